"""Profile commands."""

from __future__ import annotations

import logging
from typing import List

from .base import CommandNode
from .buttons import BUTTON
from .resolution import RESOLUTION
from ..context import CommandContext
from ..dispatcher import IndexedRoute, route
from ..errors import DeviceError, UnsupportedError, UsageError
from ..library import DeviceCapability, LibraryError
from ..parser import parse_index
from ..resolver import Needs, check_index, select_active_profile, select_profile

LOGGER = logging.getLogger("ratbag_command.commands.profile")


def run_active_get(node: CommandNode, ctx: CommandContext, argv: List[str]) -> int:
    if argv:
        raise UsageError(f"Unexpected arguments to get: {' '.join(argv)}")
    device = ctx.device
    num_profiles = device.num_profiles
    if not device.has_capability(DeviceCapability.SWITCHABLE_PROFILE) or num_profiles <= 1:
        print(0)
        return 0
    for index in range(num_profiles):
        profile = device.get_profile(index)
        if profile is None:
            continue
        with profile:
            if profile.is_active():
                print(index)
                return 0
    raise DeviceError(f"Unable to find the active profile of '{device.name}'")


def run_active_set(node: CommandNode, ctx: CommandContext, argv: List[str]) -> int:
    if len(argv) != 1:
        raise UsageError("Expected exactly one profile number")
    index = parse_index(argv[0])
    if index is None:
        raise UsageError(f"Invalid profile number '{argv[0]}'")
    device = ctx.device
    if not device.has_capability(DeviceCapability.SWITCHABLE_PROFILE):
        raise UnsupportedError(f"Device '{device.name}' has no switchable profiles")
    check_index(index, device.num_profiles, "profile")
    profile = device.get_profile(index)
    if profile is None:
        raise UnsupportedError(f"'{index}' is not a valid profile")
    with profile:
        if profile.is_active():
            print(f"'{device.name}' is already in profile '{index}'")
            return 0
        try:
            profile.set_active()
        except LibraryError as exc:
            raise DeviceError(f"Unable to switch '{device.name}' to profile '{index}': {exc}") from exc
    print(f"Switched '{device.name}' to profile '{index}'")
    return 0


ACTIVE = CommandNode(
    "active",
    route,
    needs=Needs.DEVICE,
    subcommands=(
        CommandNode("get", run_active_get, help="Get the active profile number", needs=Needs.DEVICE),
        CommandNode("set", run_active_set, args="N", help="Set the active profile number", needs=Needs.DEVICE),
    ),
)

PROFILE = CommandNode(
    "profile",
    IndexedRoute(select_profile, select_active_profile),
    args="<idx>",
    needs=Needs.DEVICE,
    subcommands=(ACTIVE, RESOLUTION, BUTTON),
)
