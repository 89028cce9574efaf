"""Resolution, dpi and report rate commands."""

from __future__ import annotations

import logging
from typing import List

from .base import CommandNode
from ..context import CommandContext
from ..dispatcher import IndexedRoute, route
from ..errors import DeviceError, UnsupportedError, UsageError
from ..library import DeviceCapability, LibraryError
from ..parser import parse_index
from ..resolver import Needs, check_index, select_active_resolution, select_resolution

LOGGER = logging.getLogger("ratbag_command.commands.resolution")

PROFILE_NEEDS = Needs.DEVICE | Needs.PROFILE
RESOLUTION_NEEDS = Needs.DEVICE | Needs.PROFILE | Needs.RESOLUTION


def _single_value(argv: List[str], what: str) -> int:
    if len(argv) != 1:
        raise UsageError(f"Expected exactly one {what}")
    value = parse_index(argv[0])
    if value is None:
        raise UsageError(f"Invalid {what} '{argv[0]}'")
    return value


def _no_arguments(node: CommandNode, argv: List[str]) -> None:
    if argv:
        raise UsageError(f"Unexpected arguments to {node.name}: {' '.join(argv)}")


def _require_switchable(ctx: CommandContext) -> None:
    device = ctx.device
    if not device.has_capability(DeviceCapability.SWITCHABLE_RESOLUTION):
        raise UnsupportedError(f"Device '{device.name}' has no switchable resolution")


def run_active_get(node: CommandNode, ctx: CommandContext, argv: List[str]) -> int:
    _no_arguments(node, argv)
    profile = ctx.profile
    for index in range(profile.num_resolutions):
        resolution = profile.get_resolution(index)
        if resolution is None:
            continue
        with resolution:
            if resolution.is_active():
                print(index)
                return 0
    raise DeviceError("Failed to retrieve the active resolution")


def run_active_set(node: CommandNode, ctx: CommandContext, argv: List[str]) -> int:
    index = _single_value(argv, "resolution number")
    _require_switchable(ctx)
    profile = ctx.profile
    check_index(index, profile.num_resolutions, "resolution")
    resolution = profile.get_resolution(index)
    if resolution is None:
        raise UnsupportedError(f"Unable to retrieve resolution {index}")
    with resolution:
        if resolution.is_active():
            print(f"Resolution '{index}' is already active in profile '{profile.index}'")
            return 0
        try:
            resolution.set_active()
        except LibraryError as exc:
            raise DeviceError(f"Failed to activate resolution {index}: {exc.reason} ({exc.errno})") from exc
    print(f"Switched profile '{profile.index}' of '{ctx.device.name}' to resolution '{index}'")
    return 0


def run_dpi_get(node: CommandNode, ctx: CommandContext, argv: List[str]) -> int:
    _no_arguments(node, argv)
    print(ctx.resolution.dpi)
    return 0


def run_dpi_set(node: CommandNode, ctx: CommandContext, argv: List[str]) -> int:
    dpi = _single_value(argv, "dpi value")
    _require_switchable(ctx)
    try:
        ctx.resolution.set_dpi(dpi)
    except LibraryError as exc:
        raise DeviceError(f"Failed to change the dpi: {exc.reason} ({exc.errno})") from exc
    LOGGER.debug("resolution %d set to %d dpi", ctx.resolution.index, dpi)
    return 0


def run_rate_get(node: CommandNode, ctx: CommandContext, argv: List[str]) -> int:
    _no_arguments(node, argv)
    print(ctx.resolution.report_rate)
    return 0


def run_rate_set(node: CommandNode, ctx: CommandContext, argv: List[str]) -> int:
    hz = _single_value(argv, "report rate")
    _require_switchable(ctx)
    try:
        ctx.resolution.set_report_rate(hz)
    except LibraryError as exc:
        raise DeviceError(f"Failed to change the report rate: {exc.reason} ({exc.errno})") from exc
    LOGGER.debug("resolution %d set to %d Hz", ctx.resolution.index, hz)
    return 0


ACTIVE = CommandNode(
    "active",
    route,
    needs=PROFILE_NEEDS,
    subcommands=(
        CommandNode("get", run_active_get, help="Get the active resolution number", needs=PROFILE_NEEDS),
        CommandNode("set", run_active_set, args="M", help="Set the active resolution number", needs=PROFILE_NEEDS),
    ),
)

DPI = CommandNode(
    "dpi",
    route,
    needs=RESOLUTION_NEEDS,
    subcommands=(
        CommandNode("get", run_dpi_get, help="Get the resolution in dpi", needs=RESOLUTION_NEEDS),
        CommandNode("set", run_dpi_set, args="<dpi>", help="Set the resolution in dpi", needs=RESOLUTION_NEEDS),
    ),
)

RATE = CommandNode(
    "rate",
    route,
    needs=RESOLUTION_NEEDS,
    subcommands=(
        CommandNode("get", run_rate_get, help="Get the report rate in Hz", needs=RESOLUTION_NEEDS),
        CommandNode("set", run_rate_set, args="<hz>", help="Set the report rate in Hz", needs=RESOLUTION_NEEDS),
    ),
)

RESOLUTION = CommandNode(
    "resolution",
    IndexedRoute(select_resolution, select_active_resolution),
    args="N",
    needs=PROFILE_NEEDS,
    subcommands=(ACTIVE, DPI, RATE),
)
