"""Button remapping commands."""

from __future__ import annotations

import logging
from contextlib import ExitStack
from enum import Enum
from typing import List

from evdev import ecodes

from .base import CommandNode
from ..actions import MacroMapping, apply_action, encode_action
from ..context import CommandContext
from ..dispatcher import IndexedRoute
from ..errors import DeviceError, UnsupportedError, UsageError
from ..library import ActionType, Button, DeviceCapability, LibraryError, Profile
from ..parser import parse_index
from ..resolver import Needs, select_button

LOGGER = logging.getLogger("ratbag_command.commands.buttons")

VOLUME_UP_BUTTON = 6
VOLUME_DOWN_BUTTON = 7


def commit_profile(profile: Profile) -> None:
    """Apply pending button changes by re-activating *profile*."""
    try:
        profile.set_active()
    except LibraryError as exc:
        raise DeviceError(f"Unable to apply the current profile: {exc.reason} ({exc.errno})") from exc


def run_change_button(node: CommandNode, ctx: CommandContext, argv: List[str]) -> int:
    if len(argv) != 3:
        raise UsageError("change-button expects: X <button|key|special|macro> <argument>")
    button_text, kind, argument = argv
    index = parse_index(button_text)
    if index is None:
        raise UsageError(f"Invalid button number '{button_text}'")
    action = encode_action(kind, argument)

    device = ctx.device
    profile = ctx.profile
    if not device.has_capability(DeviceCapability.BUTTON_KEY):
        raise UnsupportedError(f"Device '{device.name}' has no programmable buttons")
    if isinstance(action, MacroMapping) and not device.has_capability(DeviceCapability.BUTTON_MACROS):
        raise UnsupportedError(f"Device '{device.name}' does not support macros")

    button = profile.get_button(index)
    if button is None:
        raise UnsupportedError(f"Invalid button number {index}")
    with button:
        try:
            apply_action(button, action)
        except LibraryError as exc:
            raise UnsupportedError(f"Unable to perform button {index} mapping {kind} {argument}: {exc}") from exc
    LOGGER.debug("button %d mapped to %s", index, action)
    commit_profile(profile)
    return 0


class VolumeKeys(Enum):
    REPORTING = "reporting"
    UNCONFIGURED = "unconfigured"
    OTHER = "other"


def volume_key_state(volume_up: Button, volume_down: Button) -> VolumeKeys:
    if volume_up.get_key()[0] == ecodes.KEY_VOLUMEUP and volume_down.get_key()[0] == ecodes.KEY_VOLUMEDOWN:
        return VolumeKeys.REPORTING
    if volume_up.action_type == ActionType.NONE and volume_down.action_type == ActionType.NONE:
        return VolumeKeys.UNCONFIGURED
    return VolumeKeys.OTHER


def run_switch_etekcity(node: CommandNode, ctx: CommandContext, argv: List[str]) -> int:
    if argv:
        raise UsageError(f"Unexpected arguments to switch-etekcity: {' '.join(argv)}")
    device = ctx.device
    profile = ctx.profile
    if not device.has_capability(DeviceCapability.SWITCHABLE_PROFILE):
        raise UnsupportedError(f"Device '{device.name}' has no switchable profiles")

    with ExitStack() as stack:
        buttons = []
        for index in (VOLUME_UP_BUTTON, VOLUME_DOWN_BUTTON):
            button = profile.get_button(index)
            if button is None:
                raise UnsupportedError(f"Device '{device.name}' has no button {index}")
            buttons.append(stack.enter_context(button))
        volume_up, volume_down = buttons

        state = volume_key_state(volume_up, volume_down)
        LOGGER.debug("volume keys are %s", state.value)
        if state == VolumeKeys.OTHER:
            print(
                f"Left the current profile of '{device.name}' unchanged: "
                f"buttons {VOLUME_UP_BUTTON} and {VOLUME_DOWN_BUTTON} are mapped to other actions"
            )
            return 0
        try:
            if state == VolumeKeys.REPORTING:
                volume_up.disable()
                volume_down.disable()
            else:
                volume_up.set_key(ecodes.KEY_VOLUMEUP)
                volume_down.set_key(ecodes.KEY_VOLUMEDOWN)
        except LibraryError as exc:
            raise DeviceError(f"Unable to switch the volume keys: {exc}") from exc

    commit_profile(profile)
    negation = "not " if state == VolumeKeys.REPORTING else ""
    print(f"Switched the current profile of '{device.name}' to {negation}report the volume keys")
    return 0


CHANGE_BUTTON = CommandNode(
    "change-button",
    run_change_button,
    args="X <button|key|special|macro> <number|KEY_FOO|special|macro name>",
    help="Remap button X to the given action in the active profile",
    needs=Needs.DEVICE | Needs.PROFILE,
)

SWITCH_ETEKCITY = CommandNode(
    "switch-etekcity",
    run_switch_etekcity,
    help="Switch the Etekcity mouse active profile",
    needs=Needs.DEVICE | Needs.PROFILE,
)

# Per-button subcommands are not defined yet; an index is accepted and stored.
BUTTON = CommandNode(
    "button",
    IndexedRoute(select_button),
    args="[...]",
    help="Modify a button",
    needs=Needs.DEVICE | Needs.PROFILE,
)
