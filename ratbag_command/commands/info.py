"""Info command."""

from __future__ import annotations

from typing import List

from .base import CommandNode
from ..actions import describe_action
from ..context import CommandContext
from ..errors import UsageError
from ..library import Device, DeviceCapability, Profile, Resolution, ResolutionCapability
from ..resolver import Needs

CAPABILITY_LABELS = (
    DeviceCapability.SWITCHABLE_RESOLUTION,
    DeviceCapability.SWITCHABLE_PROFILE,
    DeviceCapability.BUTTON_KEY,
    DeviceCapability.BUTTON_MACROS,
)


def _flags(item) -> str:
    return f"{' (active)' if item.is_active() else ''}{' (default)' if item.is_default() else ''}"


def _render_resolution(resolution: Resolution) -> str:
    index = resolution.index
    dpi = resolution.dpi
    rate = resolution.report_rate
    if dpi == 0:
        return f"      {index}: <disabled>"
    if resolution.has_capability(ResolutionCapability.SEPARATE_XY_RESOLUTION):
        return f"      {index}: {resolution.dpi_x}x{resolution.dpi_y}dpi @ {rate}Hz{_flags(resolution)}"
    return f"      {index}: {dpi}dpi @ {rate}Hz{_flags(resolution)}"


def _render_profile(profile: Profile, num_buttons: int) -> None:
    print(f"  Profile {profile.index}{_flags(profile)}")
    print("    Resolutions:")
    for idx in range(profile.num_resolutions):
        resolution = profile.get_resolution(idx)
        if resolution is None:
            continue
        with resolution:
            print(_render_resolution(resolution))
    for idx in range(num_buttons):
        button = profile.get_button(idx)
        if button is None:
            continue
        with button:
            print(f"    Button: {idx} type {button.button_type.value} is mapped to '{describe_action(button)}'")


def render_device(device: Device) -> None:
    print(f"Device '{device.name}'")
    caps = "".join(f" {cap.value}" for cap in CAPABILITY_LABELS if device.has_capability(cap))
    print(f"Capabilities:{caps}")
    num_buttons = device.num_buttons
    print(f"Number of buttons: {num_buttons}")
    num_profiles = device.num_profiles
    print(f"Profiles supported: {num_profiles}")
    for idx in range(num_profiles):
        profile = device.get_profile(idx)
        if profile is None:
            continue
        with profile:
            _render_profile(profile, num_buttons)


def run_info(node: CommandNode, ctx: CommandContext, argv: List[str]) -> int:
    if argv:
        raise UsageError(f"Unexpected arguments to info: {' '.join(argv)}")
    render_device(ctx.device)
    return 0


INFO = CommandNode(
    "info",
    run_info,
    help="Show information about the device's capabilities",
    needs=Needs.DEVICE,
)
