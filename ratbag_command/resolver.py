"""Lazy resolution of the device, profile and resolution a command needs."""

from __future__ import annotations

import logging
from enum import Flag
from typing import List

from .context import CommandContext
from .errors import DeviceError, UnsupportedError
from .library import Device, LibraryError, Profile, Resolution

LOGGER = logging.getLogger("ratbag_command.resolver")


class Needs(Flag):
    """Prerequisites a command declares."""

    NONE = 0
    DEVICE = 1
    PROFILE = 2
    RESOLUTION = 4


def open_device(ctx: CommandContext, argv: List[str]) -> List[str]:
    """Open the device named by the last visible token and consume it."""
    if not argv:
        raise DeviceError("Missing device path")
    path = argv[-1]
    try:
        device = ctx.library.open_device(path)
    except LibraryError as exc:
        raise DeviceError(f"Device '{path}' is not supported: {exc}") from exc
    if device is None:
        raise DeviceError(f"Device '{path}' is not supported")
    LOGGER.debug("opened %s (%s)", path, device.name)
    ctx.set_device(device)
    return argv[:-1]


def active_profile(device: Device) -> Profile:
    for index in range(device.num_profiles):
        profile = device.get_profile(index)
        if profile is None:
            continue
        if profile.is_active():
            return profile
        profile.unref()
    raise DeviceError("Failed to retrieve the active profile")


def active_resolution(profile: Profile) -> Resolution:
    for index in range(profile.num_resolutions):
        resolution = profile.get_resolution(index)
        if resolution is None:
            continue
        if resolution.is_active():
            return resolution
        resolution.unref()
    raise DeviceError("Failed to retrieve the active resolution")


def ensure_context(ctx: CommandContext, needs: Needs, argv: List[str]) -> List[str]:
    """Resolve *needs* into *ctx*, in device, profile, resolution order.

    Returns the tokens still visible to the command; the device path is
    removed when the device is opened here.
    """
    if needs & (Needs.DEVICE | Needs.PROFILE | Needs.RESOLUTION) and ctx.device is None:
        argv = open_device(ctx, argv)
    if needs & (Needs.PROFILE | Needs.RESOLUTION) and ctx.profile is None:
        ctx.set_profile(active_profile(ctx.device))
        LOGGER.debug("using active profile %d", ctx.profile.index)
    if needs & Needs.RESOLUTION and ctx.resolution is None:
        ctx.set_resolution(active_resolution(ctx.profile))
        LOGGER.debug("using active resolution %d", ctx.resolution.index)
    return argv


def check_index(index: int, count: int, what: str) -> None:
    if not 0 <= index < count:
        raise UnsupportedError(f"Unable to find {what} {index}")


def select_profile(ctx: CommandContext, index: int) -> None:
    device = ctx.device
    check_index(index, device.num_profiles, "profile")
    profile = device.get_profile(index)
    if profile is None:
        raise UnsupportedError(f"Unable to find profile {index}")
    ctx.set_profile(profile)
    LOGGER.debug("selected profile %d", index)


def select_resolution(ctx: CommandContext, index: int) -> None:
    profile = ctx.profile
    check_index(index, profile.num_resolutions, "resolution")
    resolution = profile.get_resolution(index)
    if resolution is None:
        raise UnsupportedError(f"Unable to retrieve resolution {index}")
    ctx.set_resolution(resolution)
    LOGGER.debug("selected resolution %d", index)


def select_button(ctx: CommandContext, index: int) -> None:
    check_index(index, ctx.device.num_buttons, "button")
    ctx.button = index
    LOGGER.debug("selected button %d", index)


def select_active_profile(ctx: CommandContext) -> None:
    if ctx.profile is None:
        ctx.set_profile(active_profile(ctx.device))


def select_active_resolution(ctx: CommandContext) -> None:
    if ctx.resolution is None:
        ctx.set_resolution(active_resolution(ctx.profile))
