"""Per-invocation command context."""

from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Optional, TypeVar

from .library import Device, DeviceLibrary, Handle, Profile, Resolution

LOGGER = logging.getLogger("ratbag_command.context")

H = TypeVar("H", bound=Handle)


@dataclass
class CommandContext:
    """Holds the handles resolved while one command path runs.

    The context owns every handle stored into it and releases each of them
    exactly once when the ``with`` block around the invocation exits.
    """

    library: DeviceLibrary
    input_dir: str = "/dev/input"
    device: Optional[Device] = field(default=None, init=False)
    profile: Optional[Profile] = field(default=None, init=False)
    resolution: Optional[Resolution] = field(default=None, init=False)
    button: Optional[int] = field(default=None, init=False)
    _handles: ExitStack = field(default_factory=ExitStack, init=False, repr=False)

    def __enter__(self) -> "CommandContext":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._handles.close()
        self.device = None
        self.profile = None
        self.resolution = None

    def _own(self, handle: H) -> H:
        self._handles.callback(handle.unref)
        return handle

    def set_device(self, device: Device) -> None:
        self.device = self._own(device)

    def set_profile(self, profile: Profile) -> None:
        if self.device is None:
            raise RuntimeError("profile resolved before device")
        self.profile = self._own(profile)

    def set_resolution(self, resolution: Resolution) -> None:
        if self.profile is None:
            raise RuntimeError("resolution resolved before profile")
        self.resolution = self._own(resolution)
