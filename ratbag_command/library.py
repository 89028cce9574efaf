"""Device-abstraction library contract consumed by ratbag-command.

The command core never talks to hardware itself.  Everything it needs from a
device (profiles, resolutions, buttons, capability queries and the mutating
calls) goes through the handle classes below.  A binding to a real driver
library subclasses them; :mod:`ratbag_command.testdevice` ships an in-memory
implementation.

Handles follow reference-count semantics: every ``get_*`` call that returns a
handle hands out a new reference owned by the caller, which must call
:meth:`Handle.unref` exactly once (or use the handle as a context manager).
Mutating calls raise :class:`LibraryError` on failure.
"""

from __future__ import annotations

import errno as _errno
import importlib
import logging
import os
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Callable, Optional, Sequence, Tuple

if TYPE_CHECKING:  # pragma: no cover
    from .actions import Macro

LOGGER = logging.getLogger("ratbag_command.library")


class LibraryError(RuntimeError):
    """Raised by a device library when an operation fails."""

    def __init__(self, message: str, errno: int = _errno.EIO) -> None:
        super().__init__(message)
        self.errno = errno

    @property
    def reason(self) -> str:
        return os.strerror(self.errno)


class LogPriority(IntEnum):
    RAW = 10
    DEBUG = 20
    INFO = 30
    ERROR = 40


class DeviceCapability(Enum):
    SWITCHABLE_RESOLUTION = "res"
    SWITCHABLE_PROFILE = "profile"
    BUTTON_KEY = "btn-key"
    BUTTON_MACROS = "btn-macros"


class ResolutionCapability(Enum):
    SEPARATE_XY_RESOLUTION = "separate-xy"


class ButtonType(Enum):
    UNKNOWN = "unknown"
    LEFT = "left"
    MIDDLE = "middle"
    RIGHT = "right"
    THUMB = "thumb"
    THUMB2 = "thumb2"
    THUMB3 = "thumb3"
    THUMB4 = "thumb4"
    WHEEL_LEFT = "wheel left"
    WHEEL_RIGHT = "wheel right"
    WHEEL_CLICK = "wheel click"
    WHEEL_UP = "wheel up"
    WHEEL_DOWN = "wheel down"
    WHEEL_RATCHET_MODE_SHIFT = "wheel ratchet mode switch"
    EXTRA = "extra"
    SIDE = "side"
    PINKIE = "pinkie"
    PINKIE2 = "pinkie2"
    RESOLUTION_CYCLE_UP = "resolution cycle up"
    RESOLUTION_UP = "resolution up"
    RESOLUTION_DOWN = "resolution down"
    PROFILE_CYCLE_UP = "profile cycle up"
    PROFILE_UP = "profile up"
    PROFILE_DOWN = "profile down"


class ActionType(Enum):
    NONE = "none"
    BUTTON = "button"
    KEY = "key"
    SPECIAL = "special"
    MACRO = "macro"
    UNKNOWN = "unknown"


class Special(IntEnum):
    """Named non-keycode functions a button can trigger."""

    UNKNOWN = 0x40000000
    DOUBLECLICK = 0x40000001
    WHEEL_LEFT = 0x40000002
    WHEEL_RIGHT = 0x40000003
    WHEEL_UP = 0x40000004
    WHEEL_DOWN = 0x40000005
    RATCHET_MODE_SWITCH = 0x40000006
    RESOLUTION_CYCLE_UP = 0x40000007
    RESOLUTION_CYCLE_DOWN = 0x40000008
    RESOLUTION_UP = 0x40000009
    RESOLUTION_DOWN = 0x4000000A
    RESOLUTION_ALTERNATE = 0x4000000B
    RESOLUTION_DEFAULT = 0x4000000C
    PROFILE_CYCLE_UP = 0x4000000D
    PROFILE_CYCLE_DOWN = 0x4000000E
    PROFILE_UP = 0x4000000F
    PROFILE_DOWN = 0x40000010
    SECOND_MODE = 0x40000011
    BATTERY_LEVEL = 0x40000012

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", "-")

    @classmethod
    def from_label(cls, label: str) -> Optional["Special"]:
        for special in cls:
            if special is not cls.UNKNOWN and special.label == label:
                return special
        return None


class MacroEventType(IntEnum):
    NONE = 0
    KEY_PRESSED = 1
    KEY_RELEASED = 2


class Handle:
    """A reference-counted object handed out by the device library."""

    def unref(self) -> None:
        raise NotImplementedError("Handle must implement unref()")

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.unref()


class Button(Handle):
    index: int

    @property
    def button_type(self) -> ButtonType:
        raise NotImplementedError

    @property
    def action_type(self) -> ActionType:
        raise NotImplementedError

    def get_button(self) -> int:
        raise NotImplementedError

    def get_key(self) -> Tuple[int, Tuple[int, ...]]:
        """Return ``(keycode, modifiers)``; keycode 0 when not mapped to a key."""
        raise NotImplementedError

    def get_special(self) -> Optional[Special]:
        raise NotImplementedError

    def get_macro(self) -> Optional["Macro"]:
        raise NotImplementedError

    def set_button(self, button: int) -> None:
        raise NotImplementedError

    def set_key(self, key: int, modifiers: Sequence[int] = ()) -> None:
        raise NotImplementedError

    def set_special(self, special: Special) -> None:
        raise NotImplementedError

    def set_macro(self, name: str) -> None:
        raise NotImplementedError

    def set_macro_event(self, index: int, event_type: MacroEventType, key: int) -> None:
        raise NotImplementedError

    def write_macro(self) -> None:
        raise NotImplementedError

    def disable(self) -> None:
        raise NotImplementedError


class Resolution(Handle):
    index: int

    @property
    def dpi(self) -> int:
        raise NotImplementedError

    @property
    def dpi_x(self) -> int:
        raise NotImplementedError

    @property
    def dpi_y(self) -> int:
        raise NotImplementedError

    @property
    def report_rate(self) -> int:
        raise NotImplementedError

    def is_active(self) -> bool:
        raise NotImplementedError

    def is_default(self) -> bool:
        raise NotImplementedError

    def has_capability(self, capability: ResolutionCapability) -> bool:
        raise NotImplementedError

    def set_active(self) -> None:
        raise NotImplementedError

    def set_dpi(self, dpi: int) -> None:
        raise NotImplementedError

    def set_report_rate(self, hz: int) -> None:
        raise NotImplementedError


class Profile(Handle):
    index: int

    def is_active(self) -> bool:
        raise NotImplementedError

    def is_default(self) -> bool:
        raise NotImplementedError

    def set_active(self) -> None:
        raise NotImplementedError

    @property
    def num_resolutions(self) -> int:
        raise NotImplementedError

    def get_resolution(self, index: int) -> Optional[Resolution]:
        raise NotImplementedError

    def get_button(self, index: int) -> Optional[Button]:
        raise NotImplementedError


class Device(Handle):
    @property
    def name(self) -> str:
        raise NotImplementedError

    def has_capability(self, capability: DeviceCapability) -> bool:
        raise NotImplementedError

    @property
    def num_profiles(self) -> int:
        raise NotImplementedError

    @property
    def num_buttons(self) -> int:
        raise NotImplementedError

    def get_profile(self, index: int) -> Optional[Profile]:
        raise NotImplementedError


class DeviceLibrary(Handle):
    def open_device(self, path: str) -> Optional[Device]:
        """Open the device node at *path*; ``None`` when it is not supported."""
        raise NotImplementedError

    def set_log_priority(self, priority: LogPriority) -> None:
        raise NotImplementedError


LibraryFactory = Callable[[], DeviceLibrary]


def load_library(target: str) -> DeviceLibrary:
    """Instantiate the library named by a ``module:callable`` string."""
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"invalid library target '{target}' (expected module:callable)")
    module = importlib.import_module(module_name)
    factory: LibraryFactory = getattr(module, attr)
    LOGGER.debug("loading device library from %s", target)
    return factory()


__all__ = [
    "LibraryError",
    "LogPriority",
    "DeviceCapability",
    "ResolutionCapability",
    "ButtonType",
    "ActionType",
    "Special",
    "MacroEventType",
    "Handle",
    "Button",
    "Resolution",
    "Profile",
    "Device",
    "DeviceLibrary",
    "load_library",
]
