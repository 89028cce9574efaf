"""In-memory device library.

Implements the :mod:`ratbag_command.library` contract without hardware.
Devices are described by plain dictionaries (or a JSON file with the same
shape) keyed by device node path::

    {
      "devices": {
        "/dev/input/event3": {
          "name": "Test Mouse",
          "capabilities": ["res", "profile", "btn-key", "btn-macros"],
          "profiles": [
            {
              "active": true,
              "default": true,
              "resolutions": [{"dpi": 800, "rate": 1000, "active": true}],
              "buttons": [{"type": "left", "action": "button", "button": 1}]
            }
          ]
        }
      }
    }

Every handle handed out is recorded in a :class:`RefLedger` so callers can
check that each reference was released exactly once.  Operations listed in a
device's ``fail`` entry raise :class:`LibraryError`.
"""

from __future__ import annotations

import errno
import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from .actions import MAX_MACRO_EVENTS, Macro, MacroEvent
from .config import CommandConfig
from .keycodes import key_code_from_name
from .library import (
    ActionType,
    Button,
    ButtonType,
    Device,
    DeviceCapability,
    DeviceLibrary,
    LibraryError,
    LogPriority,
    MacroEventType,
    Profile,
    Resolution,
    ResolutionCapability,
    Special,
)

LOGGER = logging.getLogger("ratbag_command.testdevice")


class RefLedger:
    """Counts handle acquisitions and releases per handle kind."""

    def __init__(self) -> None:
        self.acquired: Counter = Counter()
        self.released: Counter = Counter()

    def acquire(self, kind: str) -> None:
        self.acquired[kind] += 1

    def release(self, kind: str) -> None:
        self.released[kind] += 1

    def outstanding(self) -> Dict[str, int]:
        kinds = set(self.acquired) | set(self.released)
        return {kind: self.acquired[kind] - self.released[kind] for kind in sorted(kinds)}

    def balanced(self) -> bool:
        return all(count == 0 for count in self.outstanding().values())


@dataclass
class ButtonState:
    type: ButtonType = ButtonType.UNKNOWN
    action_type: ActionType = ActionType.NONE
    button: int = 0
    key: int = 0
    modifiers: Tuple[int, ...] = ()
    special: Optional[Special] = None
    macro: Optional[Macro] = None
    pending_name: Optional[str] = None
    pending_events: Dict[int, MacroEvent] = field(default_factory=dict)


@dataclass
class ResolutionState:
    dpi: int = 0
    report_rate: int = 0
    dpi_x: Optional[int] = None
    dpi_y: Optional[int] = None
    active: bool = False
    default: bool = False


@dataclass
class ProfileState:
    active: bool = False
    default: bool = False
    resolutions: List[ResolutionState] = field(default_factory=list)
    buttons: List[ButtonState] = field(default_factory=list)


@dataclass
class DeviceState:
    name: str
    capabilities: Set[DeviceCapability] = field(default_factory=set)
    profiles: List[ProfileState] = field(default_factory=list)
    num_buttons: int = 0
    fail: Set[str] = field(default_factory=set)


class _TestHandle:
    __test__ = False
    kind = "handle"

    def __init__(self, library: "TestDeviceLibrary") -> None:
        self._library = library
        self._released = False
        library.ledger.acquire(self.kind)

    def unref(self) -> None:
        if self._released:
            raise RuntimeError(f"{self.kind} handle released twice")
        self._released = True
        self._library.ledger.release(self.kind)

    def _check(self, device: DeviceState, operation: str) -> None:
        if self._released:
            raise RuntimeError(f"{self.kind} handle used after release")
        if operation in device.fail:
            raise LibraryError(f"{operation} failed", errno.EIO)
        self._library.raw(f"{self.kind} {operation}")


class TestButton(_TestHandle, Button):
    kind = "button"

    def __init__(self, library: "TestDeviceLibrary", device: DeviceState, state: ButtonState, index: int) -> None:
        super().__init__(library)
        self._device = device
        self.state = state
        self.index = index

    @property
    def button_type(self) -> ButtonType:
        return self.state.type

    @property
    def action_type(self) -> ActionType:
        return self.state.action_type

    def get_button(self) -> int:
        return self.state.button if self.state.action_type == ActionType.BUTTON else 0

    def get_key(self) -> Tuple[int, Tuple[int, ...]]:
        if self.state.action_type != ActionType.KEY:
            return 0, ()
        return self.state.key, self.state.modifiers

    def get_special(self) -> Optional[Special]:
        return self.state.special if self.state.action_type == ActionType.SPECIAL else None

    def get_macro(self) -> Optional[Macro]:
        return self.state.macro if self.state.action_type == ActionType.MACRO else None

    def _set_action(self, action_type: ActionType, **values: Any) -> None:
        state = self.state
        state.action_type = action_type
        state.button = values.get("button", 0)
        state.key = values.get("key", 0)
        state.modifiers = tuple(values.get("modifiers", ()))
        state.special = values.get("special")
        state.macro = values.get("macro")

    def set_button(self, button: int) -> None:
        self._check(self._device, "set_button")
        if button <= 0:
            raise LibraryError(f"invalid button {button}", errno.EINVAL)
        self._set_action(ActionType.BUTTON, button=button)

    def set_key(self, key: int, modifiers: Sequence[int] = ()) -> None:
        self._check(self._device, "set_key")
        if DeviceCapability.BUTTON_KEY not in self._device.capabilities:
            raise LibraryError("device has no key mappings", errno.ENOTSUP)
        self._set_action(ActionType.KEY, key=key, modifiers=modifiers)

    def set_special(self, special: Special) -> None:
        self._check(self._device, "set_special")
        self._set_action(ActionType.SPECIAL, special=special)

    def set_macro(self, name: str) -> None:
        self._check(self._device, "set_macro")
        self.state.pending_name = name
        self.state.pending_events = {}

    def set_macro_event(self, index: int, event_type: MacroEventType, key: int) -> None:
        self._check(self._device, "set_macro_event")
        if not 0 <= index < MAX_MACRO_EVENTS:
            raise LibraryError(f"macro event index {index} out of range", errno.EINVAL)
        self.state.pending_events[index] = MacroEvent(event_type, key)

    def write_macro(self) -> None:
        self._check(self._device, "write_macro")
        state = self.state
        events = tuple(state.pending_events[i] for i in sorted(state.pending_events))
        self._set_action(ActionType.MACRO, macro=Macro(state.pending_name, events))
        state.pending_name = None
        state.pending_events = {}

    def disable(self) -> None:
        self._check(self._device, "disable")
        self._set_action(ActionType.NONE)


class TestResolution(_TestHandle, Resolution):
    kind = "resolution"

    def __init__(self, library: "TestDeviceLibrary", device: DeviceState, profile: ProfileState, index: int) -> None:
        super().__init__(library)
        self._device = device
        self._profile = profile
        self.state = profile.resolutions[index]
        self.index = index

    @property
    def dpi(self) -> int:
        return self.state.dpi

    @property
    def dpi_x(self) -> int:
        return self.state.dpi_x if self.state.dpi_x is not None else self.state.dpi

    @property
    def dpi_y(self) -> int:
        return self.state.dpi_y if self.state.dpi_y is not None else self.state.dpi

    @property
    def report_rate(self) -> int:
        return self.state.report_rate

    def is_active(self) -> bool:
        return self.state.active

    def is_default(self) -> bool:
        return self.state.default

    def has_capability(self, capability: ResolutionCapability) -> bool:
        if capability == ResolutionCapability.SEPARATE_XY_RESOLUTION:
            return self.state.dpi_x is not None and self.state.dpi_y is not None
        return False

    def set_active(self) -> None:
        self._check(self._device, "set_resolution_active")
        for resolution in self._profile.resolutions:
            resolution.active = resolution is self.state

    def set_dpi(self, dpi: int) -> None:
        self._check(self._device, "set_dpi")
        if dpi <= 0:
            raise LibraryError(f"invalid dpi {dpi}", errno.EINVAL)
        self.state.dpi = dpi
        self.state.dpi_x = None
        self.state.dpi_y = None

    def set_report_rate(self, hz: int) -> None:
        self._check(self._device, "set_report_rate")
        if hz <= 0:
            raise LibraryError(f"invalid report rate {hz}", errno.EINVAL)
        self.state.report_rate = hz


class TestProfile(_TestHandle, Profile):
    kind = "profile"

    def __init__(self, library: "TestDeviceLibrary", device: DeviceState, index: int) -> None:
        super().__init__(library)
        self._device = device
        self.state = device.profiles[index]
        self.index = index

    def is_active(self) -> bool:
        return self.state.active

    def is_default(self) -> bool:
        return self.state.default

    def set_active(self) -> None:
        self._check(self._device, "set_profile_active")
        for profile in self._device.profiles:
            profile.active = profile is self.state
        self._library.activations.append(self.index)

    @property
    def num_resolutions(self) -> int:
        return len(self.state.resolutions)

    def get_resolution(self, index: int) -> Optional[Resolution]:
        if not 0 <= index < len(self.state.resolutions):
            return None
        return TestResolution(self._library, self._device, self.state, index)

    def get_button(self, index: int) -> Optional[Button]:
        if not 0 <= index < len(self.state.buttons):
            return None
        return TestButton(self._library, self._device, self.state.buttons[index], index)


class TestDevice(_TestHandle, Device):
    kind = "device"

    def __init__(self, library: "TestDeviceLibrary", state: DeviceState) -> None:
        super().__init__(library)
        self.state = state

    @property
    def name(self) -> str:
        return self.state.name

    def has_capability(self, capability: DeviceCapability) -> bool:
        return capability in self.state.capabilities

    @property
    def num_profiles(self) -> int:
        return len(self.state.profiles)

    @property
    def num_buttons(self) -> int:
        return self.state.num_buttons

    def get_profile(self, index: int) -> Optional[Profile]:
        if not 0 <= index < len(self.state.profiles):
            return None
        return TestProfile(self._library, self.state, index)


class TestDeviceLibrary(DeviceLibrary):
    """Device library serving in-memory devices keyed by node path."""

    __test__ = False

    def __init__(self, devices: Optional[Mapping[str, DeviceState]] = None) -> None:
        self.devices: Dict[str, DeviceState] = dict(devices or {})
        self.ledger = RefLedger()
        self.log_priority = LogPriority.INFO
        self.opened: List[str] = []
        self.activations: List[int] = []
        self.released = False

    def open_device(self, path: str) -> Optional[Device]:
        self.opened.append(path)
        state = self.devices.get(path)
        if state is None:
            LOGGER.debug("no test device at %s", path)
            return None
        return TestDevice(self, state)

    def set_log_priority(self, priority: LogPriority) -> None:
        self.log_priority = priority

    def raw(self, message: str) -> None:
        if self.log_priority <= LogPriority.RAW:
            LOGGER.debug("raw: %s", message)

    def unref(self) -> None:
        if self.released:
            raise RuntimeError("library released twice")
        self.released = True

    @classmethod
    def from_description(cls, description: Mapping[str, Any]) -> "TestDeviceLibrary":
        devices = description.get("devices") or {}
        return cls({path: parse_device(entry) for path, entry in devices.items()})

    @classmethod
    def from_file(cls, path: Path) -> "TestDeviceLibrary":
        return cls.from_description(json.loads(Path(path).read_text(encoding="utf-8")))


def _parse_button(entry: Mapping[str, Any]) -> ButtonState:
    state = ButtonState(type=ButtonType(entry.get("type", "unknown")))
    action = entry.get("action", "none")
    if action == "button":
        state.action_type = ActionType.BUTTON
        state.button = int(entry["button"])
    elif action == "key":
        state.action_type = ActionType.KEY
        key = entry["key"]
        state.key = key_code_from_name(key) if isinstance(key, str) else int(key)
    elif action == "special":
        state.action_type = ActionType.SPECIAL
        state.special = Special.from_label(entry["special"])
    elif action == "macro":
        state.action_type = ActionType.MACRO
        events = tuple(
            MacroEvent(MacroEventType[event["type"].upper()], key_code_from_name(event["key"]))
            for event in entry.get("events", [])
        )
        state.macro = Macro(entry.get("name"), events)
    else:
        state.action_type = ActionType(action)
    return state


def _parse_resolution(entry: Mapping[str, Any]) -> ResolutionState:
    return ResolutionState(
        dpi=int(entry.get("dpi", 0)),
        report_rate=int(entry.get("rate", 0)),
        dpi_x=entry.get("dpi_x"),
        dpi_y=entry.get("dpi_y"),
        active=bool(entry.get("active", False)),
        default=bool(entry.get("default", False)),
    )


def parse_device(entry: Mapping[str, Any]) -> DeviceState:
    profiles = [
        ProfileState(
            active=bool(profile.get("active", False)),
            default=bool(profile.get("default", False)),
            resolutions=[_parse_resolution(res) for res in profile.get("resolutions", [])],
            buttons=[_parse_button(button) for button in profile.get("buttons", [])],
        )
        for profile in entry.get("profiles", [])
    ]
    num_buttons = entry.get("num_buttons")
    if num_buttons is None:
        num_buttons = max((len(profile.buttons) for profile in profiles), default=0)
    return DeviceState(
        name=entry.get("name", "Unnamed device"),
        capabilities={DeviceCapability(cap) for cap in entry.get("capabilities", [])},
        profiles=profiles,
        num_buttons=int(num_buttons),
        fail=set(entry.get("fail", [])),
    )


def from_environment() -> TestDeviceLibrary:
    """Library factory used when no other backend is configured."""
    config = CommandConfig.from_env()
    if config.devices_file is None:
        return TestDeviceLibrary()
    LOGGER.debug("loading test devices from %s", config.devices_file)
    return TestDeviceLibrary.from_file(config.devices_file)


__all__ = [
    "RefLedger",
    "ButtonState",
    "ResolutionState",
    "ProfileState",
    "DeviceState",
    "TestDeviceLibrary",
    "parse_device",
    "from_environment",
]
