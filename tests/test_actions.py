"""Tests for button action encoding and macro transfer."""

from __future__ import annotations

from typing import List, Tuple

import pytest
from evdev import ecodes

from ratbag_command.actions import (
    MAX_MACRO_EVENTS,
    ButtonMapping,
    KeyMapping,
    Macro,
    MacroEvent,
    MacroMapping,
    SpecialMapping,
    canned_macro,
    describe_macro,
    encode_action,
    write_macro,
)
from ratbag_command.errors import UsageError
from ratbag_command.library import MacroEventType, Special

PRESS = MacroEventType.KEY_PRESSED
RELEASE = MacroEventType.KEY_RELEASED


class MacroRecorder:
    def __init__(self) -> None:
        self.name = None
        self.events: List[Tuple[int, MacroEventType, int]] = []
        self.commits = 0

    def set_macro(self, name: str) -> None:
        self.name = name

    def set_macro_event(self, index: int, event_type: MacroEventType, key: int) -> None:
        self.events.append((index, event_type, key))

    def write_macro(self) -> None:
        self.commits += 1


def test_encode_button():
    assert encode_action("button", "4") == ButtonMapping(4)
    with pytest.raises(UsageError):
        encode_action("button", "four")


def test_encode_key():
    assert encode_action("key", "KEY_A") == KeyMapping(ecodes.KEY_A)
    assert encode_action("key", "BTN_LEFT") == KeyMapping(ecodes.BTN_LEFT)
    with pytest.raises(UsageError, match="Failed to resolve key BOGUS"):
        encode_action("key", "BOGUS")


def test_encode_special():
    assert encode_action("special", "profile-cycle-up") == SpecialMapping(Special.PROFILE_CYCLE_UP)
    for bad in ("unknown", "wheel_up", ""):
        with pytest.raises(UsageError):
            encode_action("special", bad)


def test_encode_unknown_kind():
    with pytest.raises(UsageError, match="Invalid action type 'chord'"):
        encode_action("chord", "x")


@pytest.mark.parametrize(
    "argument, name, keys",
    [
        ("f", "foo", [ecodes.KEY_F, ecodes.KEY_O, ecodes.KEY_O]),
        ("foo", "foo", [ecodes.KEY_F, ecodes.KEY_O, ecodes.KEY_O]),
        ("bar", "bar", [ecodes.KEY_B, ecodes.KEY_A, ecodes.KEY_R]),
    ],
)
def test_canned_macros(argument, name, keys):
    action = encode_action("macro", argument)
    assert isinstance(action, MacroMapping)
    expected = []
    for key in keys:
        expected += [MacroEvent(PRESS, key), MacroEvent(RELEASE, key)]
    assert action.macro.name == name
    assert list(action.macro.events) == expected


@pytest.mark.parametrize("argument", ["x", "", "Foo"])
def test_other_macros_are_empty_and_rejected(argument):
    assert not canned_macro(argument)
    with pytest.raises(UsageError):
        encode_action("macro", argument)


def test_write_macro_stops_at_none_event():
    macro = Macro(
        "stop",
        (
            MacroEvent(PRESS, ecodes.KEY_X),
            MacroEvent(RELEASE, ecodes.KEY_X),
            MacroEvent(MacroEventType.NONE),
            MacroEvent(PRESS, ecodes.KEY_Y),
        ),
    )
    button = MacroRecorder()
    assert write_macro(button, macro) == 2
    assert button.name == "stop"
    assert [index for index, _, _ in button.events] == [0, 1]
    assert button.commits == 1


def test_macro_capacity():
    events = tuple(MacroEvent(PRESS, ecodes.KEY_A) for _ in range(MAX_MACRO_EVENTS))
    button = MacroRecorder()
    assert write_macro(button, Macro("full", events)) == MAX_MACRO_EVENTS
    with pytest.raises(ValueError):
        Macro("overflow", events + (MacroEvent(RELEASE, ecodes.KEY_A),))


def test_describe_macro():
    assert describe_macro(canned_macro("b")) == "macro bar: +KEY_B -KEY_B +KEY_A -KEY_A +KEY_R -KEY_R"
