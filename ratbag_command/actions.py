"""Button action encoding.

``change-button`` takes an action kind and one argument.  This module turns
that pair into one of four tagged actions and writes it to a button handle.
Macros are written in two steps: each event is stored by index, then the
macro is committed as a whole.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence, Tuple, Union

from evdev import ecodes

from .errors import UsageError
from .keycodes import key_code_from_name, key_name
from .library import ActionType, Button, MacroEventType, Special
from .parser import parse_index

MAX_MACRO_EVENTS = 64
ACTION_KINDS = ("button", "key", "special", "macro")


@dataclass(frozen=True)
class MacroEvent:
    type: MacroEventType
    key: int = 0


@dataclass(frozen=True)
class Macro:
    name: Optional[str] = None
    events: Tuple[MacroEvent, ...] = ()

    def __post_init__(self) -> None:
        if len(self.events) > MAX_MACRO_EVENTS:
            raise ValueError(f"macro holds at most {MAX_MACRO_EVENTS} events, got {len(self.events)}")

    def iter_events(self) -> Iterator[MacroEvent]:
        """Yield events up to the first NONE entry."""
        for event in self.events[:MAX_MACRO_EVENTS]:
            if event.type == MacroEventType.NONE:
                return
            yield event

    def __bool__(self) -> bool:
        return next(self.iter_events(), None) is not None


@dataclass(frozen=True)
class ButtonMapping:
    button: int


@dataclass(frozen=True)
class KeyMapping:
    key: int
    modifiers: Tuple[int, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SpecialMapping:
    special: Special


@dataclass(frozen=True)
class MacroMapping:
    macro: Macro


ButtonAction = Union[ButtonMapping, KeyMapping, SpecialMapping, MacroMapping]


def _typed_keys(keys: Sequence[int]) -> Tuple[MacroEvent, ...]:
    events = []
    for key in keys:
        events.append(MacroEvent(MacroEventType.KEY_PRESSED, key))
        events.append(MacroEvent(MacroEventType.KEY_RELEASED, key))
    return tuple(events)


CANNED_MACROS = {
    "f": Macro("foo", _typed_keys([ecodes.KEY_F, ecodes.KEY_O, ecodes.KEY_O])),
    "b": Macro("bar", _typed_keys([ecodes.KEY_B, ecodes.KEY_A, ecodes.KEY_R])),
}


def canned_macro(argument: str) -> Macro:
    """Pick a demonstration macro by the first character of *argument*.

    Unknown characters give an empty macro; callers reject it.
    """
    if not argument:
        return Macro()
    return CANNED_MACROS.get(argument[0], Macro())


def encode_action(kind: str, argument: str) -> ButtonAction:
    if kind == "button":
        target = parse_index(argument)
        if target is None:
            raise UsageError(f"Invalid button number '{argument}'")
        return ButtonMapping(target)
    if kind == "key":
        code = key_code_from_name(argument)
        if not code:
            raise UsageError(f"Failed to resolve key {argument}")
        return KeyMapping(code)
    if kind == "special":
        special = Special.from_label(argument)
        if special is None:
            raise UsageError(f"Invalid special command '{argument}'")
        return SpecialMapping(special)
    if kind == "macro":
        macro = canned_macro(argument)
        if not macro:
            raise UsageError(f"Invalid macro '{argument}'")
        return MacroMapping(macro)
    raise UsageError(f"Invalid action type '{kind}', expected one of {', '.join(ACTION_KINDS)}")


def write_macro(button: Button, macro: Macro) -> int:
    """Transfer *macro* to *button* event by event, then commit it.

    Returns the number of events written.
    """
    button.set_macro(macro.name or "")
    count = 0
    for index, event in enumerate(macro.iter_events()):
        button.set_macro_event(index, event.type, event.key)
        count += 1
    button.write_macro()
    return count


def apply_action(button: Button, action: ButtonAction) -> None:
    if isinstance(action, ButtonMapping):
        button.set_button(action.button)
    elif isinstance(action, KeyMapping):
        button.set_key(action.key, action.modifiers)
    elif isinstance(action, SpecialMapping):
        button.set_special(action.special)
    elif isinstance(action, MacroMapping):
        write_macro(button, action.macro)
    else:
        raise TypeError(f"unsupported button action {action!r}")


def _format_key(code: int) -> str:
    return key_name(code) or f"0x{code:x}"


def describe_macro(macro: Macro) -> str:
    steps = []
    for event in macro.iter_events():
        marker = "+" if event.type == MacroEventType.KEY_PRESSED else "-"
        steps.append(f"{marker}{_format_key(event.key)}")
    return f"macro {macro.name or '(unnamed)'}: {' '.join(steps)}".rstrip()


def describe_action(button: Button) -> str:
    """Render the current action of *button* for ``info``."""
    action_type = button.action_type
    if action_type == ActionType.BUTTON:
        return f"button {button.get_button()}"
    if action_type == ActionType.KEY:
        key, modifiers = button.get_key()
        parts = [_format_key(mod) for mod in modifiers] + [_format_key(key)]
        return f"key {'+'.join(parts)}"
    if action_type == ActionType.SPECIAL:
        special = button.get_special()
        return f"special {special.label if special else 'unknown'}"
    if action_type == ActionType.MACRO:
        macro = button.get_macro()
        return describe_macro(macro) if macro is not None else "macro"
    return action_type.value


__all__ = [
    "MAX_MACRO_EVENTS",
    "MacroEvent",
    "Macro",
    "ButtonMapping",
    "KeyMapping",
    "SpecialMapping",
    "MacroMapping",
    "ButtonAction",
    "canned_macro",
    "encode_action",
    "write_macro",
    "apply_action",
    "describe_action",
    "describe_macro",
]
