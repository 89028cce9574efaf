"""Key name lookup backed by the kernel input event codes from evdev."""

from __future__ import annotations

from typing import Optional

from evdev import ecodes

KEY_PREFIXES = ("KEY_", "BTN_")


def key_code_from_name(name: str) -> int:
    """Return the EV_KEY code for *name*, or 0 when it does not name a key."""
    if not name or not name.startswith(KEY_PREFIXES):
        return 0
    return int(ecodes.ecodes.get(name, 0))


def key_name(code: int) -> Optional[str]:
    names = ecodes.keys.get(code)
    if names is None:
        return None
    if isinstance(names, (list, tuple)):
        return names[0] if names else None
    return names


__all__ = ["key_code_from_name", "key_name"]
