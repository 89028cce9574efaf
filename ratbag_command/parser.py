"""Token helpers for ratbag-command."""

from __future__ import annotations

import re
import shlex
from typing import List, Optional

_INTEGER = re.compile(r"[+-]?[0-9]+")


def parse_index(token: Optional[str]) -> Optional[int]:
    """Return the integer value of *token* if the whole token is an integer literal."""
    if token is None or not _INTEGER.fullmatch(token):
        return None
    return int(token, 10)


def split_command(line: str) -> List[str]:
    """Split a command line into argv tokens using shlex rules."""
    if not line:
        return []
    try:
        return shlex.split(line, comments=False, posix=True)
    except ValueError as exc:
        # raw line plus a marker token the caller reports
        return [line.strip(), f"#parse-error:{exc}"]
