"""File-backed command history for the interactive shell."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

LOGGER = logging.getLogger("ratbag_command.history")


class HistoryStore:
    """Keeps the last ``limit`` shell lines, mirrored to a text file."""

    def __init__(self, path: Optional[Union[str, Path]], *, limit: int = 500) -> None:
        self.limit = max(1, int(limit))
        self.path = Path(path).expanduser() if path else None
        self.entries: List[str] = []
        if self.path is not None and self.path.exists():
            self._load()

    def _load(self) -> None:
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            LOGGER.warning("cannot read history %s: %s", self.path, exc)
            return
        lines = [line.strip() for line in text.splitlines()]
        self.entries = [line for line in lines if line][-self.limit :]

    def append(self, line: str) -> None:
        entry = line.strip()
        if not entry or (self.entries and self.entries[-1] == entry):
            return
        self.entries.append(entry)
        del self.entries[: -self.limit]
        self._save()

    def _save(self) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text("\n".join(self.entries) + "\n", encoding="utf-8")
        except OSError as exc:
            LOGGER.warning("cannot write history %s: %s", self.path, exc)

    def snapshot(self) -> List[str]:
        return list(self.entries)
