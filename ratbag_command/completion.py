"""prompt_toolkit completer that follows the command tree."""

from __future__ import annotations

import shlex
from typing import Iterable, List, Optional

from evdev import ecodes
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from .actions import ACTION_KINDS, CANNED_MACROS
from .commands.base import CommandNode
from .dispatcher import IndexedRoute
from .keycodes import KEY_PREFIXES
from .library import Special
from .parser import parse_index

MAX_KEY_CANDIDATES = 64


def _normalise_tokens(text: str) -> List[str]:
    if not text:
        return []
    try:
        tokens = shlex.split(text, posix=True)
    except ValueError:
        tokens = text.split()
    if text[-1].isspace():
        tokens.append("")
    return tokens


def _key_names(prefix: str) -> List[str]:
    needle = prefix.upper()
    names = [name for name in ecodes.ecodes if name.startswith(KEY_PREFIXES) and name.startswith(needle)]
    return sorted(names)[:MAX_KEY_CANDIDATES]


def _change_button_candidates(args: List[str], prefix: str) -> List[str]:
    # args holds the complete tokens after "change-button": X, kind
    if len(args) == 1:
        return list(ACTION_KINDS)
    if len(args) == 2:
        kind = args[1]
        if kind == "key":
            return _key_names(prefix)
        if kind == "special":
            return [special.label for special in Special if special is not Special.UNKNOWN]
        if kind == "macro":
            return [macro.name for macro in CANNED_MACROS.values()]
    return []


class CommandCompleter(Completer):
    """Complete subcommand names, skipping positional indices."""

    def __init__(self, root: CommandNode) -> None:
        self.root = root

    def get_completions(self, document: Document, complete_event) -> Iterable[Completion]:
        tokens = _normalise_tokens(document.text_before_cursor)
        if not tokens:
            tokens = [""]
        prefix = tokens[-1]
        for candidate in self.candidates(tokens[:-1], prefix):
            yield Completion(candidate, start_position=-len(prefix))

    def candidates(self, complete: List[str], prefix: str) -> List[str]:
        node: Optional[CommandNode] = self.root
        for position, token in enumerate(complete):
            if node.name == "change-button":
                return self._filter(_change_button_candidates(complete[position:], prefix), prefix)
            if isinstance(node.handler, IndexedRoute) and parse_index(token) is not None:
                continue
            node = node.find(token)
            if node is None:
                return []
        if node.name == "change-button":
            return []
        return self._filter([sub.name for sub in node.subcommands], prefix)

    @staticmethod
    def _filter(candidates: Iterable[str], prefix: str) -> List[str]:
        needle = prefix.lower()
        return sorted({entry for entry in candidates if entry.lower().startswith(needle)})
