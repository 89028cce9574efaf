"""Command tree for ratbag-command."""

from __future__ import annotations

from typing import Iterator, Tuple

from .base import CommandNode, Handler
from .buttons import BUTTON, CHANGE_BUTTON, SWITCH_ETEKCITY
from .devices import LIST
from .info import INFO
from .profile import PROFILE
from .resolution import DPI, RESOLUTION
from ..dispatcher import route

PROGRAM_NAME = "ratbag-command"


def build_tree(name: str = PROGRAM_NAME) -> CommandNode:
    """Return the root node; its children are the top-level commands."""
    return CommandNode(
        name,
        route,
        subcommands=(
            INFO,
            LIST,
            CHANGE_BUTTON,
            SWITCH_ETEKCITY,
            BUTTON,
            RESOLUTION,
            PROFILE,
            DPI,
        ),
    )


COMMANDS = build_tree()


def walk(node: CommandNode, path: Tuple[str, ...] = ()) -> Iterator[Tuple[Tuple[str, ...], CommandNode]]:
    """Yield ``(path, node)`` for every node below *node*, depth first."""
    for sub in node.subcommands:
        sub_path = path + (sub.name,)
        yield sub_path, sub
        yield from walk(sub, sub_path)


__all__ = ["CommandNode", "Handler", "COMMANDS", "PROGRAM_NAME", "build_tree", "walk"]
