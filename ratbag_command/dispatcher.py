"""Recursive subcommand dispatch over the command tree."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, List, Optional

from .context import CommandContext
from .errors import UsageError
from .parser import parse_index
from .resolver import ensure_context

if TYPE_CHECKING:  # pragma: no cover
    from .commands.base import CommandNode

LOGGER = logging.getLogger("ratbag_command.dispatcher")

IndexSelector = Callable[[CommandContext, int], None]
ActiveSelector = Callable[[CommandContext], None]


def run_subcommand(command: str, node: CommandNode, ctx: CommandContext, argv: List[str]) -> int:
    """Run the child of *node* named *command*; ``argv[0]`` is *command*."""
    sub = node.find(command)
    if sub is None:
        raise UsageError(f"Invalid subcommand '{command}'")
    remaining = ensure_context(ctx, sub.needs, argv[1:])
    LOGGER.debug("dispatch %s %s", sub.name, remaining)
    return sub.run(ctx, remaining)


def dispatch(root: CommandNode, ctx: CommandContext, argv: List[str]) -> int:
    if not argv:
        raise UsageError("Missing command")
    return run_subcommand(argv[0], root, ctx, argv)


def route(node: CommandNode, ctx: CommandContext, argv: List[str]) -> int:
    """Handler for interior nodes: the next token names a child."""
    if not argv:
        raise UsageError(f"Missing subcommand for '{node.name}'")
    return run_subcommand(argv[0], node, ctx, argv)


class IndexedRoute:
    """Handler for interior nodes that take an optional positional index.

    A token that is a full integer selects that item explicitly and is
    consumed.  Any other token leaves the index unset, selects the active
    item (where the node has one) and is matched as a subcommand name.
    """

    def __init__(self, select_index: IndexSelector, select_active: Optional[ActiveSelector] = None) -> None:
        self._select_index = select_index
        self._select_active = select_active

    def __call__(self, node: CommandNode, ctx: CommandContext, argv: List[str]) -> int:
        if not argv:
            raise UsageError(f"Missing subcommand for '{node.name}'")
        index = parse_index(argv[0])
        if index is not None:
            self._select_index(ctx, index)
            argv = argv[1:]
        elif self._select_active is not None:
            self._select_active(ctx)
        return route(node, ctx, argv)


__all__ = ["run_subcommand", "dispatch", "route", "IndexedRoute"]
