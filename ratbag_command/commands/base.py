"""Command node description for ratbag-command."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple

from ..resolver import Needs

if TYPE_CHECKING:  # pragma: no cover
    from ..context import CommandContext

Handler = Callable[["CommandNode", "CommandContext", List[str]], int]


@dataclass(frozen=True)
class CommandNode:
    """Static description of one command in the tree.

    Interior nodes use one of the routing handlers from
    :mod:`ratbag_command.dispatcher`; leaves carry the command itself.
    """

    name: str
    handler: Handler
    args: Optional[str] = None
    help: Optional[str] = None
    needs: Needs = Needs.NONE
    subcommands: Tuple["CommandNode", ...] = field(default_factory=tuple)

    def run(self, ctx: "CommandContext", argv: List[str]) -> int:
        return self.handler(self, ctx, argv)

    def find(self, name: str) -> Optional["CommandNode"]:
        for sub in self.subcommands:
            if sub.name == name:
                return sub
        return None

    @property
    def usage_name(self) -> str:
        return f"{self.name} {self.args}" if self.args else self.name
