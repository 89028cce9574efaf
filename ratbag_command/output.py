"""Usage rendering for ratbag-command."""

from __future__ import annotations

import sys
from typing import List, Optional, TextIO

from .commands.base import CommandNode

USAGE_COLUMN = 40
MIN_FILL = 4
FILL = "." * (USAGE_COLUMN + 1)


def render_subcommands(node: CommandNode, prefix: str = "") -> List[str]:
    """Render one help line per documented descendant of *node*.

    Each line is ``<prefix><path> <args> ..... <help>`` with the dot fill
    sized so help texts line up, never shorter than ``MIN_FILL`` dots.
    Undocumented nodes print nothing themselves but their children do.
    """
    lines: List[str] = []
    line_prefix = f"{prefix}{node.usage_name} "
    for sub in node.subcommands:
        count = max(MIN_FILL, USAGE_COLUMN - len(sub.usage_name) - len(line_prefix))
        if sub.help:
            lines.append(f"    {line_prefix}{sub.usage_name} {FILL[:count]} {sub.help}")
        lines.extend(render_subcommands(sub, line_prefix))
    return lines


def render_usage(root: CommandNode, program: Optional[str] = None) -> str:
    program = program or root.name
    lines = [
        f"Usage: {program} [options] [command] /dev/input/eventX",
        "/path/to/device ..... Open the given device only",
        "",
        "Commands:",
    ]
    lines.extend(render_subcommands(root))
    lines.extend(
        [
            "",
            "Options:",
            "    --verbose[=raw] ....... Print debugging output, with protocol output if requested.",
            "    --help .......... Print this help.",
        ]
    )
    return "\n".join(lines)


def print_usage(root: CommandNode, program: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
    print(render_usage(root, program), file=stream or sys.stdout)


__all__ = ["render_subcommands", "render_usage", "print_usage"]
