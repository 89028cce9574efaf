"""Device listing command."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from .base import CommandNode
from ..context import CommandContext
from ..errors import UsageError
from ..library import LibraryError

LOGGER = logging.getLogger("ratbag_command.commands.devices")


def event_nodes(input_dir: str) -> List[Path]:
    directory = Path(input_dir)
    if not directory.is_dir():
        return []
    return sorted(directory.glob("event*"), key=lambda path: path.name)


def run_list(node: CommandNode, ctx: CommandContext, argv: List[str]) -> int:
    if argv:
        raise UsageError(f"Unexpected arguments to list: {' '.join(argv)}")
    supported = 0
    for path in event_nodes(ctx.input_dir):
        try:
            device = ctx.library.open_device(str(path))
        except LibraryError as exc:
            LOGGER.debug("skipping %s: %s", path, exc)
            continue
        if device is None:
            continue
        with device:
            print(f"{path}:\t{device.name}")
        supported += 1
    if not supported:
        print("No supported devices found")
    return 0


LIST = CommandNode("list", run_list, help="List the available devices")
