"""Interactive shell bound to one device.

Each line is a command path without the device path; the shell appends the
device it was started with and runs the line with a fresh command context,
so no handle outlives the line that acquired it.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout

from .cli import _configure_logging, open_library, run_command
from .commands import COMMANDS, CommandNode
from .completion import CommandCompleter
from .config import DEFAULT_INPUT_DIR, CommandConfig
from .errors import ExitCode
from .history import HistoryStore
from .library import DeviceLibrary, LogPriority
from .output import print_usage
from .parser import split_command
from .resolver import Needs

LOGGER = logging.getLogger("ratbag_command.repl")

EXIT_WORDS = {"exit", "quit", "q"}


class CommandShell:
    """prompt_toolkit REPL over the command tree."""

    def __init__(
        self,
        root: CommandNode,
        library: DeviceLibrary,
        device_path: str,
        *,
        history_store: Optional[HistoryStore] = None,
        input_dir: str = DEFAULT_INPUT_DIR,
    ) -> None:
        self.root = root
        self.library = library
        self.device_path = device_path
        self.history_store = history_store
        self.input_dir = input_dir
        self.last_status = int(ExitCode.SUCCESS)

    def run(self) -> int:
        history = InMemoryHistory()
        if self.history_store:
            for entry in self.history_store.snapshot():
                history.append_string(entry)
        session = PromptSession(
            f"{Path(self.device_path).name}> ",
            history=history,
            completer=CommandCompleter(self.root),
            complete_while_typing=True,
        )
        buffer: List[str] = []
        while True:
            try:
                with patch_stdout():
                    line = session.prompt()
            except (EOFError, KeyboardInterrupt):
                print()
                return self.last_status
            if self._handle_multiline(buffer, line):
                continue
            payload = " ".join(buffer) if buffer else line
            buffer.clear()
            self._record_history(payload)
            if self.execute(payload) is None:
                return self.last_status

    def execute(self, line: str) -> Optional[int]:
        """Run one shell line; ``None`` means the shell should stop."""
        argv = split_command(line.strip())
        if not argv:
            return self.last_status
        if argv[-1].startswith("#parse-error"):
            print(f"Parse error: {argv[-1].split(':', 1)[-1]}")
            self.last_status = int(ExitCode.USAGE)
            return self.last_status
        if argv[0] in EXIT_WORDS:
            return None
        if argv[0] in ("help", "?"):
            print_usage(self.root)
            return self.last_status
        self.last_status = run_command(self.root, self.library, self._with_device(argv), input_dir=self.input_dir)
        return self.last_status

    def run_script(self, path: str) -> int:
        """Run each line of *path*; stop at the first failing command."""
        try:
            lines = Path(path).expanduser().read_text(encoding="utf-8").splitlines()
        except OSError as exc:
            LOGGER.error("Unable to read script %s: %s", path, exc)
            return int(ExitCode.USAGE)
        for number, raw in enumerate(lines, start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            rc = self.execute(line)
            if rc is None:
                break
            if rc != ExitCode.SUCCESS:
                LOGGER.error("%s:%d: '%s' failed with exit code %d", path, number, line, rc)
                return rc
        return int(ExitCode.SUCCESS)

    def _with_device(self, argv: List[str]) -> List[str]:
        command = self.root.find(argv[0])
        if command is not None and command.needs == Needs.NONE:
            return argv
        return argv + [self.device_path]

    @staticmethod
    def _handle_multiline(buffer: List[str], line: str) -> bool:
        stripped = line.rstrip()
        if stripped.endswith("\\"):
            buffer.append(stripped[:-1])
            return True
        if buffer:
            buffer.append(stripped)
        return False

    def _record_history(self, entry: str) -> None:
        if self.history_store:
            self.history_store.append(entry)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ratbag-shell", description="Interactive ratbag-command shell")
    parser.add_argument("device", help="Device node the shell operates on, e.g. /dev/input/event3")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print debugging output")
    parser.add_argument("--raw", action="store_true", help="Also print raw protocol traffic")
    parser.add_argument("--script", help="Run the commands in this file instead of prompting")
    parser.add_argument("--history", type=Path, help="Path to the command history file")
    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    library: Optional[DeviceLibrary] = None,
    config: Optional[CommandConfig] = None,
) -> int:
    config = config or CommandConfig.from_env()
    args = build_arg_parser().parse_args(argv)
    _configure_logging("DEBUG" if args.verbose or args.raw else config.log_level)
    owned = library is None
    if owned:
        library = open_library(config)
        if library is None:
            return int(ExitCode.DEVICE)
    try:
        if args.raw:
            library.set_log_priority(LogPriority.RAW)
        elif args.verbose:
            library.set_log_priority(LogPriority.DEBUG)
        shell = CommandShell(
            COMMANDS,
            library,
            args.device,
            history_store=None if args.script else HistoryStore(args.history or config.history_file),
            input_dir=config.input_dir,
        )
        if args.script:
            return shell.run_script(args.script)
        return shell.run()
    finally:
        if owned:
            library.unref()


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
