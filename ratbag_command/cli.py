"""ratbag-command CLI entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Sequence, Tuple

from .commands import COMMANDS, PROGRAM_NAME, CommandNode
from .config import DEFAULT_INPUT_DIR, CommandConfig
from .context import CommandContext
from .dispatcher import dispatch
from .errors import CommandError, ExitCode, UsageError
from .library import DeviceLibrary, LibraryError, LogPriority, load_library
from .output import print_usage

LOG = logging.getLogger("ratbag_command.cli")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_arg_parser(prog: str = PROGRAM_NAME) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description="Configure programmable mice", add_help=False)
    parser.add_argument(
        "--verbose",
        nargs="?",
        const="debug",
        choices=("debug", "raw"),
        help="Print debugging output, with protocol output if requested",
    )
    parser.add_argument("-h", "--help", action="store_true", help="Print this help")
    return parser


def split_options(argv: Sequence[str]) -> Tuple[List[str], List[str]]:
    """Split *argv* into leading options and the command path.

    Options are only recognised before the first command token, so a
    command argument that starts with ``-`` (a negative number) is left alone.
    """
    index = 0
    while index < len(argv) and argv[index].startswith("-") and argv[index] != "-":
        if argv[index] == "--":
            return list(argv[:index]), list(argv[index + 1 :])
        index += 1
    return list(argv[:index]), list(argv[index:])


def library_priority(verbose: Optional[str]) -> Optional[LogPriority]:
    if verbose == "raw":
        return LogPriority.RAW
    if verbose == "debug":
        return LogPriority.DEBUG
    return None


def run_command(
    root: CommandNode,
    library: DeviceLibrary,
    argv: List[str],
    *,
    input_dir: str = DEFAULT_INPUT_DIR,
) -> int:
    """Dispatch one command path and map the outcome to an exit code.

    Every handle acquired while the command runs is released before this
    returns, whichever way the command ended.
    """
    with CommandContext(library, input_dir=input_dir) as ctx:
        try:
            return int(dispatch(root, ctx, argv))
        except UsageError as exc:
            LOG.error("%s", exc)
            print_usage(root)
            return int(exc.exit_code)
        except CommandError as exc:
            LOG.error("%s", exc)
            return int(exc.exit_code)


def open_library(config: CommandConfig) -> Optional[DeviceLibrary]:
    try:
        return load_library(config.backend)
    except (ImportError, AttributeError, ValueError, OSError, LibraryError) as exc:
        LOG.error("Failed to initialize the device library '%s': %s", config.backend, exc)
        return None


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    library: Optional[DeviceLibrary] = None,
    config: Optional[CommandConfig] = None,
) -> int:
    config = config or CommandConfig.from_env()
    raw_args = list(sys.argv[1:] if argv is None else argv)
    option_args, command = split_options(raw_args)
    parser = build_arg_parser()
    try:
        args = parser.parse_args(option_args)
    except SystemExit:
        print_usage(COMMANDS)
        return int(ExitCode.USAGE)
    if args.help:
        print_usage(COMMANDS)
        return int(ExitCode.SUCCESS)
    _configure_logging("DEBUG" if args.verbose else config.log_level)

    owned = library is None
    if owned:
        library = open_library(config)
        if library is None:
            return int(ExitCode.DEVICE)
    try:
        priority = library_priority(args.verbose)
        if priority is not None:
            library.set_log_priority(priority)
        return run_command(COMMANDS, library, command, input_dir=config.input_dir)
    finally:
        if owned:
            library.unref()


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
