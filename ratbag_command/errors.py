"""Exit codes and the error taxonomy for ratbag-command."""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    UNSUPPORTED = 1  # device lacks the capability, or an index exceeds the device
    USAGE = 2  # invalid command line
    DEVICE = 3  # invalid/missing device or a device operation failed


class CommandError(RuntimeError):
    """Base class for errors that terminate a command invocation."""

    exit_code = ExitCode.DEVICE


class UsageError(CommandError):
    """The command line does not match the command tree."""

    exit_code = ExitCode.USAGE


class UnsupportedError(CommandError):
    """Well-formed command the device cannot perform."""

    exit_code = ExitCode.UNSUPPORTED


class DeviceError(CommandError):
    """Missing device, failed open, or a device operation failed."""

    exit_code = ExitCode.DEVICE


__all__ = ["ExitCode", "CommandError", "UsageError", "UnsupportedError", "DeviceError"]
