"""Environment-driven settings for ratbag-command."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_BACKEND = "ratbag_command.testdevice:from_environment"
DEFAULT_INPUT_DIR = "/dev/input"
DEFAULT_HISTORY_FILE = Path.home() / ".ratbag-command-history"


@dataclass
class CommandConfig:
    """Settings that are not part of the command line."""

    log_level: str = "WARNING"
    backend: str = DEFAULT_BACKEND
    devices_file: Optional[Path] = None
    input_dir: str = DEFAULT_INPUT_DIR
    history_file: Path = DEFAULT_HISTORY_FILE

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CommandConfig":
        env = os.environ if environ is None else environ
        devices = env.get("RATBAG_COMMAND_DEVICES")
        history = env.get("RATBAG_COMMAND_HISTORY")
        return cls(
            log_level=env.get("RATBAG_COMMAND_LOG", "WARNING"),
            backend=env.get("RATBAG_COMMAND_BACKEND") or DEFAULT_BACKEND,
            devices_file=Path(devices).expanduser() if devices else None,
            input_dir=env.get("RATBAG_COMMAND_INPUT_DIR") or DEFAULT_INPUT_DIR,
            history_file=Path(history).expanduser() if history else DEFAULT_HISTORY_FILE,
        )
