"""
Pytest fixtures for ratbag-command tests.

Every test gets freshly parsed in-memory devices, so mutations made by one
command never leak into another test.
"""

from __future__ import annotations

import copy
from typing import Any, Dict

import pytest

from ratbag_command.config import CommandConfig
from ratbag_command.testdevice import TestDeviceLibrary

MOUSE_PATH = "/dev/input/event3"
FIXED_PATH = "/dev/input/event5"


def _buttons() -> list:
    return [
        {"type": "left", "action": "button", "button": 1},
        {"type": "right", "action": "button", "button": 2},
        {"type": "middle", "action": "button", "button": 3},
        {"type": "thumb", "action": "key", "key": "KEY_B"},
        {"type": "wheel up", "action": "special", "special": "wheel-up"},
        {"type": "extra", "action": "macro", "name": "hi", "events": [
            {"type": "key_pressed", "key": "KEY_H"},
            {"type": "key_released", "key": "KEY_H"},
        ]},
        {"type": "side", "action": "none"},
        {"type": "side", "action": "none"},
    ]


DESCRIPTION: Dict[str, Any] = {
    "devices": {
        MOUSE_PATH: {
            "name": "Test Mouse",
            "capabilities": ["res", "profile", "btn-key", "btn-macros"],
            "profiles": [
                {
                    "active": True,
                    "default": True,
                    "resolutions": [
                        {"dpi": 800, "rate": 1000, "active": True, "default": True},
                        {"dpi": 1600, "rate": 500},
                    ],
                    "buttons": _buttons(),
                },
                {
                    "resolutions": [
                        {"dpi": 400, "rate": 125, "active": True},
                        {"dpi": 0, "rate": 0},
                    ],
                    "buttons": _buttons(),
                },
            ],
        },
        FIXED_PATH: {
            "name": "Fixed Mouse",
            "capabilities": ["profile"],
            "profiles": [
                {
                    "active": True,
                    "resolutions": [
                        {"dpi": 1000, "rate": 500, "active": True},
                        {"dpi": 2000, "rate": 500},
                    ],
                    "buttons": _buttons(),
                },
            ],
        },
    }
}


@pytest.fixture
def library() -> TestDeviceLibrary:
    return TestDeviceLibrary.from_description(copy.deepcopy(DESCRIPTION))


@pytest.fixture
def config(tmp_path) -> CommandConfig:
    input_dir = tmp_path / "input"
    input_dir.mkdir()
    return CommandConfig(input_dir=str(input_dir), history_file=tmp_path / "history")


@pytest.fixture
def mouse(library):
    return library.devices[MOUSE_PATH]
