"""End-to-end tests for the ratbag-command entry point."""

from __future__ import annotations

import pytest
from evdev import ecodes

from ratbag_command.cli import main, split_options
from ratbag_command.library import ActionType, LogPriority
from ratbag_command.testdevice import TestDeviceLibrary

MOUSE = "/dev/input/event3"
FIXED = "/dev/input/event5"


def test_info_lists_profiles_and_marks_active(library, config, capsys):
    rc = main(["info", MOUSE], library=library, config=config)
    out = capsys.readouterr().out
    assert rc == 0
    assert "Device 'Test Mouse'" in out
    assert "Capabilities: res profile btn-key btn-macros" in out
    assert "Number of buttons: 8" in out
    assert "Profiles supported: 2" in out
    assert "  Profile 0 (active) (default)\n" in out
    assert "  Profile 1\n" in out
    assert "      0: 800dpi @ 1000Hz (active) (default)" in out
    assert "      1: <disabled>" in out
    assert "    Button: 3 type thumb is mapped to 'key KEY_B'" in out
    assert "    Button: 4 type wheel up is mapped to 'special wheel-up'" in out
    assert "    Button: 5 type extra is mapped to 'macro hi: +KEY_H -KEY_H'" in out
    assert library.ledger.balanced()


def test_change_button_to_key_reactivates_profile(library, config, mouse):
    rc = main(["change-button", "3", "key", "KEY_A", MOUSE], library=library, config=config)
    assert rc == 0
    button = mouse.profiles[0].buttons[3]
    assert button.action_type == ActionType.KEY
    assert button.key == ecodes.KEY_A
    assert library.activations == [0]
    assert library.ledger.balanced()


def test_change_button_unknown_key_is_usage_error(library, config, mouse, capsys):
    rc = main(["change-button", "3", "key", "BOGUS", MOUSE], library=library, config=config)
    assert rc == 2
    assert "Usage: ratbag-command" in capsys.readouterr().out
    assert mouse.profiles[0].buttons[3].key == ecodes.KEY_B
    assert library.activations == []
    assert library.ledger.balanced()


def test_dpi_set_without_switchable_resolution_is_unsupported(library, config):
    rc = main(["resolution", "1", "dpi", "set", "800", FIXED], library=library, config=config)
    assert rc == 1
    assert library.devices[FIXED].profiles[0].resolutions[1].dpi == 2000
    assert library.ledger.balanced()


def test_list_without_event_nodes(library, config, capsys):
    rc = main(["list"], library=library, config=config)
    assert rc == 0
    assert "No supported devices found" in capsys.readouterr().out
    assert library.opened == []


def test_list_prints_supported_nodes(config, capsys, tmp_path):
    input_dir = tmp_path / "input"
    for name in ("event3", "event7", "mouse0"):
        (input_dir / name).write_text("", encoding="utf-8")
    lib = TestDeviceLibrary.from_description(
        {"devices": {str(input_dir / "event3"): {"name": "Listed Mouse"}}}
    )
    rc = main(["list"], library=lib, config=config)
    out = capsys.readouterr().out
    assert rc == 0
    assert f"{input_dir / 'event3'}:\tListed Mouse" in out
    assert "event7" not in out
    assert lib.opened == [str(input_dir / "event3"), str(input_dir / "event7")]
    assert lib.ledger.balanced()


def test_profile_index_out_of_range_is_unsupported(library, config):
    rc = main(["profile", "5", "active", "set", MOUSE], library=library, config=config)
    assert rc == 1
    assert library.ledger.balanced()


def test_profile_active_set_switches_profile(library, config, mouse, capsys):
    rc = main(["profile", "active", "set", "1", MOUSE], library=library, config=config)
    assert rc == 0
    assert "Switched 'Test Mouse' to profile '1'" in capsys.readouterr().out
    assert [profile.active for profile in mouse.profiles] == [False, True]
    assert library.ledger.balanced()


def test_profile_active_set_same_profile_is_noop(library, config, capsys):
    rc = main(["profile", "active", "set", "0", MOUSE], library=library, config=config)
    assert rc == 0
    assert "'Test Mouse' is already in profile '0'" in capsys.readouterr().out
    assert library.activations == []


def test_profile_active_set_count_is_out_of_range(library, config):
    assert main(["profile", "active", "set", "2", MOUSE], library=library, config=config) == 1


def test_profile_active_get(library, config, capsys):
    assert main(["profile", "active", "get", MOUSE], library=library, config=config) == 0
    assert capsys.readouterr().out.strip() == "0"


def test_dpi_get_reads_active_resolution(library, config, capsys):
    assert main(["dpi", "get", MOUSE], library=library, config=config) == 0
    assert capsys.readouterr().out.strip() == "800"


def test_resolution_index_selects_explicit_resolution(library, config, mouse, capsys):
    assert main(["resolution", "1", "dpi", "get", MOUSE], library=library, config=config) == 0
    assert capsys.readouterr().out.strip() == "1600"
    assert main(["resolution", "1", "dpi", "set", "1200", MOUSE], library=library, config=config) == 0
    assert mouse.profiles[0].resolutions[1].dpi == 1200
    assert mouse.profiles[0].resolutions[0].dpi == 800


def test_nested_profile_and_resolution(library, config, capsys):
    assert main(["profile", "1", "resolution", "dpi", "get", MOUSE], library=library, config=config) == 0
    assert capsys.readouterr().out.strip() == "400"


def test_resolution_active_set_and_rate(library, config, mouse, capsys):
    assert main(["resolution", "active", "set", "1", MOUSE], library=library, config=config) == 0
    assert [res.active for res in mouse.profiles[0].resolutions] == [False, True]
    capsys.readouterr()
    assert main(["resolution", "active", "get", MOUSE], library=library, config=config) == 0
    assert capsys.readouterr().out.strip() == "1"
    assert main(["resolution", "0", "rate", "set", "250", MOUSE], library=library, config=config) == 0
    assert mouse.profiles[0].resolutions[0].report_rate == 250


def test_change_button_macro_writes_canned_events(library, config, mouse):
    assert main(["change-button", "2", "macro", "foo", MOUSE], library=library, config=config) == 0
    macro = mouse.profiles[0].buttons[2].macro
    assert macro.name == "foo"
    assert len(macro.events) == 6
    assert library.activations == [0]


def test_change_button_on_device_without_key_mapping(library, config):
    assert main(["change-button", "3", "button", "2", FIXED], library=library, config=config) == 1
    assert library.ledger.balanced()


def test_change_button_missing_button(library, config):
    assert main(["change-button", "99", "button", "2", MOUSE], library=library, config=config) == 1


def test_change_button_library_failure_is_unsupported(library, config, mouse):
    mouse.fail.add("set_special")
    assert main(["change-button", "3", "special", "doubleclick", MOUSE], library=library, config=config) == 1
    assert library.activations == []
    assert library.ledger.balanced()


def test_commit_failure_is_device_error(library, config, mouse):
    mouse.fail.add("set_profile_active")
    assert main(["change-button", "3", "button", "2", MOUSE], library=library, config=config) == 3
    assert library.ledger.balanced()


def test_switch_etekcity_toggles_volume_keys(library, config, mouse, capsys):
    assert main(["switch-etekcity", MOUSE], library=library, config=config) == 0
    assert "to report the volume keys" in capsys.readouterr().out
    buttons = mouse.profiles[0].buttons
    assert (buttons[6].key, buttons[7].key) == (ecodes.KEY_VOLUMEUP, ecodes.KEY_VOLUMEDOWN)

    assert main(["switch-etekcity", MOUSE], library=library, config=config) == 0
    assert "to not report the volume keys" in capsys.readouterr().out
    assert buttons[6].action_type == ActionType.NONE
    assert library.activations == [0, 0]
    assert library.ledger.balanced()


def test_switch_etekcity_leaves_other_mappings(library, config, mouse, capsys):
    mouse.profiles[0].buttons[6].action_type = ActionType.BUTTON
    mouse.profiles[0].buttons[6].button = 4
    assert main(["switch-etekcity", MOUSE], library=library, config=config) == 0
    assert "unchanged" in capsys.readouterr().out
    assert library.activations == []
    assert library.ledger.balanced()


@pytest.mark.parametrize(
    "argv, expected",
    [
        ([], 2),
        (["frobnicate", MOUSE], 2),
        (["info"], 3),
        (["info", "/dev/input/event9"], 3),
        (["info", "extra", MOUSE], 2),
        (["profile", MOUSE], 2),
        (["profile", "bogus", MOUSE], 2),
        (["profile", "1", "resolution", "5", "dpi", "get", MOUSE], 1),
        (["button", "3", MOUSE], 2),
        (["button", "42", MOUSE], 1),
        (["change-button", "3", "key", MOUSE], 2),
        (["resolution", "dpi", "set", "x", MOUSE], 2),
    ],
)
def test_exit_codes_and_release_accounting(library, config, argv, expected):
    assert main(argv, library=library, config=config) == expected
    assert library.ledger.balanced(), library.ledger.outstanding()
    assert not library.released


def test_help_prints_usage(library, config, capsys):
    assert main(["--help"], library=library, config=config) == 0
    assert capsys.readouterr().out.startswith("Usage: ratbag-command [options] [command] /dev/input/eventX")
    assert library.opened == []


def test_unknown_option_is_usage_error(library, config, capsys):
    assert main(["--bogus", "info", MOUSE], library=library, config=config) == 2
    assert "Usage:" in capsys.readouterr().out


@pytest.mark.parametrize(
    "flag, priority",
    [("--verbose", LogPriority.DEBUG), ("--verbose=raw", LogPriority.RAW)],
)
def test_verbose_sets_library_priority(library, config, flag, priority):
    assert main([flag, "dpi", "get", MOUSE], library=library, config=config) == 0
    assert library.log_priority == priority


def test_split_options_stops_at_first_command():
    assert split_options(["--verbose", "dpi", "set", "-5"]) == (["--verbose"], ["dpi", "set", "-5"])
    assert split_options(["--", "--odd"]) == ([], ["--odd"])


def test_main_releases_library_it_created(config, monkeypatch):
    created = []

    def factory():
        lib = TestDeviceLibrary()
        created.append(lib)
        return lib

    monkeypatch.setattr("ratbag_command.cli.load_library", lambda spec: factory())
    assert main(["info", MOUSE], config=config) == 3
    assert created and created[0].released

