"""Completion tests for the interactive shell."""

from __future__ import annotations

from prompt_toolkit.document import Document

from ratbag_command.commands import COMMANDS
from ratbag_command.completion import CommandCompleter


def _complete(text: str):
    completer = CommandCompleter(COMMANDS)
    doc = Document(text, cursor_position=len(text))
    return {c.text for c in completer.get_completions(doc, None)}


def test_top_level_prefix():
    assert _complete("pro") == {"profile"}
    assert {"info", "list", "dpi", "change-button"} <= _complete("")


def test_index_tokens_are_skipped():
    assert _complete("profile 1 ") == {"active", "resolution", "button"}
    assert _complete("profile 1 resolution 0 ") == {"active", "dpi", "rate"}
    assert _complete("resolution ") == {"active", "dpi", "rate"}


def test_leaf_subcommands():
    assert _complete("dpi ") == {"get", "set"}
    assert _complete("profile active s") == {"set"}


def test_change_button_arguments():
    assert _complete("change-button 3 ") == {"button", "key", "special", "macro"}
    assert "KEY_VOLUMEUP" in _complete("change-button 3 key KEY_VOLU")
    assert _complete("change-button 3 special profile-cycle") == {"profile-cycle-up", "profile-cycle-down"}
    assert _complete("change-button 3 macro ") == {"foo", "bar"}
    assert _complete("change-button ") == set()


def test_unknown_path_has_no_candidates():
    assert _complete("bogus ") == set()


def test_completion_start_position_replaces_prefix():
    completer = CommandCompleter(COMMANDS)
    doc = Document("resolution d", cursor_position=len("resolution d"))
    completions = list(completer.get_completions(doc, None))
    assert [(c.text, c.start_position) for c in completions] == [("dpi", -1)]
