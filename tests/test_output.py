"""Usage rendering tests."""

from __future__ import annotations

from ratbag_command.commands import COMMANDS
from ratbag_command.commands.base import CommandNode
from ratbag_command.dispatcher import route
from ratbag_command.output import MIN_FILL, USAGE_COLUMN, render_subcommands, render_usage


def _noop(node, ctx, argv):
    return 0


def test_top_level_lines_are_aligned():
    lines = render_subcommands(COMMANDS)
    info = next(line for line in lines if line.startswith("    ratbag-command info "))
    dots = USAGE_COLUMN - len("info") - len("ratbag-command ")
    assert info == f"    ratbag-command info {'.' * dots} Show information about the device's capabilities"
    listing = next(line for line in lines if line.startswith("    ratbag-command list "))
    assert listing.index("List the") == info.index("Show information")


def test_deep_paths_keep_minimum_fill():
    lines = render_subcommands(COMMANDS)
    expected = "    ratbag-command profile <idx> resolution N dpi set <dpi> " + "." * MIN_FILL + " Set the resolution in dpi"
    assert expected in lines


def test_nodes_without_help_only_render_children():
    lines = render_subcommands(COMMANDS)
    assert not any(line.split(" .")[0].endswith("profile <idx> active") for line in lines)
    assert any("profile <idx> active get" in line for line in lines)


def test_leaf_without_children_renders_nothing():
    assert render_subcommands(CommandNode("leaf", _noop, help="Leaf")) == []


def test_prefix_is_carried_into_children():
    child = CommandNode("child", _noop, args="X", help="Child")
    parent = CommandNode("parent", route, subcommands=(child,))
    root = CommandNode("tool", route, subcommands=(parent,))
    count = USAGE_COLUMN - len("child X") - len("tool parent ")
    assert render_subcommands(root) == [f"    tool parent child X {'.' * count} Child"]


def test_render_usage_header_and_options():
    text = render_usage(COMMANDS)
    assert text.splitlines()[0] == "Usage: ratbag-command [options] [command] /dev/input/eventX"
    assert "Commands:" in text
    assert "    --help .......... Print this help." in text
