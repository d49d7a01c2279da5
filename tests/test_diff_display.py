"""Tests for diff rendering and the line picker helpers."""

from unittest.mock import patch

from partial_stage.diff_display import (
    apply_choice, format_colored_diff, format_numbered_diff, pick_lines,
)
from partial_stage.editing.diff_parser import Diff, DiffParser
from partial_stage.editing.selection import DiffSelection


RAW = "@@ -1,2 +1,2 @@\n-old\n+new\n same\n"


def _diff():
    return DiffParser().parse(RAW)


class TestFormatting:
    def test_colored_diff(self):
        out = format_colored_diff("--- a/x\n+++ b/x\n@@ -1 +1 @@\n-a\n+b\n c")
        lines = out.split("\n")
        assert lines[0] == "\033[1m--- a/x\033[0m"
        assert lines[2] == "\033[36m@@ -1 +1 @@\033[0m"
        assert lines[3] == "\033[31m-a\033[0m"
        assert lines[4] == "\033[32m+b\033[0m"
        assert lines[5] == " c"

    def test_deletion_starting_with_dashes_is_not_a_header(self):
        out = format_colored_diff("--- a/x\n+++ b/x\n@@ -1,2 +1,2 @@\n---x\n+++y\n c")
        lines = out.split("\n")
        assert lines[0] == "\033[1m--- a/x\033[0m"
        assert lines[1] == "\033[1m+++ b/x\033[0m"
        assert lines[3] == "\033[31m---x\033[0m"
        assert lines[4] == "\033[32m+++y\033[0m"

    def test_next_patch_header_after_a_hunk(self):
        out = format_colored_diff(
            "--- /dev/null\n+++ b/n\n@@ -0,0 +1,1 @@\n+a\n"
            "--- /dev/null\n+++ b/n\n@@ -0,0 +5,1 @@\n+b\n"
        )
        lines = out.split("\n")
        assert lines[4] == "\033[1m--- /dev/null\033[0m"
        assert lines[5] == "\033[1m+++ b/n\033[0m"

    def test_numbered_diff_without_color(self):
        selection = DiffSelection()
        selection.set(1, False)
        out = format_numbered_diff(_diff(), selection, color=False)
        assert out.split("\n") == [
            "section 0: @@ -1,2 +1,2 @@",
            "    1 [ ] -old",
            "    2 [x] +new",
            "    3      same",
        ]


class TestApplyChoice:
    def test_everything_chosen(self):
        selection = DiffSelection(include_all_by_default=False)
        apply_choice(_diff(), selection, {1, 2})
        assert selection.is_include_all()

    def test_nothing_chosen(self):
        selection = DiffSelection()
        apply_choice(_diff(), selection, set())
        assert selection.is_include_none()

    def test_some_chosen(self):
        selection = DiffSelection()
        apply_choice(_diff(), selection, {2})
        assert selection.get(1) is False
        assert selection.get(2) is True


class TestPickLines:
    def test_empty_diff_needs_no_choice(self):
        assert pick_lines("x", Diff(), DiffSelection()) is True

    @patch("partial_stage.diff_display._textual_pick_lines", return_value={2})
    def test_accepted_choice_updates_selection(self, mock_tui):
        selection = DiffSelection()
        assert pick_lines("x", _diff(), selection) is True
        assert selection.get(1) is False

    @patch("partial_stage.diff_display._textual_pick_lines", return_value=None)
    def test_cancel_leaves_selection(self, mock_tui):
        selection = DiffSelection()
        assert pick_lines("x", _diff(), selection) is False
        assert selection.is_include_all()

    @patch("partial_stage.diff_display._textual_pick_lines", side_effect=ImportError)
    @patch("builtins.input", side_effect=["1", "s"])
    def test_console_fallback(self, mock_input, mock_tui, capsys):
        selection = DiffSelection()
        assert pick_lines("x", _diff(), selection) is True
        assert selection.get(1) is False
        assert selection.get(2) is True
