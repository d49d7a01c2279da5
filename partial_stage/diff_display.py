"""
Diff display: render parsed diffs for the terminal and let the user pick
which lines to stage.

Includes a Textual-based line picker that toggles entries of a
DiffSelection; a plain console prompt is used when Textual cannot start.
"""

from __future__ import annotations

import logging

from .editing.diff_parser import Diff, DiffLine, DiffLineType
from .editing.selection import DiffSelection

logger = logging.getLogger(__name__)

_BOLD = "\033[1m"
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_RED = "\033[31m"
_DIM = "\033[2m"
_RESET = "\033[0m"


def _is_file_header(lines: list[str], i: int) -> bool:
    """``lines[i]`` opens a ``---``/``+++`` pair directly followed by a hunk."""
    return (
        i >= 0
        and lines[i].startswith("--- ")
        and i + 2 < len(lines)
        and lines[i + 1].startswith("+++ ")
        and lines[i + 2].startswith("@@")
    )


def format_colored_diff(diff_text: str) -> str:
    """Add ANSI colors to a unified diff string.

    Green for additions (+), red for deletions (-), cyan for @@ hunks.
    Inside a hunk, ``---``/``+++`` are file headers only when they open the
    next patch.
    """
    lines = diff_text.splitlines()
    colored: list[str] = []
    in_hunk = False
    for i, line in enumerate(lines):
        if line.startswith("@@"):
            in_hunk = True
            colored.append(f"{_CYAN}{line}{_RESET}")
        elif (line.startswith("+++") or line.startswith("---")) and (
            not in_hunk or _is_file_header(lines, i) or _is_file_header(lines, i - 1)
        ):
            colored.append(f"{_BOLD}{line}{_RESET}")
        elif line.startswith("+"):
            colored.append(f"{_GREEN}{line}{_RESET}")
        elif line.startswith("-"):
            colored.append(f"{_RED}{line}{_RESET}")
        else:
            colored.append(line)
    return "\n".join(colored)


def _checkbox(line: DiffLine, position: int, selection: DiffSelection) -> str:
    if not line.is_change:
        return "   "
    return "[x]" if selection.get(position) else "[ ]"


def format_numbered_diff(diff: Diff, selection: DiffSelection,
                         color: bool = True) -> str:
    """Render *diff* with the selection position and state of every line.

    The positions printed are the ones accepted by ``--only``/``--exclude``.
    """
    out: list[str] = []
    for number, section in enumerate(diff.sections):
        header = f"section {number}: {section.header.text}"
        out.append(f"{_CYAN}{header}{_RESET}" if color else header)
        for position, line in section.content_lines():
            row = f"{position:>5} {_checkbox(line, position, selection)} {line.text}"
            if color and line.type is DiffLineType.ADD:
                row = f"{_GREEN}{row}{_RESET}"
            elif color and line.type is DiffLineType.DELETE:
                row = f"{_RED}{row}{_RESET}"
            elif color:
                row = f"{_DIM}{row}{_RESET}"
            out.append(row)
    return "\n".join(out)


# ══════════════════════════════════════════════════════════════════
#  Interactive line picker (Textual TUI)
# ══════════════════════════════════════════════════════════════════

def pick_lines(path: str, diff: Diff, selection: DiffSelection,
               use_tui: bool = True) -> bool:
    """Let the user toggle the changed lines of *path*.

    *selection* is updated only when the user accepts. Returns ``True`` if
    the user accepted, ``False`` if they cancelled.
    """
    if diff.is_empty:
        return True

    if not use_tui:
        chosen = _console_pick_lines(path, diff, selection)
    else:
        try:
            chosen = _textual_pick_lines(path, diff, selection)
        except ImportError:
            logger.warning("Textual not installed, falling back to console line picker.")
            chosen = _console_pick_lines(path, diff, selection)
        except Exception as e:
            logger.warning("Textual line picker failed: %s", e)
            chosen = _console_pick_lines(path, diff, selection)

    if chosen is None:
        return False

    apply_choice(diff, selection, chosen)
    return True


def apply_choice(diff: Diff, selection: DiffSelection, chosen: set[int]) -> None:
    """Record *chosen* as the exact set of included change lines."""
    positions = [position for position, _ in diff.change_lines()]
    if all(p in chosen for p in positions):
        selection.set_all(True)
        return
    if not chosen:
        selection.set_all(False)
        return

    selection.set_all(False)
    selection.set_many(chosen, True)


def _format_rich_line(line: DiffLine) -> str:
    """Convert one diff line to Rich markup for Textual display."""
    escaped = line.text.replace("[", "\\[")
    if line.type is DiffLineType.ADD:
        return f"[green]{escaped}[/green]"
    if line.type is DiffLineType.DELETE:
        return f"[red]{escaped}[/red]"
    return escaped


def _textual_pick_lines(path: str, diff: Diff,
                        selection: DiffSelection) -> set[int] | None:
    """Launch a Textual app listing every changed line as a toggle."""
    from textual.app import App, ComposeResult
    from textual.binding import Binding
    from textual.widgets import Footer, SelectionList, Static
    from textual.widgets.selection_list import Selection

    class LinePickerApp(App):
        """Toggle the lines of one file that should be staged."""

        CSS = """
        #title-bar {
            dock: top;
            height: 3;
            background: #1a1a2e;
            color: #e9c46a;
            text-align: center;
            padding: 1;
            text-style: bold;
        }
        #lines {
            height: 1fr;
            margin: 1 2;
            border: round #444;
        }
        """

        BINDINGS = [
            Binding("s", "accept", "Stage selected"),
            Binding("ctrl+s", "accept", "Stage selected", show=False),
            Binding("escape", "cancel", "Cancel"),
            Binding("a", "select_all", "All"),
            Binding("n", "select_none", "None"),
        ]

        def __init__(self) -> None:
            super().__init__()
            self.chosen: set[int] | None = None

        def compose(self) -> ComposeResult:
            yield Static(f" Select lines to stage: {path} ", id="title-bar")
            options = []
            for number, section in enumerate(diff.sections):
                for position, line in section.change_lines():
                    options.append(Selection(
                        f"{number}:{position:<4} {_format_rich_line(line)}",
                        position,
                        selection.get(position),
                    ))
            yield SelectionList[int](*options, id="lines")
            yield Footer()

        def action_accept(self) -> None:
            self.chosen = set(self.query_one(SelectionList).selected)
            self.exit()

        def action_cancel(self) -> None:
            self.chosen = None
            self.exit()

        def action_select_all(self) -> None:
            self.query_one(SelectionList).select_all()

        def action_select_none(self) -> None:
            self.query_one(SelectionList).deselect_all()

    app = LinePickerApp()
    app.run()
    return app.chosen


def _console_pick_lines(path: str, diff: Diff,
                        selection: DiffSelection) -> set[int] | None:
    """Fallback console-based picker when Textual is unavailable."""
    working = selection.copy()
    valid = {position for position, _ in diff.change_lines()}

    while True:
        print(f"\n  {path}")
        print(format_numbered_diff(diff, working))
        print("\n  <number> toggle  |  [A]ll  |  [N]one  |  [S]tage  |  [Q]uit")
        try:
            choice = input("  Your choice: ").strip().lower()
        except (EOFError, KeyboardInterrupt):
            return None

        if choice in ("s", "stage"):
            return {p for p in valid if working.get(p)}
        if choice in ("q", "quit"):
            return None
        if choice in ("a", "all"):
            working.set_all(True)
        elif choice in ("n", "none"):
            working.set_all(False)
        elif choice.isdigit() and int(choice) in valid:
            working.toggle(int(choice))
        else:
            print("  Invalid choice.")
