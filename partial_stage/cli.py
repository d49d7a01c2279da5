"""
CLI entry point: argument parsing and main execution flow.
"""

import argparse
import sys

from .cli_display import print_apply_result, setup_logger
from .config import Config
from .diff_display import format_colored_diff, format_numbered_diff, pick_lines
from .editing.patch_builder import build_modified_file_patches, build_new_file_patch
from .editing.selection import DiffSelection
from .errors import PartialApplyError, PartialStageError
from .git_utils import GitRunner
from .staging import create_commit, get_diff, stage_file
from .status import FileStatus, WorkingDirectoryFileChange, get_status

_STATUS_LABELS = {
    FileStatus.MODIFIED: "M",
    FileStatus.NEW: "A",
    FileStatus.DELETED: "D",
    FileStatus.RENAMED: "R",
    FileStatus.CONFLICTED: "U",
}


def parse_line_spec(spec: str) -> list[int]:
    """Parse ``"3,5-7"`` into ``[3, 5, 6, 7]``."""
    positions: list[int] = []
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start, _, end = part.partition("-")
            try:
                first, last = int(start), int(end)
            except ValueError:
                raise argparse.ArgumentTypeError(f"invalid line range: {part!r}")
            if last < first:
                raise argparse.ArgumentTypeError(f"empty line range: {part!r}")
            positions.extend(range(first, last + 1))
        else:
            try:
                positions.append(int(part))
            except ValueError:
                raise argparse.ArgumentTypeError(f"invalid line number: {part!r}")
    return positions


def build_selection(only: list[int] | None, exclude: list[int] | None) -> DiffSelection:
    """Turn ``--only``/``--exclude`` positions into a selection."""
    selection = DiffSelection()
    if only:
        selection.set_all(False)
        selection.set_many(only, True)
    if exclude:
        selection.set_many(exclude, False)
    return selection


def _add_selection_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--only", type=parse_line_spec, default=None,
                   help="Stage only these line positions (e.g. 3,5-7)")
    p.add_argument("--exclude", type=parse_line_spec, default=None,
                   help="Leave these line positions unstaged")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="partial-stage",
        description="Stage individual lines of a file's changes",
    )
    parser.add_argument("-C", dest="repo", default=".",
                        help="Run as if started in this directory")
    parser.add_argument("--config", default=None,
                        help="Path to .partial_stage.yaml config file")
    parser.add_argument("--no-color", action="store_true",
                        help="Disable colored output")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Echo log messages to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="List changed files")

    p = sub.add_parser("diff", help="Show a file's diff with line positions")
    p.add_argument("path")
    p.add_argument("--commit", default=None, help="Show the diff of a commit")
    _add_selection_args(p)

    p = sub.add_parser("patch", help="Print the patch(es) that would be staged")
    p.add_argument("path")
    _add_selection_args(p)

    p = sub.add_parser("stage", help="Stage selected lines of a file")
    p.add_argument("path")
    _add_selection_args(p)

    p = sub.add_parser("pick", help="Choose lines interactively, then stage them")
    p.add_argument("path")

    p = sub.add_parser("commit", help="Commit selected changes")
    p.add_argument("paths", nargs="+")
    p.add_argument("-m", "--message", required=True, help="Commit summary")
    p.add_argument("-d", "--description", default="", help="Commit description")
    _add_selection_args(p)

    return parser


def _find_change(repo: str, path: str, runner: GitRunner) -> WorkingDirectoryFileChange:
    status = get_status(repo, runner)
    if not status.exists:
        raise PartialStageError(f"{repo} is not a git repository")
    file = status.working_directory.find(path)
    if file is None:
        raise PartialStageError(f"{path} has no changes")
    return file


def _cmd_status(args, cfg: Config, runner: GitRunner) -> int:
    status = get_status(args.repo, runner)
    if not status.exists:
        print(f"{args.repo} is not a git repository", file=sys.stderr)
        return 1
    for file in status.working_directory.files:
        print(f"  {_STATUS_LABELS[file.status]} {file.path}")
    return 0


def _cmd_diff(args, cfg: Config, runner: GitRunner) -> int:
    file = _find_change(args.repo, args.path, runner) if not args.commit \
        else WorkingDirectoryFileChange(args.path, FileStatus.MODIFIED)
    diff = get_diff(args.repo, file, commit=args.commit, runner=runner)
    if diff.is_empty:
        print(f"  {args.path}: no textual changes")
        return 0
    selection = build_selection(args.only, args.exclude)
    print(format_numbered_diff(diff, selection, color=cfg.COLOR))
    return 0


def _cmd_patch(args, cfg: Config, runner: GitRunner) -> int:
    file = _find_change(args.repo, args.path, runner)
    diff = get_diff(args.repo, file, runner=runner)
    selection = build_selection(args.only, args.exclude)

    if file.status is FileStatus.NEW:
        patches = [build_new_file_patch(file.path, diff, selection)]
    else:
        patches = [p.text for p in build_modified_file_patches(file.path, diff, selection)
                   if not p.is_noop]

    for text in patches:
        print(format_colored_diff(text) if cfg.COLOR else text.rstrip("\n"))
    return 0


def _stage(args, cfg: Config, runner: GitRunner, file: WorkingDirectoryFileChange) -> int:
    try:
        result = stage_file(args.repo, file, runner=runner,
                            max_workers=cfg.APPLY_WORKERS)
    except PartialApplyError as exc:
        print_apply_result(exc.result)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print_apply_result(result)
    return 0


def _cmd_stage(args, cfg: Config, runner: GitRunner) -> int:
    file = _find_change(args.repo, args.path, runner)
    file.selection = build_selection(args.only, args.exclude)
    return _stage(args, cfg, runner, file)


def _cmd_pick(args, cfg: Config, runner: GitRunner) -> int:
    file = _find_change(args.repo, args.path, runner)
    diff = get_diff(args.repo, file, runner=runner)
    if not pick_lines(file.path, diff, file.selection, use_tui=cfg.INTERACTIVE):
        print("  Cancelled.")
        return 1
    return _stage(args, cfg, runner, file)


def _cmd_commit(args, cfg: Config, runner: GitRunner) -> int:
    if (args.only or args.exclude) and len(args.paths) != 1:
        print("Error: --only/--exclude need exactly one path", file=sys.stderr)
        return 2

    files = [_find_change(args.repo, path, runner) for path in args.paths]
    if args.only or args.exclude:
        files[0].selection = build_selection(args.only, args.exclude)

    try:
        results = create_commit(args.repo, args.message, args.description, files,
                                runner=runner, max_workers=cfg.APPLY_WORKERS)
    except PartialApplyError as exc:
        print_apply_result(exc.result)
        print(f"Error: {exc}; nothing was committed", file=sys.stderr)
        return 1
    for result in results:
        print_apply_result(result)
    return 0


_COMMANDS = {
    "status": _cmd_status,
    "diff": _cmd_diff,
    "patch": _cmd_patch,
    "stage": _cmd_stage,
    "pick": _cmd_pick,
    "commit": _cmd_commit,
}


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    # ── 0. Load config ──
    cfg = Config.load(args.config)
    if args.no_color or not sys.stdout.isatty():
        cfg.COLOR = False
    setup_logger(cfg.LOG_DIR, verbose=args.verbose)

    runner = GitRunner.from_config(cfg)
    try:
        return _COMMANDS[args.command](args, cfg, runner)
    except PartialStageError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
