"""
Staging: fetch a file's diff, stage the selected lines and create commits.
"""

from __future__ import annotations

import logging

from .editing.diff_parser import Diff, DiffParser
from .editing.patch_applier import ApplyResult, IndexPatchApplier
from .editing.patch_builder import build_modified_file_patches, build_new_file_patch
from .errors import PartialApplyError
from .git_utils import GitRunner, resolve_head
from .status import FileChange, FileStatus, WorkingDirectoryFileChange

logger = logging.getLogger(__name__)


def diff_args(file: FileChange, commit: str | None = None) -> list[str]:
    """Return the git arguments that print the diff for *file*."""
    if commit:
        return ["show", commit, "--patch-with-raw", "-z", "--", file.path]
    if file.status is FileStatus.NEW:
        return ["diff", "--no-index", "--patch-with-raw", "-z", "--",
                "/dev/null", file.path]
    return ["diff", "HEAD", "--patch-with-raw", "-z", "--", file.path]


def get_diff(
    repo_path: str,
    file: FileChange,
    commit: str | None = None,
    runner: GitRunner | None = None,
) -> Diff:
    """Render the diff for a file within the repository.

    A specific commit may be given, otherwise the working directory state
    is compared against HEAD (or against nothing for a new file).
    """
    runner = runner or GitRunner()
    # diff --no-index exits with 1 when the files differ
    ok_codes = (0, 1) if file.status is FileStatus.NEW and not commit else (0,)
    output = runner.exec(diff_args(file, commit), repo_path, ok_codes=ok_codes)
    return DiffParser().parse(output)


def _add_file_to_index(repo_path: str, file: WorkingDirectoryFileChange,
                       runner: GitRunner) -> None:
    if file.status is FileStatus.NEW:
        args = ["add", file.path]
    else:
        args = ["add", "-u", file.path]
    runner.exec(args, repo_path)


def stage_file(
    repo_path: str,
    file: WorkingDirectoryFileChange,
    runner: GitRunner | None = None,
    max_workers: int = 1,
    strict: bool = True,
) -> ApplyResult:
    """Stage the selected lines of *file*.

    A fully selected file is added as a whole. Otherwise the diff is
    rebuilt from the selection: a new file becomes a single patch, a
    tracked file one patch per section. The selection itself is never
    modified, so a failed attempt can be retried.

    Raises :class:`PartialApplyError` when *strict* and any section fails.
    """
    runner = runner or GitRunner()
    result = ApplyResult(path=file.path)
    selection = file.selection

    if selection.is_include_all():
        _add_file_to_index(repo_path, file, runner)
        result.whole_file = True
        logger.info("[Stage] Added %s to the index", file.path)
        return result

    if selection.is_include_none():
        logger.info("[Stage] No lines selected in %s, skipping", file.path)
        return result

    diff = get_diff(repo_path, file, runner=runner)
    if diff.is_empty:
        logger.info("[Stage] %s has no textual changes", file.path)
        return result

    applier = IndexPatchApplier(repo_path, runner=runner, max_workers=max_workers)

    if file.status is FileStatus.NEW:
        applier.apply_patch(build_new_file_patch(file.path, diff, selection))
        result.applied_sections = list(range(len(diff.sections)))
        logger.info("[Stage] Applied selected lines of new file %s", file.path)
        return result

    patches = build_modified_file_patches(file.path, diff, selection)
    result = applier.apply_sections(file.path, patches)
    if strict and not result.success:
        raise PartialApplyError(file.path, result)
    return result


def commit_message(summary: str, description: str = "") -> str:
    if description:
        return f"{summary}\n\n{description}"
    return summary


def create_commit(
    repo_path: str,
    summary: str,
    description: str,
    files: list[WorkingDirectoryFileChange],
    runner: GitRunner | None = None,
    max_workers: int = 1,
) -> list[ApplyResult]:
    """Reset the index, stage the selected lines of *files* and commit.

    Any staging failure aborts before the commit is made and propagates.
    """
    runner = runner or GitRunner()

    reset_args = ["reset"]
    if resolve_head(repo_path, runner):
        reset_args += ["HEAD", "--mixed"]
    runner.exec(reset_args, repo_path)

    results = [
        stage_file(repo_path, file, runner=runner, max_workers=max_workers)
        for file in files
    ]

    runner.exec(["commit", "-m", commit_message(summary, description)], repo_path)
    logger.info("[Stage] Committed %d file(s): %s", len(files), summary)
    return results
