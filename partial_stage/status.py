"""
Working directory status: which files changed and how.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field

from .editing.selection import DiffSelection
from .errors import GitError
from .git_utils import GitRunner

logger = logging.getLogger(__name__)


class FileStatus(enum.Enum):
    MODIFIED = "modified"
    NEW = "new"
    DELETED = "deleted"
    RENAMED = "renamed"
    CONFLICTED = "conflicted"


_STATUS_CODES: dict[str, FileStatus] = {
    "M": FileStatus.MODIFIED,
    "A": FileStatus.NEW,
    "D": FileStatus.DELETED,
    "R": FileStatus.RENAMED,
    "RM": FileStatus.RENAMED,      # renamed in index, modified in working directory
    "RD": FileStatus.CONFLICTED,   # renamed in index, deleted in working directory
    "DD": FileStatus.CONFLICTED,   # unmerged, both deleted
    "AU": FileStatus.CONFLICTED,   # unmerged, added by us
    "UD": FileStatus.CONFLICTED,   # unmerged, deleted by them
    "UA": FileStatus.CONFLICTED,   # unmerged, added by them
    "DU": FileStatus.CONFLICTED,   # unmerged, deleted by us
    "AA": FileStatus.CONFLICTED,   # unmerged, added by both
    "UU": FileStatus.CONFLICTED,   # unmerged, both modified
    "??": FileStatus.NEW,          # untracked
}

_PORCELAIN_PATTERN = re.compile(r"([\? \w]{2}) (.*)", re.DOTALL)
_COPY_OR_RENAME = {"R", "C"}


def map_status(raw_status: str) -> FileStatus:
    """Map a git short status code to a :class:`FileStatus`.

    Unknown codes are treated as modifications.
    """
    return _STATUS_CODES.get(raw_status.strip(), FileStatus.MODIFIED)


@dataclass
class FileChange:
    """A changed path and its status."""
    path: str
    status: FileStatus


@dataclass
class WorkingDirectoryFileChange(FileChange):
    """A change in the working directory, with the lines chosen for staging."""
    selection: DiffSelection = field(default_factory=DiffSelection)


@dataclass
class WorkingDirectoryStatus:
    files: list[WorkingDirectoryFileChange] = field(default_factory=list)

    def find(self, path: str) -> WorkingDirectoryFileChange | None:
        for file in self.files:
            if file.path == path:
                return file
        return None


@dataclass
class StatusResult:
    """The result of ``git status``."""
    exists: bool
    working_directory: WorkingDirectoryStatus

    @classmethod
    def not_found(cls) -> "StatusResult":
        return cls(False, WorkingDirectoryStatus())

    @classmethod
    def from_status(cls, status: WorkingDirectoryStatus) -> "StatusResult":
        return cls(True, status)


def parse_porcelain_status(output: str) -> list[WorkingDirectoryFileChange]:
    """Parse ``git status --porcelain -z`` output into file changes.

    Records are NUL-terminated and paths are never quoted. A rename or copy
    record is followed by a second record holding the source path, which
    is skipped. Each change starts with every line selected.
    """
    files: list[WorkingDirectoryFileChange] = []
    records = iter(output.split("\0"))
    for record in records:
        match = _PORCELAIN_PATTERN.match(record)
        if match is None:
            continue

        mode_text, path = match.group(1), match.group(2)
        if _COPY_OR_RENAME & set(mode_text):
            next(records, None)
        files.append(WorkingDirectoryFileChange(path, map_status(mode_text),
                                                DiffSelection()))
    return files


def get_status(repo_path: str, runner: GitRunner | None = None) -> StatusResult:
    """Retrieve the status of the repository at *repo_path*.

    Returns :meth:`StatusResult.not_found` when the path is not a
    repository; any other git failure propagates.
    """
    runner = runner or GitRunner()
    try:
        output = runner.exec(
            ["status", "--untracked-files=all", "--porcelain", "-z"], repo_path,
        )
    except GitError as exc:
        if exc.is_not_found:
            logger.info("[Git] %s is not a git repository", repo_path)
            return StatusResult.not_found()
        raise

    return StatusResult.from_status(
        WorkingDirectoryStatus(parse_porcelain_status(output))
    )
