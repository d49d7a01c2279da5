"""
Exceptions raised by partial_stage.
"""

from __future__ import annotations

import enum


class PartialStageError(Exception):
    """Base class for all partial_stage errors."""


class GitErrorCode(enum.Enum):
    NOT_A_REPOSITORY = "not_a_repository"
    BAD_REVISION = "bad_revision"
    GIT_NOT_FOUND = "git_not_found"
    UNKNOWN = "unknown"


_ERROR_PATTERNS: list[tuple[str, GitErrorCode]] = [
    ("not a git repository", GitErrorCode.NOT_A_REPOSITORY),
    ("unknown revision", GitErrorCode.BAD_REVISION),
    ("ambiguous argument 'head'", GitErrorCode.BAD_REVISION),
    ("bad revision", GitErrorCode.BAD_REVISION),
]


class GitError(PartialStageError):
    """Raised when a git invocation exits with an unexpected status."""

    def __init__(self, args: list[str], returncode: int, stderr: str = "",
                 code: GitErrorCode | None = None) -> None:
        self.git_args = list(args)
        self.returncode = returncode
        self.stderr = stderr
        self.code = code or self.classify(stderr)
        detail = stderr.strip() or f"exit status {returncode}"
        super().__init__(f"git {' '.join(self.git_args)} failed: {detail}")

    @staticmethod
    def classify(stderr: str) -> GitErrorCode:
        lowered = stderr.lower()
        for needle, code in _ERROR_PATTERNS:
            if needle in lowered:
                return code
        return GitErrorCode.UNKNOWN

    @property
    def is_not_found(self) -> bool:
        return self.code is GitErrorCode.NOT_A_REPOSITORY


class MalformedSectionError(PartialStageError):
    """Raised when a patch is requested for a section whose header did not parse."""

    def __init__(self, header: str) -> None:
        self.header = header
        super().__init__(f"Malformed hunk header: {header!r}")


class PartialApplyError(PartialStageError):
    """Raised when some sections of a file could not be applied to the index."""

    def __init__(self, path: str, result) -> None:
        self.path = path
        self.result = result
        failed = ", ".join(str(n) for n in result.failed_sections)
        super().__init__(
            f"Failed to stage section(s) {failed} of {path}; "
            f"{len(result.applied_sections)} section(s) already staged"
        )
