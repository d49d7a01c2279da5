"""
Git integration: runs the git executable and captures its output.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Sequence

from .errors import GitError, GitErrorCode

logger = logging.getLogger(__name__)

_ENCODING = "utf-8"


def _encode(text: str) -> bytes:
    return text.encode(_ENCODING, "surrogateescape")


def _decode(data: bytes | None) -> str:
    """Decode git output, keeping undecodable bytes as lone surrogates."""
    if not data:
        return ""
    return data.decode(_ENCODING, "surrogateescape")


@dataclass
class GitResult:
    """Exit status and captured output of one git invocation."""
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class GitRunner:
    """Run git commands inside a working directory."""

    def __init__(self, git_binary: str = "git", timeout: float | None = None) -> None:
        self.git_binary = git_binary
        self.timeout = timeout

    @classmethod
    def from_config(cls, cfg) -> "GitRunner":
        return cls(git_binary=cfg.GIT_BINARY, timeout=cfg.GIT_TIMEOUT)

    def run(self, args: Sequence[str], cwd: str, stdin: str | None = None) -> GitResult:
        """Run ``git <args>`` and return its result whatever the exit status.

        Output is captured as bytes and decoded without newline translation,
        so carriage returns in file content survive the round trip.
        """
        cmd = [self.git_binary, *args]
        logger.debug("[Git] %s (cwd=%s)", " ".join(cmd), cwd)
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                input=_encode(stdin) if stdin is not None else None,
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise GitError(list(args), -1, str(exc),
                           code=GitErrorCode.GIT_NOT_FOUND) from exc
        except subprocess.TimeoutExpired as exc:
            raise GitError(list(args), -1, f"timed out after {exc.timeout}s") from exc

        return GitResult(
            result.returncode,
            _decode(result.stdout),
            result.stderr.decode(_ENCODING, "replace") if result.stderr else "",
        )

    def exec(
        self,
        args: Sequence[str],
        cwd: str,
        stdin: str | None = None,
        ok_codes: Sequence[int] = (0,),
    ) -> str:
        """Run ``git <args>`` and return stdout, raising :class:`GitError`
        when the exit status is not in *ok_codes*."""
        result = self.run(args, cwd, stdin=stdin)
        if result.returncode not in ok_codes:
            logger.warning(
                "[Git] git %s exited with %d: %s",
                " ".join(args), result.returncode, result.stderr.strip(),
            )
            raise GitError(list(args), result.returncode, result.stderr)
        return result.stdout


def is_git_repo(path: str, runner: GitRunner | None = None) -> bool:
    """Return ``True`` if *path* is inside a git repository."""
    runner = runner or GitRunner()
    return runner.run(["rev-parse", "--git-dir"], path).ok


def resolve_head(path: str, runner: GitRunner | None = None) -> bool:
    """Return ``True`` if HEAD points at a commit (the branch is not unborn)."""
    runner = runner or GitRunner()
    result = runner.run(["rev-parse", "--verify", "--quiet", "HEAD"], path)
    if result.ok:
        return True
    if result.returncode == 1:
        return False
    raise GitError(["rev-parse", "--verify", "--quiet", "HEAD"],
                   result.returncode, result.stderr)
