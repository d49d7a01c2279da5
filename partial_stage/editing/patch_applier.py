"""
Patch applier: feeds rebuilt patches to ``git apply --cached`` so that only
the selected lines reach the index.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field

from ..errors import GitError
from ..git_utils import GitRunner
from .patch_builder import SectionPatch

logger = logging.getLogger(__name__)

APPLY_ARGS = ["apply", "--cached", "--unidiff-zero", "--whitespace=nowarn", "-"]


@dataclass
class ApplyResult:
    """Outcome of applying the section patches of one file."""
    path: str
    applied_sections: list[int] = field(default_factory=list)
    failed_sections: list[int] = field(default_factory=list)
    skipped_sections: list[int] = field(default_factory=list)
    errors: dict[int, str] = field(default_factory=dict)
    whole_file: bool = False

    @property
    def success(self) -> bool:
        return not self.failed_sections

    @property
    def is_partial(self) -> bool:
        return bool(self.failed_sections) and bool(self.applied_sections)


class IndexPatchApplier:
    """Apply patches to the index of the repository at *repo_path*.

    Section patches of one file are applied concurrently and independently:
    a section that fails does not stop or roll back the others.
    """

    def __init__(
        self,
        repo_path: str,
        runner: GitRunner | None = None,
        max_workers: int = 4,
    ) -> None:
        self._repo_path = repo_path
        self._runner = runner or GitRunner()
        self._max_workers = max(1, max_workers)

    def apply_patch(self, patch_text: str) -> None:
        """Apply a single patch to the index, raising :class:`GitError` on failure."""
        self._runner.exec(APPLY_ARGS, self._repo_path, stdin=patch_text)

    def apply_sections(self, path: str, patches: list[SectionPatch]) -> ApplyResult:
        """Apply every section patch of *path* and report what happened.

        Sections without any selected change are skipped.
        """
        result = ApplyResult(path=path)
        pending: list[SectionPatch] = []
        for patch in patches:
            if patch.is_noop:
                result.skipped_sections.append(patch.section_number)
            else:
                pending.append(patch)

        if not pending:
            logger.info("[Stage] Nothing selected in %s, no patch applied", path)
            return result

        with ThreadPoolExecutor(max_workers=min(len(pending), self._max_workers)) as pool:
            futures = {
                pool.submit(self.apply_patch, patch.text): patch.section_number
                for patch in pending
            }
            for future in as_completed(futures):
                number = futures[future]
                try:
                    future.result()
                except GitError as exc:
                    logger.warning(
                        "[Stage] Section %d of %s failed to apply: %s",
                        number, path, exc.stderr.strip(),
                    )
                    result.failed_sections.append(number)
                    result.errors[number] = exc.stderr.strip() or str(exc)
                else:
                    result.applied_sections.append(number)

        result.applied_sections.sort()
        result.failed_sections.sort()
        logger.info(
            "[Stage] %s: %d section(s) applied, %d failed, %d skipped",
            path, len(result.applied_sections), len(result.failed_sections),
            len(result.skipped_sections),
        )
        return result
