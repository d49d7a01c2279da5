"""
partial_stage: stage individual lines of a file's changes with git.

Public API for library usage::

    from partial_stage import DiffParser, DiffSelection, build_section_patch

    diff = DiffParser().parse(raw_git_diff)
    selection = DiffSelection()
    selection.set(3, False)
    patch = build_section_patch("src/app.py", diff.sections[0], selection)
"""

from .editing import (
    DiffParser, Diff, DiffSection, DiffSectionRange, DiffLine, DiffLineType,
    DiffSelection, SectionPatch, build_new_file_patch, build_section_patch,
    build_modified_file_patches, IndexPatchApplier, ApplyResult,
)
from .status import FileStatus, map_status
from .staging import stage_file, create_commit, get_diff

__all__ = [
    "DiffParser", "Diff", "DiffSection", "DiffSectionRange", "DiffLine",
    "DiffLineType", "DiffSelection", "SectionPatch", "build_new_file_patch",
    "build_section_patch", "build_modified_file_patches",
    "IndexPatchApplier", "ApplyResult",
    "FileStatus", "map_status",
    "stage_file", "create_commit", "get_diff",
]
