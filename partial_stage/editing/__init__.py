"""Selective staging: parse git diffs and rebuild patches from chosen lines."""

from .diff_parser import (
    DiffParser, Diff, DiffSection, DiffSectionRange, DiffLine, DiffLineType,
    classify_line, parse_section_header,
)
from .selection import DiffSelection
from .patch_builder import (
    SectionPatch, build_new_file_patch, build_section_patch,
    build_modified_file_patches,
)
from .patch_applier import IndexPatchApplier, ApplyResult

__all__ = [
    "DiffParser", "Diff", "DiffSection", "DiffSectionRange", "DiffLine",
    "DiffLineType", "classify_line", "parse_section_header",
    "DiffSelection",
    "SectionPatch", "build_new_file_patch", "build_section_patch",
    "build_modified_file_patches",
    "IndexPatchApplier", "ApplyResult",
]
