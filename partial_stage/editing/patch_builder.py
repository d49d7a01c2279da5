"""
Patch builder: rebuilds unified-diff patches that contain only the lines
selected for staging, with hunk headers that match what is emitted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import MalformedSectionError
from .diff_parser import Diff, DiffLineType, DiffSection, DiffSectionRange
from .selection import DiffSelection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SectionPatch:
    """A patch rebuilt from one section of a diff."""
    section_number: int
    text: str
    new_count: int
    changes: int  # selected additions + selected deletions

    @property
    def is_noop(self) -> bool:
        return self.changes == 0


def format_section_header(range_: DiffSectionRange, new_count: int) -> str:
    return (
        f"@@ -{range_.old_start},{range_.old_count} "
        f"+{range_.new_start},{new_count} @@ {range_.trailing_text}\n"
    )


def _check_range(section: DiffSection) -> None:
    if section.range.is_malformed:
        raise MalformedSectionError(section.header.text)


def build_new_file_patch(path: str, diff: Diff, selection: DiffSelection) -> str:
    """Build one patch adding the selected lines of an untracked file.

    The new line count of each section is recomputed from the lines that
    are actually emitted. A ``\\ No newline at end of file`` marker follows
    the line it annotates and is never counted.
    """
    patch = ""

    for section in diff.sections:
        _check_range(section)

        emitted = 0
        body = ""
        previous_emitted = False
        for position, line in section.content_lines():
            if line.is_no_newline_marker:
                if previous_emitted:
                    body += line.text + "\n"
                continue
            previous_emitted = (
                line.type is DiffLineType.CONTEXT or selection.get(position)
            )
            if previous_emitted:
                body += line.text + "\n"
                emitted += 1

        header = (
            f"--- /dev/null\n+++ b/{path}\n"
            + format_section_header(section.range, emitted)
        )
        patch += header + body

    return patch


def build_section_patch(
    path: str,
    section: DiffSection,
    selection: DiffSelection,
    section_number: int = 0,
) -> SectionPatch:
    """Build the patch for one section of a tracked file.

    A deselected deletion stays in the working copy, so it is written back
    as a context line. A deselected addition is dropped, together with a
    no-newline marker that follows it. ``skipped`` is the net number of
    old-file lines the patch removes, so the new side of the hunk holds
    ``old_count - skipped`` lines.
    """
    _check_range(section)

    skipped = 0
    changes = 0
    body = ""
    previous_emitted = False
    for position, line in section.content_lines():
        if line.is_no_newline_marker:
            if previous_emitted:
                body += line.text + "\n"
            continue

        previous_emitted = True
        if line.type is DiffLineType.CONTEXT:
            body += line.text + "\n"
        elif selection.get(position):
            body += line.text + "\n"
            changes += 1
            if line.type is DiffLineType.DELETE:
                skipped += 1
            else:
                skipped -= 1
        elif line.type is DiffLineType.DELETE:
            body += " " + line.text[1:] + "\n"
        else:
            previous_emitted = False

    new_count = section.range.old_count - skipped
    header = (
        f"--- a/{path}\n+++ b/{path}\n"
        + format_section_header(section.range, new_count)
    )
    return SectionPatch(section_number, header + body, new_count, changes)


def build_modified_file_patches(
    path: str,
    diff: Diff,
    selection: DiffSelection,
) -> list[SectionPatch]:
    """Build one independent patch per section of a tracked file."""
    patches = [
        build_section_patch(path, section, selection, number)
        for number, section in enumerate(diff.sections)
    ]
    logger.debug(
        "[Stage] Built %d section patch(es) for %s (%d with changes)",
        len(patches), path, sum(1 for p in patches if not p.is_noop),
    )
    return patches
