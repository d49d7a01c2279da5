"""
Diff parser: turns the unified diff printed by git into an addressable,
line-level model of sections (hunks) and lines.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# Markers
_HUNK_PREFIX = "@@"
_NO_NEWLINE_PREFIX = "\\"
_SECTION_MARKER = re.compile(r"^@@", re.MULTILINE)

# Patterns
_SECTION_HEADER_PATTERN = re.compile(
    r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@ ?(.*)$"
)

MALFORMED = -1


class DiffLineType(enum.Enum):
    """What a single line of a diff represents."""
    CONTEXT = "context"
    ADD = "add"
    DELETE = "delete"
    HUNK = "hunk"


def classify_line(text: str) -> DiffLineType:
    """Infer the type of a diff line from its prefix."""
    if text.startswith(_HUNK_PREFIX):
        return DiffLineType.HUNK
    if text.startswith("-"):
        return DiffLineType.DELETE
    if text.startswith("+"):
        return DiffLineType.ADD
    return DiffLineType.CONTEXT


@dataclass(frozen=True)
class DiffLine:
    """One line of a section with its position in the old and new file."""
    text: str
    type: DiffLineType
    old_line_number: int | None = None
    new_line_number: int | None = None

    @property
    def is_change(self) -> bool:
        return self.type in (DiffLineType.ADD, DiffLineType.DELETE)

    @property
    def is_no_newline_marker(self) -> bool:
        """``\\ No newline at end of file``: annotates the line before it."""
        return self.text.startswith(_NO_NEWLINE_PREFIX)

    @property
    def content(self) -> str:
        """The line without its one-character diff prefix."""
        if self.type is DiffLineType.HUNK:
            return self.text
        return self.text[1:]


@dataclass(frozen=True)
class DiffSectionRange:
    """The four numbers of a ``@@ -old,count +new,count @@`` header."""
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    trailing_text: str = ""

    @classmethod
    def malformed(cls) -> "DiffSectionRange":
        return cls(MALFORMED, MALFORMED, MALFORMED, MALFORMED)

    @property
    def is_malformed(self) -> bool:
        return MALFORMED in (
            self.old_start, self.old_count, self.new_start, self.new_count,
        )


def parse_section_header(text: str) -> DiffSectionRange | None:
    """Parse a hunk header line.

    Returns ``None`` when *text* is not a well-formed header. Omitted
    counts default to 1, as unified diff elides ``,1``.
    """
    match = _SECTION_HEADER_PATTERN.match(text)
    if match is None:
        return None

    old_start, old_count, new_start, new_count, trailing = match.groups()
    return DiffSectionRange(
        old_start=int(old_start),
        old_count=int(old_count) if old_count is not None else 1,
        new_start=int(new_start),
        new_count=int(new_count) if new_count is not None else 1,
        trailing_text=trailing or "",
    )


def number_line(
    text: str,
    counters: tuple[int, int],
) -> tuple[DiffLine, tuple[int, int]]:
    """Number one line of a section.

    *counters* holds the last old and new line numbers seen; both are
    incremented before use. Returns the numbered line and the counters
    to feed into the next call.
    """
    old, new = counters
    line_type = classify_line(text)

    # hunk headers and the no-newline marker are not file lines,
    # they take no part in the line counts
    if line_type is DiffLineType.HUNK or text.startswith(_NO_NEWLINE_PREFIX):
        return DiffLine(text, line_type), counters

    if line_type is DiffLineType.DELETE:
        old += 1
        return DiffLine(text, line_type, old_line_number=old), (old, new)

    if line_type is DiffLineType.ADD:
        new += 1
        return DiffLine(text, line_type, new_line_number=new), (old, new)

    old += 1
    new += 1
    return DiffLine(text, line_type, old, new), (old, new)


def number_lines(lines: list[str], range_: DiffSectionRange) -> tuple[DiffLine, ...]:
    """Fold :func:`number_line` over *lines*, seeded from *range_*."""
    counters = (range_.old_start, range_.new_start)
    numbered: list[DiffLine] = []
    for text in lines:
        line, counters = number_line(text, counters)
        numbered.append(line)
    return tuple(numbered)


@dataclass(frozen=True)
class DiffSection:
    """One hunk of a diff.

    ``lines[0]`` is the header and the last entry is the empty line left
    behind by splitting the section body on newlines. ``start_index`` and
    ``end_index`` locate the section within the concatenation of every
    section's lines.
    """
    range: DiffSectionRange
    lines: tuple[DiffLine, ...]
    start_index: int
    end_index: int

    @property
    def header(self) -> DiffLine:
        return self.lines[0]

    def content_lines(self) -> list[tuple[int, DiffLine]]:
        """Return ``(position, line)`` for every line between the header
        and the trailing boundary line.

        ``position`` is the absolute index used to address the line in a
        :class:`~partial_stage.editing.selection.DiffSelection`.
        """
        return [
            (self.start_index + offset, line)
            for offset, line in enumerate(self.lines[1:-1], start=1)
        ]

    def change_lines(self) -> list[tuple[int, DiffLine]]:
        return [(pos, line) for pos, line in self.content_lines() if line.is_change]


@dataclass(frozen=True)
class Diff:
    """The parsed contents of a diff generated by git."""
    sections: tuple[DiffSection, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return len(self.sections) == 0

    def change_lines(self) -> list[tuple[int, DiffLine]]:
        lines: list[tuple[int, DiffLine]] = []
        for section in self.sections:
            lines.extend(section.change_lines())
        return lines

    def locate(self, index: int) -> tuple[int, int] | None:
        """Resolve an absolute line index to ``(section_number, offset)``."""
        for number, section in enumerate(self.sections):
            if section.start_index <= index < section.end_index:
                return number, index - section.start_index
        return None

    def line_at(self, index: int) -> DiffLine | None:
        location = self.locate(index)
        if location is None:
            return None
        number, offset = location
        return self.sections[number].lines[offset]


class DiffParser:
    """Parse the raw output of ``git diff``/``git show`` into a :class:`Diff`."""

    def __init__(self, delimiter: str = "\0") -> None:
        self._delimiter = delimiter

    def parse(self, raw: str) -> Diff:
        """Parse *raw* git output.

        With ``--patch-with-raw -z`` git separates the raw status records
        from the patch with NUL bytes; the patch is always the last record.
        Text before the first hunk header (``---``/``+++``, mode lines) is
        ignored. Output without any hunk header yields an empty diff.
        """
        if self._delimiter and self._delimiter in raw:
            raw = raw.split(self._delimiter)[-1]

        markers = [m.start() for m in _SECTION_MARKER.finditer(raw)]
        if not markers:
            logger.debug("[Diff] No hunk headers found, diff is empty")
            return Diff()

        sections: list[DiffSection] = []
        pointer = 0
        for i, start in enumerate(markers):
            end = markers[i + 1] if i + 1 < len(markers) else len(raw)
            section = self._parse_section(raw[start:end], pointer)
            sections.append(section)
            pointer = section.end_index

        return Diff(tuple(sections))

    @staticmethod
    def _parse_section(body: str, start_index: int) -> DiffSection:
        """Build one section from its raw text, header line included."""
        if not body.endswith("\n"):
            body += "\n"

        raw_lines = body.split("\n")
        header = raw_lines[0]

        range_ = parse_section_header(header)
        if range_ is None:
            logger.warning("[Diff] Malformed hunk header: %r", header)
            range_ = DiffSectionRange.malformed()

        return DiffSection(
            range=range_,
            lines=number_lines(raw_lines, range_),
            start_index=start_index,
            end_index=start_index + len(raw_lines),
        )
