"""Tests for rebuilding patches from a partial selection."""

from itertools import combinations

import pytest

from partial_stage.editing.diff_parser import DiffParser, DiffLineType
from partial_stage.editing.patch_builder import (
    build_modified_file_patches, build_new_file_patch, build_section_patch,
)
from partial_stage.editing.selection import DiffSelection
from partial_stage.errors import MalformedSectionError


MODIFIED_DIFF = """\
--- a/src/app.py
+++ b/src/app.py
@@ -10,3 +10,4 @@ def main():
 a
-b
+c
+d
 e
"""

MULTI_SECTION_DIFF = """\
--- a/notes.txt
+++ b/notes.txt
@@ -1,3 +1,3 @@
 one
-two
+TWO
 three
@@ -20,2 +20,3 @@ def tail():
 x
+y
 z
"""

NEW_FILE_DIFF = """\
diff --git a/new.txt b/new.txt
new file mode 100644
--- /dev/null
+++ b/new.txt
@@ -0,0 +1,3 @@
+alpha
+beta
+gamma
"""


NEW_FILE_NO_EOL_DIFF = """\
--- /dev/null
+++ b/new.txt
@@ -0,0 +1,3 @@
+a
+b
+c
\\ No newline at end of file
"""

# "a\nb" without a final newline becomes "a\nb\nc" without one
APPEND_NO_EOL_DIFF = """\
--- a/f.txt
+++ b/f.txt
@@ -1,2 +1,3 @@
 a
-b
\\ No newline at end of file
+b
+c
\\ No newline at end of file
"""

def _parse(raw):
    return DiffParser().parse(raw)


def _split(patch_text):
    """Return (header lines, hunk header, body lines) of a one-section patch."""
    lines = patch_text.split("\n")
    assert lines[-1] == ""
    return lines[:2], lines[2], lines[3:-1]


class TestModifiedSection:
    def test_deselected_addition_is_dropped(self):
        section = _parse(MODIFIED_DIFF).sections[0]
        selection = DiffSelection()
        selection.set(4, False)  # +d

        patch = build_section_patch("src/app.py", section, selection)

        assert patch.text == (
            "--- a/src/app.py\n"
            "+++ b/src/app.py\n"
            "@@ -10,3 +10,3 @@ def main():\n"
            " a\n"
            "-b\n"
            "+c\n"
            " e\n"
        )
        assert patch.new_count == 3
        assert patch.changes == 2

    def test_deselected_deletion_becomes_context(self):
        section = _parse(MODIFIED_DIFF).sections[0]
        selection = DiffSelection()
        selection.set(2, False)  # -b

        patch = build_section_patch("src/app.py", section, selection)
        _, hunk, body = _split(patch.text)

        assert body == [" a", " b", "+c", "+d", " e"]
        assert hunk == "@@ -10,3 +10,5 @@ def main():"

    def test_full_selection_keeps_declared_counts(self):
        section = _parse(MODIFIED_DIFF).sections[0]
        patch = build_section_patch("src/app.py", section, DiffSelection())
        _, hunk, body = _split(patch.text)

        assert hunk == "@@ -10,3 +10,4 @@ def main():"
        assert body == [" a", "-b", "+c", "+d", " e"]
        assert patch.new_count == section.range.new_count

    def test_empty_selection_is_noop(self):
        section = _parse(MODIFIED_DIFF).sections[0]
        patch = build_section_patch("src/app.py", section,
                                    DiffSelection(include_all_by_default=False))
        _, hunk, body = _split(patch.text)

        assert body == [" a", " b", " e"]
        assert patch.new_count == 3
        assert patch.is_noop

    def test_header_paths(self):
        section = _parse(MODIFIED_DIFF).sections[0]
        patch = build_section_patch("src/app.py", section, DiffSelection())
        header, _, _ = _split(patch.text)
        assert header == ["--- a/src/app.py", "+++ b/src/app.py"]

    def test_recontextified_lines_keep_their_text(self):
        raw = "@@ -1,3 +1,0 @@\n-  indented\n--x\n-\n"
        section = _parse(raw).sections[0]
        patch = build_section_patch("f", section, DiffSelection(include_all_by_default=False))
        _, _, body = _split(patch.text)

        originals = [l.text for _, l in section.content_lines()]
        assert body == [" " + text[1:] for text in originals]
        assert body == ["   indented", " -x", " "]

    def test_count_conservation_for_every_subset(self):
        section = _parse(MODIFIED_DIFF).sections[0]
        changes = section.change_lines()

        for size in range(len(changes) + 1):
            for chosen in combinations(changes, size):
                selection = DiffSelection(include_all_by_default=False)
                selection.set_many([p for p, _ in chosen], True)

                patch = build_section_patch("f", section, selection)
                _, _, body = _split(patch.text)

                selected_deletions = sum(1 for _, l in chosen if l.type is DiffLineType.DELETE)
                selected_additions = len(chosen) - selected_deletions
                skipped = selected_deletions - selected_additions

                assert patch.new_count == section.range.old_count - skipped
                assert patch.new_count == sum(1 for l in body if not l.startswith("-"))
                assert section.range.old_count == sum(1 for l in body if not l.startswith("+"))

    def test_malformed_section_raises(self):
        section = _parse("@@ -x +y @@\n+a\n").sections[0]
        with pytest.raises(MalformedSectionError):
            build_section_patch("f", section, DiffSelection())


class TestModifiedFile:
    def test_one_patch_per_section(self):
        diff = _parse(MULTI_SECTION_DIFF)
        patches = build_modified_file_patches("notes.txt", diff, DiffSelection())

        assert [p.section_number for p in patches] == [0, 1]
        assert all(p.text.startswith("--- a/notes.txt\n+++ b/notes.txt\n@@ ") for p in patches)
        assert "@@ -20,2 +20,3 @@ def tail():\n x\n+y\n z\n" in patches[1].text

    def test_selection_is_addressed_per_line(self):
        diff = _parse(MULTI_SECTION_DIFF)
        selection = DiffSelection()
        selection.set(8, False)  # +y in the second section

        first, second = build_modified_file_patches("notes.txt", diff, selection)

        assert first.text.endswith(" one\n-two\n+TWO\n three\n")
        assert not first.is_noop
        assert second.text.endswith("@@ -20,2 +20,2 @@ def tail():\n x\n z\n")
        assert second.is_noop

    def test_empty_diff_has_no_patches(self):
        assert build_modified_file_patches("f", _parse(""), DiffSelection()) == []


class TestNewFile:
    def test_full_selection(self):
        diff = _parse(NEW_FILE_DIFF)
        patch = build_new_file_patch("new.txt", diff, DiffSelection())

        assert patch == (
            "--- /dev/null\n"
            "+++ b/new.txt\n"
            "@@ -0,0 +1,3 @@ \n"
            "+alpha\n"
            "+beta\n"
            "+gamma\n"
        )

    def test_partial_selection_recounts_lines(self):
        diff = _parse(NEW_FILE_DIFF)
        selection = DiffSelection()
        selection.set(2, False)

        header, hunk, body = _split(build_new_file_patch("new.txt", diff, selection))

        assert hunk == "@@ -0,0 +1,2 @@ "
        assert body == ["+alpha", "+gamma"]

    def test_header_is_fixed_regardless_of_selection(self):
        diff = _parse(NEW_FILE_DIFF)
        for selection in (DiffSelection(), DiffSelection(include_all_by_default=False)):
            header, _, _ = _split(build_new_file_patch("new.txt", diff, selection))
            assert header == ["--- /dev/null", "+++ b/new.txt"]

    def test_sections_are_concatenated(self):
        raw = "@@ -0,0 +1,1 @@\n+a\n@@ -0,0 +5,1 @@\n+b\n"
        patch = build_new_file_patch("n", _parse(raw), DiffSelection())
        assert patch.count("--- /dev/null\n+++ b/n\n") == 2
        assert patch.endswith("@@ -0,0 +5,1 @@ \n+b\n")

    def test_malformed_section_raises(self):
        with pytest.raises(MalformedSectionError):
            build_new_file_patch("n", _parse("@@ bogus @@\n+a\n"), DiffSelection())


class TestNoNewlineMarker:
    def test_new_file_marker_follows_selected_last_line(self):
        selection = DiffSelection()
        selection.set(2, False)  # +b

        _, hunk, body = _split(
            build_new_file_patch("new.txt", _parse(NEW_FILE_NO_EOL_DIFF), selection)
        )

        assert hunk == "@@ -0,0 +1,2 @@ "
        assert body == ["+a", "+c", "\\ No newline at end of file"]

    def test_new_file_marker_dropped_with_last_line(self):
        selection = DiffSelection()
        selection.set(3, False)  # +c

        _, hunk, body = _split(
            build_new_file_patch("new.txt", _parse(NEW_FILE_NO_EOL_DIFF), selection)
        )

        assert hunk == "@@ -0,0 +1,2 @@ "
        assert body == ["+a", "+b"]

    def test_full_selection_keeps_both_markers(self):
        section = _parse(APPEND_NO_EOL_DIFF).sections[0]
        patch = build_section_patch("f.txt", section, DiffSelection())
        _, hunk, body = _split(patch.text)

        assert hunk == "@@ -1,2 +1,3 @@ "
        assert body == [
            " a", "-b", "\\ No newline at end of file",
            "+b", "+c", "\\ No newline at end of file",
        ]

    def test_marker_after_dropped_addition_is_dropped(self):
        section = _parse(APPEND_NO_EOL_DIFF).sections[0]
        selection = DiffSelection()
        selection.set(5, False)  # +c

        patch = build_section_patch("f.txt", section, selection)
        _, hunk, body = _split(patch.text)

        assert hunk == "@@ -1,2 +1,2 @@ "
        assert body == [" a", "-b", "\\ No newline at end of file", "+b"]

    def test_marker_kept_after_recontextified_deletion(self):
        raw = "@@ -1,2 +1,1 @@\n-x\n y\n\\ No newline at end of file\n"
        section = _parse(raw).sections[0]
        patch = build_section_patch("f", section, DiffSelection(include_all_by_default=False))
        _, _, body = _split(patch.text)

        assert body == [" x", " y", "\\ No newline at end of file"]
        assert patch.new_count == 2
