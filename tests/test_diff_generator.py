"""Tests for line-level hunk generation."""

from __future__ import annotations

from models.diff import DiffOperationType
from services.diff_generator import DiffGenerator

ORIGINAL = "function test() {\n\treturn true;\n}"
COMMENTED = "function test() {\n\t// Added comment\n\treturn true;\n}"


def _ops(hunk):
    return [(op.type.value, op.old_line, op.new_line, op.content) for op in hunk.operations]


def test_added_line_hunk():
    suggestion = DiffGenerator().generate_file_suggestion(ORIGINAL, COMMENTED, "/test/file.ts", "typescript")

    assert suggestion.file_path == "/test/file.ts"
    assert suggestion.language == "typescript"
    assert suggestion.preview_content == COMMENTED
    assert len(suggestion.hunks) == 1

    hunk = suggestion.hunks[0]
    assert (hunk.old_start, hunk.old_lines, hunk.new_start, hunk.new_lines) == (1, 3, 1, 4)
    assert _ops(hunk) == [
        ("context", 1, 1, "function test() {"),
        ("add", 2, 2, "\t// Added comment"),
        ("context", 2, 3, "\treturn true;"),
        ("context", 3, 4, "}"),
    ]


def test_unified_diff_text():
    suggestion = DiffGenerator().generate_file_suggestion(ORIGINAL, COMMENTED, "/test/file.ts")

    assert suggestion.unified_diff.startswith("--- a//test/file.ts\n+++ b//test/file.ts\n@@ -1,3 +1,4 @@")
    assert "+\t// Added comment\n" in suggestion.unified_diff


def test_identical_content_has_no_hunks():
    suggestion = DiffGenerator().generate_file_suggestion(ORIGINAL, ORIGINAL, "f.ts")

    assert suggestion.hunks == []
    assert suggestion.unified_diff == ""


def test_replaced_line_emits_remove_then_add():
    suggestion = DiffGenerator().generate_file_suggestion(
        ORIGINAL, ORIGINAL.replace("true", "false"), "f.ts"
    )

    changed = [op for op in suggestion.operations if op.type != DiffOperationType.CONTEXT]
    assert [(op.type.value, op.line, op.content) for op in changed] == [
        ("remove", 2, "\treturn true;"),
        ("add", 2, "\treturn false;"),
    ]


def test_distant_changes_split_into_hunks():
    original = "\n".join(str(i) for i in range(1, 11))
    modified = original.replace("2", "two").replace("9", "nine")

    suggestion = DiffGenerator(context_lines=1).generate_file_suggestion(original, modified, "n.txt")

    assert [hunk.old_start for hunk in suggestion.hunks] == [1, 8]
    assert all(hunk.has_changes() for hunk in suggestion.hunks)


def test_zero_context_lines():
    suggestion = DiffGenerator(context_lines=0).generate_file_suggestion(ORIGINAL, COMMENTED, "f.ts")

    assert _ops(suggestion.hunks[0]) == [("add", 2, 2, "\t// Added comment")]


def test_translate_hunk_line_numbers():
    operations = DiffGenerator.translate_hunk(5, 7, [" a", "-b", "+c", "+d", " e", "\\ No newline at end of file"])

    assert [(op.type.value, op.old_line, op.new_line) for op in operations] == [
        ("context", 5, 7),
        ("remove", 6, 8),
        ("add", 7, 8),
        ("add", 7, 9),
        ("context", 7, 10),
    ]


def test_form_feed_does_not_split_lines():
    suggestion = DiffGenerator(context_lines=0).generate_file_suggestion("a\fb\nc\n", "a\fb\nC\n", "f")

    assert _ops(suggestion.hunks[0]) == [("remove", 2, 2, "c"), ("add", 3, 2, "C")]
    assert [op.line for op in suggestion.operations] == [2, 2]


def test_unicode_line_separator_does_not_split_lines():
    original = 'const s = "x\u2028y";\nfoo();\n'
    modified = 'const s = "x\u2028y";\nbar();\n'

    suggestion = DiffGenerator(context_lines=0).generate_file_suggestion(original, modified, "s.js")

    assert [op.line for op in suggestion.operations] == [2, 2]


def test_crlf_and_missing_final_newline():
    suggestion = DiffGenerator(context_lines=0).generate_file_suggestion("a\r\nb\r\nc", "a\r\nb\r\nC", "w.txt")

    assert _ops(suggestion.hunks[0]) == [("remove", 3, 3, "c"), ("add", 4, 3, "C")]
