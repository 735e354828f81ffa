"""
Diff Generator Service - Translate document edits into line operations
"""

from __future__ import annotations

import re
from difflib import SequenceMatcher, unified_diff

from models.diff import DiffHunk, DiffOperation, DiffOperationType, FileSuggestion

_PREFIX_TO_TYPE = {
    "+": DiffOperationType.ADD,
    "-": DiffOperationType.REMOVE,
    " ": DiffOperationType.CONTEXT,
}

# Editor line breaks only; form feeds, U+2028 and friends stay inside a line
_LINE_RE = re.compile(r"[^\r\n]*(?:\r\n|\r|\n)|[^\r\n]+\Z")


class DiffGenerator:
    """Generate line-level suggestion hunks for a document edit"""

    def __init__(self, context_lines: int = 3):
        self.context_lines = max(0, context_lines)

    def generate_file_suggestion(
        self,
        original_content: str,
        new_content: str,
        file_path: str,
        language: str = "plaintext",
    ) -> FileSuggestion:
        """Generate the suggestion for one file from original and edited content"""
        suggestion = FileSuggestion(file_path=file_path, language=language)
        return self.fill_suggestion(suggestion, original_content, new_content)

    def fill_suggestion(self, suggestion: FileSuggestion, original_content: str, new_content: str) -> FileSuggestion:
        """Populate diff text, preview and hunks of an existing file entry"""
        original_lines = self._split_lines(original_content)
        new_lines = self._split_lines(new_content)

        unified = unified_diff(
            original_lines,
            new_lines,
            fromfile=f"a/{suggestion.file_path}",
            tofile=f"b/{suggestion.file_path}",
            n=self.context_lines,
        )
        suggestion.unified_diff = "".join(unified)
        suggestion.preview_content = new_content
        for hunk in self._extract_hunks(original_lines, new_lines):
            suggestion.add_hunk(hunk)
        return suggestion

    def _extract_hunks(self, original: list[str], modified: list[str]) -> list[DiffHunk]:
        """Extract change hunks with surrounding context"""
        matcher = SequenceMatcher(None, original, modified, autojunk=False)
        hunks = []

        for group in matcher.get_grouped_opcodes(self.context_lines):
            old_begin, new_begin = group[0][1], group[0][3]
            old_end, new_end = group[-1][2], group[-1][4]

            lines: list[str] = []
            for tag, i1, i2, j1, j2 in group:
                if tag == "equal":
                    lines.extend(" " + line for line in original[i1:i2])
                    continue
                if tag in ("replace", "delete"):
                    lines.extend("-" + line for line in original[i1:i2])
                if tag in ("replace", "insert"):
                    lines.extend("+" + line for line in modified[j1:j2])

            hunks.append(
                DiffHunk(
                    old_start=old_begin + 1,  # 1-indexed for IDE
                    old_lines=old_end - old_begin,
                    new_start=new_begin + 1,
                    new_lines=new_end - new_begin,
                    operations=self.translate_hunk(old_begin + 1, new_begin + 1, lines),
                )
            )

        return hunks

    @staticmethod
    def translate_hunk(old_start: int, new_start: int, lines: list[str]) -> list[DiffOperation]:
        """Turn prefixed hunk lines into operations with running line numbers"""
        operations = []
        old_line = old_start
        new_line = new_start

        for line in lines:
            op_type = _PREFIX_TO_TYPE.get(line[:1])
            if op_type is None:
                # "\ No newline at end of file" and similar markers
                continue
            content = line[1:].rstrip("\r\n")
            operations.append(
                DiffOperation(type=op_type, old_line=old_line, new_line=new_line, content=content)
            )
            if op_type != DiffOperationType.ADD:
                old_line += 1
            if op_type != DiffOperationType.REMOVE:
                new_line += 1

        return operations

    @staticmethod
    def _split_lines(content: str) -> list[str]:
        lines = _LINE_RE.findall(content)
        # Ensure last lines have newlines for proper diff
        if lines and not lines[-1].endswith(("\n", "\r")):
            lines[-1] += "\n"
        return lines
