"""
Change Matcher - locate a search payload inside the document

Models often echo code with different indentation or line endings, so an
exact lookup is followed by progressively looser strategies.
"""

from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


@dataclass(slots=True)
class MatchResult:
    """Resolved range of a search payload in the original document"""

    start: int
    end: int
    strategy: str


class _NormalizedDocument:
    """Whitespace-normalized view of a document that maps offsets back to it."""

    def __init__(self, text: str, tab_width: int):
        self.tab_width = tab_width
        self.lines: list[tuple[int, str]] = []  # (start offset, line without break)
        position = 0
        for match in _LINE_BREAK_RE.finditer(text):
            self.lines.append((position, text[position : match.start()]))
            position = match.end()
        self.lines.append((position, text[position:]))

        normalized_lines = [self.normalize_line(line) for _, line in self.lines]
        self.line_starts: list[int] = []
        offset = 0
        for line in normalized_lines:
            self.line_starts.append(offset)
            offset += len(line) + 1
        self.text = "\n".join(normalized_lines)

    def normalize_line(self, line: str) -> str:
        return line.replace("\t", " " * self.tab_width).rstrip(" \t")

    def to_original(self, index: int) -> int:
        """Map an offset in the normalized text to the original text"""
        line_no = max(0, bisect_right(self.line_starts, index) - 1)
        column = index - self.line_starts[line_no]
        start, line = self.lines[line_no]

        width = 0
        for position, char in enumerate(line):
            step = self.tab_width if char == "\t" else 1
            if width >= column or width + step > column:
                return start + position
            width += step
        return start + len(line)


def normalize_whitespace(text: str, tab_width: int = 4) -> str:
    """Unify line endings, expand tabs and drop trailing blanks on each line"""
    return _NormalizedDocument(text, tab_width).text


class ChangeMatcher:
    """Resolve search payloads with a cascade of strategies, first hit wins.

    1. exact substring
    2. payload without its trailing line break, when followed by a break or EOF
    3. whitespace-normalized match mapped back to the original offsets
    4. payload trimmed of surrounding whitespace
    """

    def __init__(self, tab_width: int = 4):
        self.tab_width = tab_width

    def find(self, content: str, search: str) -> MatchResult | None:
        if not content or not search:
            return None

        index = content.find(search)
        if index != -1:
            return MatchResult(index, index + len(search), "exact")

        if search.endswith("\n"):
            match = self._find_without_trailing_newline(content, search)
            if match is not None:
                return match

        if not search.strip():
            return None

        match = self._find_normalized(content, search)
        if match is not None:
            return match

        trimmed = search.strip()
        if trimmed != search:
            index = content.find(trimmed)
            if index != -1:
                return MatchResult(index, index + len(trimmed), "trimmed")

        return None

    def find_best_match(self, content: str, search: str) -> int:
        """Start offset of the best match, or -1 like ``str.find``"""
        match = self.find(content, search)
        return match.start if match is not None else -1

    def _find_without_trailing_newline(self, content: str, search: str) -> MatchResult | None:
        stripped = search[:-1]
        if not stripped:
            return None
        index = content.find(stripped)
        while index != -1:
            after = index + len(stripped)
            if after >= len(content) or content[after] == "\n":
                return MatchResult(index, min(after + 1, len(content)), "trailing_newline")
            index = content.find(stripped, index + 1)
        return None

    def _find_normalized(self, content: str, search: str) -> MatchResult | None:
        document = _NormalizedDocument(content, self.tab_width)
        pattern = normalize_whitespace(search, self.tab_width)
        index = document.text.find(pattern)
        if index == -1:
            return None
        start = document.to_original(index)
        end = document.to_original(index + len(pattern))
        return MatchResult(start, max(start, end), "normalized")
