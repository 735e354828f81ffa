"""Diff-related data models"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, computed_field


class DiffOperationType(str, Enum):
    """Kind of a single line operation"""

    ADD = "add"
    REMOVE = "remove"
    CONTEXT = "context"


class DiffOperation(BaseModel):
    """A single line of a suggestion diff"""

    type: DiffOperationType
    old_line: int  # 1-indexed
    new_line: int  # 1-indexed
    content: str

    @computed_field
    @property
    def line(self) -> int:
        """Line the operation is anchored on, in the document it belongs to"""
        if self.type == DiffOperationType.REMOVE:
            return self.old_line
        return self.new_line


class DiffHunk(BaseModel):
    """A contiguous group of operations sharing local context"""

    old_start: int  # 1-indexed
    old_lines: int
    new_start: int  # 1-indexed
    new_lines: int
    operations: list[DiffOperation] = []

    def has_changes(self) -> bool:
        return any(op.type != DiffOperationType.CONTEXT for op in self.operations)


class FileSuggestion(BaseModel):
    """Suggested edits for one file"""

    file_path: str
    language: str = "plaintext"
    hunks: list[DiffHunk] = []
    unified_diff: str = ""  # Standard unified diff format
    preview_content: str = ""  # Full file with changes applied

    def add_hunk(self, hunk: DiffHunk) -> DiffHunk:
        self.hunks.append(hunk)
        return hunk

    @property
    def operations(self) -> list[DiffOperation]:
        return [op for hunk in self.hunks for op in hunk.operations]


class SuggestionSet(BaseModel):
    """Per-file collection of suggested operations exposed to the renderer"""

    files: list[FileSuggestion] = []

    def add_file(self, file_path: str, language: str = "plaintext") -> FileSuggestion:
        for existing in self.files:
            if existing.file_path == file_path:
                return existing
        suggestion = FileSuggestion(file_path=file_path, language=language)
        self.files.append(suggestion)
        return suggestion

    def get_file(self, file_path: str) -> FileSuggestion | None:
        for suggestion in self.files:
            if suggestion.file_path == file_path:
                return suggestion
        return None

    def has_suggestions(self) -> bool:
        return any(hunk.has_changes() for suggestion in self.files for hunk in suggestion.hunks)

    def sort_groups(self) -> None:
        """Sort files by path and hunks by position"""
        self.files.sort(key=lambda suggestion: suggestion.file_path)
        for suggestion in self.files:
            suggestion.hunks.sort(key=lambda hunk: (hunk.old_start, hunk.new_start))
