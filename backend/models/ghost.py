"""Ghost suggestion data models"""

from __future__ import annotations

from pydantic import BaseModel

from .diff import SuggestionSet


class DocumentSnapshot(BaseModel):
    """Document text captured once at session start"""

    text: str
    file_path: str
    language: str = "plaintext"


class GhostSuggestionContext(BaseModel):
    """Context bound to a streaming parser session"""

    document: DocumentSnapshot | None = None


class ParsedChange(BaseModel):
    """A search/replace directive extracted from the model response"""

    search: str
    replace: str


class MatchedChange(BaseModel):
    """A directive resolved to a range of the original document"""

    search: str
    replace: str  # May carry re-appended trailing newlines
    start_offset: int
    end_offset: int
    strategy: str  # exact, trailing_newline, normalized, trimmed

    def overlaps(self, other: MatchedChange) -> bool:
        return self.start_offset < other.end_offset and other.start_offset < self.end_offset


class StreamingParseResult(BaseModel):
    """Result returned for every processed chunk"""

    suggestions: SuggestionSet
    is_complete: bool
    has_new_suggestions: bool
