"""Models module - Pydantic data models"""

from .diff import DiffHunk, DiffOperation, DiffOperationType, FileSuggestion, SuggestionSet
from .ghost import (
    DocumentSnapshot,
    GhostSuggestionContext,
    MatchedChange,
    ParsedChange,
    StreamingParseResult,
)
from .session import (
    ChunkRequest,
    CreateSessionRequest,
    CreateSessionResponse,
    ReplayEvent,
    ReplayRequest,
    SessionState,
)

__all__ = [
    # Diff models
    "DiffHunk",
    "DiffOperation",
    "DiffOperationType",
    "FileSuggestion",
    "SuggestionSet",
    # Ghost models
    "DocumentSnapshot",
    "GhostSuggestionContext",
    "MatchedChange",
    "ParsedChange",
    "StreamingParseResult",
    # Session API models
    "ChunkRequest",
    "CreateSessionRequest",
    "CreateSessionResponse",
    "ReplayEvent",
    "ReplayRequest",
    "SessionState",
]
