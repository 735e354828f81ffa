"""Streaming session API models"""

from __future__ import annotations

from pydantic import BaseModel

from .ghost import DocumentSnapshot, ParsedChange


class CreateSessionRequest(BaseModel):
    """Request to open a streaming parse session"""

    document: DocumentSnapshot | None = None
    cursor_marker: str | None = None  # Overrides the configured marker


class CreateSessionResponse(BaseModel):
    """Response with the new session id"""

    session_id: str


class ChunkRequest(BaseModel):
    """A chunk of model output"""

    chunk: str


class SessionState(BaseModel):
    """Snapshot of a session for debugging"""

    session_id: str
    buffer: str
    completed_changes: list[ParsedChange] = []
    finished: bool = False


class ReplayRequest(BaseModel):
    """Replay a recorded model response chunk by chunk"""

    document: DocumentSnapshot
    chunks: list[str]
    cursor_marker: str | None = None


class ReplayEvent(BaseModel):
    """SSE replay event"""

    type: str  # "result", "done", "error"
    index: int | None = None
    result: dict | None = None
    error: str | None = None
