"""Ghost suggestion streaming API endpoints"""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, HTTPException
from sse_starlette.sse import EventSourceResponse

from models.ghost import GhostSuggestionContext, StreamingParseResult
from models.session import (
    ChunkRequest,
    CreateSessionRequest,
    CreateSessionResponse,
    ReplayEvent,
    ReplayRequest,
    SessionState,
)
from services.config_manager import ConfigManager
from services.errors import ParserUsageError
from services.streaming_parser import GhostStreamingParser

logger = logging.getLogger(__name__)

router = APIRouter()

# In-memory session storage, one parser per generation
sessions: dict[str, GhostStreamingParser] = {}


def build_parser(cursor_marker: str | None = None) -> GhostStreamingParser:
    """Create a parser from the current parser config"""
    options = ConfigManager.get_instance().parser_options()
    if cursor_marker is not None:
        options["cursorMarker"] = cursor_marker
    return GhostStreamingParser.from_options(options)


def get_session(session_id: str) -> GhostStreamingParser:
    parser = sessions.get(session_id)
    if parser is None:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
    return parser


@router.post("/sessions", response_model=CreateSessionResponse)
async def create_session(request: CreateSessionRequest) -> CreateSessionResponse:
    """Open a session bound to one document snapshot"""
    parser = build_parser(request.cursor_marker)
    parser.initialize(GhostSuggestionContext(document=request.document))

    session_id = str(uuid.uuid4())
    sessions[session_id] = parser
    logger.info(
        "Opened session %s for %s",
        session_id,
        request.document.file_path if request.document else "<no document>",
    )
    return CreateSessionResponse(session_id=session_id)


@router.post("/sessions/{session_id}/chunks", response_model=StreamingParseResult)
async def process_chunk(session_id: str, request: ChunkRequest) -> StreamingParseResult:
    """Feed the next chunk of model output"""
    parser = get_session(session_id)
    try:
        return parser.process_chunk(request.chunk)
    except ParserUsageError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/sessions/{session_id}/finish", response_model=StreamingParseResult)
async def finish_stream(session_id: str) -> StreamingParseResult:
    """Signal that the model stopped streaming"""
    parser = get_session(session_id)
    try:
        return parser.finish_stream()
    except ParserUsageError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/sessions/{session_id}/reset")
async def reset_session(session_id: str) -> dict[str, str]:
    """Abandon the in-flight parse but keep the document"""
    get_session(session_id).reset()
    return {"status": "success", "message": "Session reset"}


@router.get("/sessions/{session_id}", response_model=SessionState)
async def get_session_state(session_id: str) -> SessionState:
    """Inspect buffered text and completed changes"""
    parser = get_session(session_id)
    return SessionState(
        session_id=session_id,
        buffer=parser.get_buffer(),
        completed_changes=parser.get_completed_changes(),
        finished=parser.is_finished,
    )


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str) -> dict[str, str]:
    """Discard a session"""
    if sessions.pop(session_id, None) is None:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
    return {"status": "success", "message": "Session deleted"}


@router.post("/replay")
async def replay_stream(request: ReplayRequest):
    """Replay recorded chunks and stream each parse result (SSE)"""
    parser = build_parser(request.cursor_marker)
    parser.initialize(GhostSuggestionContext(document=request.document))

    async def event_generator():
        try:
            for index, chunk in enumerate(request.chunks):
                result = parser.process_chunk(chunk)
                event = ReplayEvent(type="result", index=index, result=result.model_dump(mode="json"))
                yield {"event": "message", "data": event.model_dump_json()}

            result = parser.finish_stream()
            event = ReplayEvent(type="done", index=len(request.chunks), result=result.model_dump(mode="json"))
            yield {"event": "message", "data": event.model_dump_json()}

        except ParserUsageError as e:
            event = ReplayEvent(type="error", error=str(e))
            yield {"event": "message", "data": event.model_dump_json()}

    return EventSourceResponse(event_generator())
