"""
Streaming Parser - turn a streamed model response into ghost suggestions

Every processed chunk recomputes the full suggestion set from all changes
completed so far. Change order and overlap resolution can shift as more
blocks complete, so results are never patched incrementally.
"""

from __future__ import annotations

import logging
from typing import Any

from models.diff import SuggestionSet
from models.ghost import GhostSuggestionContext, ParsedChange, StreamingParseResult

from .change_extractor import DEFAULT_CURSOR_MARKER, ChangeExtractor
from .change_matcher import ChangeMatcher
from .completion_detector import CompletionDetector
from .diff_generator import DiffGenerator
from .edit_applier import EditApplier
from .errors import ParserNotInitializedError, StreamAlreadyFinishedError
from .stream_buffer import StreamBuffer
from .stream_finalizer import StreamFinalizer

logger = logging.getLogger(__name__)


class GhostStreamingParser:
    """Streaming parser bound to one generation session at a time.

    Not safe for concurrent use: callers feed chunks serially.
    """

    def __init__(
        self,
        cursor_marker: str | None = DEFAULT_CURSOR_MARKER,
        context_lines: int = 3,
        tab_width: int = 4,
    ):
        self.buffer = StreamBuffer()
        self.extractor = ChangeExtractor(cursor_marker)
        self.detector = CompletionDetector()
        self.finalizer = StreamFinalizer()
        self.applier = EditApplier(ChangeMatcher(tab_width))
        self.diff_generator = DiffGenerator(context_lines)

        self._context: GhostSuggestionContext | None = None
        self._completed_changes: list[ParsedChange] = []
        self._finished_result: StreamingParseResult | None = None

    @classmethod
    def from_options(cls, options: dict[str, Any]) -> GhostStreamingParser:
        """Build a parser from the ``parser`` config section"""
        return cls(
            cursor_marker=options.get("cursorMarker", DEFAULT_CURSOR_MARKER),
            context_lines=int(options.get("contextLines", 3)),
            tab_width=int(options.get("tabWidth", 4)),
        )

    # ========== Session lifecycle ==========

    def initialize(self, context: GhostSuggestionContext) -> None:
        """Bind the document snapshot and start a fresh session"""
        self._context = context
        self.reset()

    def reset(self) -> None:
        """Drop all streamed state; the bound context is kept"""
        self.buffer.reset()
        self.extractor.reset()
        self._completed_changes = []
        self._finished_result = None

    @property
    def is_initialized(self) -> bool:
        return self._context is not None

    @property
    def is_finished(self) -> bool:
        return self._finished_result is not None

    # ========== Streaming ==========

    def process_chunk(self, chunk: str) -> StreamingParseResult:
        """Append a chunk and return the cumulative suggestions"""
        self._require_initialized()
        if self._finished_result is not None:
            raise StreamAlreadyFinishedError()

        self.buffer.append(chunk)
        new_changes = self.extractor.extract(self.buffer)
        if new_changes:
            logger.debug("Extracted %d new change(s)", len(new_changes))
        self._completed_changes.extend(new_changes)

        return self._build_result(has_new_suggestions=bool(new_changes))

    def finish_stream(self) -> StreamingParseResult:
        """Signal that no more chunks will arrive; safe to call repeatedly"""
        self._require_initialized()
        if self._finished_result is not None:
            return self._finished_result

        new_changes = self.finalizer.finalize(self.buffer, self.extractor)
        self._completed_changes.extend(new_changes)
        self._finished_result = self._build_result(has_new_suggestions=bool(new_changes))
        logger.debug(
            "Stream finished with %d change(s), complete=%s",
            len(self._completed_changes),
            self._finished_result.is_complete,
        )
        return self._finished_result

    def generate_suggestions(self, changes: list[ParsedChange]) -> SuggestionSet:
        """Apply ``changes`` to the snapshot and diff the result"""
        suggestions = SuggestionSet()
        document = self._context.document if self._context else None
        if document is None or not changes:
            return suggestions

        edit = self.applier.apply(document.text, changes)
        if edit.unmatched or edit.overlapping:
            logger.debug(
                "Applied %d change(s), dropped %d unmatched and %d overlapping",
                len(edit.applied),
                len(edit.unmatched),
                len(edit.overlapping),
            )

        suggestion = suggestions.add_file(document.file_path, document.language)
        self.diff_generator.fill_suggestion(suggestion, document.text, edit.text)
        suggestions.sort_groups()
        return suggestions

    # ========== Debug accessors ==========

    def get_buffer(self) -> str:
        return self.buffer.text

    def get_completed_changes(self) -> list[ParsedChange]:
        return list(self._completed_changes)

    # ========== Helpers ==========

    def _build_result(self, has_new_suggestions: bool) -> StreamingParseResult:
        return StreamingParseResult(
            suggestions=self.generate_suggestions(self._completed_changes),
            is_complete=self.detector.is_complete(self.buffer, self.extractor, len(self._completed_changes)),
            has_new_suggestions=has_new_suggestions,
        )

    def _require_initialized(self) -> None:
        if self._context is None:
            raise ParserNotInitializedError()
