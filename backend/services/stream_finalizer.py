"""
Stream Finalizer - conservative repair of one truncated trailing block
"""

from __future__ import annotations

import logging

from models.ghost import ParsedChange

from .change_extractor import CHANGE_CLOSE, CHANGE_OPEN, REPLACE_CLOSE, ChangeExtractor, TokenizerState
from .stream_buffer import StreamBuffer

logger = logging.getLogger(__name__)

_TRUNCATED_CHANGE_CLOSE = CHANGE_CLOSE[:-1]


class StreamFinalizer:
    """Repair the tail of a finished stream, then extract once more.

    Only two repairs are attempted and only when exactly one block is still
    open. With two or more open blocks nothing is touched.
    """

    def repair_suffix(self, buffer: StreamBuffer, extractor: ChangeExtractor) -> str | None:
        """Text to append to the buffer, or None when no repair applies"""
        if extractor.state is not TokenizerState.AWAIT_CLOSE_CHANGE:
            return None

        unprocessed = buffer.unprocessed()
        open_blocks = unprocessed.count(CHANGE_OPEN) - unprocessed.count(CHANGE_CLOSE)
        if open_blocks != 1:
            return None

        if buffer.text.endswith(_TRUNCATED_CHANGE_CLOSE):
            return ">"
        if buffer.text.rstrip().endswith(REPLACE_CLOSE) and CHANGE_CLOSE not in unprocessed:
            return CHANGE_CLOSE
        return None

    def finalize(self, buffer: StreamBuffer, extractor: ChangeExtractor) -> list[ParsedChange]:
        """Apply at most one repair and return the changes it released"""
        suffix = self.repair_suffix(buffer, extractor)
        if suffix is None:
            if extractor.state is not TokenizerState.OUTSIDE:
                logger.debug("Dropping unterminated change block in state %s", extractor.state.value)
            return []

        logger.debug("Repairing truncated change block by appending %r", suffix)
        buffer.append(suffix)
        return extractor.extract(buffer)
