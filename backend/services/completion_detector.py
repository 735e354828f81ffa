"""
Completion Detector - structural guess whether the model stopped streaming
"""

from __future__ import annotations

from .change_extractor import ChangeExtractor
from .stream_buffer import StreamBuffer


class CompletionDetector:
    """Classify a buffer as finished or still arriving.

    The answer is a heuristic derived from tokenizer state. It does not
    prove the model meant to stop.
    """

    def is_complete(self, buffer: StreamBuffer, extractor: ChangeExtractor, completed_count: int) -> bool:
        # Unclosed <change>, <search>, <replace> or CDATA section
        if extractor.dangling_tags():
            return False

        if not buffer.text.strip():
            return True

        return completed_count > 0
