"""
Stream Buffer - append-only response text with a processed-offset cursor
"""

from __future__ import annotations


class StreamBuffer:
    """Growing response text owned by one parse session.

    ``processed_offset`` marks the end of the last fully extracted change
    block. It only moves forward and never passes the end of the text.
    """

    def __init__(self) -> None:
        self._chunk_count = 0
        self._text = ""
        self._processed_offset = 0

    def append(self, chunk: str) -> None:
        """Append a chunk verbatim"""
        if chunk:
            self._chunk_count += 1
            self._text += chunk

    def advance_to(self, offset: int) -> None:
        """Move the processed cursor forward, clamped to the buffer length"""
        self._processed_offset = max(self._processed_offset, min(offset, len(self._text)))

    def reset(self) -> None:
        self._chunk_count = 0
        self._text = ""
        self._processed_offset = 0

    @property
    def text(self) -> str:
        return self._text

    @property
    def processed_offset(self) -> int:
        return self._processed_offset

    @property
    def chunk_count(self) -> int:
        return self._chunk_count

    def unprocessed(self) -> str:
        """Text after the processed cursor"""
        return self._text[self._processed_offset :]

    def __len__(self) -> int:
        return len(self._text)
