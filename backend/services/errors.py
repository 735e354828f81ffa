"""Errors raised by the streaming parser for API misuse"""

from __future__ import annotations


class ParserUsageError(RuntimeError):
    """Raised when the streaming parser is driven out of order."""


class ParserNotInitializedError(ParserUsageError):
    """Raised when a session is used before ``initialize()``."""

    def __init__(self, message: str = "Parser not initialized. Call initialize() first.") -> None:
        super().__init__(message)


class StreamAlreadyFinishedError(ParserUsageError):
    """Raised when a chunk arrives after the stream was declared finished."""

    def __init__(self, message: str = "Stream already finished. Call reset() to start a new one.") -> None:
        super().__init__(message)
