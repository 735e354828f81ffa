"""Services module - Business logic layer"""

from .change_extractor import ChangeExtractor, TokenizerState
from .change_matcher import ChangeMatcher, MatchResult
from .completion_detector import CompletionDetector
from .config_manager import ConfigManager
from .diff_generator import DiffGenerator
from .edit_applier import EditApplier, EditResult
from .errors import ParserNotInitializedError, ParserUsageError, StreamAlreadyFinishedError
from .stream_buffer import StreamBuffer
from .stream_finalizer import StreamFinalizer
from .streaming_parser import GhostStreamingParser

__all__ = [
    "ChangeExtractor",
    "TokenizerState",
    "ChangeMatcher",
    "MatchResult",
    "CompletionDetector",
    "ConfigManager",
    "DiffGenerator",
    "EditApplier",
    "EditResult",
    "ParserNotInitializedError",
    "ParserUsageError",
    "StreamAlreadyFinishedError",
    "StreamBuffer",
    "StreamFinalizer",
    "GhostStreamingParser",
]
