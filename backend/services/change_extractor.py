"""
Change Extractor - incremental tokenizer for <change> directive blocks

Grammar:
    <change><search><![CDATA[...]]></search><replace><![CDATA[...]]></replace></change>

Whitespace between tags is ignored, blocks do not nest and any number of
sibling blocks may appear in one response. The tokenizer keeps its position
between calls so text that has already been read is never scanned again.
"""

from __future__ import annotations

import logging
import re
from enum import Enum

from models.ghost import ParsedChange

from .stream_buffer import StreamBuffer

logger = logging.getLogger(__name__)

DEFAULT_CURSOR_MARKER = "<<<AUTOCOMPLETE_HERE>>>"

CHANGE_OPEN = "<change>"
CHANGE_CLOSE = "</change>"
SEARCH_OPEN = "<search>"
SEARCH_CLOSE = "</search>"
REPLACE_OPEN = "<replace>"
REPLACE_CLOSE = "</replace>"
CDATA_OPEN = "<![CDATA["
CDATA_CLOSE = "]]>"

# Tags tracked outside of blocks for the completion heuristic
_OUTSIDE_TAG_RE = re.compile(
    r"<(?P<closing>/?)(?P<name>change|search|replace)(?:\s[^>]*)?>|(?P<cdata_open><!\[CDATA\[)|(?P<cdata_close>\]\]>)",
    re.IGNORECASE,
)
_TAG_OPENERS = ("<change", "</change", "<search", "</search", "<replace", "</replace", "<![cdata[")


class TokenizerState(str, Enum):
    """Where the tokenizer currently is in the grammar"""

    OUTSIDE = "outside"
    IN_CHANGE = "in_change"
    IN_SEARCH_CDATA = "in_search_cdata"
    IN_REPLACE_CDATA = "in_replace_cdata"
    AWAIT_CLOSE_CHANGE = "await_close_change"


class _Match(Enum):
    MATCHED = "matched"
    NEED_MORE = "need_more"
    MISMATCH = "mismatch"


def _skip_whitespace(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def _match_token(text: str, pos: int, token: str) -> tuple[_Match, int]:
    """Match ``token`` at ``pos`` after optional whitespace."""
    pos = _skip_whitespace(text, pos)
    if pos >= len(text):
        return _Match.NEED_MORE, pos
    candidate = text[pos : pos + len(token)]
    if candidate == token:
        return _Match.MATCHED, pos + len(token)
    if len(candidate) < len(token) and token.startswith(candidate):
        return _Match.NEED_MORE, pos
    return _Match.MISMATCH, pos


def _could_become_tag(fragment: str) -> bool:
    lowered = fragment.lower()
    for opener in _TAG_OPENERS:
        if opener == "<![cdata[":
            if len(lowered) < len(opener) and opener.startswith(lowered):
                return True
            continue
        if opener.startswith(lowered):
            return True
        if lowered.startswith(opener) and lowered[len(opener)].isspace():
            return True
    return False


def strip_cursor_marker(text: str, marker: str | None) -> str:
    if not marker:
        return text
    return text.replace(marker, "")


class ChangeExtractor:
    """Pull completed change blocks out of a growing :class:`StreamBuffer`."""

    def __init__(self, cursor_marker: str | None = DEFAULT_CURSOR_MARKER):
        self.cursor_marker = cursor_marker
        self.reset()

    def reset(self) -> None:
        self.state = TokenizerState.OUTSIDE
        self._pos = 0
        self._block_start = 0
        self._pending: list[str] = []
        self._next_state = TokenizerState.OUTSIDE
        self._content_start = 0
        self._cdata_scan = 0
        self._search = ""
        self._replace = ""
        # Open tags seen outside of any parsed block, keyed by lowercase name
        self._outside_open: dict[str, bool] = {"change": False, "search": False, "replace": False, "cdata": False}

    @property
    def position(self) -> int:
        return self._pos

    def extract(self, buffer: StreamBuffer) -> list[ParsedChange]:
        """Return the blocks completed since the last call.

        ``buffer.processed_offset`` is moved to the end of the last block
        found. Partial blocks stay pending for a later call.
        """
        text = buffer.text
        if self._pos < buffer.processed_offset:
            self._pos = buffer.processed_offset

        changes: list[ParsedChange] = []
        while True:
            if self._pending:
                outcome = self._consume_pending(text)
                if outcome is _Match.NEED_MORE:
                    break
                if outcome is _Match.MISMATCH:
                    self._abandon_block(text)
                    continue
                change = self._enter(self._next_state)
                if change is not None:
                    changes.append(change)
                    buffer.advance_to(self._pos)
                continue

            if self.state is TokenizerState.OUTSIDE:
                if not self._scan_outside(text):
                    break
                continue

            if not self._scan_cdata(text):
                break

        return changes

    def dangling_tags(self) -> set[str]:
        """Names of tags that are open with no closing tag after them"""
        dangling = {name for name, is_open in self._outside_open.items() if is_open}
        if self.state is not TokenizerState.OUTSIDE:
            dangling.add("change")
        if self.state is TokenizerState.IN_SEARCH_CDATA:
            dangling.update(("search", "cdata"))
        elif self.state is TokenizerState.IN_REPLACE_CDATA:
            dangling.update(("replace", "cdata"))
        return dangling

    # ========== State handlers ==========

    def _scan_outside(self, text: str) -> bool:
        """Look for the next block opener. Returns False when more text is needed."""
        start = text.find(CHANGE_OPEN, self._pos)
        if start == -1:
            end = self._safe_outside_end(text, self._pos)
            self._track_outside(text[self._pos : end])
            self._pos = end
            return False

        self._track_outside(text[self._pos : start])
        self._block_start = start
        self._pos = start + len(CHANGE_OPEN)
        self.state = TokenizerState.IN_CHANGE
        self._pending = [SEARCH_OPEN, CDATA_OPEN]
        self._next_state = TokenizerState.IN_SEARCH_CDATA
        return True

    def _scan_cdata(self, text: str) -> bool:
        """Find the end of the current CDATA payload. Returns False when more text is needed."""
        in_search = self.state is TokenizerState.IN_SEARCH_CDATA
        closing_tag = SEARCH_CLOSE if in_search else REPLACE_CLOSE

        while True:
            end = text.find(CDATA_CLOSE, self._cdata_scan)
            if end == -1:
                # Keep a possible "]]" tail for the next call
                self._cdata_scan = max(self._content_start, len(text) - len(CDATA_CLOSE) + 1)
                return False

            outcome, _ = _match_token(text, end + len(CDATA_CLOSE), closing_tag)
            if outcome is _Match.NEED_MORE:
                self._cdata_scan = end
                return False
            if outcome is _Match.MISMATCH:
                # Not a terminator, the "]]>" belongs to the payload
                self._cdata_scan = end + 1
                continue
            break

        payload = text[self._content_start : end]
        self._pos = end + len(CDATA_CLOSE)
        if in_search:
            self._search = payload
            self.state = TokenizerState.IN_CHANGE
            self._pending = [SEARCH_CLOSE, REPLACE_OPEN, CDATA_OPEN]
            self._next_state = TokenizerState.IN_REPLACE_CDATA
        else:
            self._replace = payload
            self.state = TokenizerState.AWAIT_CLOSE_CHANGE
            self._pending = [REPLACE_CLOSE, CHANGE_CLOSE]
            self._next_state = TokenizerState.OUTSIDE
        return True

    def _consume_pending(self, text: str) -> _Match:
        while self._pending:
            outcome, self._pos = _match_token(text, self._pos, self._pending[0])
            if outcome is not _Match.MATCHED:
                return outcome
            self._pending.pop(0)
        return _Match.MATCHED

    def _enter(self, state: TokenizerState) -> ParsedChange | None:
        self.state = state
        if state is TokenizerState.OUTSIDE:
            change = ParsedChange(
                search=strip_cursor_marker(self._search, self.cursor_marker),
                replace=strip_cursor_marker(self._replace, self.cursor_marker),
            )
            self._search = ""
            self._replace = ""
            # Every tag opened before this block is closed by now
            self._outside_open = dict.fromkeys(self._outside_open, False)
            return change
        self._content_start = self._pos
        self._cdata_scan = self._pos
        return None

    def _abandon_block(self, text: str) -> None:
        logger.debug(
            "Abandoning malformed change block at offset %d: %r",
            self._block_start,
            text[self._block_start : self._pos + 20][:80],
        )
        self.state = TokenizerState.OUTSIDE
        self._pending = []
        self._search = ""
        self._replace = ""
        self._outside_open["change"] = True
        self._pos = self._block_start + len(CHANGE_OPEN)

    # ========== Outside-of-block bookkeeping ==========

    def _track_outside(self, segment: str) -> None:
        for match in _OUTSIDE_TAG_RE.finditer(segment):
            if match.group("cdata_open"):
                self._outside_open["cdata"] = True
            elif match.group("cdata_close"):
                self._outside_open["cdata"] = False
            else:
                self._outside_open[match.group("name").lower()] = not match.group("closing")

    @staticmethod
    def _safe_outside_end(text: str, start: int) -> int:
        """End of the outside text that can be consumed without splitting a tag"""
        tag_start = text.rfind("<", start)
        if tag_start != -1 and ">" not in text[tag_start:] and _could_become_tag(text[tag_start:]):
            return tag_start
        end = len(text)
        while end > start and len(text) - end < len(CDATA_CLOSE) - 1 and text[end - 1] == "]":
            end -= 1
        return end
