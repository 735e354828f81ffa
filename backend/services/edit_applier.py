"""
Edit Applier - splice matched directives into a hypothetical document
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from models.ghost import MatchedChange, ParsedChange

from .change_matcher import ChangeMatcher

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EditResult:
    """Hypothetical edited document plus the edit script that produced it"""

    text: str
    applied: list[MatchedChange] = field(default_factory=list)  # Descending start offset
    unmatched: list[ParsedChange] = field(default_factory=list)
    overlapping: list[ParsedChange] = field(default_factory=list)


class EditApplier:
    """Apply directives to a document without ever touching the real file"""

    def __init__(self, matcher: ChangeMatcher | None = None):
        self.matcher = matcher or ChangeMatcher()

    def build_edit_script(
        self,
        content: str,
        changes: Sequence[ParsedChange],
    ) -> tuple[list[MatchedChange], list[ParsedChange], list[ParsedChange]]:
        """Resolve changes in order; unmatched and overlapping ones are dropped"""
        accepted: list[MatchedChange] = []
        unmatched: list[ParsedChange] = []
        overlapping: list[ParsedChange] = []

        for change in changes:
            match = self.matcher.find(content, change.search)
            if match is None:
                logger.debug("No match for change: %r", change.search[:50])
                unmatched.append(change)
                continue

            candidate = MatchedChange(
                search=change.search,
                replace=self._preserve_trailing_newlines(content, change, match.end),
                start_offset=match.start,
                end_offset=match.end,
                strategy=match.strategy,
            )
            if any(candidate.overlaps(existing) for existing in accepted):
                logger.debug("Skipping overlapping change: %r", change.search[:50])
                overlapping.append(change)
                continue

            accepted.append(candidate)

        accepted.sort(key=lambda matched: matched.start_offset, reverse=True)
        return accepted, unmatched, overlapping

    def apply(self, content: str, changes: Sequence[ParsedChange]) -> EditResult:
        """Return the document with every accepted change spliced in"""
        applied, unmatched, overlapping = self.build_edit_script(content, changes)

        # Highest offset first keeps the lower offsets valid
        modified = content
        for change in applied:
            modified = modified[: change.start_offset] + change.replace + modified[change.end_offset :]

        return EditResult(text=modified, applied=applied, unmatched=unmatched, overlapping=overlapping)

    @staticmethod
    def _preserve_trailing_newlines(content: str, change: ParsedChange, end: int) -> str:
        """Keep blank lines after the matched region the model did not echo"""
        if not change.search.endswith("\n"):
            return change.replace

        following = 0
        while end + following < len(content) and content[end + following] == "\n":
            following += 1
        if following == 0:
            return change.replace

        trailing = len(change.replace) - len(change.replace.rstrip("\n"))
        if trailing >= following:
            return change.replace
        return change.replace + "\n" * (following - trailing)
