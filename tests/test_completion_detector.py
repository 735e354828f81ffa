"""Tests for the structural completion heuristic."""

from __future__ import annotations

import pytest

from services.change_extractor import ChangeExtractor
from services.completion_detector import CompletionDetector
from services.stream_buffer import StreamBuffer
from tests.helpers import change_block


def _classify(text: str) -> bool:
    buffer = StreamBuffer()
    extractor = ChangeExtractor()
    buffer.append(text)
    changes = extractor.extract(buffer)
    return CompletionDetector().is_complete(buffer, extractor, len(changes))


def test_empty_buffer_is_complete():
    assert _classify("") is True
    assert _classify("   \n\t") is True


def test_closed_block_is_complete():
    assert _classify(change_block("a", "b")) is True


def test_text_without_blocks_is_not_complete():
    assert _classify("I could not find anything to change.") is False


@pytest.mark.parametrize(
    "text",
    [
        "<change>",
        "<change><search><![CDATA[abc",
        "<change><search><![CDATA[abc]]></search><replace><![CDATA[def",
        "<change><search><![CDATA[abc]]></search><replace><![CDATA[def]]></replace>",
    ],
)
def test_open_block_is_not_complete(text):
    assert _classify(text) is False


def test_trailing_open_block_after_completed_one():
    text = change_block("a", "b") + "<change><search>"
    assert _classify(text) is False


def test_stray_open_tag_outside_block():
    assert _classify(change_block("a", "b") + "\n<search>") is False
    assert _classify(change_block("a", "b") + "\n<SEARCH>") is False


def test_stray_tag_closed_later():
    assert _classify(change_block("a", "b") + "\n<replace>x</replace>") is True
