"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from models.ghost import DocumentSnapshot, GhostSuggestionContext
from services.config_manager import ConfigManager
from services.streaming_parser import GhostStreamingParser

SAMPLE_TEXT = "function test() {\n\treturn true;\n}"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setenv("GHOST_BACKEND_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("GHOST_BACKEND_LOG_DIR", str(tmp_path / "logs"))
    ConfigManager.reset_instance()
    yield tmp_path / "config"
    ConfigManager.reset_instance()


@pytest.fixture
def document() -> DocumentSnapshot:
    return DocumentSnapshot(text=SAMPLE_TEXT, file_path="/test/file.ts", language="typescript")


@pytest.fixture
def parser(document: DocumentSnapshot) -> GhostStreamingParser:
    instance = GhostStreamingParser()
    instance.initialize(GhostSuggestionContext(document=document))
    yield instance
    instance.reset()
