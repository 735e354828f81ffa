"""Tests for the rotating file logging setup."""

from __future__ import annotations

import logging

import pytest

from services.logging_config import get_log_path, setup_logging


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    previous_handlers = list(root.handlers)
    previous_level = root.level
    yield
    for handler in root.handlers:
        if handler not in previous_handlers:
            handler.close()
    root.handlers = previous_handlers
    root.setLevel(previous_level)


def test_writes_to_log_file(tmp_path, restore_root_logging):
    log_path = setup_logging("DEBUG", log_dir=tmp_path, console=False, force=True)

    logging.getLogger("services.test").debug("hello from the parser")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert log_path == tmp_path / "ghost_backend.log"
    assert get_log_path() == log_path
    assert "hello from the parser" in log_path.read_text(encoding="utf-8")


def test_env_dir_used_when_no_explicit_dir(tmp_path, monkeypatch, restore_root_logging):
    monkeypatch.setenv("GHOST_BACKEND_LOG_DIR", str(tmp_path / "env_logs"))

    log_path = setup_logging(logging.INFO, console=False, force=True)

    assert log_path.parent == tmp_path / "env_logs"


def test_second_call_without_force_is_noop(tmp_path, restore_root_logging):
    first = setup_logging(log_dir=tmp_path / "a", console=False, force=True)
    second = setup_logging(log_dir=tmp_path / "b", console=False)

    assert first == second


def test_unknown_level_falls_back_to_info(tmp_path, restore_root_logging):
    setup_logging("CHATTY", log_dir=tmp_path, console=False, force=True)

    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger("uvicorn.access").level == logging.WARNING
