"""Tests for the session and replay HTTP endpoints."""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from main import app
from routers import ghost
from tests.helpers import change_block

DOCUMENT = {"text": "function test() {\n\treturn true;\n}", "file_path": "/test/file.ts", "language": "typescript"}
BLOCK = change_block("return true;", "return false;")


@pytest.fixture(autouse=True)
def clear_sessions():
    ghost.sessions.clear()
    yield
    ghost.sessions.clear()


@pytest.fixture(autouse=True)
def reset_sse_exit_event():
    from sse_starlette.sse import AppStatus

    # The exit event binds to the first event loop that awaits it
    if getattr(AppStatus, "should_exit_event", None) is not None:
        AppStatus.should_exit_event = None
    yield


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def _open_session(client: TestClient, **body) -> str:
    response = client.post("/api/ghost/sessions", json={"document": DOCUMENT, **body})
    assert response.status_code == 200
    return response.json()["session_id"]


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_session_flow(client):
    session_id = _open_session(client)

    partial = client.post(f"/api/ghost/sessions/{session_id}/chunks", json={"chunk": BLOCK[:30]})
    assert partial.status_code == 200
    assert partial.json()["is_complete"] is False

    response = client.post(f"/api/ghost/sessions/{session_id}/chunks", json={"chunk": BLOCK[30:]})
    body = response.json()
    assert body["has_new_suggestions"] is True
    assert body["is_complete"] is True
    suggestion = body["suggestions"]["files"][0]
    assert suggestion["file_path"] == "/test/file.ts"
    assert suggestion["preview_content"] == "function test() {\n\treturn false;\n}"
    changed = [op for hunk in suggestion["hunks"] for op in hunk["operations"] if op["type"] != "context"]
    assert [(op["type"], op["line"]) for op in changed] == [("remove", 2), ("add", 2)]

    state = client.get(f"/api/ghost/sessions/{session_id}").json()
    assert state["buffer"] == BLOCK
    assert state["completed_changes"] == [{"search": "return true;", "replace": "return false;"}]
    assert state["finished"] is False

    finished = client.post(f"/api/ghost/sessions/{session_id}/finish")
    assert finished.status_code == 200
    assert client.get(f"/api/ghost/sessions/{session_id}").json()["finished"] is True


def test_chunk_after_finish_conflicts(client):
    session_id = _open_session(client)
    client.post(f"/api/ghost/sessions/{session_id}/finish")

    response = client.post(f"/api/ghost/sessions/{session_id}/chunks", json={"chunk": "late"})

    assert response.status_code == 409


def test_reset_session(client):
    session_id = _open_session(client)
    client.post(f"/api/ghost/sessions/{session_id}/chunks", json={"chunk": BLOCK})

    assert client.post(f"/api/ghost/sessions/{session_id}/reset").status_code == 200

    state = client.get(f"/api/ghost/sessions/{session_id}").json()
    assert state["buffer"] == ""
    assert state["completed_changes"] == []


def test_custom_cursor_marker(client):
    session_id = _open_session(client, cursor_marker="<|c|>")

    client.post(f"/api/ghost/sessions/{session_id}/chunks", json={"chunk": change_block("return<|c|> true;", "x")})

    state = client.get(f"/api/ghost/sessions/{session_id}").json()
    assert state["completed_changes"][0]["search"] == "return true;"


def test_session_without_document(client):
    response = client.post("/api/ghost/sessions", json={})
    session_id = response.json()["session_id"]

    body = client.post(f"/api/ghost/sessions/{session_id}/chunks", json={"chunk": BLOCK}).json()

    assert body["suggestions"]["files"] == []


def test_unknown_session(client):
    assert client.post("/api/ghost/sessions/missing/chunks", json={"chunk": "x"}).status_code == 404
    assert client.get("/api/ghost/sessions/missing").status_code == 404
    assert client.delete("/api/ghost/sessions/missing").status_code == 404


def test_delete_session(client):
    session_id = _open_session(client)

    assert client.delete(f"/api/ghost/sessions/{session_id}").status_code == 200
    assert session_id not in ghost.sessions


def test_replay_streams_results(client):
    response = client.post(
        "/api/ghost/replay",
        json={"document": DOCUMENT, "chunks": [BLOCK[:30], BLOCK[30:]]},
    )

    assert response.status_code == 200
    events = [
        json.loads(line[len("data:") :].strip())
        for line in response.text.splitlines()
        if line.startswith("data:")
    ]
    assert [event["type"] for event in events] == ["result", "result", "done"]
    assert [event["index"] for event in events] == [0, 1, 2]
    assert events[0]["result"]["has_new_suggestions"] is False
    assert events[1]["result"]["has_new_suggestions"] is True
    assert events[2]["result"]["is_complete"] is True
