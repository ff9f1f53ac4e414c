"""Tests for the FastAPI endpoints."""

import json

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from claude_code_stream.endpoint import add_claude_code_fastapi_endpoint
from claude_code_stream.model import ClaudeCodeLanguageModel

from conftest import assistant_text, init_message, result_message, text_delta


def _sse_events(body):
    return [
        json.loads(line[len("data: "):])
        for line in body.splitlines()
        if line.startswith("data: ")
    ]


@pytest.fixture
def model():
    return ClaudeCodeLanguageModel("sonnet")


@pytest.fixture
def client(model):
    app = FastAPI()
    add_claude_code_fastapi_endpoint(app, model, "/claude")
    return TestClient(app)


@pytest.fixture
def scripted(fake_query):
    fake_query.script = [
        init_message("session-9"),
        text_delta("Hi"),
        assistant_text("Hi"),
        result_message("session-9"),
    ]
    return fake_query


class TestStreamingEndpoint:
    """Tests for the SSE endpoint."""

    def test_streams_events(self, client, scripted):
        response = client.post("/claude", json={"prompt": "hello"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        events = _sse_events(response.text)
        assert [event["type"] for event in events] == [
            "stream-start",
            "response-metadata",
            "text-start",
            "text-delta",
            "text-end",
            "finish",
        ]
        assert events[1]["modelId"] == "sonnet"
        assert events[-1]["summary"]["finishReason"]["unified"] == "stop"

    def test_error_event_on_failure(self, client, fake_query):
        fake_query.error = RuntimeError("Command failed")
        events = _sse_events(client.post("/claude", json={"prompt": "hello"}).text)
        assert events[-1]["type"] == "error"
        assert events[-1]["message"] == "Command failed"
        assert "error" not in events[-1]

    def test_rejects_missing_prompt(self, client):
        assert client.post("/claude", json={}).status_code == 422


class TestGenerateEndpoint:
    """Tests for the JSON endpoint."""

    def test_generate(self, client, scripted):
        response = client.post("/claude/generate", json={"prompt": "hello"})
        assert response.status_code == 200
        body = response.json()
        assert body["text"] == "Hi"
        assert body["finishReason"]["unified"] == "stop"
        assert body["sessionId"] == "session-9"

    def test_authentication_failure(self, client, fake_query):
        fake_query.error = RuntimeError("Not logged in")
        response = client.post("/claude/generate", json={"prompt": "hello"})
        assert response.status_code == 401

    def test_cli_failure(self, client, fake_query):
        fake_query.error = RuntimeError("Command failed")
        response = client.post("/claude/generate", json={"prompt": "hello"})
        assert response.status_code == 502

    def test_timeout(self, client, fake_query):
        fake_query.error = TimeoutError("Request timed out")
        response = client.post("/claude/generate", json={"prompt": "hello"})
        assert response.status_code == 504


class TestHealthEndpoint:
    """Tests for the health check."""

    def test_health_reports_session(self, client, model, scripted):
        assert client.get("/claude/health").json() == {
            "status": "ok",
            "model": {"id": "sonnet", "session_id": None},
        }
        client.post("/claude", json={"prompt": "hello"})
        assert client.get("/claude/health").json()["model"]["session_id"] == "session-9"
