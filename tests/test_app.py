"""Tests for the FastAPI application routes."""
from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from quiz_engine import app as app_module
from quiz_engine.app import app
from quiz_engine.config import Settings
from quiz_engine.errors import UpstreamError


class FakeLLM:
    """Fake LLM returning a fixed completion, or raising a fixed error."""

    def __init__(self, response: str = "", error: Exception | None = None):
        self._response = response
        self._error = error

    async def generate(self, prompt: str, system: str | None = None,
                       temperature: float = 0.7, max_tokens: int = 3000) -> str:
        if self._error:
            raise self._error
        return self._response

    def name(self) -> str:
        return "fake-llm"


@pytest.fixture
def make_client(monkeypatch):
    """Build a TestClient whose LLM is a FakeLLM; ollama needs no API key."""
    clients = []

    def _make(llm: FakeLLM | None = None, settings: Settings | None = None):
        app_module._settings = settings or Settings(llm_provider="ollama")
        patcher = patch("quiz_engine.app._get_llm", return_value=llm or FakeLLM())
        patcher.start()
        client = TestClient(app, raise_server_exceptions=False)
        clients.append((client, patcher))
        return client

    yield _make

    for client, patcher in clients:
        client.close()
        patcher.stop()
    app_module._settings = None


class TestHealth:
    def test_health(self, make_client):
        resp = make_client().get("/api/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["provider"] == "ollama"
        assert data["apiKeyConfigured"] is True
        assert data["timestamp"]


class TestGenerateQuiz:
    def test_success(self, make_client, sample_content, sample_document_json):
        client = make_client(FakeLLM(f"```json\n{sample_document_json}\n```"))
        resp = client.post("/api/generate-quiz", json={
            "content": sample_content,
            "options": {"numQuestions": 4, "difficulty": "beginner",
                        "subject": "Biology", "gradeLevel": "middle"},
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert len(data["quiz"]) == 4
        assert data["metadata"]["difficulty"] == "beginner"
        assert data["quiz"][3]["learningObjective"] == "Remember specific details and terminology"

    def test_short_content(self, make_client):
        resp = make_client().post("/api/generate-quiz", json={"content": "short", "options": {}})
        assert resp.status_code == 400
        assert resp.json()["error"] == "invalid-options"
        assert "100 characters" in resp.json()["message"]

    def test_bad_options(self, make_client, sample_content):
        resp = make_client().post("/api/generate-quiz", json={
            "content": sample_content, "options": {"numQuestions": 0},
        })
        assert resp.status_code == 400

    def test_upstream_status_passthrough(self, make_client, sample_content):
        client = make_client(FakeLLM(error=UpstreamError(status=429)))
        resp = client.post("/api/generate-quiz", json={"content": sample_content, "options": {}})
        assert resp.status_code == 429
        assert resp.json()["message"].startswith("Rate limit exceeded")

    def test_unparseable_completion(self, make_client, sample_content):
        client = make_client(FakeLLM("Sorry, no quiz today."))
        resp = client.post("/api/generate-quiz", json={"content": sample_content, "options": {}})
        assert resp.status_code == 502
        assert resp.json()["error"] == "extraction-error"

    def test_missing_api_key(self, make_client, sample_content, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        client = make_client(settings=Settings(llm_provider="openai"))
        resp = client.post("/api/generate-quiz", json={"content": sample_content, "options": {}})
        assert resp.status_code == 500
        assert resp.json()["success"] is False

    def test_invalid_json_body(self, make_client):
        resp = make_client().post(
            "/api/generate-quiz", content=b"not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400


class TestGrade:
    def test_grade(self, make_client, sample_quiz):
        resp = make_client().post("/api/grade", json={
            "quiz": sample_quiz.to_dict(),
            "answers": [2, True, "mitochondria make energy", None],
        })
        assert resp.status_code == 200
        results = resp.json()["results"]
        assert results["score"] == 3
        assert results["total"] == 4
        assert results["percent"] == 75
        assert [v["correct"] for v in results["perQuestion"]] == [True, True, True, False]
        assert results["perQuestion"][3]["answered"] is False

    def test_grade_answers_by_key(self, make_client, sample_quiz):
        resp = make_client().post("/api/grade", json={
            "quiz": sample_quiz.to_dict(), "answers": {"3": "Photosynthesis "},
        })
        assert resp.json()["results"]["score"] == 1

    def test_empty_quiz(self, make_client):
        resp = make_client().post("/api/grade", json={"quiz": {"questions": []}, "answers": []})
        assert resp.status_code == 400
        assert resp.json()["reason"] == "empty-quiz"

    def test_missing_quiz(self, make_client):
        resp = make_client().post("/api/grade", json={"answers": []})
        assert resp.status_code == 400

    def test_round_trip_generated_quiz(self, make_client, sample_content, sample_document_json):
        client = make_client(FakeLLM(sample_document_json))
        generated = client.post("/api/generate-quiz", json={
            "content": sample_content, "options": {"numQuestions": 4},
        }).json()
        resp = client.post("/api/grade", json={
            "quiz": generated["quiz"],
            "answers": [1, True, "The mitochondria", "photosynthesis"],
        })
        assert resp.json()["results"]["percent"] == 100
