"""AI service tests."""

import httpx
import pytest

from moodtracker.core.moods import MoodType
from moodtracker.services import ai_service
from moodtracker.services.ai_service import AIServiceError, generate_structured, suggest_activities
from tests.conftest import TEST_SETTINGS


TEST_SCHEMA = {
    "type": "object",
    "required": ["summary", "tags"],
    "properties": {
        "summary": {"type": "string"},
        "tags": {"type": "array", "items": {"type": "string"}},
    },
}


def test_generate_structured_retries_after_invalid_json(monkeypatch):
    """Invalid JSON on first attempt should trigger one retry and then succeed."""
    calls: list[str] = []

    def fake_call_provider(config, provider, prompt, schema):
        calls.append(prompt)
        if len(calls) == 1:
            return "not-json"
        return '{"summary":"ok","tags":["a"]}'

    monkeypatch.setattr(ai_service, "_call_provider", fake_call_provider)

    out = generate_structured(
        TEST_SETTINGS,
        provider="gemini",
        task="test task",
        payload={"text": "hello"},
        schema=TEST_SCHEMA,
    )

    assert out == {"summary": "ok", "tags": ["a"]}
    assert len(calls) == 2
    assert "previous output was invalid" in calls[1].lower()


def test_generate_structured_retries_after_schema_mismatch(monkeypatch):
    """Schema mismatch on first attempt should retry with correction instruction."""
    calls = {"count": 0}

    def fake_call_provider(config, provider, prompt, schema):
        calls["count"] += 1
        if calls["count"] == 1:
            return {"summary": "missing tags"}
        return '```json\n{"summary":"fixed","tags":["b","c"]}\n```'

    monkeypatch.setattr(ai_service, "_call_provider", fake_call_provider)

    out = generate_structured(
        TEST_SETTINGS,
        provider="Ollama",
        task="test task",
        payload={"topic": "test"},
        schema=TEST_SCHEMA,
    )

    assert out == {"summary": "fixed", "tags": ["b", "c"]}
    assert calls["count"] == 2


def test_generate_structured_raises_after_retry_exhausted(monkeypatch):
    """Two invalid attempts should raise AIServiceError."""

    def fake_call_provider(config, provider, prompt, schema):
        return '{"summary":"x","tags":[1, 2]}'

    monkeypatch.setattr(ai_service, "_call_provider", fake_call_provider)

    with pytest.raises(AIServiceError) as exc:
        generate_structured(
            TEST_SETTINGS,
            provider="gemini",
            task="test task",
            payload={"x": 1},
            schema=TEST_SCHEMA,
        )

    assert "failed to return valid structured json" in str(exc.value).lower()


def test_unknown_provider_rejected():
    with pytest.raises(AIServiceError, match="Unsupported provider"):
        generate_structured(TEST_SETTINGS, provider="openai", task="t", payload={}, schema=TEST_SCHEMA)


def test_suggest_activities_trims_and_caps(monkeypatch):
    seen = {}

    def fake_call_provider(config, provider, prompt, schema):
        seen["prompt"] = prompt
        return {"suggestions": ["  Stretch ", "", "Drink water", "Read", "Nap"]}

    monkeypatch.setattr(ai_service, "_call_provider", fake_call_provider)

    suggestions = suggest_activities(MoodType.ANXIOUS, TEST_SETTINGS)

    assert suggestions == ["Stretch", "Drink water", "Read"]
    assert "anxious" in seen["prompt"]


def test_suggest_activities_empty_list_fails(monkeypatch):
    monkeypatch.setattr(ai_service, "_call_provider", lambda *args: {"suggestions": ["  "]})

    with pytest.raises(AIServiceError, match="no suggestions"):
        suggest_activities(MoodType.SAD, TEST_SETTINGS)


def test_gemini_requires_api_key():
    config = TEST_SETTINGS.model_copy(update={"gemini_api_key": ""})
    with pytest.raises(AIServiceError, match="GEMINI_API_KEY"):
        ai_service._call_gemini(config, "prompt", TEST_SCHEMA)


def test_ollama_http_error_wrapped(monkeypatch):
    def fake_post(url, json, timeout):
        raise httpx.ConnectError("connection refused")

    monkeypatch.setattr(ai_service.httpx, "post", fake_post)

    with pytest.raises(AIServiceError, match="Ollama request failed"):
        ai_service._call_ollama(TEST_SETTINGS, "prompt", TEST_SCHEMA)
