"""Activity suggestions from an AI provider (Gemini or Ollama)."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from moodtracker.core.config import Settings
from moodtracker.core.moods import MoodType

logger = logging.getLogger(__name__)

SUGGESTION_COUNT = 3

ACTIVITY_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["suggestions"],
    "properties": {
        "suggestions": {"type": "array", "items": {"type": "string"}},
    },
}


class AIServiceError(Exception):
    """Raised when the provider cannot produce usable output."""


def suggest_activities(mood: MoodType, config: Settings) -> list[str]:
    """Ask the configured provider for activities suited to mood."""
    data = generate_structured(
        config,
        provider=config.ai_provider,
        task=(
            f"Suggest {SUGGESTION_COUNT} short, practical activities to help someone who feels "
            f"{mood.value.lower()}. Each suggestion is a single sentence."
        ),
        payload={"mood": mood.value},
        schema=ACTIVITY_SCHEMA,
    )
    suggestions = [item.strip() for item in data["suggestions"] if item.strip()]
    if not suggestions:
        raise AIServiceError("Provider returned no suggestions")
    return suggestions[:SUGGESTION_COUNT]


def generate_structured(
    config: Settings,
    provider: str,
    task: str,
    payload: dict[str, Any],
    schema: dict[str, Any],
) -> dict[str, Any]:
    """Generate schema-constrained JSON from the selected provider.

    Retries once with a correction prompt when JSON parsing or schema validation fails.
    """
    provider_name = provider.strip().lower()
    if provider_name not in {"gemini", "ollama"}:
        raise AIServiceError(f"Unsupported provider '{provider}'. Use 'gemini' or 'ollama'.")

    prompt = _build_prompt(task=task, payload=payload, schema=schema)
    last_error: ValueError | None = None

    for attempt in range(2):
        raw = _call_provider(config, provider_name, prompt, schema)
        try:
            parsed = _parse_provider_output(raw)
            _check_schema(parsed, schema)
            return parsed
        except ValueError as exc:
            last_error = exc
            logger.warning("%s output rejected on attempt %s: %s", provider_name, attempt + 1, exc)
            prompt = _build_correction_prompt(task=task, payload=payload, schema=schema, bad_output=raw, error=exc)

    raise AIServiceError(
        f"{provider_name} failed to return valid structured JSON after 2 attempts: {last_error}"
    )


def _call_provider(config: Settings, provider: str, prompt: str, schema: dict[str, Any]) -> str | dict[str, Any]:
    if provider == "gemini":
        return _call_gemini(config, prompt, schema)
    return _call_ollama(config, prompt, schema)


def _call_gemini(config: Settings, prompt: str, schema: dict[str, Any]) -> str | dict[str, Any]:
    if not config.gemini_api_key:
        raise AIServiceError("GEMINI_API_KEY is not configured")

    try:
        from google import genai
        from google.genai import types
    except ImportError as exc:
        raise AIServiceError("Gemini SDK is not installed. Add 'google-genai' to dependencies.") from exc

    client = genai.Client(api_key=config.gemini_api_key)
    try:
        response = client.models.generate_content(
            model=config.gemini_model,
            contents=prompt,
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=schema,
            ),
        )
    except Exception as exc:  # noqa: BLE001 - SDK raises several unrelated error types
        raise AIServiceError(f"Gemini request failed: {exc}") from exc

    parsed = getattr(response, "parsed", None)
    if isinstance(parsed, dict):
        return parsed

    text = getattr(response, "text", None)
    if not text:
        raise AIServiceError("Gemini returned an empty response")
    return text


def _call_ollama(config: Settings, prompt: str, schema: dict[str, Any]) -> str | dict[str, Any]:
    url = config.ollama_base_url.rstrip("/") + "/api/generate"
    body = {
        "model": config.ollama_model,
        "prompt": prompt,
        "stream": False,
        "format": schema,
    }

    try:
        response = httpx.post(url, json=body, timeout=45.0)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise AIServiceError(f"Ollama request failed: {exc}") from exc

    data = response.json()
    if "response" not in data:
        raise AIServiceError("Ollama response missing 'response' field")
    return data["response"]


def _parse_provider_output(raw: str | dict[str, Any]) -> dict[str, Any]:
    if isinstance(raw, dict):
        return raw

    text = raw.strip()
    # Models sometimes wrap JSON in markdown fences
    if text.startswith("```"):
        lines = text.splitlines()
        if len(lines) >= 2 and lines[-1].strip() == "```":
            text = "\n".join(lines[1:-1]).strip()

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON: {exc.msg}") from exc

    if not isinstance(parsed, dict):
        raise ValueError("JSON must be an object")
    return parsed


def _check_schema(data: dict[str, Any], schema: dict[str, Any]) -> None:
    """Check required keys and string-array properties (the only shapes used here)."""
    for key in schema.get("required", []):
        if key not in data:
            raise ValueError(f"missing required field '{key}'")
    for key, spec in schema.get("properties", {}).items():
        if key not in data or spec.get("type") != "array":
            continue
        value = data[key]
        if not isinstance(value, list):
            raise ValueError(f"'{key}' must be an array")
        if spec.get("items", {}).get("type") == "string" and not all(isinstance(item, str) for item in value):
            raise ValueError(f"'{key}' must contain only strings")


def _build_prompt(task: str, payload: dict[str, Any], schema: dict[str, Any]) -> str:
    return (
        "You are a supportive wellbeing assistant. "
        "Return only JSON that matches the provided schema exactly.\n\n"
        f"Task:\n{task}\n\n"
        f"Input:\n{json.dumps(payload, ensure_ascii=True)}\n\n"
        f"JSON schema:\n{json.dumps(schema, ensure_ascii=True)}"
    )


def _build_correction_prompt(
    task: str,
    payload: dict[str, Any],
    schema: dict[str, Any],
    bad_output: str | dict[str, Any],
    error: Exception,
) -> str:
    return (
        "Your previous output was invalid. Fix it and return only valid JSON.\n\n"
        f"Validation error:\n{error}\n\n"
        f"Previous invalid output:\n{bad_output}\n\n"
        + _build_prompt(task=task, payload=payload, schema=schema)
    )
