"""Tests for the Gemini REST adapter."""

from __future__ import annotations

import json

import httpx
import pytest

from vibesync.server.core import gemini_client as gc


def _analysis_json(score: float = 88.5) -> str:
    return json.dumps(
        {
            "detectedGenre": "Neo-Soul",
            "mood": "Mellow",
            "tempo": "86 BPM",
            "keyElements": ["Rhodes", "lazy snare"],
            "vibeDescription": "Warm and unhurried.",
            "recommendations": [
                {
                    "artist": "D'Angelo",
                    "title": "Untitled",
                    "reason": "Same behind-the-beat feel",
                    "similarityScore": score,
                }
            ],
        }
    )


def _candidate(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class _Recorder:
    """httpx handler that records requests and replays one response."""

    def __init__(self, response: httpx.Response | Exception):
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response

    @property
    def body(self) -> dict:
        return json.loads(self.requests[-1].content)


def _client(handler: _Recorder, api_key: str | None = "secret") -> gc.GeminiClient:
    return gc.GeminiClient(
        api_key=api_key,
        model="gemini-test",
        base_url="https://gemini.example/v1beta/",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_analyze_posts_inline_audio_and_schema() -> None:
    handler = _Recorder(httpx.Response(200, json=_candidate(_analysis_json())))
    client = _client(handler)

    result = await client.analyze_audio("QUJD", "es")

    request = handler.requests[0]
    assert str(request.url) == (
        "https://gemini.example/v1beta/models/gemini-test:generateContent"
    )
    assert request.headers["x-goog-api-key"] == "secret"

    body = handler.body
    parts = body["contents"][0]["parts"]
    assert parts[0] == {"inlineData": {"mimeType": "audio/wav", "data": "QUJD"}}
    assert "in Spanish (Español)" in parts[1]["text"]
    assert "recommend 4 real" in parts[1]["text"]
    assert "musicologist" in body["systemInstruction"]["parts"][0]["text"]
    assert body["generationConfig"]["responseMimeType"] == "application/json"
    assert body["generationConfig"]["responseSchema"] == gc.ANALYSIS_SCHEMA

    assert result["detectedGenre"] == "Neo-Soul"
    assert result["recommendations"][0]["similarityScore"] == 88.5


@pytest.mark.asyncio
async def test_english_prompt_uses_english_clause() -> None:
    handler = _Recorder(httpx.Response(200, json=_candidate(_analysis_json())))

    await _client(handler).analyze_audio("QUJD", "en", mime_type="audio/webm")

    parts = handler.body["contents"][0]["parts"]
    assert parts[0]["inlineData"]["mimeType"] == "audio/webm"
    assert parts[1]["text"].endswith("in English.")


@pytest.mark.asyncio
async def test_missing_key_returns_placeholder_without_network() -> None:
    handler = _Recorder(httpx.Response(500))
    client = _client(handler, api_key=None)

    first = await client.analyze_audio("QUJD", "en")
    first["keyElements"].append("mutated")
    second = await client.analyze_audio("QUJD", "en")

    assert handler.requests == []
    assert second == gc.PLACEHOLDER_ANALYSIS
    assert second["detectedGenre"] == "Unknown (No API Key)"
    assert second["recommendations"] == []


@pytest.mark.asyncio
async def test_missing_key_chat_returns_hint() -> None:
    handler = _Recorder(httpx.Response(500))

    reply = await _client(handler, api_key=None).chat([], "hi", "en")

    assert reply == gc.CHAT_MISSING_KEY_REPLY
    assert handler.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json=_candidate("not json at all")),
        httpx.Response(200, json=_candidate(_analysis_json(score=140))),
        httpx.Response(200, json=_candidate('{"mood": "only a mood"}')),
        httpx.Response(200, json={"candidates": []}),
        httpx.Response(200, json=_candidate("   ")),
        httpx.Response(200, text="<html>"),
    ],
)
async def test_unusable_responses_raise_response_error(response) -> None:
    with pytest.raises(gc.GeminiResponseError):
        await _client(_Recorder(response)).analyze_audio("QUJD", "en")


@pytest.mark.asyncio
async def test_error_status_carries_status_code() -> None:
    handler = _Recorder(httpx.Response(429, json={"error": "quota"}))

    with pytest.raises(gc.GeminiResponseError) as exc:
        await _client(handler).chat([], "hi", "en")

    assert exc.value.status_code == 429


@pytest.mark.asyncio
async def test_transport_failures_are_classified() -> None:
    connect = _Recorder(httpx.ConnectError("refused"))
    timeout = _Recorder(httpx.ReadTimeout("slow"))

    with pytest.raises(gc.GeminiConnectionError):
        await _client(connect).analyze_audio("QUJD", "en")
    with pytest.raises(gc.GeminiTimeoutError):
        await _client(timeout).analyze_audio("QUJD", "en")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        httpx.ReadError("connection reset"),
        httpx.RemoteProtocolError("server disconnected"),
    ],
)
async def test_other_transport_failures_are_connection_errors(error) -> None:
    with pytest.raises(gc.GeminiConnectionError):
        await _client(_Recorder(error)).chat([], "hi", "en")


@pytest.mark.asyncio
async def test_chat_replays_transcript_after_greeting() -> None:
    handler = _Recorder(httpx.Response(200, json=_candidate("Try some Khruangbin!")))
    history = [
        {"role": "assistant", "content": "Hey! I'm VibeBot."},
        {"role": "user", "content": "I like funk"},
        {"role": "assistant", "content": "Nice."},
    ]

    reply = await _client(handler).chat(history, "Anything chill?", "en")

    assert reply == "Try some Khruangbin!"
    body = handler.body
    assert [c["role"] for c in body["contents"]] == ["user", "model", "user"]
    assert body["contents"][-1]["parts"][0]["text"] == "Anything chill?"
    assert body["systemInstruction"]["parts"][0]["text"].endswith("Speak in English.")


def test_build_chat_contents_with_empty_history() -> None:
    assert gc.build_chat_contents([], "hola") == [
        {"role": "user", "parts": [{"text": "hola"}]}
    ]


def test_language_clauses() -> None:
    assert gc.analysis_language_instruction("es") == "in Spanish (Español)"
    assert gc.analysis_language_instruction("en") == "in English"
    assert gc.chat_language_instruction("es") == "Speak in Spanish (Español)."


def test_from_config_reads_ai_section(tmp_path, monkeypatch) -> None:
    from vibesync.server.config import ServerConfig

    path = tmp_path / "c.yaml"
    path.write_text(
        "ai:\n  model: gemini-x\n  timeout: 5\n  recommendation_count: 6\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")

    client = gc.GeminiClient.from_config(ServerConfig(path))

    assert client.configured
    assert client.api_key == "env-key"
    assert client.model == "gemini-x"
    assert client.timeout == 5.0
    assert client.recommendation_count == 6
    assert client.endpoint.endswith("/models/gemini-x:generateContent")
