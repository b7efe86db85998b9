"""
Gemini integration - audio vibe analysis and the VibeBot chat assistant.

Talks to the Gemini REST API (generateContent) with httpx. Analysis requests
carry the recorded clip inline and ask for structured JSON matching
ANALYSIS_SCHEMA; chat requests replay the session transcript.

When no API key is configured, analysis returns a clearly labelled
placeholder result and chat returns a configuration hint instead of failing.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import BaseModel, Field, ValidationError

from vibesync.server.config import DEFAULT_MODEL, ServerConfig, resolve_api_key

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_TIMEOUT = 120.0
DEFAULT_RECOMMENDATION_COUNT = 4

SUPPORTED_LANGUAGES = ("en", "es")

# Structured output schema sent with every analysis request
ANALYSIS_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "detectedGenre": {"type": "STRING"},
        "mood": {"type": "STRING"},
        "tempo": {"type": "STRING"},
        "keyElements": {"type": "ARRAY", "items": {"type": "STRING"}},
        "vibeDescription": {"type": "STRING"},
        "recommendations": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "artist": {"type": "STRING"},
                    "title": {"type": "STRING"},
                    "reason": {"type": "STRING"},
                    "similarityScore": {"type": "NUMBER"},
                },
                "required": ["artist", "title", "reason", "similarityScore"],
            },
        },
    },
    "required": [
        "detectedGenre",
        "mood",
        "tempo",
        "keyElements",
        "vibeDescription",
        "recommendations",
    ],
}

PLACEHOLDER_ANALYSIS: Dict[str, Any] = {
    "detectedGenre": "Unknown (No API Key)",
    "mood": "N/A",
    "tempo": "0 BPM",
    "keyElements": ["Missing API Key"],
    "vibeDescription": (
        "Please add a valid GEMINI_API_KEY to your environment or server "
        "config to enable AI analysis."
    ),
    "recommendations": [],
}

CHAT_MISSING_KEY_REPLY = "Please configure your GEMINI_API_KEY to chat."


# --- Exceptions ---


class GeminiError(Exception):
    """Base error for Gemini requests."""


class GeminiConnectionError(GeminiError):
    """The Gemini API could not be reached."""


class GeminiTimeoutError(GeminiError):
    """The Gemini API did not answer in time."""


class GeminiResponseError(GeminiError):
    """The Gemini API answered with an error or unusable content."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


# --- Response validation ---


class _RecommendationPayload(BaseModel):
    artist: str
    title: str
    reason: str
    similarityScore: float = Field(ge=0, le=100)


class _AnalysisPayload(BaseModel):
    detectedGenre: str
    mood: str
    tempo: str
    keyElements: List[str]
    vibeDescription: str
    recommendations: List[_RecommendationPayload]


# --- Prompts ---


def analysis_language_instruction(language: str) -> str:
    """Language clause appended to analysis prompts."""
    return "in Spanish (Español)" if language == "es" else "in English"


def chat_language_instruction(language: str) -> str:
    """Language sentence appended to the chat persona."""
    return "Speak in Spanish (Español)." if language == "es" else "Speak in English."


def build_analysis_prompt(language: str, recommendation_count: int) -> str:
    lang = analysis_language_instruction(language)
    return (
        "Listen to this audio. Analyze its tempo, rhythm, style, and flow. "
        "If it's music, identify the genre and mood. Then, recommend "
        f"{recommendation_count} real, existing songs that have the exact same "
        "'vibe', 'flow' or 'groove'. Ensure these songs exist on YouTube. "
        "For example, if it's funky with a specific vocal style, find matches. "
        "Provide a JSON response. IMPORTANT: Provide all text fields (mood, "
        f"detectedGenre, vibeDescription, reasons) {lang}."
    )


def build_analysis_system_instruction(language: str) -> str:
    return (
        "You are a world-class musicologist and DJ. You specialize in finding "
        "deep cuts and perfect matches based on rhythm, production style, and "
        "emotional context. You must respond "
        f"{analysis_language_instruction(language)}."
    )


def build_chat_system_instruction(language: str) -> str:
    return (
        "You are VibeBot, a cool, energetic music assistant embedded in the "
        "VibeSync app. Keep answers short, punchy, and helpful. "
        f"{chat_language_instruction(language)}"
    )


def build_chat_contents(
    history: Sequence[Dict[str, str]], message: str
) -> List[Dict[str, Any]]:
    """
    Convert a session transcript plus the new message into Gemini contents.

    Roles other than "user" become "model". Assistant turns before the
    first user turn (the greeting) are dropped because a conversation must
    open with a user turn.
    """
    contents: List[Dict[str, Any]] = []
    for entry in history:
        role = "user" if entry.get("role") == "user" else "model"
        if not contents and role == "model":
            continue
        contents.append({"role": role, "parts": [{"text": entry.get("content", "")}]})
    contents.append({"role": "user", "parts": [{"text": message}]})
    return contents


def _extract_text(data: Dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate."""
    candidates = data.get("candidates") or []
    if not candidates:
        feedback = data.get("promptFeedback", {})
        reason = feedback.get("blockReason", "no candidates returned")
        raise GeminiResponseError(f"Gemini returned no content ({reason})")

    parts = candidates[0].get("content", {}).get("parts") or []
    text = "".join(part.get("text", "") for part in parts)
    if not text.strip():
        raise GeminiResponseError("Gemini returned an empty response")
    return text


def parse_analysis_text(text: str) -> Dict[str, Any]:
    """Parse and validate the structured analysis JSON."""
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise GeminiResponseError(f"Gemini returned invalid JSON: {e}") from e

    try:
        payload = _AnalysisPayload.model_validate(raw)
    except ValidationError as e:
        raise GeminiResponseError(
            f"Gemini response does not match the analysis schema: {e}"
        ) from e

    return payload.model_dump()


class GeminiClient:
    """Async client for the Gemini generateContent endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        recommendation_count: int = DEFAULT_RECOMMENDATION_COUNT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            api_key: Gemini API key; None disables remote calls
            model: Model id used for both analysis and chat
            base_url: API root (without the /models suffix)
            timeout: Request timeout in seconds
            recommendation_count: Number of songs requested per analysis
            transport: Optional httpx transport (tests inject a mock)
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.recommendation_count = recommendation_count
        self._transport = transport

    @classmethod
    def from_config(cls, config: ServerConfig) -> "GeminiClient":
        """Build a client from the ``ai`` config section and environment."""
        return cls(
            api_key=resolve_api_key(config),
            model=config.get("ai", "model", default=DEFAULT_MODEL),
            base_url=config.get("ai", "base_url", default=DEFAULT_BASE_URL),
            timeout=float(config.get("ai", "timeout", default=DEFAULT_TIMEOUT)),
            recommendation_count=int(
                config.get(
                    "ai", "recommendation_count", default=DEFAULT_RECOMMENDATION_COUNT
                )
            ),
        )

    @property
    def configured(self) -> bool:
        """True when an API key is available."""
        return bool(self.api_key)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def _generate(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST a generateContent request and return the decoded body."""
        headers = {"x-goog-api-key": self.api_key or ""}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(self.endpoint, json=payload, headers=headers)
        except httpx.ConnectError as e:
            raise GeminiConnectionError("Cannot connect to the Gemini API") from e
        except httpx.TimeoutException as e:
            raise GeminiTimeoutError("Gemini request timed out") from e
        except httpx.RequestError as e:
            raise GeminiConnectionError(
                f"Gemini request failed: {type(e).__name__}"
            ) from e

        if response.status_code != 200:
            logger.error(
                f"Gemini API error: {response.status_code} - {response.text[:500]}"
            )
            raise GeminiResponseError(
                f"Gemini API error: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise GeminiResponseError("Gemini API returned a non-JSON body") from e

    async def analyze_audio(
        self,
        audio_base64: str,
        language: str,
        mime_type: str = "audio/wav",
    ) -> Dict[str, Any]:
        """
        Classify a clip and recommend songs with the same vibe.

        Args:
            audio_base64: Base64-encoded audio bytes
            language: "en" or "es"; controls the language of all text fields
            mime_type: MIME type of the clip

        Returns:
            Dict with detectedGenre, mood, tempo, keyElements,
            vibeDescription and recommendations
        """
        if not self.configured:
            logger.warning("Gemini API key is missing; returning placeholder analysis")
            return json.loads(json.dumps(PLACEHOLDER_ANALYSIS))

        payload = {
            "systemInstruction": {
                "parts": [{"text": build_analysis_system_instruction(language)}]
            },
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"inlineData": {"mimeType": mime_type, "data": audio_base64}},
                        {
                            "text": build_analysis_prompt(
                                language, self.recommendation_count
                            )
                        },
                    ],
                }
            ],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": ANALYSIS_SCHEMA,
            },
        }

        logger.info(
            f"Gemini analysis request: model={self.model}, language={language}, "
            f"audio={len(audio_base64)} base64 chars"
        )
        data = await self._generate(payload)
        result = parse_analysis_text(_extract_text(data))
        logger.info(
            f"Gemini analysis received: genre={result['detectedGenre']!r}, "
            f"{len(result['recommendations'])} recommendations"
        )
        return result

    async def chat(
        self,
        history: Sequence[Dict[str, str]],
        message: str,
        language: str,
    ) -> str:
        """Send the transcript plus a new message and return the reply text."""
        if not self.configured:
            return CHAT_MISSING_KEY_REPLY

        payload = {
            "systemInstruction": {
                "parts": [{"text": build_chat_system_instruction(language)}]
            },
            "contents": build_chat_contents(history, message),
        }

        logger.info(
            f"Gemini chat request: model={self.model}, turns={len(payload['contents'])}"
        )
        data = await self._generate(payload)
        return _extract_text(data)
