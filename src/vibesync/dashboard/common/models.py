"""
Shared data models for the VibeSync dashboard.

Defines the view enum and the immutable records exchanged with the server.
Wire dicts use the server's camelCase keys.
"""

import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

Language = Literal["en", "es"]

DEFAULT_LANGUAGE: Language = "es"


class AppView(Enum):
    """Top-level views selectable from the sidebar."""

    ANALYZER = "analyzer"
    DASHBOARD = "dashboard"
    HISTORY = "history"
    NOTES = "notes"


def new_id() -> str:
    """Generate a client-side identifier."""
    return uuid.uuid4().hex


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Recommendation:
    """A suggested track with the same vibe."""

    artist: str
    title: str
    reason: str
    similarity_score: float

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Recommendation":
        score = float(data["similarityScore"])
        if not 0 <= score <= 100:
            raise ValueError(f"similarityScore out of range: {score}")
        return cls(
            artist=str(data["artist"]),
            title=str(data["title"]),
            reason=str(data["reason"]),
            similarity_score=score,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "artist": self.artist,
            "title": self.title,
            "reason": self.reason,
            "similarityScore": self.similarity_score,
        }


@dataclass(frozen=True)
class AnalysisPayload:
    """Analysis content returned by the server, before id/timestamp exist."""

    detected_genre: str
    mood: str
    tempo: str
    key_elements: tuple[str, ...] = ()
    vibe_description: str = ""
    recommendations: tuple[Recommendation, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalysisPayload":
        """
        Build from a camelCase dict.

        Raises:
            KeyError, TypeError, ValueError: If the dict is malformed
        """
        key_elements = data["keyElements"]
        recommendations = data["recommendations"]
        if not isinstance(key_elements, list) or not isinstance(recommendations, list):
            raise TypeError("keyElements and recommendations must be lists")
        return cls(
            detected_genre=str(data["detectedGenre"]),
            mood=str(data["mood"]),
            tempo=str(data["tempo"]),
            key_elements=tuple(str(el) for el in key_elements),
            vibe_description=str(data["vibeDescription"]),
            recommendations=tuple(Recommendation.from_dict(r) for r in recommendations),
        )


@dataclass(frozen=True)
class AudioAnalysis:
    """A completed analysis. Never mutated after creation."""

    id: str
    timestamp: int
    detected_genre: str
    mood: str
    tempo: str
    key_elements: tuple[str, ...] = ()
    vibe_description: str = ""
    recommendations: tuple[Recommendation, ...] = ()

    @classmethod
    def create(cls, payload: AnalysisPayload) -> "AudioAnalysis":
        """Stamp a payload with a fresh id and the current time."""
        return cls(
            id=new_id(),
            timestamp=now_ms(),
            detected_genre=payload.detected_genre,
            mood=payload.mood,
            tempo=payload.tempo,
            key_elements=payload.key_elements,
            vibe_description=payload.vibe_description,
            recommendations=payload.recommendations,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AudioAnalysis":
        payload = AnalysisPayload.from_dict(data)
        return cls(
            id=str(data["id"]),
            timestamp=int(data["timestamp"]),
            detected_genre=payload.detected_genre,
            mood=payload.mood,
            tempo=payload.tempo,
            key_elements=payload.key_elements,
            vibe_description=payload.vibe_description,
            recommendations=payload.recommendations,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "detectedGenre": self.detected_genre,
            "mood": self.mood,
            "tempo": self.tempo,
            "keyElements": list(self.key_elements),
            "vibeDescription": self.vibe_description,
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


@dataclass(frozen=True)
class Note:
    """A free-text note. related_analysis_id is a weak reference."""

    id: str
    timestamp: int
    content: str
    related_analysis_id: str | None = None

    @classmethod
    def create(cls, content: str, related_analysis_id: str | None = None) -> "Note":
        return cls(
            id=new_id(),
            timestamp=now_ms(),
            content=content,
            related_analysis_id=related_analysis_id,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Note":
        return cls(
            id=str(data["id"]),
            timestamp=int(data["timestamp"]),
            content=str(data["content"]),
            related_analysis_id=data.get("relatedAnalysisId"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "content": self.content,
            "relatedAnalysisId": self.related_analysis_id,
        }


@dataclass(frozen=True)
class ChatMessage:
    """One chat turn. Kept for the session only."""

    role: Literal["user", "assistant"]
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class AppStateSnapshot:
    """Immutable view of the application state handed to listeners."""

    language: Language = DEFAULT_LANGUAGE
    active_view: AppView = AppView.ANALYZER
    is_recording: bool = False
    is_analyzing: bool = False
    history: tuple[AudioAnalysis, ...] = ()
    notes: tuple[Note, ...] = ()
    current_analysis: AudioAnalysis | None = None
    chat_open: bool = False
    chat_messages: tuple[ChatMessage, ...] = ()
    # Live capture handle while recording; consumed by the visualizer
    audio_stream: Any = None


def find_analysis(
    history: "list[AudioAnalysis] | tuple[AudioAnalysis, ...]",
    analysis_id: str | None,
) -> AudioAnalysis | None:
    """Resolve a note's related analysis id against the current history."""
    if not analysis_id:
        return None
    for analysis in history:
        if analysis.id == analysis_id:
            return analysis
    return None
