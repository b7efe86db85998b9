"""
Request and response models for the VibeSync API.

Fields are snake_case in Python and camelCase on the wire.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Language = Literal["en", "es"]


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _require_text(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("must not be blank")
    return value


# --- Analyses ---


class RecommendationModel(CamelModel):
    """A suggested track with the same vibe as the analysed clip."""

    artist: str
    title: str
    reason: str
    similarity_score: float = Field(ge=0, le=100)


class AnalysisPayloadModel(CamelModel):
    """Analysis fields produced by Gemini, before id/timestamp are assigned."""

    detected_genre: str
    mood: str
    tempo: str
    key_elements: List[str]
    vibe_description: str
    recommendations: List[RecommendationModel]


class AudioAnalysisModel(AnalysisPayloadModel):
    """A persisted analysis."""

    id: str = Field(min_length=1)
    timestamp: int = Field(ge=0)


# --- Notes ---


class NoteModel(CamelModel):
    """A free-text note, optionally linked to an analysis."""

    id: str = Field(min_length=1)
    timestamp: int = Field(ge=0)
    content: str
    related_analysis_id: Optional[str] = None

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, value: str) -> str:
        return _require_text(value)


# --- Generic responses ---


class SaveResponse(BaseModel):
    message: str
    id: str


class DeleteResponse(BaseModel):
    message: str
    changes: int


# --- Analysis and chat ---


class AnalyzeRequest(CamelModel):
    """Base64-encoded clip to analyse."""

    audio: str
    mime_type: str = "audio/wav"
    language: Language = "es"


class ChatTurn(CamelModel):
    role: Literal["user", "assistant", "model"]
    content: str


class ChatRequest(CamelModel):
    """A new chat message plus the session transcript so far."""

    history: List[ChatTurn] = Field(default_factory=list)
    message: str
    language: Language = "es"

    @field_validator("message")
    @classmethod
    def _message_not_blank(cls, value: str) -> str:
        return _require_text(value)


class ChatResponse(BaseModel):
    reply: str


class StatusResponse(CamelModel):
    status: str
    version: str
    ai_configured: bool
    model: Optional[str] = None
