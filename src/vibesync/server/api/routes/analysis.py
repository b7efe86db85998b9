"""
Gemini-backed endpoints: audio vibe analysis and the VibeBot chat.

The dashboard never holds the Gemini credential; it posts clips and chat
turns here and the server forwards them with its own key.
"""

import base64
import binascii
import logging
from typing import Any, Dict, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Request

from vibesync.server.api.routes.utils import sanitize_for_log
from vibesync.server.api.schemas import (
    AnalysisPayloadModel,
    AnalyzeRequest,
    ChatRequest,
    ChatResponse,
)
from vibesync.server.config import get_config
from vibesync.server.core.gemini_client import (
    GeminiClient,
    GeminiConnectionError,
    GeminiError,
    GeminiTimeoutError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_gemini_client(request: Request) -> GeminiClient:
    """Return the app's Gemini client, building one if startup did not."""
    client = getattr(request.app.state, "gemini_client", None)
    if client is None:
        client = GeminiClient.from_config(get_config())
        request.app.state.gemini_client = client
    return client


def _raise_for_gemini_error(e: GeminiError) -> NoReturn:
    """Map adapter failures onto gateway status codes."""
    if isinstance(e, GeminiConnectionError):
        raise HTTPException(status_code=503, detail=str(e)) from e
    if isinstance(e, GeminiTimeoutError):
        raise HTTPException(status_code=504, detail=str(e)) from e
    raise HTTPException(status_code=502, detail=str(e)) from e


@router.post("/analyze", response_model=AnalysisPayloadModel)
async def analyze_audio(
    body: AnalyzeRequest,
    client: GeminiClient = Depends(get_gemini_client),
) -> Dict[str, Any]:
    """Classify a recorded clip and return recommendations."""
    try:
        audio = base64.b64decode(body.audio, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="Audio must be base64 encoded")

    if not audio:
        raise HTTPException(status_code=400, detail="Audio is empty")

    logger.info(
        f"Analysis requested: {len(audio)} bytes, "
        f"mime={sanitize_for_log(body.mime_type)}, language={body.language}"
    )

    try:
        return await client.analyze_audio(body.audio, body.language, body.mime_type)
    except GeminiError as e:
        logger.error(f"Analysis failed: {e}")
        _raise_for_gemini_error(e)


@router.post("/chat", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    client: GeminiClient = Depends(get_gemini_client),
) -> Dict[str, str]:
    """Answer one chat message in the context of the session transcript."""
    logger.info(
        f"Chat message ({len(body.history)} prior turns): "
        f"{sanitize_for_log(body.message, max_length=80)}"
    )
    history = [turn.model_dump() for turn in body.history]

    try:
        reply = await client.chat(history, body.message, body.language)
    except GeminiError as e:
        logger.error(f"Chat failed: {e}")
        _raise_for_gemini_error(e)

    return {"reply": reply}
