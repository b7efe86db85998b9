"""
Health and status endpoints for the VibeSync server.
"""

from typing import Any

from fastapi import APIRouter, Request

from vibesync.server import __version__
from vibesync.server.api.schemas import StatusResponse

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "vibesync"}


@router.get("/api/status", response_model=StatusResponse)
async def get_status(request: Request) -> dict[str, Any]:
    """Report the server version and whether Gemini is usable."""
    client = getattr(request.app.state, "gemini_client", None)

    return {
        "status": "running",
        "version": __version__,
        "aiConfigured": bool(client and client.configured),
        "model": client.model if client else None,
    }
