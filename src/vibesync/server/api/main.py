"""
FastAPI application for the VibeSync server.

Provides a single API serving:
- Analysis history endpoints (/api/history)
- Notes endpoints (/api/notes)
- Gemini analysis and chat endpoints (/api/analyze, /api/chat)
- Health and status endpoints
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vibesync.server import __version__
from vibesync.server.api.routes import analysis, health, history, notes
from vibesync.server.config import get_config
from vibesync.server.core.gemini_client import GeminiClient
from vibesync.server.database.database import init_db, set_data_directory
from vibesync.server.logging import get_logger, setup_logging

logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    logger.info("VibeSync server starting...")

    config = get_config()
    setup_logging(config.logging)

    data_dir = config.get("database", "data_dir")
    if data_dir:
        set_data_directory(Path(data_dir).expanduser())

    init_db()
    logger.info("Database initialized")

    gemini_client = GeminiClient.from_config(config)
    if gemini_client.configured:
        logger.info(f"Gemini configured (model: {gemini_client.model})")
    else:
        logger.warning(
            "No Gemini API key configured; analysis returns placeholder results"
        )

    app.state.config = config
    app.state.gemini_client = gemini_client

    logger.info("Server startup complete")

    yield

    logger.info("Server shutting down...")


def create_app(config_path: Path | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config_path: Optional path to configuration file

    Returns:
        Configured FastAPI application
    """
    config = get_config(config_path)

    app = FastAPI(
        title="VibeSync",
        description="Audio vibe analysis, history and notes",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.get("server", "cors_origins", default=["*"]),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(history.router, prefix="/api/history", tags=["History"])
    app.include_router(notes.router, prefix="/api/notes", tags=["Notes"])
    app.include_router(analysis.router, prefix="/api", tags=["Analysis"])

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app
