"""Shared fixtures for server tests."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

import vibesync.server.database.database as db
import vibesync.server.logging.setup as logging_setup
from vibesync.server.config import reset_config


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch: pytest.MonkeyPatch):
    """Start every test with no cached config and no Gemini key in the env."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the database module at a fresh directory."""
    monkeypatch.setattr(db, "_data_dir", None)
    monkeypatch.setattr(db, "_db_path", None)

    path = tmp_path / "data"
    db.set_data_directory(path)
    return path


@pytest.fixture
def migrated_db(data_dir: Path) -> Path:
    db.init_db()
    return db.get_db_path()


@pytest.fixture
def config_file(tmp_path: Path, data_dir: Path) -> Path:
    """A config.yaml wired to the temporary data directory."""
    config = {
        "server": {"host": "127.0.0.1", "port": 3005, "cors_origins": ["*"]},
        "database": {"data_dir": str(data_dir)},
        "logging": {
            "level": "DEBUG",
            "directory": str(tmp_path / "logs"),
            "console_output": False,
        },
        "ai": {"model": "gemini-test", "api_key": ""},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(config), encoding="utf-8")
    return path


@pytest.fixture
def app_client(config_file: Path, monkeypatch: pytest.MonkeyPatch):
    """TestClient over a fully started app (lifespan included)."""
    from fastapi.testclient import TestClient

    from vibesync.server.api.main import create_app

    # Keep the root logger's handlers (pytest's capture) untouched
    monkeypatch.setattr(logging_setup, "_logging_configured", True)

    app = create_app(config_file)
    with TestClient(app) as client:
        yield client


def _analysis_record(
    analysis_id: str = "a1",
    timestamp: int = 1_700_000_000_000,
    genre: str = "Funk",
    mood: str = "Groovy",
) -> dict:
    """A wire-format analysis record."""
    return {
        "id": analysis_id,
        "timestamp": timestamp,
        "detectedGenre": genre,
        "mood": mood,
        "tempo": "112 BPM",
        "keyElements": ["slap bass", "horn stabs"],
        "vibeDescription": "Tight pocket with a loose swing.",
        "recommendations": [
            {
                "artist": "Vulfpeck",
                "title": "Dean Town",
                "reason": "Same bass-forward groove",
                "similarityScore": 92,
            }
        ],
    }


def _note_record(
    note_id: str = "n1",
    timestamp: int = 1_700_000_000_000,
    content: str = "Great bassline",
    related: str | None = None,
) -> dict:
    return {
        "id": note_id,
        "timestamp": timestamp,
        "content": content,
        "relatedAnalysisId": related,
    }


@pytest.fixture
def make_analysis():
    return _analysis_record


@pytest.fixture
def make_note():
    return _note_record
