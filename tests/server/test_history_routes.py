"""Tests for the analysis history endpoints."""

import pytest
from fastapi import HTTPException

from vibesync.server.api.routes import history
from vibesync.server.api.schemas import AudioAnalysisModel
from vibesync.server.core.gemini_client import PLACEHOLDER_ANALYSIS


@pytest.mark.asyncio
async def test_save_passes_camel_case_record_to_store(monkeypatch, make_analysis) -> None:
    stored: list[dict] = []

    def _insert(entry: dict) -> bool:
        stored.append(entry)
        return True

    monkeypatch.setattr(history, "insert_history_entry", _insert)

    record = make_analysis("a1")
    response = await history.save_history_entry(AudioAnalysisModel.model_validate(record))

    assert response == {"message": "success", "id": "a1"}
    assert stored == [record]


@pytest.mark.asyncio
async def test_save_duplicate_id_is_bad_request(monkeypatch, make_analysis) -> None:
    monkeypatch.setattr(history, "insert_history_entry", lambda entry: False)

    with pytest.raises(HTTPException) as exc:
        await history.save_history_entry(
            AudioAnalysisModel.model_validate(make_analysis())
        )

    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_store_failure_is_internal_error(monkeypatch) -> None:
    def _boom():
        raise RuntimeError("disk full")

    monkeypatch.setattr(history, "get_all_history", _boom)

    with pytest.raises(HTTPException) as exc:
        await history.list_history()

    assert exc.value.status_code == 500
    assert "disk full" in exc.value.detail


def test_history_endpoints_end_to_end(app_client, make_analysis) -> None:
    assert app_client.get("/api/history").json() == []

    older = make_analysis("old", timestamp=1000, genre="Jazz")
    newer = make_analysis("new", timestamp=2000, genre="House")
    for entry in (older, newer):
        response = app_client.post("/api/history", json=entry)
        assert response.status_code == 200
        assert response.json() == {"message": "success", "id": entry["id"]}

    listed = app_client.get("/api/history").json()
    assert [entry["id"] for entry in listed] == ["new", "old"]
    assert listed[1] == older


def test_duplicate_post_is_rejected_and_first_kept(app_client, make_analysis) -> None:
    app_client.post("/api/history", json=make_analysis("dup", genre="First"))
    response = app_client.post("/api/history", json=make_analysis("dup", genre="Second"))

    assert response.status_code == 400
    listed = app_client.get("/api/history").json()
    assert [entry["detectedGenre"] for entry in listed] == ["First"]


@pytest.mark.parametrize(
    "mutate",
    [
        lambda r: r.pop("id"),
        lambda r: r.pop("recommendations"),
        lambda r: r.update(timestamp="yesterday"),
        lambda r: r["recommendations"][0].update(similarityScore=150),
    ],
)
def test_malformed_analysis_is_rejected(app_client, make_analysis, mutate) -> None:
    record = make_analysis()
    mutate(record)

    response = app_client.post("/api/history", json=record)

    assert response.status_code == 422
    assert app_client.get("/api/history").json() == []


def test_no_key_placeholder_is_persisted(app_client) -> None:
    entry = {"id": "p1", "timestamp": 1_700_000_000_000, **PLACEHOLDER_ANALYSIS}

    response = app_client.post("/api/history", json=entry)

    assert response.status_code == 200
    listed = app_client.get("/api/history").json()
    assert listed == [entry]
    assert listed[0]["detectedGenre"] == "Unknown (No API Key)"
    assert listed[0]["recommendations"] == []
