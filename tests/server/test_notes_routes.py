"""Tests for the session notes endpoints."""

import pytest
from fastapi import HTTPException

from vibesync.server.api.routes import notes
from vibesync.server.api.schemas import NoteModel


@pytest.mark.asyncio
async def test_delete_unknown_note_is_not_found(monkeypatch) -> None:
    monkeypatch.setattr(notes, "delete_note", lambda note_id: False)

    with pytest.raises(HTTPException) as exc:
        await notes.remove_note("missing")

    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_delete_reports_one_change(monkeypatch) -> None:
    deleted: list[str] = []

    def _delete(note_id: str) -> bool:
        deleted.append(note_id)
        return True

    monkeypatch.setattr(notes, "delete_note", _delete)

    response = await notes.remove_note("n1")

    assert response == {"message": "deleted", "changes": 1}
    assert deleted == ["n1"]


@pytest.mark.asyncio
async def test_save_duplicate_note_is_bad_request(monkeypatch, make_note) -> None:
    monkeypatch.setattr(notes, "insert_note", lambda note: False)

    with pytest.raises(HTTPException) as exc:
        await notes.save_note(NoteModel.model_validate(make_note()))

    assert exc.value.status_code == 400


def test_notes_endpoints_end_to_end(app_client, make_note) -> None:
    first = make_note("n1", timestamp=1, related="a1")
    second = make_note("n2", timestamp=2, content="Check the drums")

    for note in (first, second):
        assert app_client.post("/api/notes", json=note).json() == {
            "message": "success",
            "id": note["id"],
        }

    listed = app_client.get("/api/notes").json()
    assert [n["id"] for n in listed] == ["n2", "n1"]
    assert listed[1] == first

    response = app_client.delete("/api/notes/n1")
    assert response.status_code == 200
    assert response.json() == {"message": "deleted", "changes": 1}
    assert [n["id"] for n in app_client.get("/api/notes").json()] == ["n2"]

    assert app_client.delete("/api/notes/n1").status_code == 404


def test_note_without_link_serializes_null(app_client, make_note) -> None:
    note = make_note("n1")
    del note["relatedAnalysisId"]

    app_client.post("/api/notes", json=note)

    assert app_client.get("/api/notes").json()[0]["relatedAnalysisId"] is None


@pytest.mark.parametrize("content", ["", "   \n"])
def test_blank_note_is_rejected(app_client, make_note, content: str) -> None:
    response = app_client.post("/api/notes", json=make_note(content=content))

    assert response.status_code == 422
    assert app_client.get("/api/notes").json() == []
