"""
Session notes endpoints.
"""

import logging
from typing import Any, Dict, List, Union

from fastapi import APIRouter, HTTPException

from vibesync.server.api.schemas import DeleteResponse, NoteModel, SaveResponse
from vibesync.server.api.routes.utils import sanitize_for_log
from vibesync.server.database.database import delete_note, get_all_notes, insert_note

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[NoteModel])
async def list_notes() -> List[Dict[str, Any]]:
    """List all notes, newest first."""
    try:
        return get_all_notes()
    except Exception as e:
        logger.error(f"Failed to list notes: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("", response_model=SaveResponse)
async def save_note(note: NoteModel) -> Dict[str, str]:
    """Persist one note."""
    try:
        stored = insert_note(note.model_dump(by_alias=True))
    except Exception as e:
        logger.error(f"Failed to save note {sanitize_for_log(note.id)}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    if not stored:
        raise HTTPException(status_code=400, detail="A note with this id already exists")

    return {"message": "success", "id": note.id}


@router.delete("/{note_id}", response_model=DeleteResponse)
async def remove_note(note_id: str) -> Dict[str, Union[str, int]]:
    """Delete exactly one note."""
    try:
        deleted = delete_note(note_id)
    except Exception as e:
        logger.error(f"Failed to delete note {sanitize_for_log(note_id)}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    if not deleted:
        raise HTTPException(status_code=404, detail="Note not found")

    logger.info(f"Deleted note {sanitize_for_log(note_id)}")
    return {"message": "deleted", "changes": 1}
