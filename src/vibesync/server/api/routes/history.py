"""
Analysis history endpoints.

Handles:
- Listing stored analyses, newest first
- Persisting a new analysis produced by the dashboard
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException

from vibesync.server.api.schemas import AudioAnalysisModel, SaveResponse
from vibesync.server.api.routes.utils import sanitize_for_log
from vibesync.server.database.database import get_all_history, insert_history_entry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[AudioAnalysisModel])
async def list_history() -> List[Dict[str, Any]]:
    """List all analyses, newest first."""
    try:
        return get_all_history()
    except Exception as e:
        logger.error(f"Failed to list history: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("", response_model=SaveResponse)
async def save_history_entry(entry: AudioAnalysisModel) -> Dict[str, str]:
    """Persist one analysis. The id and timestamp come from the client."""
    record = entry.model_dump(by_alias=True)

    try:
        stored = insert_history_entry(record)
    except Exception as e:
        logger.error(f"Failed to save analysis {sanitize_for_log(entry.id)}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    if not stored:
        raise HTTPException(
            status_code=400, detail="An analysis with this id already exists"
        )

    logger.info(
        f"Saved analysis {sanitize_for_log(entry.id)} "
        f"(genre={sanitize_for_log(entry.detected_genre)!r})"
    )
    return {"message": "success", "id": entry.id}
