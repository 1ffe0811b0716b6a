"""
NoteMap Backend: Entries Route
===============================

GET /api/entries → the current identity's transcriptions, newest first.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.middleware.identity import current_user_id
from app.schemas.entry import EntryResponse
from app.services.entry_service import entry_service

router = APIRouter(prefix="/api", tags=["Transcription"])


@router.get("/entries", response_model=List[EntryResponse], summary="Transcription history")
async def list_entries(
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[EntryResponse]:
    return await entry_service.list_entries(db, user_id)
