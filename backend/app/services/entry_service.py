"""
NoteMap Backend: Entry Service
===============================

What:  Upload → transcribe → persist workflow, and per-identity history.
Who:   POST /api/analyze and GET /api/entries.

Analyze flow:
    ┌──────────┐    ┌─────────────┐    ┌──────────────┐    ┌──────────┐
    │ Validate │───▶│ Write temp  │───▶│  Transcribe  │───▶│  Insert  │
    │  upload  │    │ (FileServ)  │    │  (vision)    │    │  entry   │
    └──────────┘    └─────────────┘    └──────────────┘    └──────────┘
                           │                                     │
                           └──────── finally: delete temp ◀──────┘

The temp file is removed whether transcription or the insert succeeds or
fails. There is no cross-step transaction: a failed insert after a
successful transcription loses the text, and the error is returned.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import RepositoryError
from app.models.entry import Entry
from app.schemas.entry import AnalyzeResponse, EntryResponse
from app.services.file_service import FileService, file_service
from app.services.gemini_service import gemini_transcriber
from app.services.vision_base import VisionTranscriber

logger = logging.getLogger(__name__)


class EntryService:
    def __init__(
        self,
        transcriber: Optional[VisionTranscriber] = None,
        files: Optional[FileService] = None,
    ):
        self.transcriber = transcriber or gemini_transcriber
        self.files = files or file_service

    async def analyze(
        self,
        db: AsyncSession,
        user_id: str,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
        content_length: Optional[int] = None,
    ) -> AnalyzeResponse:
        """
        Raises:
            ValidationError: bad extension, empty, too large, not an image
            FileStorageError: temp file could not be written
            ConfigurationError / TranscriptionError: vision provider failure
            RepositoryError: the entry could not be stored
        """
        path, mime_type = await self.files.validate_and_store(
            filename=filename,
            content=content,
            content_type=content_type,
            content_length=content_length,
        )
        try:
            text = await self.transcriber.transcribe(path, mime_type)

            entry = Entry(user_id=user_id, text=text)
            db.add(entry)
            try:
                await db.flush()
            except SQLAlchemyError as e:
                logger.error("Failed to store entry: %s", str(e))
                raise RepositoryError(
                    message=f"Could not store the transcription: {e}",
                    context={"error_type": type(e).__name__},
                ) from e

            logger.info("Stored entry %s (%d chars)", entry.id, len(text))
            return AnalyzeResponse(text=text, id=entry.id, created_at=entry.created_at)
        finally:
            await self.files.cleanup_file(path)

    async def list_entries(self, db: AsyncSession, user_id: str) -> List[EntryResponse]:
        """The identity's entries, most recent first."""
        try:
            result = await db.execute(
                select(Entry)
                .where(Entry.user_id == user_id)
                .order_by(Entry.created_at.desc(), Entry.id)
            )
            return [EntryResponse.model_validate(e) for e in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Database error listing entries: %s", str(e), exc_info=True)
            raise RepositoryError(
                message=f"Could not retrieve entries: {e}",
                context={"error_type": type(e).__name__},
            ) from e


# ── Singleton Instance ────────────────────────────────────────────────────
entry_service = EntryService()
