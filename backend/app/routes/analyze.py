"""
NoteMap Backend: Analyze Route
===============================

POST /api/analyze, multipart/form-data with an `image` field.

Request Flow:
    1. No `image` part → 400 "No image uploaded."
    2. Read the upload into memory (bounded by MAX_FILE_SIZE validation)
    3. EntryService: validate → temp file → transcribe → insert entry
    4. Temp file is removed whatever happens in step 3
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import ValidationError
from app.middleware.identity import current_user_id
from app.schemas.common import ErrorResponse
from app.schemas.entry import AnalyzeResponse
from app.services.entry_service import entry_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Transcription"])


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    responses={
        400: {"description": "No image, or invalid image", "model": ErrorResponse},
        500: {"description": "Transcription or storage failed", "model": ErrorResponse},
    },
    summary="Transcribe a handwritten image",
    description=(
        "Upload an image (PNG, JPG, JPEG or WEBP) of handwriting. The text is "
        "transcribed by a vision model and stored as an entry for the current identity."
    ),
)
async def analyze_image(
    request: Request,
    image: Optional[UploadFile] = File(default=None, description="Image to transcribe"),
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> AnalyzeResponse:
    if image is None:
        raise ValidationError(message="No image uploaded.", field="image")

    content = await image.read()
    content_length = request.headers.get("content-length")
    logger.info("Received upload: %s (%d bytes)", image.filename, len(content))

    return await entry_service.analyze(
        db=db,
        user_id=user_id,
        filename=image.filename or "",
        content=content,
        content_type=image.content_type,
        content_length=int(content_length) if content_length and content_length.isdigit() else None,
    )
