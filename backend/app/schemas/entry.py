"""
NoteMap Backend: Entry Schemas
===============================

What:  Response models for POST /api/analyze and GET /api/entries.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AnalyzeResponse(BaseModel):
    """
    What:  Result of transcribing one uploaded image.
    Who:   Returned by POST /api/analyze.

    `text` is duplicated at the top level (rather than nesting an entry)
    because the upload UI renders it immediately.
    """
    text: str = Field(description="Transcribed handwritten text")
    id: uuid.UUID = Field(description="Identifier of the stored entry")
    created_at: datetime = Field(description="When the entry was stored (UTC)")


class EntryResponse(BaseModel):
    """One past transcription in the identity's history."""
    id: uuid.UUID
    user_id: str
    text: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
