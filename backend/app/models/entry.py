"""
NoteMap Backend: Entry SQLAlchemy Model
========================================

What:  ORM model for the `entries` table: one transcription per row.
Who:   EntryService inserts rows after a successful transcription and lists
       them per identity.

Table Design:
    - UUID primary key assigned on insert
    - user_id: the owning identity (indexed for the per-user history query)
    - text: full transcription, unbounded
    - created_at: UTC, indexed DESC for "most recent first"

Entries are append-only: no update or delete path exists.
"""

import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy import DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Entry(Base):
    """A handwritten-text transcription owned by an identity."""

    __tablename__ = "entries"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Server-assigned identifier",
    )

    user_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Identity (uid cookie) that uploaded the image",
    )

    text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Text transcribed from the uploaded image",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        comment="When the transcription was stored (UTC)",
    )

    __table_args__ = (
        Index("entries_user_id_idx", "user_id"),
        Index("idx_entries_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Entry(id={self.id}, user_id={self.user_id}, created_at='{self.created_at}')>"
