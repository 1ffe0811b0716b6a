"""
NoteMap Backend: User SQLAlchemy Model
=======================================

What:  ORM model for the `users` table: one row per anonymous identity.
How:   The primary key is the opaque value of the `uid` cookie, so no join
       table or session store is needed to map a browser to its row.
Who:   IdentityService (insert / select / upsert) and the identity middleware.

Rows are never deleted by the application.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    An anonymous identity minted by the identity middleware.

    Lifecycle:
        1. Inserted (id only) the first time a browser arrives without a cookie
        2. `name` set or changed through POST /api/me
        3. Never deleted
    """

    __tablename__ = "users"

    # Opaque identity string (a UUID4 today, but never parsed as one)
    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Opaque identity from the uid cookie",
    )

    name: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        default=None,
        comment="Display name chosen by the user",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this identity was first seen (UTC)",
    )

    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        onupdate=_utcnow,
        comment="Last profile change (UTC)",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name={self.name!r})>"
