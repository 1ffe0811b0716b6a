"""
NoteMap Backend: Identity Schemas
==================================

What:  Request/response models for GET and POST /api/me.

`created_at` is nullable because the degraded profile (datastore
unreachable) only knows the identity from the cookie.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProfileResponse(BaseModel):
    """Current identity's profile."""
    id: str = Field(description="Opaque identity from the uid cookie")
    name: Optional[str] = Field(default=None, description="Display name, if set")
    created_at: Optional[datetime] = Field(
        default=None,
        description="When the identity was first stored (null in degraded mode)",
    )

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    """Body of POST /api/me."""
    name: str = Field(max_length=100, description="New display name")

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v:
            raise ValueError("Name is required.")
        return v
