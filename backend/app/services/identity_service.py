"""
NoteMap Backend: Identity Service
==================================

What:  Reads and updates the `users` row behind an anonymous identity.
Who:   IdentityMiddleware (first-visit insert) and the /api/me routes.

Degraded mode:
    The identity itself lives in the cookie, so a datastore outage must not
    lock the user out. Profile reads and writes catch datastore errors and
    return a ProfileOutcome with degraded=True and a minimal profile built
    from what the request already knows:

        get_profile  → {id, name: null, created_at: null}
        update_name  → {id, name: <trimmed name>, created_at: null}

    Routes surface degradation as the X-Identity-Degraded response header.
    This is the only place in the API that degrades instead of failing.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.schemas.identity import ProfileResponse

logger = logging.getLogger(__name__)

# Errors treated as "datastore unavailable"; asyncpg raises OSError on refused connections
DATASTORE_ERRORS = (SQLAlchemyError, OSError)


@dataclass(frozen=True)
class ProfileOutcome:
    profile: ProfileResponse
    degraded: bool = False
    reason: Optional[str] = None


async def safe_rollback(db: AsyncSession) -> None:
    try:
        await db.rollback()
    except DATASTORE_ERRORS as e:
        logger.warning("Rollback after identity failure also failed: %s", str(e))


class IdentityService:
    """Stateless; every method takes the caller's session."""

    async def ensure_user(self, db: AsyncSession, user_id: str) -> User:
        """
        Returns the users row for `user_id`, inserting it when missing.

        Flushes but does not commit; datastore errors propagate.
        """
        user = await db.get(User, user_id)
        if user is None:
            user = User(id=user_id)
            db.add(user)
            await db.flush()
            logger.info("Created users row for new identity")
        return user

    async def get_profile(self, db: AsyncSession, user_id: str) -> ProfileOutcome:
        try:
            user = await self.ensure_user(db, user_id)
            return ProfileOutcome(profile=ProfileResponse.model_validate(user))
        except DATASTORE_ERRORS as e:
            logger.warning("Profile lookup degraded: %s", str(e))
            await safe_rollback(db)
            return ProfileOutcome(
                profile=ProfileResponse(id=user_id, name=None, created_at=None),
                degraded=True,
                reason=type(e).__name__,
            )

    async def update_name(self, db: AsyncSession, user_id: str, name: str) -> ProfileOutcome:
        """Sets the display name (trimmed), inserting the row if it does not exist."""
        name = name.strip()
        try:
            result = await db.execute(select(User).where(User.id == user_id))
            user = result.scalar_one_or_none()
            if user is None:
                user = User(id=user_id, name=name)
                db.add(user)
            else:
                user.name = name
            await db.flush()
            return ProfileOutcome(profile=ProfileResponse.model_validate(user))
        except DATASTORE_ERRORS as e:
            logger.warning("Profile update degraded: %s", str(e))
            await safe_rollback(db)
            return ProfileOutcome(
                profile=ProfileResponse(id=user_id, name=name, created_at=None),
                degraded=True,
                reason=type(e).__name__,
            )


# ── Singleton Instance ────────────────────────────────────────────────────
identity_service = IdentityService()
