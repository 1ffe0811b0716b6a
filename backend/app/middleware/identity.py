"""
NoteMap Backend: Identity Middleware
=====================================

What:  Gives every browser a persistent anonymous identity.
How:   Reads the `uid` cookie; when absent, mints a UUID4, sets it on the
       response and inserts a `users` row (best effort).
Who:   Applied to every request; routes read the identity through the
       current_user_id dependency.

Cookie attributes:
    HttpOnly, SameSite=Lax, Max-Age = COOKIE_MAX_AGE_DAYS (1 year),
    Secure only when ENVIRONMENT=production.

A request that already carries the cookie never gets a new one, even when
its users row is missing.
"""

import logging
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from app import database
from app.config import settings
from app.services.identity_service import DATASTORE_ERRORS, identity_service, safe_rollback

logger = logging.getLogger(__name__)


class IdentityMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        uid = request.cookies.get(settings.cookie_name)
        is_new = not uid
        if is_new:
            uid = str(uuid.uuid4())
            await self._store_identity(uid)

        request.state.user_id = uid
        response = await call_next(request)

        if is_new:
            response.set_cookie(
                key=settings.cookie_name,
                value=uid,
                max_age=settings.cookie_max_age_seconds,
                httponly=True,
                samesite="lax",
                secure=settings.is_production,
            )
        return response

    @staticmethod
    async def _store_identity(uid: str) -> None:
        """Inserts the users row; a datastore failure leaves the cookie identity usable."""
        # Factory looked up at call time so tests can swap the database
        async with database.async_session_factory() as session:
            try:
                await identity_service.ensure_user(session, uid)
                await session.commit()
            except DATASTORE_ERRORS as e:
                logger.warning("Could not store new identity, continuing with cookie only: %s", str(e))
                await safe_rollback(session)


def current_user_id(request: Request) -> str:
    """FastAPI dependency: the identity assigned by IdentityMiddleware."""
    return request.state.user_id
