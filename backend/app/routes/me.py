"""
NoteMap Backend: Identity Routes
=================================

GET  /api/me  → the current identity's profile
POST /api/me  → set the display name

Both answer 200 even when the datastore is down; the profile is then built
from the cookie (and the submitted name) and X-Identity-Degraded: true is set.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.middleware.identity import current_user_id
from app.schemas.common import ErrorResponse
from app.schemas.identity import ProfileResponse, ProfileUpdate
from app.services.identity_service import ProfileOutcome, identity_service

router = APIRouter(prefix="/api", tags=["Identity"])

DEGRADED_HEADER = "X-Identity-Degraded"


def _render(outcome: ProfileOutcome, response: Response) -> ProfileResponse:
    if outcome.degraded:
        response.headers[DEGRADED_HEADER] = "true"
    return outcome.profile


@router.get("/me", response_model=ProfileResponse, summary="Current identity")
async def get_me(
    response: Response,
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    outcome = await identity_service.get_profile(db, user_id)
    return _render(outcome, response)


@router.post(
    "/me",
    response_model=ProfileResponse,
    responses={400: {"description": "Name missing or blank", "model": ErrorResponse}},
    summary="Set display name",
)
async def update_me(
    body: ProfileUpdate,
    response: Response,
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    outcome = await identity_service.update_name(db, user_id, body.name)
    return _render(outcome, response)
