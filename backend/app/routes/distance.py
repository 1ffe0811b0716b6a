"""
NoteMap Backend: Distance Route
================================

GET /api/distance?origin=53703&destination=219+Dothan+Rd+Abbeville+AL+36310

Response fields:
    driving_distance  e.g. "12.4 mi"     (null unless the provider pair status is OK)
    driving_duration  e.g. "18 mins"     (same)
    straight_miles    e.g. 9.8           (null when either place cannot be geocoded)
    status            provider pair status, e.g. "OK", "NOT_FOUND"
"""

from typing import Optional

from fastapi import APIRouter, Query

from app.exceptions import ValidationError
from app.schemas.common import ErrorResponse
from app.schemas.geo import DistanceResponse
from app.services.route_distance_service import route_distance_service

router = APIRouter(prefix="/api", tags=["Geo"])


@router.get(
    "/distance",
    response_model=DistanceResponse,
    responses={
        400: {"description": "origin or destination missing", "model": ErrorResponse},
        503: {"description": "Maps provider unreachable", "model": ErrorResponse},
    },
    summary="Driving and straight-line distance",
)
async def get_distance(
    origin: Optional[str] = Query(default=None),
    destination: Optional[str] = Query(default=None),
) -> DistanceResponse:
    origin = (origin or "").strip()
    destination = (destination or "").strip()
    if not origin or not destination:
        raise ValidationError(message="origin and destination are required")
    return await route_distance_service.route_distance(origin, destination)
