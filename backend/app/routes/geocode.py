"""
NoteMap Backend: Geocode Route
===============================

POST /api/geocode, one endpoint with three actions selected by `action`:

    facility → {lat, lng, cached}       FacilityGeocodeService (cached per facility)
    user     → {lat, lng}               GeocodingService (never cached)
    nearest  → {user_coords, results}   FacilityMatcher

An unknown action, an unknown field or an unknown capability flag is a 400.
"""

from typing import Annotated, Union

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import ErrorResponse
from app.schemas.geo import (
    CoordinateResponse,
    FacilityCoordinateResponse,
    FacilityGeocodeRequest,
    FacilityResult,
    GeocodeRequest,
    NearestResponse,
    UserGeocodeRequest,
)
from app.services.facility_geocode_service import facility_geocode_service
from app.services.facility_matcher import MatchQuery, MatchResult, facility_matcher
from app.services.geocoding_service import geocoding_service

router = APIRouter(prefix="/api", tags=["Geo"])


def _nearest_response(result: MatchResult) -> NearestResponse:
    return NearestResponse(
        user_coords=(
            CoordinateResponse(lat=result.user_coords.lat, lng=result.user_coords.lng)
            if result.user_coords is not None
            else None
        ),
        results=[
            FacilityResult(
                facility_id=m.facility.facility_id,
                name=m.facility.name,
                address=m.facility.address,
                city=m.facility.city,
                state=m.facility.state,
                zip=m.facility.zip,
                phone=m.facility.phone,
                lat=m.facility.lat,
                lng=m.facility.lng,
                geocoded_at=m.facility.geocoded_at,
                capabilities=m.facility.capabilities,
                distance_miles=m.distance_miles,
            )
            for m in result.results
        ],
    )


@router.post(
    "/geocode",
    response_model=Union[FacilityCoordinateResponse, NearestResponse, CoordinateResponse],
    responses={
        400: {"description": "Invalid body, action or filter", "model": ErrorResponse},
        404: {"description": "Unknown facility", "model": ErrorResponse},
        422: {"description": "Address matched nothing", "model": ErrorResponse},
        502: {"description": "Provider rejected the request", "model": ErrorResponse},
        503: {"description": "Provider unreachable", "model": ErrorResponse},
    },
    summary="Geocode a facility or address, or search nearby facilities",
)
async def geocode(
    payload: Annotated[GeocodeRequest, Body(discriminator="action")],
    db: AsyncSession = Depends(get_db_session),
):
    if isinstance(payload, FacilityGeocodeRequest):
        resolved = await facility_geocode_service.resolve(
            db, payload.facility_id, address=payload.address
        )
        return FacilityCoordinateResponse(
            lat=resolved.coordinate.lat,
            lng=resolved.coordinate.lng,
            cached=resolved.cached,
        )

    if isinstance(payload, UserGeocodeRequest):
        coordinate = await geocoding_service.geocode(payload.query)
        return CoordinateResponse(lat=coordinate.lat, lng=coordinate.lng)

    # action == "nearest"
    result = await facility_matcher.match(
        db,
        MatchQuery(
            query_address=payload.query,
            region=payload.state,
            filters=payload.filters,
            limit=payload.limit,
        ),
    )
    return _nearest_response(result)
