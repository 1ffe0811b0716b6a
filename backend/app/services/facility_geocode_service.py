"""
NoteMap Backend: Facility Geocode Cache
========================================

What:  Resolves a facility's coordinate, geocoding it at most once.
How:   The facility row itself is the cache: lat/lng present means a hit;
       on a miss the address is geocoded and lat/lng/geocoded_at written back.
Who:   The "facility" action of POST /api/geocode.

Resolution order:
    1. Unknown facility_id                → NotFoundError
    2. lat/lng already stored             → return them, cached=True
    3. Geocode the facility's own address (caller's address only when the
       record has none; neither → ValidationError)
    4. Success → persist, cached=False. Failure → propagate, write nothing.

There is no invalidation. When a facility's address changes, whoever
changes it clears lat/lng/geocoded_at. Two concurrent misses for the same
facility both geocode and both write the same coordinate.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError, ValidationError
from app.repositories.facility_repository import FacilityRepository, facility_repository
from app.schemas.geo import Coordinate
from app.services.geocoding_service import GeocodingService, geocoding_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedCoordinate:
    coordinate: Coordinate
    cached: bool


class FacilityGeocodeService:
    def __init__(
        self,
        geocoder: Optional[GeocodingService] = None,
        repository: Optional[FacilityRepository] = None,
    ):
        self.geocoder = geocoder or geocoding_service
        self.repository = repository or facility_repository

    async def resolve(
        self,
        db: AsyncSession,
        facility_id: str,
        address: Optional[str] = None,
    ) -> ResolvedCoordinate:
        facility = await self.repository.get(db, facility_id)
        if facility is None:
            raise NotFoundError(resource="facility", resource_id=facility_id)

        if facility.is_geocoded:
            return ResolvedCoordinate(
                coordinate=Coordinate(lat=facility.lat, lng=facility.lng),
                cached=True,
            )

        query = (facility.address or "").strip() or (address or "").strip()
        if not query:
            raise ValidationError(
                message="Facility has no address on record; an address is required",
                field="address",
            )

        # Geocoder failures propagate before anything is written
        coordinate = await self.geocoder.geocode(query)
        await self.repository.save_coordinate(
            db, facility, coordinate, geocoded_at=datetime.now(timezone.utc)
        )
        logger.info("Cached coordinate for facility %s", facility_id)
        return ResolvedCoordinate(coordinate=coordinate, cached=False)


# ── Singleton Instance ────────────────────────────────────────────────────
facility_geocode_service = FacilityGeocodeService()
