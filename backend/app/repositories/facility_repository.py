"""
NoteMap Backend: Facility Repository
=====================================

What:  Queries and single-row writes against the `facilities` table.
Who:   FacilityGeocodeService (lookup + coordinate back-fill) and
       FacilityMatcher (candidate search).

Query plan (search):
    SELECT * FROM facilities
    WHERE state = :region AND lat IS NOT NULL AND lng IS NOT NULL
      [AND <flag> = true ...]
    ORDER BY facility_id
    → uses the index on state; ordering by primary key gives callers a
      stable input order for tie-breaking.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import RepositoryError
from app.models.facility import FACILITY_CAPABILITIES, Facility
from app.schemas.geo import Coordinate

logger = logging.getLogger(__name__)


class FacilityRepository:
    """Stateless; every method takes the request's session."""

    async def get(self, db: AsyncSession, facility_id: str) -> Optional[Facility]:
        try:
            result = await db.execute(
                select(Facility).where(Facility.facility_id == facility_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching facility %s: %s", facility_id, str(e))
            raise RepositoryError(
                message=f"Could not load facility: {e}",
                context={"facility_id": facility_id},
            ) from e

    async def find_geocoded(
        self,
        db: AsyncSession,
        region: str,
        required_flags: Iterable[str] = (),
    ) -> List[Facility]:
        """
        Facilities in `region` that have coordinates and every flag in
        `required_flags` set to true, ordered by facility_id.

        Flag names must already be validated against FACILITY_CAPABILITIES.
        """
        query = select(Facility).where(
            Facility.state == region,
            Facility.lat.is_not(None),
            Facility.lng.is_not(None),
        )
        for name in required_flags:
            if name not in FACILITY_CAPABILITIES:
                raise ValueError(f"Unknown capability flag: {name}")
            query = query.where(getattr(Facility, name).is_(True))
        query = query.order_by(Facility.facility_id)

        try:
            result = await db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error searching facilities in %s: %s", region, str(e))
            raise RepositoryError(
                message=f"Facility search failed: {e}",
                context={"region": region},
            ) from e

    async def save_coordinate(
        self,
        db: AsyncSession,
        facility: Facility,
        coordinate: Coordinate,
        geocoded_at: datetime,
    ) -> None:
        """Writes lat/lng/geocoded_at onto one facility row (flushed, committed by the session owner)."""
        facility.lat = coordinate.lat
        facility.lng = coordinate.lng
        facility.geocoded_at = geocoded_at
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error(
                "Database error caching coordinate for facility %s: %s",
                facility.facility_id,
                str(e),
            )
            raise RepositoryError(
                message=f"Could not store facility coordinate: {e}",
                context={"facility_id": facility.facility_id},
            ) from e


# ── Singleton Instance ────────────────────────────────────────────────────
facility_repository = FacilityRepository()
