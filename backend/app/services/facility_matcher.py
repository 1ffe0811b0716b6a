"""
NoteMap Backend: Facility Matcher
==================================

What:  Nearest-facility search around a free-text address.
Who:   The "nearest" action of POST /api/geocode.

Pipeline:
    ┌──────────┐   ┌──────────────┐   ┌────────────┐   ┌──────────┐   ┌──────────┐
    │ Geocode  │──▶│ Repository   │──▶│ Haversine  │──▶│ Stable   │──▶│ Truncate │
    │ query    │   │ region+flags │   │ + round(1) │   │ sort asc │   │ to limit │
    └──────────┘   └──────────────┘   └────────────┘   └──────────┘   └──────────┘

Filter semantics:
    {"telehealth": true}   → facility.telehealth must be true
    {"telehealth": false}  → no constraint (same as omitting it)
    {"unknown_flag": ...}  → ValidationError

The sort key is the rounded distance, so two facilities 10.04 and 10.01
miles away tie at 10.0 and keep repository (facility_id) order.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ValidationError
from app.models.facility import FACILITY_CAPABILITIES, Facility
from app.repositories.facility_repository import FacilityRepository, facility_repository
from app.schemas.geo import Coordinate
from app.services.distance import haversine_miles, round_miles
from app.services.geocoding_service import GeocodingService, geocoding_service

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 30


@dataclass(frozen=True)
class MatchQuery:
    query_address: str
    region: str
    filters: Dict[str, bool] = field(default_factory=dict)
    limit: int = DEFAULT_LIMIT


@dataclass(frozen=True)
class FacilityMatch:
    facility: Facility
    distance_miles: float


@dataclass(frozen=True)
class MatchResult:
    user_coords: Optional[Coordinate]
    results: List[FacilityMatch]


def required_flags(filters: Dict[str, bool]) -> Tuple[str, ...]:
    """
    Validates filter names and returns the ones that must be true.

    Raises:
        ValidationError: any name outside FACILITY_CAPABILITIES
    """
    unknown = sorted(name for name in filters if name not in FACILITY_CAPABILITIES)
    if unknown:
        raise ValidationError(
            message=f"Unknown filter(s): {', '.join(unknown)}",
            field="filters",
            context={"allowed": list(FACILITY_CAPABILITIES)},
        )
    return tuple(name for name in FACILITY_CAPABILITIES if filters.get(name) is True)


class FacilityMatcher:
    def __init__(
        self,
        geocoder: Optional[GeocodingService] = None,
        repository: Optional[FacilityRepository] = None,
    ):
        self.geocoder = geocoder or geocoding_service
        self.repository = repository or facility_repository

    async def match(self, db: AsyncSession, query: MatchQuery) -> MatchResult:
        """
        Run the search.

        A non-positive limit returns an empty result without geocoding.

        Raises:
            GeocodingError / ConfigurationError: the query address could not be resolved
            ValidationError: unknown filter name
            RepositoryError: the facility query failed
        """
        if query.limit <= 0:
            return MatchResult(user_coords=None, results=[])

        flags = required_flags(query.filters)
        origin = await self.geocoder.geocode(query.query_address)
        candidates = await self.repository.find_geocoded(db, query.region, flags)

        scored = [
            FacilityMatch(
                facility=facility,
                distance_miles=round_miles(
                    haversine_miles(origin, Coordinate(lat=facility.lat, lng=facility.lng))
                ),
            )
            for facility in candidates
        ]
        # sorted() is stable: ties keep facility_id order from the repository
        scored = sorted(scored, key=lambda m: m.distance_miles)[: query.limit]

        logger.info(
            "Facility search in %s with %d flag(s): %d candidate(s), returning %d",
            query.region,
            len(flags),
            len(candidates),
            len(scored),
        )
        return MatchResult(user_coords=origin, results=scored)


# ── Singleton Instance ────────────────────────────────────────────────────
facility_matcher = FacilityMatcher()
