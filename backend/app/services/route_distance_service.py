"""
NoteMap Backend: Route Distance Service
========================================

What:  Driving distance/duration plus straight-line miles between two
       free-text places.
How:   The distance-matrix call and both geocodes run concurrently.
Who:   GET /api/distance.

Partial results:
    matrix element not OK    → driving fields null, status echoes the element status
    either geocode fails     → straight_miles null, call still succeeds
    key missing              → ConfigurationError (whole call fails)
    matrix call fails        → driving fields and status null, straight line still computed
"""

import asyncio
import logging
from typing import Optional, Union

from app.exceptions import GeocodingError
from app.schemas.geo import Coordinate, DistanceResponse
from app.services.distance import haversine_miles, round_miles
from app.services.distance_matrix_service import (
    DistanceMatrixService,
    MatrixElement,
    distance_matrix_service,
)
from app.services.geocoding_service import GeocodingService, geocoding_service, require_maps_key

logger = logging.getLogger(__name__)


class RouteDistanceService:
    def __init__(
        self,
        matrix: Optional[DistanceMatrixService] = None,
        geocoder: Optional[GeocodingService] = None,
    ):
        self.matrix = matrix or distance_matrix_service
        self.geocoder = geocoder or geocoding_service

    async def _geocode_or_error(self, address: str) -> Union[Coordinate, GeocodingError]:
        try:
            return await self.geocoder.geocode(address)
        except GeocodingError as e:
            return e

    async def _lookup_or_empty(self, origin: str, destination: str) -> MatrixElement:
        try:
            return await self.matrix.lookup(origin, destination)
        except GeocodingError as e:
            logger.warning("Driving distance unavailable: %s", e.message)
            return MatrixElement(status=None)

    async def route_distance(self, origin: str, destination: str) -> DistanceResponse:
        require_maps_key()

        element, origin_coords, destination_coords = await asyncio.gather(
            self._lookup_or_empty(origin, destination),
            self._geocode_or_error(origin),
            self._geocode_or_error(destination),
        )

        straight_miles: Optional[float] = None
        if isinstance(origin_coords, Coordinate) and isinstance(destination_coords, Coordinate):
            straight_miles = round_miles(haversine_miles(origin_coords, destination_coords))
        else:
            for label, outcome in (("origin", origin_coords), ("destination", destination_coords)):
                if isinstance(outcome, GeocodingError):
                    logger.warning("Straight-line distance unavailable, %s: %s", label, outcome.message)

        return DistanceResponse(
            driving_distance=element.distance_text,
            driving_duration=element.duration_text,
            straight_miles=straight_miles,
            status=element.status,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
route_distance_service = RouteDistanceService()
