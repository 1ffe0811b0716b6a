"""
NoteMap Backend: Distance Matrix Service
=========================================

What:  Road distance and travel time between one origin and one destination
       via the Google Distance Matrix API (imperial units).
Who:   RouteDistanceService.

Only the first row's first element is read. The element's own status
decides whether distance/duration are usable; provider-level statuses are
reported, not raised, so the caller can still return a partial result.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from app.services.geocoding_service import require_maps_key
from app.services.maps_client import MapsClient, maps_client

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatrixElement:
    """One origin/destination pair from a Distance Matrix response."""
    status: Optional[str]
    distance_text: Optional[str] = None
    duration_text: Optional[str] = None


def _first_element(data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    rows = data.get("rows") or []
    if not rows or not isinstance(rows[0], dict):
        return None
    elements = rows[0].get("elements") or []
    if not elements or not isinstance(elements[0], dict):
        return None
    return elements[0]


class DistanceMatrixService:
    def __init__(self, client: Optional[MapsClient] = None):
        self.client = client or maps_client

    async def lookup(self, origin: str, destination: str) -> MatrixElement:
        """
        Fetch driving distance/duration for one pair.

        Returns a MatrixElement whose text fields are set only when the
        element status is OK. Without an element, the top-level status is
        echoed instead.

        Raises:
            ConfigurationError: GOOGLE_MAPS_API_KEY is missing
            TransientServiceError: transport failure or non-2xx after retries
        """
        key = require_maps_key()
        data = await self.client.get_json(
            "distancematrix/json",
            {
                "origins": origin,
                "destinations": destination,
                "units": "imperial",
                "key": key,
            },
        )

        element = _first_element(data)
        if element is None:
            status = data.get("status")
            logger.info("Distance matrix returned no element (status=%s)", status)
            return MatrixElement(status=status)

        status = element.get("status")
        if status != "OK":
            return MatrixElement(status=status)

        distance = element.get("distance") or {}
        duration = element.get("duration") or {}
        return MatrixElement(
            status=status,
            distance_text=distance.get("text"),
            duration_text=duration.get("text"),
        )


# ── Singleton Instance ────────────────────────────────────────────────────
distance_matrix_service = DistanceMatrixService()
