"""
NoteMap Backend: Geocoding Service
===================================

What:  Resolves a free-text address to a Coordinate using the Google
       Geocoding API.
Who:   FacilityGeocodeService (facility cache misses), FacilityMatcher
       (search origin), RouteDistanceService and the "user" geocode action.

Provider status mapping:
    OK (with results)       → Coordinate of the first result
    OK (empty results)      → NoResult
    ZERO_RESULTS            → NoResult
    REQUEST_DENIED          → RequestDenied (carries error_message, not retried)
    anything else           → ProviderError (raw status preserved)

This adapter never caches; the facility cache lives one layer up.
"""

import logging
from typing import Any, Dict, Optional

from app.config import settings
from app.exceptions import ConfigurationError, NoResult, ProviderError, RequestDenied
from app.schemas.geo import Coordinate
from app.services.maps_client import MapsClient, maps_client

logger = logging.getLogger(__name__)


def require_maps_key() -> str:
    """Returns the Maps API key or raises ConfigurationError before any network call."""
    key = settings.google_maps_api_key
    if not key:
        raise ConfigurationError(
            "GOOGLE_MAPS_API_KEY",
            message="Maps API is not configured: GOOGLE_MAPS_API_KEY is not set",
        )
    return key


def _first_location(data: Dict[str, Any]) -> Optional[Coordinate]:
    results = data.get("results") or []
    if not results:
        return None
    try:
        location = results[0]["geometry"]["location"]
        return Coordinate(lat=float(location["lat"]), lng=float(location["lng"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise ProviderError("INVALID_RESPONSE") from exc


class GeocodingService:
    """Forward geocoding over the Google Geocoding JSON API."""

    def __init__(self, client: Optional[MapsClient] = None):
        self.client = client or maps_client

    async def geocode(self, address: str) -> Coordinate:
        """
        Resolve `address` to a coordinate.

        Raises:
            ConfigurationError: GOOGLE_MAPS_API_KEY is missing
            TransientServiceError: provider unreachable / non-2xx after retries
            RequestDenied, NoResult, ProviderError: provider-reported failures
        """
        key = require_maps_key()
        data = await self.client.get_json("geocode/json", {"address": address, "key": key})

        status = data.get("status")
        if status == "OK":
            coordinate = _first_location(data)
            if coordinate is None:
                raise NoResult(address)
            logger.debug("Geocoded address (%d chars) to %s", len(address), coordinate)
            return coordinate
        if status == "ZERO_RESULTS":
            raise NoResult(address)
        if status == "REQUEST_DENIED":
            reason = data.get("error_message")
            logger.error("Geocoding request denied: %s", reason)
            raise RequestDenied(reason)

        logger.warning("Geocoding provider returned status %s", status)
        raise ProviderError(str(status))


# ── Singleton Instance ────────────────────────────────────────────────────
geocoding_service = GeocodingService()
