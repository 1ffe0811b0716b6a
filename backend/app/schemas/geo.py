"""
NoteMap Backend: Geo Schemas
=============================

What:  Coordinates, distance results, and the action-discriminated bodies
       accepted by POST /api/geocode.

Geocode request shapes:
    {"action": "facility", "facility_id": "...", "address": "..."?}
    {"action": "user", "query": "..."}
    {"action": "nearest", "query": "...", "state": "AL", "limit": 30,
     "filters": {"telehealth": true}, "medicaid": true}

For "nearest", capability flags are accepted either inside `filters` or as
top-level booleans (the shape older clients send); both end up in `filters`.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.config import settings
from app.models.facility import FACILITY_CAPABILITIES


class Coordinate(BaseModel):
    """A latitude/longitude pair in decimal degrees."""
    lat: float
    lng: float

    model_config = ConfigDict(frozen=True)


class DistanceResponse(BaseModel):
    """
    What:  Road and straight-line distance between two free-text places.
    Who:   Returned by GET /api/distance.

    Driving fields are null unless the provider's per-pair status is OK;
    straight_miles is null when either endpoint could not be geocoded.
    """
    driving_distance: Optional[str] = Field(default=None, examples=["12.3 mi"])
    driving_duration: Optional[str] = Field(default=None, examples=["18 mins"])
    straight_miles: Optional[float] = Field(default=None, examples=[9.8])
    status: Optional[str] = Field(default=None, examples=["OK"])


# ── /api/geocode request bodies ───────────────────────────────────────────

class _GeocodeRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class FacilityGeocodeRequest(_GeocodeRequest):
    """Resolve (and cache) a facility's coordinate."""
    action: Literal["facility"]
    facility_id: str = Field(min_length=1)
    # Used only when the stored facility record has no address
    address: Optional[str] = None


class UserGeocodeRequest(_GeocodeRequest):
    """Geocode a free-text address for the caller; never cached."""
    action: Literal["user"]
    query: str = Field(min_length=1)


class NearestRequest(_GeocodeRequest):
    """Facility search around a free-text address."""
    action: Literal["nearest"]
    query: str = Field(min_length=1)
    state: str = Field(min_length=1, description="Region code, matched exactly")
    limit: int = Field(default=settings.default_match_limit, le=settings.max_match_limit)
    filters: Dict[str, bool] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def fold_capability_flags(cls, data: Any) -> Any:
        """Moves top-level capability booleans into `filters`."""
        if not isinstance(data, dict):
            return data
        filters = data.get("filters")
        if filters is None:
            filters = {}
        elif not isinstance(filters, dict):
            # Left for the field validator to reject
            return data
        data = dict(data)
        filters = dict(filters)
        for name in FACILITY_CAPABILITIES:
            if name in data:
                value = data.pop(name)
                # An explicit entry in `filters` wins over the top-level field
                filters.setdefault(name, value)
        data["filters"] = filters
        return data


# Discriminated on `action` where it is used as a request body
GeocodeRequest = Union[FacilityGeocodeRequest, UserGeocodeRequest, NearestRequest]


# ── /api/geocode responses ────────────────────────────────────────────────

class CoordinateResponse(BaseModel):
    lat: float
    lng: float


class FacilityCoordinateResponse(CoordinateResponse):
    cached: bool = Field(description="True when the coordinate came from the facility record")


class FacilityResult(BaseModel):
    """One facility in a nearest-search result, with its distance."""
    facility_id: str
    name: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: str
    zip: Optional[str] = None
    phone: Optional[str] = None
    lat: float
    lng: float
    geocoded_at: Optional[datetime] = None
    capabilities: Dict[str, bool]
    distance_miles: float


class NearestResponse(BaseModel):
    # Null only when the search was short-circuited (limit <= 0)
    user_coords: Optional[CoordinateResponse] = None
    results: List[FacilityResult]
