"""
Great-circle distance helpers.

haversine_miles() is pure: no I/O, no validation, no rounding. Rounding to
one decimal happens where a distance is presented (round_miles).
"""

import math

from app.schemas.geo import Coordinate

# Mean Earth radius in statute miles
EARTH_RADIUS_MILES = 3958.8


def haversine_miles(a: Coordinate, b: Coordinate) -> float:
    """
    Great-circle distance between two coordinates, in miles.

    Symmetric, and exactly 0.0 for identical points. Inputs outside the
    valid lat/lng ranges still yield a finite number.
    """
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)

    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    )
    # Float error can push h a hair outside [0, 1] for antipodal points
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_MILES * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def round_miles(value: float) -> float:
    return round(value, 1)
