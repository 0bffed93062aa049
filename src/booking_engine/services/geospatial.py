"""Geospatial helper functions."""

from __future__ import annotations

import math

from ..errors import InvalidInput
from ..models.domain import GeoPoint

EARTH_RADIUS_MILES = 3959.0


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c


def distance_miles(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points, in miles.

    The result can be NaN when a point carries non-finite coordinates; callers
    must treat such a distance as out of range.
    """

    return haversine_miles(a.lat, a.lng, b.lat, b.lng)


def validate_point(point: GeoPoint, *, label: str = "location") -> GeoPoint:
    """Reject unset (0, 0), non-finite or out-of-range coordinates."""

    if not point.is_valid:
        raise InvalidInput(f"Invalid {label} coordinates ({point.lat}, {point.lng}).")
    return point
