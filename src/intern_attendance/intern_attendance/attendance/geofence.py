from __future__ import annotations

import math

from ..common.validators import require_latitude, require_longitude
from ..core.constants import EARTH_RADIUS_KM
from ..settings.model import SystemSettings


def haversine_distance_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in meters between two WGS84 points.

    Raises ValidationError for NaN/infinite values or out-of-range coordinates.
    """

    lat1 = require_latitude(lat1)
    lat2 = require_latitude(lat2)
    lng1 = require_longitude(lng1)
    lng2 = require_longitude(lng2)

    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    # Rounding can push ``a`` a hair above 1 for antipodal points.
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c * 1000


def distance_to_office_m(lat: float, lng: float, settings: SystemSettings) -> float:
    return haversine_distance_m(lat, lng, settings.office_lat, settings.office_lng)


def is_within_geofence(lat: float, lng: float, settings: SystemSettings) -> bool:
    """True when the point is within ``max_distance_meters`` of the office (inclusive)."""
    return distance_to_office_m(lat, lng, settings) <= settings.max_distance_meters
