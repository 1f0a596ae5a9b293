"""Great-circle distance and ETA helpers."""

from __future__ import annotations

import math

from missiontrack._constants import DEFAULT_SPEED_KMH, EARTH_RADIUS_KM, POSITION_EPSILON_DEG
from missiontrack.models.geo import GeoPoint


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Haversine distance between two points in kilometres."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    d_lat = lat2 - lat1
    d_lng = math.radians(b.lng - a.lng)
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    # Clamp: rounding can push h marginally outside [0, 1] for antipodal points.
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def eta_minutes(distance: float, speed_kmh: float = DEFAULT_SPEED_KMH) -> int:
    """Minutes to cover *distance* km at *speed_kmh*, rounded up.

    Negative or non-finite distances yield ``0``.
    """
    if speed_kmh <= 0 or not math.isfinite(speed_kmh):
        raise ValueError(f"speed_kmh must be a positive number, got {speed_kmh!r}")
    if not math.isfinite(distance) or distance <= 0:
        return 0
    return math.ceil(distance * 60 / speed_kmh)


def is_same_position(a: GeoPoint, b: GeoPoint, epsilon_deg: float = POSITION_EPSILON_DEG) -> bool:
    """Whether two points are equal within a negligible per-axis tolerance."""
    return abs(a.lat - b.lat) <= epsilon_deg and abs(a.lng - b.lng) <= epsilon_deg
