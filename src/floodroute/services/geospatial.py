"""Geospatial helper functions."""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Mapping

from ..models.domain import GeoPoint

EARTH_RADIUS_KM = 6371.0
# Vectors shorter than this (in degrees) are treated as zero-length.
MIN_VECTOR_LENGTH = 1e-9


class Side(str, Enum):
    LEFT = "left"
    RIGHT = "right"


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_meters(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points in meters."""

    return haversine_km(a.lat, a.lng, b.lat, b.lng) * 1000.0


def midpoint(a: GeoPoint, b: GeoPoint) -> GeoPoint:
    """Arithmetic mean in degree space; adequate at city scale."""

    return GeoPoint((a.lat + b.lat) / 2, (a.lng + b.lng) / 2)


def _is_coordinate(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def as_geo_point(raw: Any) -> GeoPoint | None:
    """Coerce a point-like value into a GeoPoint.

    Accepts a GeoPoint, a ``(lat, lng)`` pair or a mapping with ``lat`` and
    ``lng`` keys. Anything missing, non-numeric, non-finite or outside valid
    latitude/longitude bounds yields None.
    """

    if raw is None:
        return None
    if isinstance(raw, GeoPoint):
        lat, lng = raw.lat, raw.lng
    elif isinstance(raw, Mapping):
        lat, lng = raw.get("lat"), raw.get("lng", raw.get("lon"))
    elif isinstance(raw, (tuple, list)) and len(raw) >= 2:
        lat, lng = raw[0], raw[1]
    else:
        return None

    if not (_is_coordinate(lat) and _is_coordinate(lng)):
        return None
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        return None
    return raw if isinstance(raw, GeoPoint) else GeoPoint(float(lat), float(lng))


def unit_vector(d_lat: float, d_lng: float) -> tuple[float, float] | None:
    """Normalize a (d_lat, d_lng) vector, or None when it has no direction."""

    length = math.hypot(d_lat, d_lng)
    if not math.isfinite(length) or length < MIN_VECTOR_LENGTH:
        return None
    return (d_lat / length, d_lng / length)


def normal(direction: tuple[float, float], side: Side) -> tuple[float, float]:
    """Rotate a unit (d_lat, d_lng) vector by 90 degrees toward ``side``.

    Uses x = longitude, y = latitude, so LEFT is counter-clockwise.
    """

    d_lat, d_lng = direction
    if side is Side.LEFT:
        return (d_lng, -d_lat)
    return (-d_lng, d_lat)


def offset_point(point: GeoPoint, direction: tuple[float, float], magnitude_degrees: float) -> GeoPoint:
    return GeoPoint(
        point.lat + direction[0] * magnitude_degrees,
        point.lng + direction[1] * magnitude_degrees,
    )


def perpendicular_offset(a: GeoPoint, b: GeoPoint, magnitude_degrees: float, side: Side) -> GeoPoint | None:
    """Offset the midpoint of a->b along the segment normal on ``side``.

    Returns None for a zero-length segment.
    """

    direction = unit_vector(b.lat - a.lat, b.lng - a.lng)
    if direction is None:
        return None
    return offset_point(midpoint(a, b), normal(direction, side), magnitude_degrees)


def side_of(a: GeoPoint, b: GeoPoint, p: GeoPoint) -> Side | None:
    """Which side of the directed line a->b the point p lies on.

    Collinear points are reported as RIGHT. None when a and b coincide.
    """

    if unit_vector(b.lat - a.lat, b.lng - a.lng) is None:
        return None
    dx, dy = b.lng - a.lng, b.lat - a.lat
    cross = dx * (p.lat - a.lat) - dy * (p.lng - a.lng)
    return Side.LEFT if cross > 0 else Side.RIGHT
