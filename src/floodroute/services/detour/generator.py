"""Propose via-points that route around a hazard segment."""

from __future__ import annotations

import logging
import math
from typing import Sequence

from ...models.domain import GeoPoint
from ..geospatial import (
    Side,
    as_geo_point,
    distance_meters,
    normal,
    offset_point,
    perpendicular_offset,
    side_of,
    unit_vector,
)
from ..hazards.models import HazardSegment
from ..routing.models import Route
from .models import DetourCandidate, DetourConfig

logger = logging.getLogger(__name__)


def _anchors(route: Route, segment: HazardSegment, buffer: int) -> tuple[GeoPoint, GeoPoint] | None:
    last = len(route.points) - 1
    start_idx = max(0, segment.start_index - buffer)
    end_idx = min(last, segment.end_index + buffer)
    if start_idx > last or end_idx < 0 or start_idx > end_idx:
        return None
    near = as_geo_point(route.points[start_idx])
    far = as_geo_point(route.points[end_idx])
    if near is None or far is None:
        return None
    return near, far


def midpoint_fan_out(near: GeoPoint, far: GeoPoint, offsets_degrees: Sequence[float]) -> list[GeoPoint]:
    """Via-points on both sides of the anchor midpoint, one pair per offset."""

    via_points: list[GeoPoint] = []
    for magnitude in offsets_degrees:
        for side in (Side.LEFT, Side.RIGHT):
            point = perpendicular_offset(near, far, magnitude, side)
            if point is None:
                logger.info("Zero-length anchor segment, skipping midpoint fan-out.")
                return []
            via_points.append(point)
    return via_points


def _closest_index(route: Route, segment: HazardSegment, station: GeoPoint) -> int | None:
    closest: int | None = None
    best = math.inf
    for index in range(segment.start_index, min(segment.end_index, len(route.points) - 1) + 1):
        point = as_geo_point(route.points[index])
        if point is None:
            continue
        distance = distance_meters(point, station)
        if distance < best:
            best = distance
            closest = index
    return closest


def local_tangent(points: Sequence[object], index: int) -> tuple[float, float] | None:
    """Unit direction of the route at ``index`` from its neighbours.

    Falls back to the forward difference when the neighbours coincide.
    """

    current = as_geo_point(points[index])
    if current is None:
        return None
    prev = as_geo_point(points[max(0, index - 1)]) or current
    nxt = as_geo_point(points[min(len(points) - 1, index + 1)]) or current

    direction = unit_vector(nxt.lat - prev.lat, nxt.lng - prev.lng)
    if direction is None:
        direction = unit_vector(nxt.lat - current.lat, nxt.lng - current.lng)
    return direction


def hazard_tangent_push(route: Route, segment: HazardSegment, push_degrees: float) -> GeoPoint | None:
    """Push the point nearest the station sideways, away from the station."""

    station = as_geo_point((segment.causing_station.lat, segment.causing_station.lng))
    if station is None:
        return None
    index = _closest_index(route, segment, station)
    if index is None:
        return None
    tangent = local_tangent(route.points, index)
    if tangent is None:
        return None

    point = as_geo_point(route.points[index])
    ahead = offset_point(point, tangent, 1.0)
    # Normal pointing away from the station has a positive dot product with station->point.
    station_side = side_of(point, ahead, station)
    away = Side.RIGHT if station_side is Side.LEFT else Side.LEFT
    return offset_point(point, normal(tangent, away), push_degrees)


def build_waypoints(
    origin: GeoPoint,
    destination: GeoPoint,
    near: GeoPoint,
    via: GeoPoint,
    far: GeoPoint,
    min_separation_meters: float,
) -> tuple[GeoPoint, ...]:
    """Keep the provider's search local to the detour by pinning the anchors."""

    waypoints = [origin]
    if distance_meters(origin, near) > min_separation_meters:
        waypoints.append(near)
    waypoints.append(via)
    if distance_meters(destination, far) > min_separation_meters:
        waypoints.append(far)
    waypoints.append(destination)
    return tuple(waypoints)


def generate(
    route: Route,
    segment: HazardSegment,
    origin: GeoPoint,
    destination: GeoPoint,
    config: DetourConfig | None = None,
) -> list[DetourCandidate]:
    """Candidate detours around the given hazard segment.

    Combines six midpoint offsets across the anchor segment with one push away
    from the causing station. Returns an empty list when the anchors are not
    usable.
    """

    config = config or DetourConfig()
    anchors = _anchors(route, segment, config.anchor_buffer_points)
    if anchors is None:
        logger.warning(
            "Could not find valid anchors for detour around segment %s-%s",
            segment.start_index,
            segment.end_index,
        )
        return []
    near, far = anchors

    via_points = midpoint_fan_out(near, far, config.offsets_degrees)
    pushed = hazard_tangent_push(route, segment, config.push_degrees)
    if pushed is not None:
        via_points.append(pushed)

    return [
        DetourCandidate(
            via_point=via,
            waypoints=build_waypoints(
                origin, destination, near, via, far, config.anchor_min_separation_meters
            ),
        )
        for via in via_points
    ]
