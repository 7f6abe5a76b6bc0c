"""Comparable cost for routes with hazard exposure."""

from __future__ import annotations

import math
from typing import Sequence

from ...config import settings
from ...models.domain import HazardStation, VehicleProfile
from ..geospatial import as_geo_point, distance_meters
from ..hazards.detector import detect
from ..hazards.models import HazardSegment
from .models import Route, RouteScore


def hazard_exposure_meters(route: Route, segments: Sequence[HazardSegment]) -> float:
    """Sum of straight-line start-to-end distances of each hazard segment.

    Underestimates exposure on winding segments.
    """

    exposure = 0.0
    for segment in segments:
        if not (0 <= segment.start_index <= segment.end_index < len(route.points)):
            continue
        start = as_geo_point(route.points[segment.start_index])
        end = as_geo_point(route.points[segment.end_index])
        if start is None or end is None:
            continue
        exposure += distance_meters(start, end)
    return exposure


def score(
    route: Route | None,
    segments: Sequence[HazardSegment] | None,
    stations: Sequence[HazardStation],
    vehicle_profile: VehicleProfile,
    *,
    penalty: float | None = None,
) -> RouteScore:
    """Score a route as distance plus heavily weighted hazard exposure.

    Routes without usable geometry or distance score infinitely so they are
    never preferred. When ``segments`` is None they are detected here.
    """

    if route is None or not any(as_geo_point(point) is not None for point in route.points):
        return RouteScore.unusable()
    distance = route.total_distance_meters
    if isinstance(distance, bool) or not isinstance(distance, (int, float)) or not math.isfinite(distance):
        return RouteScore.unusable()

    if segments is None:
        segments = detect(route, stations, vehicle_profile)
    multiplier = settings.flood_penalty_multiplier if penalty is None else penalty
    exposure = hazard_exposure_meters(route, segments)
    return RouteScore(
        total_score=distance + exposure * multiplier,
        hazard_exposure_meters=exposure,
        distance_meters=float(distance),
    )
