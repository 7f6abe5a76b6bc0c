"""Detect the portions of a route that pass near risky hazard stations."""

from __future__ import annotations

import logging
import math
from typing import Iterable, Sequence

from ...config import settings
from ...models.domain import GeoPoint, HazardStation, RiskLevel, VehicleProfile
from ..geospatial import as_geo_point, distance_meters
from ..routing.models import Route
from .models import HazardSegment

logger = logging.getLogger(__name__)

# Four-wheeled vehicles tolerate shallow water, so only severe stations matter.
RISKY_LEVELS: dict[VehicleProfile, frozenset[RiskLevel]] = {
    VehicleProfile.TWO_WHEELED: frozenset({RiskLevel.ELEVATED, RiskLevel.SEVERE}),
    VehicleProfile.FOUR_WHEELED: frozenset({RiskLevel.SEVERE}),
}


def is_station_risky(station: HazardStation, vehicle_profile: VehicleProfile) -> bool:
    return station.risk_level in RISKY_LEVELS[vehicle_profile]


def risky_stations(
    stations: Iterable[HazardStation | None],
    vehicle_profile: VehicleProfile,
) -> list[tuple[HazardStation, GeoPoint]]:
    """Return risky stations paired with their validated location."""

    result: list[tuple[HazardStation, GeoPoint]] = []
    for station in stations:
        if station is None or not is_station_risky(station, vehicle_profile):
            continue
        location = as_geo_point((station.lat, station.lng))
        if location is None:
            logger.debug("Ignoring station %s with invalid coordinates", station.id)
            continue
        result.append((station, location))
    return result


def detect(
    route: Route | None,
    stations: Sequence[HazardStation],
    vehicle_profile: VehicleProfile,
    radius_meters: float | None = None,
) -> list[HazardSegment]:
    """Group contiguous hazardous route points into segments.

    A point is hazardous when any risky station lies within ``radius_meters``.
    Each segment is attributed to the nearest causing station, switching to a
    newer nearest station if it changes mid-run. Malformed points are skipped
    and neither open nor close a run.
    """

    if route is None or not route.points:
        return []
    radius = settings.hazard_radius_meters if radius_meters is None else radius_meters
    candidates = risky_stations(stations, vehicle_profile)
    if not candidates:
        return []

    segments: list[HazardSegment] = []
    run_start: int | None = None
    run_end: int | None = None
    run_station: HazardStation | None = None

    for index, raw in enumerate(route.points):
        point = as_geo_point(raw)
        if point is None:
            continue

        nearest: HazardStation | None = None
        nearest_distance = math.inf
        for station, location in candidates:
            distance = distance_meters(point, location)
            if distance < radius and distance < nearest_distance:
                nearest = station
                nearest_distance = distance

        if nearest is not None:
            if run_start is None:
                run_start = index
            run_end = index
            run_station = nearest
        elif run_start is not None and run_station is not None:
            segments.append(HazardSegment(run_start, run_end, run_station))
            run_start, run_end, run_station = None, None, None

    if run_start is not None and run_station is not None:
        segments.append(HazardSegment(run_start, run_end, run_station))
    return segments


def hazard_ranges(segments: Iterable[HazardSegment]) -> list[tuple[int, int]]:
    """Index ranges of hazardous portions, for highlighting."""

    return [segment.index_range for segment in segments]


def affected_station_names(segments: Iterable[HazardSegment]) -> list[str]:
    names: list[str] = []
    for segment in segments:
        name = segment.causing_station.name
        if name not in names:
            names.append(name)
    return names
