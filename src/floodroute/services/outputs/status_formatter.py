"""Serializers for route status and hazard highlight outputs."""

from __future__ import annotations

from typing import Sequence

from shapely.geometry import LineString, mapping

from ..geospatial import as_geo_point
from ..hazards.detector import affected_station_names
from ..hazards.models import HazardSegment
from ..routing.models import Route
from ..detour.models import NavigationOutcome, RouteStatus

NO_SAFE_DETOUR_SUMMARY = "No safe detour found. Showing original route."
BEST_EFFORT_NOTE = "Flood exposure reduced, but the route is not fully clear."


def build_status(
    route: Route,
    segments: Sequence[HazardSegment],
    *,
    is_detour: bool = False,
    summary: str | None = None,
    note: str | None = None,
) -> RouteStatus:
    text = summary or route.name or "Route"
    if note:
        text = f"{text} ({note})"
    return RouteStatus(
        distance_meters=route.total_distance_meters,
        duration_seconds=route.total_duration_seconds,
        summary=text,
        is_hazardous=bool(segments),
        affected_station_names=tuple(affected_station_names(segments)),
        is_detour=is_detour,
    )


def error_status(message: str) -> RouteStatus:
    return RouteStatus(
        distance_meters=0.0,
        duration_seconds=0.0,
        summary=f"Routing failed: {message}",
        is_hazardous=False,
        error=message,
    )


def hazard_highlights(route: Route | None, ranges: Sequence[tuple[int, int]]) -> dict:
    """GeoJSON FeatureCollection with one LineString per hazardous range.

    Ranges covering fewer than two valid points are left out.
    """
    features = []
    if route is not None:
        for start, end in ranges:
            points = [as_geo_point(raw) for raw in route.points[start : end + 1]]
            coords = [(point.lng, point.lat) for point in points if point is not None]
            if len(coords) < 2:
                continue
            features.append(
                {
                    "type": "Feature",
                    "geometry": mapping(LineString(coords)),
                    "properties": {"start_index": start, "end_index": end},
                }
            )
    return {"type": "FeatureCollection", "features": features}


def outcome_to_json(outcome: NavigationOutcome) -> dict:
    status = outcome.status
    route = outcome.route
    return {
        "status": {
            "distance_meters": status.distance_meters,
            "duration_seconds": status.duration_seconds,
            "summary": status.summary,
            "is_hazardous": status.is_hazardous,
            "affected_station_names": list(status.affected_station_names),
            "is_detour": status.is_detour,
            "error": status.error,
        },
        "attempt_state": outcome.attempt_state.observable().value,
        "waypoints": [{"lat": point.lat, "lng": point.lng} for point in outcome.waypoints],
        "geometry": [
            [point.lat, point.lng]
            for point in (as_geo_point(raw) for raw in (route.points if route else ()))
            if point is not None
        ],
        "hazard_ranges": [list(item) for item in outcome.hazard_ranges],
        "highlights": hazard_highlights(route, outcome.hazard_ranges),
    }
