"""Detour search domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ...config import settings
from ...models.domain import GeoPoint, VehicleProfile
from ..routing.models import Route, RouteScore


class DetourAttemptState(str, Enum):
    NOT_ATTEMPTED = "not_attempted"
    EVALUATING = "evaluating"
    APPLIED = "applied"
    FAILED = "failed"

    def observable(self) -> "DetourAttemptState":
        """Evaluating is an internal guard and is reported as not attempted."""
        if self is DetourAttemptState.EVALUATING:
            return DetourAttemptState.NOT_ATTEMPTED
        return self


@dataclass(frozen=True, slots=True)
class RouteKey:
    origin: GeoPoint
    destination: GeoPoint
    vehicle_profile: VehicleProfile


@dataclass(frozen=True, slots=True)
class NavigationRequest:
    """Inputs of one controller call for a traveler session."""

    session_id: str
    origin: GeoPoint
    destination: GeoPoint
    vehicle_profile: VehicleProfile
    avoid_hazards: bool = False

    @property
    def key(self) -> RouteKey:
        return RouteKey(self.origin, self.destination, self.vehicle_profile)


@dataclass(frozen=True, slots=True)
class DetourCandidate:
    via_point: GeoPoint
    waypoints: tuple[GeoPoint, ...]


@dataclass(frozen=True, slots=True)
class EvaluatedCandidate:
    candidate: DetourCandidate
    route: Route
    score: RouteScore


@dataclass(frozen=True, slots=True)
class DetourDecision:
    """Winner of a detour search, if any."""

    winner: EvaluatedCandidate | None
    best_effort: bool = False


@dataclass(frozen=True, slots=True)
class RouteStatus:
    """Status emitted to the presentation layer after every evaluation."""

    distance_meters: float
    duration_seconds: float
    summary: str
    is_hazardous: bool
    affected_station_names: tuple[str, ...] = ()
    is_detour: bool = False
    error: str | None = None


@dataclass(frozen=True, slots=True)
class NavigationOutcome:
    status: RouteStatus
    attempt_state: DetourAttemptState
    route: Route | None = None
    waypoints: tuple[GeoPoint, ...] = ()
    hazard_ranges: tuple[tuple[int, int], ...] = ()


@dataclass(slots=True)
class DetourConfig:
    radius_meters: float = settings.hazard_radius_meters
    penalty: float = settings.flood_penalty_multiplier
    anchor_buffer_points: int = settings.detour_anchor_buffer_points
    offsets_degrees: tuple[float, ...] = field(default_factory=lambda: tuple(settings.detour_offsets_degrees))
    push_degrees: float = settings.detour_push_degrees
    anchor_min_separation_meters: float = settings.detour_anchor_min_separation_meters
    flood_free_tolerance_meters: float = settings.flood_free_tolerance_meters
    flood_free_max_distance_increase: float = settings.flood_free_max_distance_increase
    partial_min_exposure_reduction: float = settings.partial_min_exposure_reduction
    partial_max_distance_increase: float = settings.partial_max_distance_increase
    best_effort_min_reduction_meters: float = settings.best_effort_min_reduction_meters
    candidate_timeout_seconds: float = settings.detour_candidate_timeout_seconds
    max_parallel_requests: int = settings.detour_max_parallel_requests
