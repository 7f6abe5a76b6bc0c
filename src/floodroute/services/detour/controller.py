"""Detour decision orchestration.

The controller is safe to call from any timer or event source: every call
re-scores the active route for the given hazard snapshot, and a detour search
starts at most once per (origin, destination, vehicle profile) key until one
of the reset rules in :class:`DetourAttemptStore` applies.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Sequence

from ...models.domain import GeoPoint, HazardStation
from ..hazards.detector import detect, hazard_ranges
from ..hazards.models import HazardSegment
from ..outputs.status_formatter import (
    BEST_EFFORT_NOTE,
    NO_SAFE_DETOUR_SUMMARY,
    build_status,
    error_status,
)
from ..routing.base import RoutingProvider, RoutingProviderError
from ..routing.models import Route, RouteScore
from ..routing.scorer import score
from .generator import generate
from .models import (
    DetourAttemptState,
    DetourCandidate,
    DetourConfig,
    EvaluatedCandidate,
    NavigationOutcome,
    NavigationRequest,
)
from .selection import select_detour
from .state import DetourAttemptStore, SessionEntry

logger = logging.getLogger(__name__)


class DetourController:
    def __init__(
        self,
        provider: RoutingProvider,
        *,
        config: DetourConfig | None = None,
        store: DetourAttemptStore | None = None,
    ) -> None:
        self.provider = provider
        self.config = config or DetourConfig()
        self.store = store or DetourAttemptStore()

    def evaluate(self, request: NavigationRequest, stations: Sequence[HazardStation]) -> NavigationOutcome:
        """Evaluate the session's active route and search for a detour if needed."""
        stations = tuple(stations)
        entry = self.store.sync(request)

        route = entry.active_route
        if route is None:
            try:
                route = self._fetch_route(entry.waypoints)
            except RoutingProviderError as exc:
                logger.warning("Route request failed for session %s: %s", request.session_id, exc)
                return NavigationOutcome(
                    status=error_status(str(exc)),
                    attempt_state=entry.state,
                    waypoints=entry.waypoints,
                )
            self.store.remember_route(request.session_id, entry.generation, route)

        segments = self._detect(route, request, stations)
        summary = None
        if entry.state is DetourAttemptState.FAILED and request.avoid_hazards and segments:
            summary = NO_SAFE_DETOUR_SUMMARY
        applied = entry.state is DetourAttemptState.APPLIED
        outcome = self._outcome(
            route,
            segments,
            entry.state,
            entry.waypoints,
            is_detour=applied,
            summary=summary,
            note=BEST_EFFORT_NOTE if applied and entry.best_effort else None,
        )

        if not request.avoid_hazards or not segments or entry.state is not DetourAttemptState.NOT_ATTEMPTED:
            return outcome
        if not self.store.begin_evaluation(request.session_id, entry.generation):
            return outcome

        logger.info("Hazard detected on route for session %s, searching for a detour", request.session_id)
        try:
            base_score = score(route, segments, stations, request.vehicle_profile, penalty=self.config.penalty)
            return self._search(entry, request, route, segments, base_score, stations)
        except Exception:
            logger.exception("Detour search failed for session %s", request.session_id)
            return self._fail(entry, route, segments)

    def on_hazard_refresh(self, session_id: str, stations: Sequence[HazardStation]) -> NavigationOutcome:
        """Re-run evaluation for the session's last request with a new hazard snapshot."""
        entry = self.store.get(session_id)
        if entry is None:
            raise KeyError(session_id)
        return self.evaluate(entry.request, stations)

    def forget(self, session_id: str) -> bool:
        return self.store.forget(session_id)

    def _detect(self, route: Route, request: NavigationRequest, stations: Sequence[HazardStation]) -> list[HazardSegment]:
        return detect(route, stations, request.vehicle_profile, self.config.radius_meters)

    def _fetch_route(self, waypoints: Sequence[GeoPoint]) -> Route:
        routes = self.provider.route(list(waypoints))
        if not routes:
            raise RoutingProviderError("Routing provider returned no routes.")
        return routes[0]

    def _route_candidate(self, candidate: DetourCandidate) -> Route | None:
        try:
            return self._fetch_route(candidate.waypoints)
        except RoutingProviderError as exc:
            logger.info("No route for detour candidate via %s: %s", candidate.via_point, exc)
        except Exception as exc:
            logger.warning("Routing provider error for detour candidate via %s: %s", candidate.via_point, exc)
        return None

    def _route_candidates(self, candidates: Sequence[DetourCandidate]) -> list[tuple[DetourCandidate, Route]]:
        """Request all candidates concurrently; a failure or timeout only drops that candidate."""
        workers = max(1, min(self.config.max_parallel_requests, len(candidates)))
        executor = ThreadPoolExecutor(max_workers=workers)
        try:
            futures = [executor.submit(self._route_candidate, candidate) for candidate in candidates]
            done, not_done = wait(futures, timeout=self.config.candidate_timeout_seconds)
            if not_done:
                logger.warning(
                    "%d of %d detour candidate requests timed out after %.1fs",
                    len(not_done),
                    len(futures),
                    self.config.candidate_timeout_seconds,
                )
            results: list[tuple[DetourCandidate, Route]] = []
            for candidate, future in zip(candidates, futures):
                if future not in done:
                    continue
                route = future.result()
                if route is not None:
                    results.append((candidate, route))
            return results
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _search(
        self,
        entry: SessionEntry,
        request: NavigationRequest,
        route: Route,
        segments: list[HazardSegment],
        base_score: RouteScore,
        stations: Sequence[HazardStation],
    ) -> NavigationOutcome:
        candidates = generate(route, segments[0], request.origin, request.destination, self.config)
        if not candidates:
            logger.info("No detour candidates could be generated for session %s", request.session_id)
            return self._fail(entry, route, segments)

        evaluated = [
            EvaluatedCandidate(
                candidate=candidate,
                route=candidate_route,
                score=score(
                    candidate_route,
                    self._detect(candidate_route, request, stations),
                    stations,
                    request.vehicle_profile,
                    penalty=self.config.penalty,
                ),
            )
            for candidate, candidate_route in self._route_candidates(candidates)
        ]
        decision = select_detour(base_score, evaluated, self.config)
        if decision.winner is None:
            logger.info(
                "No viable detour among %d routed candidates for session %s",
                len(evaluated),
                request.session_id,
            )
            return self._fail(entry, route, segments)

        winner = decision.winner
        if not self.store.commit(
            request.session_id,
            entry.generation,
            winner.route,
            winner.candidate.waypoints,
            best_effort=decision.best_effort,
        ):
            logger.info("Discarding stale detour result for session %s", request.session_id)
            return self._stale(entry, route, segments)

        logger.info(
            "Detour applied for session %s: exposure %.0fm -> %.0fm, distance %.0fm -> %.0fm",
            request.session_id,
            base_score.hazard_exposure_meters,
            winner.score.hazard_exposure_meters,
            base_score.distance_meters,
            winner.score.distance_meters,
        )
        return self._outcome(
            winner.route,
            self._detect(winner.route, request, stations),
            DetourAttemptState.APPLIED,
            winner.candidate.waypoints,
            is_detour=True,
            note=BEST_EFFORT_NOTE if decision.best_effort else None,
        )

    def _fail(self, entry: SessionEntry, route: Route, segments: list[HazardSegment]) -> NavigationOutcome:
        if not self.store.fail(entry.request.session_id, entry.generation):
            return self._stale(entry, route, segments)
        return self._outcome(
            route,
            segments,
            DetourAttemptState.FAILED,
            entry.waypoints,
            summary=NO_SAFE_DETOUR_SUMMARY,
        )

    def _stale(self, entry: SessionEntry, route: Route, segments: list[HazardSegment]) -> NavigationOutcome:
        current = self.store.get(entry.request.session_id)
        state = current.state if current is not None else DetourAttemptState.NOT_ATTEMPTED
        return self._outcome(route, segments, state, entry.waypoints)

    @staticmethod
    def _outcome(
        route: Route,
        segments: list[HazardSegment],
        state: DetourAttemptState,
        waypoints: tuple[GeoPoint, ...],
        *,
        is_detour: bool = False,
        summary: str | None = None,
        note: str | None = None,
    ) -> NavigationOutcome:
        return NavigationOutcome(
            status=build_status(route, segments, is_detour=is_detour, summary=summary, note=note),
            attempt_state=state,
            route=route,
            waypoints=waypoints,
            hazard_ranges=tuple(hazard_ranges(segments)),
        )
