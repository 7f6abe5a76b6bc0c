"""Acceptance rule and winner selection for detour candidates."""

from __future__ import annotations

from typing import Iterable

from ..routing.models import RouteScore
from .models import DetourConfig, DetourDecision, EvaluatedCandidate


def distance_increase(candidate: RouteScore, base: RouteScore) -> float:
    return (candidate.distance_meters - base.distance_meters) / (base.distance_meters or 1.0)


def is_flood_free(candidate: RouteScore, config: DetourConfig) -> bool:
    return candidate.hazard_exposure_meters < config.flood_free_tolerance_meters


def is_acceptable(candidate: RouteScore, base: RouteScore, config: DetourConfig | None = None) -> bool:
    """Whether a candidate is worth replacing the base route with.

    A flood-free candidate may be up to 70% longer. Otherwise it must cut
    exposure by more than 30% of the base exposure while adding less than 40%
    distance.
    """

    config = config or DetourConfig()
    if not candidate.is_usable:
        return False
    increase = distance_increase(candidate, base)
    if is_flood_free(candidate, config):
        return increase <= config.flood_free_max_distance_increase
    reduction = base.hazard_exposure_meters - candidate.hazard_exposure_meters
    return (
        reduction > base.hazard_exposure_meters * config.partial_min_exposure_reduction
        and increase < config.partial_max_distance_increase
    )


def select_detour(
    base: RouteScore,
    evaluated: Iterable[EvaluatedCandidate],
    config: DetourConfig | None = None,
) -> DetourDecision:
    """Pick the accepted candidate with the lowest total score.

    Without an accepted candidate, fall back to the lowest-exposure candidate
    if it measurably reduces exposure versus the base route.
    """

    config = config or DetourConfig()
    best: EvaluatedCandidate | None = None
    lowest_exposure: EvaluatedCandidate | None = None

    for item in evaluated:
        if not item.score.is_usable:
            continue
        if lowest_exposure is None or item.score.hazard_exposure_meters < lowest_exposure.score.hazard_exposure_meters:
            lowest_exposure = item
        if is_acceptable(item.score, base, config) and (
            best is None or item.score.total_score < best.score.total_score
        ):
            best = item

    if best is not None:
        return DetourDecision(winner=best)
    if lowest_exposure is not None:
        reduction = base.hazard_exposure_meters - lowest_exposure.score.hazard_exposure_meters
        if reduction >= config.best_effort_min_reduction_meters:
            return DetourDecision(winner=lowest_exposure, best_effort=True)
    return DetourDecision(winner=None)
