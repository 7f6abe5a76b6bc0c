"""Hazard detection models."""

from __future__ import annotations

from dataclasses import dataclass

from ...models.domain import HazardStation


@dataclass(frozen=True, slots=True)
class HazardSegment:
    """Inclusive run of route point indexes inside a risky station's radius."""

    start_index: int
    end_index: int
    causing_station: HazardStation

    @property
    def index_range(self) -> tuple[int, int]:
        return (self.start_index, self.end_index)
