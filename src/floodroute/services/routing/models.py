"""Routing domain models."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Route:
    """A path returned by a routing provider.

    ``points`` is kept as provided; individual entries may be malformed and
    consumers coerce them with ``as_geo_point``.
    """

    points: tuple[Any, ...]
    total_distance_meters: float
    total_duration_seconds: float
    name: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.points, tuple):
            object.__setattr__(self, "points", tuple(self.points))


@dataclass(frozen=True, slots=True)
class RouteScore:
    total_score: float
    hazard_exposure_meters: float
    distance_meters: float

    @classmethod
    def unusable(cls) -> "RouteScore":
        return cls(math.inf, math.inf, math.inf)

    @property
    def is_usable(self) -> bool:
        return math.isfinite(self.total_score)
