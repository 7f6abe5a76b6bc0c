"""Derive station risk levels from raw water-level readings."""

from __future__ import annotations

import math
from typing import Iterable

from ...config import settings
from ...models.domain import HazardStation, RiskLevel, StationReading


def classify_reading(
    level_cm: float,
    threshold_cm: float,
    *,
    danger_level_cm: float | None = None,
    warning_level_cm: float | None = None,
) -> RiskLevel:
    """Map a water level to a risk level.

    Severe when the level reaches the absolute danger mark or the station's own
    threshold, elevated from the warning mark upward, clear otherwise.
    """

    for value in (level_cm, threshold_cm):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise ValueError(f"Invalid water level reading: {value!r}")

    danger = settings.reading_danger_level_cm if danger_level_cm is None else danger_level_cm
    warning = settings.reading_warning_level_cm if warning_level_cm is None else warning_level_cm

    if level_cm >= danger or level_cm >= threshold_cm:
        return RiskLevel.SEVERE
    if level_cm >= warning:
        return RiskLevel.ELEVATED
    return RiskLevel.CLEAR


def station_from_reading(reading: StationReading) -> HazardStation:
    return HazardStation(
        id=reading.id,
        name=reading.name,
        lat=reading.lat,
        lng=reading.lng,
        risk_level=classify_reading(reading.level_cm, reading.threshold_cm),
    )


def stations_from_readings(readings: Iterable[StationReading]) -> list[HazardStation]:
    return [station_from_reading(reading) for reading in readings]
