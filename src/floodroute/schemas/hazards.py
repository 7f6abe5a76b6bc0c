"""Sensor reading classification schemas."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from ..models.domain import RiskLevel, StationReading


class StationReadingModel(BaseModel):
    id: str
    name: str
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    level_cm: float = Field(..., allow_inf_nan=False, description="Current water level in centimeters.")
    threshold_cm: float = Field(..., allow_inf_nan=False, description="Station-specific alert threshold.")

    def to_domain(self) -> StationReading:
        return StationReading(
            id=self.id,
            name=self.name,
            lat=self.lat,
            lng=self.lng,
            level_cm=self.level_cm,
            threshold_cm=self.threshold_cm,
        )


class ClassifyReadingsRequest(BaseModel):
    readings: List[StationReadingModel]


class ClassifiedStationModel(BaseModel):
    id: str
    name: str
    lat: float
    lng: float
    risk_level: RiskLevel


class ClassifyReadingsResponse(BaseModel):
    stations: List[ClassifiedStationModel]
