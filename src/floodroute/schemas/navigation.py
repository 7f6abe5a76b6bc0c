"""Navigation request/response schemas."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..models.domain import GeoPoint, HazardStation, RiskLevel, VehicleProfile


class GeoPointModel(BaseModel):
    lat: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    lng: float = Field(..., ge=-180, le=180, allow_inf_nan=False)

    def to_domain(self) -> GeoPoint:
        return GeoPoint(self.lat, self.lng)


class HazardStationModel(BaseModel):
    id: str
    name: str
    lat: float
    lng: float
    risk_level: RiskLevel = RiskLevel.CLEAR

    def to_domain(self) -> HazardStation:
        return HazardStation(id=self.id, name=self.name, lat=self.lat, lng=self.lng, risk_level=self.risk_level)


def _unique_station_ids(stations: List[HazardStationModel]) -> List[HazardStationModel]:
    seen: set[str] = set()
    for station in stations:
        if station.id in seen:
            raise ValueError(f"Duplicate station id '{station.id}' in hazard snapshot.")
        seen.add(station.id)
    return stations


class NavigationRequestModel(BaseModel):
    session_id: str = Field(..., min_length=1, description="Identifies the traveler whose detour state is tracked.")
    origin: GeoPointModel
    destination: GeoPointModel
    vehicle_profile: VehicleProfile = VehicleProfile.TWO_WHEELED
    avoid_hazards: bool = False
    stations: List[HazardStationModel] = Field(default_factory=list)

    @field_validator("stations")
    @classmethod
    def _check_station_ids(cls, value: List[HazardStationModel]) -> List[HazardStationModel]:
        return _unique_station_ids(value)


class HazardRefreshRequest(BaseModel):
    stations: List[HazardStationModel] = Field(default_factory=list)

    @field_validator("stations")
    @classmethod
    def _check_station_ids(cls, value: List[HazardStationModel]) -> List[HazardStationModel]:
        return _unique_station_ids(value)


class RouteStatusModel(BaseModel):
    distance_meters: float
    duration_seconds: float
    summary: str
    is_hazardous: bool
    affected_station_names: List[str]
    is_detour: bool = False
    error: Optional[str] = None


class NavigationResponse(BaseModel):
    status: RouteStatusModel
    attempt_state: str
    waypoints: List[GeoPointModel]
    geometry: List[List[float]]
    hazard_ranges: List[List[int]]
    highlights: Dict
