"""Domain models for geographic points and hazard stations."""

from dataclasses import dataclass
from enum import Enum


class RiskLevel(str, Enum):
    """Risk reported by a hazard station."""

    CLEAR = "clear"
    ELEVATED = "elevated"
    SEVERE = "severe"


class VehicleProfile(str, Enum):
    """Vehicle classes with different tolerance to standing water."""

    TWO_WHEELED = "two_wheeled"
    FOUR_WHEELED = "four_wheeled"


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float

    def as_tuple(self) -> tuple[float, float]:
        return (self.lat, self.lng)


@dataclass(frozen=True, slots=True)
class HazardStation:
    """Represents a fixed sensor and the risk it currently reports."""

    id: str
    name: str
    lat: float
    lng: float
    risk_level: RiskLevel = RiskLevel.CLEAR

    @property
    def location(self) -> GeoPoint:
        return GeoPoint(self.lat, self.lng)


@dataclass(frozen=True, slots=True)
class StationReading:
    """Raw water-level reading reported by a station."""

    id: str
    name: str
    lat: float
    lng: float
    level_cm: float
    threshold_cm: float
