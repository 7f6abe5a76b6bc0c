"""Hazard detection helpers."""

from .detector import affected_station_names, detect, hazard_ranges, is_station_risky
from .models import HazardSegment
from .readings import classify_reading, station_from_reading, stations_from_readings

__all__ = [
    "HazardSegment",
    "detect",
    "hazard_ranges",
    "is_station_risky",
    "affected_station_names",
    "classify_reading",
    "station_from_reading",
    "stations_from_readings",
]
