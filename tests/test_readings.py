import math

import pytest

from src.floodroute.models.domain import RiskLevel, StationReading
from src.floodroute.services.hazards import classify_reading, stations_from_readings


@pytest.mark.parametrize(
    "level, threshold, expected",
    [
        (0.0, 30.0, RiskLevel.CLEAR),
        (4.9, 30.0, RiskLevel.CLEAR),
        (5.0, 30.0, RiskLevel.ELEVATED),
        (19.9, 30.0, RiskLevel.ELEVATED),
        (20.0, 30.0, RiskLevel.SEVERE),
        (12.0, 10.0, RiskLevel.SEVERE),
    ],
)
def test_classify_reading(level, threshold, expected):
    assert classify_reading(level, threshold) is expected


def test_classify_reading_with_custom_marks():
    assert classify_reading(8.0, 50.0, danger_level_cm=8.0) is RiskLevel.SEVERE
    assert classify_reading(3.0, 50.0, warning_level_cm=2.0) is RiskLevel.ELEVATED


@pytest.mark.parametrize("level", [math.nan, math.inf, None, "12", True])
def test_classify_reading_rejects_invalid_levels(level):
    with pytest.raises(ValueError):
        classify_reading(level, 30.0)


def test_stations_from_readings_keep_identity_and_location():
    readings = [
        StationReading(id="S1", name="Trieu Khuc", lat=21.0, lng=105.815, level_cm=25.0, threshold_cm=30.0),
        StationReading(id="S2", name="Kim Giang", lat=20.98, lng=105.82, level_cm=1.0, threshold_cm=30.0),
    ]

    stations = stations_from_readings(readings)

    assert [(s.id, s.risk_level) for s in stations] == [("S1", RiskLevel.SEVERE), ("S2", RiskLevel.CLEAR)]
    assert stations[0].location.lat == 21.0
