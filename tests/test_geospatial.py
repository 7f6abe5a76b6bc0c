import math

import pytest

from src.floodroute.models.domain import GeoPoint
from src.floodroute.services.geospatial import (
    Side,
    as_geo_point,
    distance_meters,
    haversine_km,
    midpoint,
    perpendicular_offset,
    side_of,
    unit_vector,
)


def test_distance_one_degree_of_latitude():
    assert distance_meters(GeoPoint(21.0, 105.8), GeoPoint(22.0, 105.8)) == pytest.approx(111_195, rel=1e-3)


def test_distance_urban_scale_is_symmetric():
    a = GeoPoint(21.0285, 105.8542)
    b = GeoPoint(21.0245, 105.8412)
    assert distance_meters(a, b) == pytest.approx(distance_meters(b, a))
    assert distance_meters(a, b) == pytest.approx(haversine_km(a.lat, a.lng, b.lat, b.lng) * 1000)
    assert distance_meters(a, a) == 0.0


def test_midpoint_is_degree_mean():
    point = midpoint(GeoPoint(21.0, 105.8), GeoPoint(21.01, 105.82))
    assert point.lat == pytest.approx(21.005)
    assert point.lng == pytest.approx(105.81)


def test_perpendicular_offset_left_and_right_of_eastward_segment():
    a = GeoPoint(21.0, 105.80)
    b = GeoPoint(21.0, 105.82)

    left = perpendicular_offset(a, b, 0.002, Side.LEFT)
    right = perpendicular_offset(a, b, 0.002, Side.RIGHT)

    # Heading east, left is north.
    assert left.lat == pytest.approx(21.002)
    assert left.lng == pytest.approx(105.81)
    assert right.lat == pytest.approx(20.998)
    assert right.lng == pytest.approx(105.81)


def test_perpendicular_offset_degenerate_segment_returns_none():
    point = GeoPoint(21.0, 105.8)
    assert perpendicular_offset(point, point, 0.004, Side.LEFT) is None


def test_side_of():
    a = GeoPoint(21.0, 105.80)
    b = GeoPoint(21.0, 105.82)
    assert side_of(a, b, GeoPoint(21.01, 105.81)) is Side.LEFT
    assert side_of(a, b, GeoPoint(20.99, 105.81)) is Side.RIGHT
    assert side_of(a, a, GeoPoint(20.99, 105.81)) is None


def test_unit_vector():
    assert unit_vector(3.0, 4.0) == pytest.approx((0.6, 0.8))
    assert unit_vector(0.0, 0.0) is None
    assert unit_vector(math.nan, 1.0) is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        (GeoPoint(21.0, 105.8), GeoPoint(21.0, 105.8)),
        ((21.0, 105.8), GeoPoint(21.0, 105.8)),
        ([21, 105], GeoPoint(21.0, 105.0)),
        ({"lat": 21.0, "lng": 105.8}, GeoPoint(21.0, 105.8)),
        ({"lat": 21.0, "lon": 105.8}, GeoPoint(21.0, 105.8)),
    ],
)
def test_as_geo_point_accepts_point_like_values(raw, expected):
    assert as_geo_point(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        None,
        (21.0,),
        ("21.0", "105.8"),
        (math.nan, 105.8),
        (21.0, math.inf),
        (True, 105.8),
        (95.0, 105.8),
        (21.0, 190.0),
        {"lat": 21.0},
        GeoPoint(math.nan, 105.8),
        "21.0,105.8",
    ],
)
def test_as_geo_point_rejects_malformed_values(raw):
    assert as_geo_point(raw) is None
