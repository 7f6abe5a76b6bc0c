import math

from src.floodroute.models.domain import GeoPoint, HazardStation, RiskLevel, VehicleProfile
from src.floodroute.services.hazards import affected_station_names, detect, hazard_ranges, is_station_risky
from src.floodroute.services.routing.models import Route


def _line(lat: float, start_lng: float, count: int, step: float = 0.001) -> list[GeoPoint]:
    return [GeoPoint(lat, round(start_lng + step * i, 6)) for i in range(count)]


def _route(points) -> Route:
    return Route(points=tuple(points), total_distance_meters=3000.0, total_duration_seconds=300.0, name="Test Road")


def _station(sid: str, lat: float, lng: float, risk: RiskLevel = RiskLevel.SEVERE) -> HazardStation:
    return HazardStation(id=sid, name=f"Station {sid}", lat=lat, lng=lng, risk_level=risk)


def test_route_far_from_stations_has_no_segments():
    route = _route(_line(21.0, 105.80, 31))
    stations = [_station("S1", 21.05, 105.815)]

    assert detect(route, stations, VehicleProfile.TWO_WHEELED) == []


def test_single_station_produces_one_segment():
    route = _route(_line(21.0, 105.80, 31))
    station = _station("S1", 21.0, 105.815)

    segments = detect(route, [station], VehicleProfile.FOUR_WHEELED)

    assert len(segments) == 1
    assert segments[0].start_index == 11
    assert segments[0].end_index == 19
    assert segments[0].causing_station == station


def test_route_entirely_inside_radius_is_one_full_segment():
    route = _route(_line(21.0, 105.813, 5))
    segments = detect(route, [_station("S1", 21.0, 105.815)], VehicleProfile.TWO_WHEELED)

    assert [(s.start_index, s.end_index) for s in segments] == [(0, 4)]


def test_segments_are_ordered_and_do_not_overlap():
    route = _route(_line(21.0, 105.80, 61))
    stations = [_station("S2", 21.0, 105.845), _station("S1", 21.0, 105.815)]

    segments = detect(route, stations, VehicleProfile.TWO_WHEELED)

    assert len(segments) == 2
    assert [s.causing_station.id for s in segments] == ["S1", "S2"]
    previous_end = -1
    for segment in segments:
        assert previous_end < segment.start_index <= segment.end_index
        previous_end = segment.end_index


def test_vehicle_profile_controls_risky_levels():
    elevated = _station("S1", 21.0, 105.815, RiskLevel.ELEVATED)
    route = _route(_line(21.0, 105.80, 31))

    assert is_station_risky(elevated, VehicleProfile.TWO_WHEELED)
    assert not is_station_risky(elevated, VehicleProfile.FOUR_WHEELED)
    assert detect(route, [elevated], VehicleProfile.FOUR_WHEELED) == []
    assert len(detect(route, [elevated], VehicleProfile.TWO_WHEELED)) == 1
    assert detect(route, [_station("S2", 21.0, 105.815, RiskLevel.CLEAR)], VehicleProfile.TWO_WHEELED) == []


def test_malformed_points_are_skipped_without_breaking_the_run():
    points: list = _line(21.0, 105.80, 31)
    points[15] = None
    points[16] = (math.nan, 105.816)
    points[2] = "garbage"
    route = _route(points)

    segments = detect(route, [_station("S1", 21.0, 105.815)], VehicleProfile.TWO_WHEELED)

    assert [(s.start_index, s.end_index) for s in segments] == [(11, 19)]


def test_run_reaching_last_point_is_closed():
    route = _route(_line(21.0, 105.80, 16))

    segments = detect(route, [_station("S1", 21.0, 105.815)], VehicleProfile.TWO_WHEELED)

    assert [(s.start_index, s.end_index) for s in segments] == [(11, 15)]


def test_nearest_station_taken_over_mid_run():
    route = _route(_line(21.0, 105.80, 31))
    first = _station("S1", 21.0, 105.812)
    second = _station("S2", 21.0, 105.818)

    segments = detect(route, [first, second], VehicleProfile.TWO_WHEELED)

    assert len(segments) == 1
    assert segments[0].causing_station == second


def test_invalid_stations_are_ignored():
    route = _route(_line(21.0, 105.80, 31))
    broken = _station("S1", math.nan, 105.815)

    assert detect(route, [broken, None], VehicleProfile.TWO_WHEELED) == []


def test_empty_route_has_no_segments():
    assert detect(None, [_station("S1", 21.0, 105.815)], VehicleProfile.TWO_WHEELED) == []
    assert detect(_route([]), [_station("S1", 21.0, 105.815)], VehicleProfile.TWO_WHEELED) == []


def test_custom_radius():
    route = _route(_line(21.0, 105.80, 31))
    segments = detect(route, [_station("S1", 21.0, 105.815)], VehicleProfile.TWO_WHEELED, radius_meters=150)

    assert [(s.start_index, s.end_index) for s in segments] == [(14, 16)]


def test_ranges_and_names_for_highlighting():
    route = _route(_line(21.0, 105.80, 61))
    stations = [_station("S1", 21.0, 105.815), _station("S2", 21.0, 105.845)]
    segments = detect(route, stations, VehicleProfile.TWO_WHEELED)

    assert hazard_ranges(segments) == [(11, 19), (41, 49)]
    assert affected_station_names(segments) == ["Station S1", "Station S2"]
