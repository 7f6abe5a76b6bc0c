import math
import threading

import pytest
from fastapi.testclient import TestClient

from src.floodroute.api.routes import navigation
from src.floodroute.main import create_app
from src.floodroute.models.domain import GeoPoint
from src.floodroute.services.detour.controller import DetourController
from src.floodroute.services.routing.base import RoutingProviderError
from src.floodroute.services.routing.models import Route

ORIGIN = {"lat": 21.0, "lng": 105.80}
DESTINATION = {"lat": 21.0, "lng": 105.83}
STATION = {"id": "S1", "name": "Trieu Khuc", "lat": 21.0, "lng": 105.815, "risk_level": "severe"}


class DummyOSRM:
    """Straight legs between waypoints, one point every 0.001 degrees."""

    def __init__(self):
        self.calls = 0
        self.fail = False
        self._lock = threading.Lock()

    def route(self, waypoints):
        with self._lock:
            self.calls += 1
        if self.fail:
            raise RoutingProviderError("OSRM HTTP 503")
        points = [waypoints[0]]
        for start, end in zip(waypoints, waypoints[1:]):
            steps = max(1, math.ceil(max(abs(end.lat - start.lat), abs(end.lng - start.lng)) / 0.001 - 1e-9))
            points.extend(
                GeoPoint(
                    round(start.lat + (end.lat - start.lat) * i / steps, 6),
                    round(start.lng + (end.lng - start.lng) * i / steps, 6),
                )
                for i in range(1, steps + 1)
            )
        distance = 111_195.0 * sum(math.hypot(b.lat - a.lat, (b.lng - a.lng) * 0.9336) for a, b in zip(points, points[1:]))
        return [Route(points=tuple(points), total_distance_meters=distance, total_duration_seconds=distance / 10, name="Lang Road")]


@pytest.fixture
def provider() -> DummyOSRM:
    return DummyOSRM()


@pytest.fixture
def api_client(provider: DummyOSRM) -> TestClient:
    app = create_app()
    controller = DetourController(provider)
    app.dependency_overrides[navigation.get_detour_controller] = lambda: controller
    return TestClient(app)


def _payload(**overrides):
    payload = {
        "session_id": "rider-1",
        "origin": ORIGIN,
        "destination": DESTINATION,
        "vehicle_profile": "two_wheeled",
        "avoid_hazards": True,
        "stations": [STATION],
    }
    payload.update(overrides)
    return payload


def test_evaluate_applies_detour(api_client: TestClient, provider: DummyOSRM):
    response = api_client.post("/api/navigation/evaluate", json=_payload())

    assert response.status_code == 200
    body = response.json()
    assert body["attempt_state"] == "applied"
    assert body["status"]["is_detour"] is True
    assert body["status"]["is_hazardous"] is False
    assert len(body["waypoints"]) == 5
    assert body["highlights"] == {"type": "FeatureCollection", "features": []}
    assert provider.calls == 8


def test_evaluate_without_avoidance_highlights_hazard(api_client: TestClient):
    response = api_client.post("/api/navigation/evaluate", json=_payload(avoid_hazards=False))

    assert response.status_code == 200
    body = response.json()
    assert body["attempt_state"] == "not_attempted"
    assert body["status"]["is_hazardous"] is True
    assert body["status"]["affected_station_names"] == ["Trieu Khuc"]
    assert body["hazard_ranges"] == [[11, 19]]
    feature = body["highlights"]["features"][0]
    assert feature["geometry"]["type"] == "LineString"
    assert feature["geometry"]["coordinates"][0] == [105.811, 21.0]
    assert len(feature["geometry"]["coordinates"]) == 9
    assert body["geometry"][0] == [21.0, 105.8]


def test_evaluate_reports_routing_failure(api_client: TestClient, provider: DummyOSRM):
    provider.fail = True

    response = api_client.post("/api/navigation/evaluate", json=_payload())

    assert response.status_code == 200
    status = response.json()["status"]
    assert status["error"] == "OSRM HTTP 503"
    assert status["summary"].startswith("Routing failed")


def test_evaluate_rejects_duplicate_station_ids(api_client: TestClient):
    response = api_client.post("/api/navigation/evaluate", json=_payload(stations=[STATION, STATION]))

    assert response.status_code == 422


def test_evaluate_rejects_out_of_range_origin(api_client: TestClient):
    response = api_client.post("/api/navigation/evaluate", json=_payload(origin={"lat": 95.0, "lng": 105.8}))

    assert response.status_code == 422


def test_refresh_hazards_rescores_session(api_client: TestClient, provider: DummyOSRM):
    api_client.post("/api/navigation/evaluate", json=_payload(avoid_hazards=False))

    response = api_client.post("/api/navigation/rider-1/hazards", json={"stations": []})

    assert response.status_code == 200
    assert response.json()["status"]["is_hazardous"] is False
    assert provider.calls == 1


def test_refresh_hazards_for_unknown_session(api_client: TestClient):
    response = api_client.post("/api/navigation/nobody/hazards", json={"stations": [STATION]})

    assert response.status_code == 404


def test_forget_session(api_client: TestClient):
    api_client.post("/api/navigation/evaluate", json=_payload(avoid_hazards=False))

    assert api_client.delete("/api/navigation/rider-1").status_code == 200
    assert api_client.delete("/api/navigation/rider-1").status_code == 404


def test_classify_readings(api_client: TestClient):
    readings = [
        {"id": "S1", "name": "Trieu Khuc", "lat": 21.0, "lng": 105.815, "level_cm": 22.0, "threshold_cm": 30.0},
        {"id": "S2", "name": "Kim Giang", "lat": 20.98, "lng": 105.82, "level_cm": 6.0, "threshold_cm": 30.0},
    ]

    response = api_client.post("/api/hazards/classify", json={"readings": readings})

    assert response.status_code == 200
    assert [s["risk_level"] for s in response.json()["stations"]] == ["severe", "elevated"]


def test_health(api_client: TestClient):
    assert api_client.get("/api/health").json() == {"status": "ok"}


def test_osrm_health_reports_unconfigured(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    from src.floodroute.services.routing import osrm_client

    monkeypatch.setattr(osrm_client.settings, "osrm_base_url", None)

    response = api_client.get("/api/health/osrm")

    assert response.status_code == 200
    assert response.json() == {"service": "osrm", "healthy": False}
