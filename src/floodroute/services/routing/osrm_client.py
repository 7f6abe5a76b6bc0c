"""HTTP client for interacting with OSRM services."""

from __future__ import annotations

import logging
import time
from typing import Any, Sequence

import httpx

from ...config import settings
from ...models.domain import GeoPoint
from .base import RoutingProviderError
from .models import Route

logger = logging.getLogger(__name__)


class OSRMClient:
    """Routing provider backed by the OSRM ``route/v1`` endpoint."""

    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        alternatives: bool = False,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.osrm_base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.osrm_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.osrm_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.osrm_backoff_seconds
        self.alternatives = alternatives
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        """Create a client per request; detour candidates are routed from worker threads."""
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self._transport,
        )

    def _request(self, url: str, params: dict[str, str]) -> dict:
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    if 400 <= response.status_code < 500 and response.status_code not in (408, 429):
                        # Bad request or no route for these coordinates; retrying will not help.
                        raise RoutingProviderError(_format_osrm_error(response))
                    response.raise_for_status()
                    data = response.json()
                    if not isinstance(data, dict):
                        raise RoutingProviderError("OSRM response is not a JSON object.")
                    if data.get("code") != "Ok":
                        error_msg = data.get("message", data.get("code", "Unknown OSRM route error"))
                        raise RoutingProviderError(f"OSRM route request failed: {error_msg}")
                    return data
                except RoutingProviderError:
                    raise
                except httpx.HTTPStatusError as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise RoutingProviderError(_format_osrm_error(e.response)) from e
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.TimeoutException as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"OSRM route request timed out after {self.max_retries} attempts: {e}")
                        raise RoutingProviderError(f"OSRM route request timed out: {e}") from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"OSRM route timeout, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except (httpx.TransportError, OSError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise RoutingProviderError(
                            f"Failed to connect to OSRM service at {self.base_url}: {e}"
                        ) from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"OSRM network error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                    time.sleep(wait_time)
                except ValueError as e:
                    # Undecodable JSON body
                    attempt += 1
                    if attempt > self.max_retries:
                        raise RoutingProviderError(f"Invalid OSRM response: {e}") from e
                    time.sleep(self.backoff_seconds * attempt)
        finally:
            client.close()

    def route(self, waypoints: Sequence[GeoPoint]) -> list[Route]:
        """Get routes through the waypoints, in order, using the OSRM route endpoint.

        Args:
            waypoints: Ordered points the route must pass through (at least two)

        Returns:
            Routes ordered as OSRM ranks them, with decoded geometry
        """
        if len(waypoints) < 2:
            raise ValueError("At least two waypoints are required for OSRM route.")

        # OSRM route endpoint expects coordinates as "lon,lat;lon,lat;..."
        coordinate_str = ";".join(f"{point.lng},{point.lat}" for point in waypoints)
        params = {
            "overview": "full",
            "geometries": "polyline",
            "steps": "false",
            "alternatives": "true" if self.alternatives else "false",
        }
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"

        data = self._request(url, params)
        routes = [_parse_route(item) for item in data.get("routes") or []]
        routes = [route for route in routes if route is not None]
        if not routes:
            raise RoutingProviderError("OSRM returned no usable routes.")
        return routes


def _format_osrm_error(resp: httpx.Response) -> str:
    try:
        data = resp.json()
        if isinstance(data, dict) and (data.get("code") or data.get("message")):
            return f"OSRM {resp.status_code} {data.get('code', '')}: {data.get('message', '')}".strip()
    except ValueError:
        pass
    return f"OSRM HTTP {resp.status_code}"


def _parse_route(item: Any) -> Route | None:
    if not isinstance(item, dict):
        return None
    geometry = item.get("geometry")
    try:
        points = decode_polyline(geometry) if isinstance(geometry, str) else []
    except IndexError:
        logger.warning("Discarding OSRM route with truncated polyline geometry")
        return None
    if len(points) < 2:
        return None
    summaries = [leg.get("summary") for leg in item.get("legs") or [] if isinstance(leg, dict)]
    name = ", ".join(summary for summary in summaries if summary)
    return Route(
        points=tuple(GeoPoint(lat, lon) for lat, lon in points),
        total_distance_meters=float(item.get("distance") or 0.0),
        total_duration_seconds=float(item.get("duration") or 0.0),
        name=name or "Route",
    )


def decode_polyline(polyline: str) -> list[tuple[float, float]]:
    """Decode Google polyline string to list of (lat, lon) coordinates.

    OSRM uses Google's polyline encoding format (precision 5) for route geometry.
    """
    coordinates = []
    index = 0
    lat = 0
    lon = 0

    while index < len(polyline):
        deltas = []
        for _ in range(2):
            shift = 0
            result = 0
            while True:
                b = ord(polyline[index]) - 63
                index += 1
                result |= (b & 0x1f) << shift
                shift += 5
                if b < 0x20:
                    break
            deltas.append(~(result >> 1) if (result & 1) else (result >> 1))
        lat += deltas[0]
        lon += deltas[1]
        coordinates.append((lat / 1e5, lon / 1e5))

    return coordinates


def check_health(base_url: str | None = None, transport: httpx.BaseTransport | None = None) -> bool:
    """Check OSRM service health by routing between two nearby points.

    Public OSRM endpoints may not have a /health endpoint.
    """
    base = base_url or settings.osrm_base_url
    if not base:
        return False
    try:
        client = OSRMClient(base_url=base, timeout=5.0, max_retries=0, transport=transport)
        client.route([GeoPoint(21.0285, 105.8542), GeoPoint(21.0245, 105.8412)])
        return True
    except (RoutingProviderError, ValueError):
        return False
