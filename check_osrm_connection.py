#!/usr/bin/env python3
"""Verify that the configured OSRM service can route a short trip.

Run from the repository root: ``python check_osrm_connection.py``.
"""

import sys

from src.floodroute.config import settings
from src.floodroute.models.domain import GeoPoint
from src.floodroute.services.routing.base import RoutingProviderError
from src.floodroute.services.routing.osrm_client import OSRMClient, check_health


def main():
    print("=" * 60)
    print("OSRM Connection Test")
    print("=" * 60)
    print()

    print("1. Checking OSRM configuration...")
    if not settings.osrm_base_url:
        print("   [ERROR] OSRM base URL is not configured")
        print("   Please set FLOODROUTE_OSRM_BASE_URL in your .env file")
        return 1

    print(f"   [OK] OSRM Base URL: {settings.osrm_base_url}")
    print(f"   [OK] OSRM Profile: {settings.osrm_profile}")
    print()

    print("2. Testing OSRM health check...")
    if not check_health():
        print("   [ERROR] OSRM service is not responding")
        return 1
    print("   [OK] OSRM service is healthy and accessible!")
    print()

    print("3. Testing OSRM route request through a via-point...")
    # Hanoi: Thanh Xuan to Cau Giay, pinned through Nga Tu So
    waypoints = [
        GeoPoint(20.9937, 105.8079),
        GeoPoint(21.0034, 105.8197),
        GeoPoint(21.0362, 105.7905),
    ]
    try:
        routes = OSRMClient().route(waypoints)
    except RoutingProviderError as e:
        print(f"   [ERROR] Route request failed: {e}")
        return 1

    route = routes[0]
    print("   [OK] Route request successful!")
    print(f"   [OK] {route.name}: {route.total_distance_meters:.0f} m, {route.total_duration_seconds:.0f} s")
    print(f"   [OK] Geometry has {len(route.points)} points")
    print()

    print("=" * 60)
    print("[SUCCESS] OSRM is connected and working!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
