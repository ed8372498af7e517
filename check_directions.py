#!/usr/bin/env python3
"""Manual probe of the directions provider using the configured API key."""

import asyncio
import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from wasteroute.config import settings
from wasteroute.errors import ProviderDisabledError, SegmentResolutionFailure
from wasteroute.models.domain import Coordinate, default_depot
from wasteroute.services.routing.directions_client import DirectionsClient


async def probe() -> int:
    print("=" * 60)
    print("Directions Provider Connection Test")
    print("=" * 60)
    print()

    print("1. Checking configuration...")
    if not settings.directions_api_key:
        print("   [ERROR] WASTEROUTE_DIRECTIONS_API_KEY is not configured")
        return 1
    print(f"   [OK] Endpoint: {settings.directions_base_url}")
    print(f"   [OK] Travel mode: {settings.directions_travel_mode} ({settings.directions_routing_preference})")
    print()

    print("2. Requesting a short leg from the depot...")
    origin = default_depot()
    destination = Coordinate(origin.latitude + 0.0035, origin.longitude + 0.0094)
    try:
        async with DirectionsClient() as client:
            leg = await client.compute_route(origin, destination)
    except ProviderDisabledError as e:
        print(f"   [ERROR] Access denied: {e}")
        return 1
    except SegmentResolutionFailure as e:
        print(f"   [ERROR] Request failed: {e}")
        return 1

    print(f"   [OK] {len(leg.geometry)} polyline points")
    print(f"   [OK] Distance: {leg.distance_km:.2f} km, duration: {leg.duration_minutes:.1f} min")
    print()
    print("=" * 60)
    print("[SUCCESS] Directions provider is reachable!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(probe()))
