#!/usr/bin/env python3
"""Helper script to check and create the .env file for the route planner."""

from pathlib import Path
import os
import sys

TEMPLATE = """# Container source
WASTEROUTE_CONTAINER_SOURCE_URL=https://kmtgarbage.vercel.app/containers/
WASTEROUTE_CONTAINER_FETCH_TIMEOUT_SECONDS=10

# Depot and selection
WASTEROUTE_DEPOT_LATITUDE=40.9765
WASTEROUTE_DEPOT_LONGITUDE=28.8706
WASTEROUTE_OCCUPANCY_THRESHOLD=0.7

# Directions provider (optional - straight-line segments are used when empty)
WASTEROUTE_DIRECTIONS_API_KEY=
WASTEROUTE_RESOLVE_ROAD_SEGMENTS=true

# API Configuration
WASTEROUTE_API_PREFIX=/api
# WASTEROUTE_FRONTEND_ALLOWED_ORIGINS - JSON array or comma-separated list
"""


def _mask(value: str) -> str:
    if len(value) > 12:
        return value[:6] + "..." + value[-4:]
    return "***"


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Route Planner Environment Checker")
    print("=" * 60)
    print()

    if env_file.exists():
        print(f"✅ Found .env file at: {env_file}")
        print()
        print("Current contents:")
        print("-" * 60)
        for line in env_file.read_text(encoding="utf-8").splitlines():
            if line.startswith("WASTEROUTE_DIRECTIONS_API_KEY=") and line.split("=", 1)[1].strip():
                name, value = line.split("=", 1)
                print(f"{name}={_mask(value.strip())}")
            else:
                print(line)
        print("-" * 60)
        print()
    else:
        print(f"❌ .env file NOT found at: {env_file}")
        print("Creating template .env file...")
        env_file.write_text(TEMPLATE, encoding="utf-8")
        print(f"✅ Created .env file at: {env_file}")
        print()
        return

    print("Testing config loading...")
    print()
    try:
        sys.path.insert(0, str(project_root / "src"))
        os.chdir(project_root)
        from wasteroute.config import settings

        print(f"✅ Container source: {settings.container_source_url}")
        print(f"✅ Depot: ({settings.depot_latitude}, {settings.depot_longitude})")
        print(f"✅ Occupancy threshold: {settings.occupancy_threshold}")
        if settings.directions_api_key:
            print(f"✅ Directions API key: {_mask(settings.directions_api_key)}")
        else:
            print("⚠️  Directions API key not set - routes will use straight-line segments")
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        print()
        print("Make sure you're running this from the project root directory")


if __name__ == "__main__":
    main()
