"""Route distance, duration and label helpers."""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Sequence

from ...config import settings
from ...models.domain import Coordinate
from ..geospatial import distance
from .models import RouteInfo, RouteSegment, SegmentState

HOURS_SUFFIX = "s"
MINUTES_SUFFIX = "dk"
UNKNOWN_DURATION = "--"


def total_distance(route: Sequence[Coordinate]) -> float:
    """Sum of great-circle distances between consecutive route points, in km."""

    total = 0.0
    for index in range(len(route) - 1):
        total += distance(route[index], route[index + 1])
    return total


def format_distance(km: float) -> str:
    return f"{km:.2f} km"


def format_duration(minutes: float) -> str:
    """Render minutes as ``"2s 5dk"`` from an hour upwards, otherwise ``"45dk"``.

    Non-finite input renders as ``"--"``.
    """

    if not math.isfinite(minutes):
        return UNKNOWN_DURATION
    rounded = math.floor(minutes + 0.5)
    if rounded >= 60:
        hours, remainder = divmod(rounded, 60)
        return f"{hours}{HOURS_SUFFIX} {remainder}{MINUTES_SUFFIX}"
    return f"{rounded}{MINUTES_SUFFIX}"


def estimate_duration_minutes(km: float, average_speed_kmh: float | None = None) -> float:
    speed = average_speed_kmh or settings.average_speed_kmh
    return (km / speed) * 60.0


def build_route_info(
    route: Sequence[Coordinate],
    segments: Sequence[RouteSegment],
    average_speed_kmh: float | None = None,
) -> RouteInfo:
    """Aggregate straight-line and road totals for a route.

    Resolved segments contribute provider distance and duration; every other
    segment contributes its great-circle distance and a speed-based estimate.
    The returned segments are copies, so later resolution leaves them as they were.
    """

    road_distance = 0.0
    duration = 0.0
    for segment in segments:
        if segment.state is SegmentState.RESOLVED and segment.distance_km is not None:
            road_distance += segment.distance_km
            if segment.duration_minutes is not None:
                duration += segment.duration_minutes
            else:
                duration += estimate_duration_minutes(segment.distance_km, average_speed_kmh)
            continue
        straight = distance(segment.origin, segment.destination)
        road_distance += straight
        duration += estimate_duration_minutes(straight, average_speed_kmh)

    return RouteInfo(
        total_distance_km=total_distance(route),
        road_distance_km=road_distance,
        total_duration_minutes=duration,
        segments=[replace(segment, geometry=list(segment.geometry)) for segment in segments],
    )
