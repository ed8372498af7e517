"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Optional, Sequence

from ..models.domain import Coordinate

EARTH_RADIUS_KM = 6371.0
REGION_PADDING = 1.2
MIN_REGION_DELTA = 0.008


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in kilometres between two coordinates."""

    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)


def bearing_degrees(a: Coordinate, b: Coordinate) -> float:
    """Initial great-circle bearing from ``a`` to ``b``, clockwise from true north."""

    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    delta_lambda = math.radians(b.longitude - a.longitude)
    y = math.sin(delta_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(delta_lambda)
    return (math.degrees(math.atan2(y, x)) + 360) % 360


def midpoint(a: Coordinate, b: Coordinate) -> Coordinate:
    return Coordinate((a.latitude + b.latitude) / 2, (a.longitude + b.longitude) / 2)


def arrow_rotation(a: Coordinate, b: Coordinate) -> float:
    """Screen rotation (degrees, counter-clockwise from east) for a marker pointing from a to b."""

    d_lon = b.longitude - a.longitude
    d_lat = b.latitude - a.latitude
    return math.degrees(math.atan2(d_lat, d_lon))


def fit_region(
    coordinates: Sequence[Coordinate],
    padding: float = REGION_PADDING,
    min_delta: float = MIN_REGION_DELTA,
) -> Optional[dict]:
    """Return a map region centred on the coordinates with padded spans.

    The centre is the mean position; each delta is the coordinate span times
    ``padding``, never smaller than ``min_delta``.
    """

    if not coordinates:
        return None

    latitudes = [coord.latitude for coord in coordinates]
    longitudes = [coord.longitude for coord in coordinates]
    return {
        "latitude": sum(latitudes) / len(latitudes),
        "longitude": sum(longitudes) / len(longitudes),
        "latitude_delta": max(min_delta, (max(latitudes) - min(latitudes)) * padding),
        "longitude_delta": max(min_delta, (max(longitudes) - min(longitudes)) * padding),
    }
