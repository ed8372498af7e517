"""HTTP client for the road directions provider."""

from __future__ import annotations

import logging
import re
from typing import Optional

import httpx

from ...config import settings
from ...errors import ProviderDisabledError, SegmentResolutionFailure
from ...models.domain import Coordinate
from .models import RoadLeg

FIELD_MASK = "routes.duration,routes.distanceMeters,routes.polyline.encodedPolyline"
_DURATION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)s\s*$")

logger = logging.getLogger(__name__)


class DirectionsClient:
    """Requests one driving leg at a time from a Routes-API compatible provider.

    Failures are reported as :class:`SegmentResolutionFailure`; an HTTP 403 is
    reported as :class:`ProviderDisabledError` so callers can stop asking.
    The client never retries.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        travel_mode: str | None = None,
        routing_preference: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.directions_api_key
        if not self.api_key:
            raise ValueError("Directions API key is not configured.")
        self.base_url = base_url or settings.directions_base_url
        self.travel_mode = travel_mode or settings.directions_travel_mode
        self.routing_preference = routing_preference or settings.directions_routing_preference
        self.timeout = timeout if timeout is not None else settings.directions_timeout_seconds
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=transport,
        )

    async def __aenter__(self) -> "DirectionsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _build_body(self, origin: Coordinate, destination: Coordinate) -> dict:
        return {
            "origin": {"location": {"latLng": {"latitude": origin.latitude, "longitude": origin.longitude}}},
            "destination": {
                "location": {"latLng": {"latitude": destination.latitude, "longitude": destination.longitude}}
            },
            "travelMode": self.travel_mode,
            "routingPreference": self.routing_preference,
            "computeAlternativeRoutes": False,
            "routeModifiers": {
                "avoidTolls": False,
                "avoidHighways": False,
                "avoidFerries": False,
            },
            "languageCode": "en-US",
            "units": "METRIC",
        }

    async def compute_route(self, origin: Coordinate, destination: Coordinate) -> RoadLeg:
        """Fetch the road path between two points."""

        headers = {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": FIELD_MASK,
        }
        try:
            response = await self._client.post(
                self.base_url, json=self._build_body(origin, destination), headers=headers
            )
        except httpx.TimeoutException as exc:
            raise SegmentResolutionFailure(f"Directions request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise SegmentResolutionFailure(f"Directions request failed: {exc}") from exc

        if response.status_code == 403:
            raise ProviderDisabledError("Directions provider denied access (HTTP 403).")
        if response.is_error:
            raise SegmentResolutionFailure(f"Directions provider returned HTTP {response.status_code}.")

        try:
            data = response.json()
        except ValueError as exc:
            raise SegmentResolutionFailure("Directions response is not valid JSON.") from exc
        return parse_route_response(data)


def parse_route_response(data: object) -> RoadLeg:
    """Convert a provider payload into a :class:`RoadLeg`."""

    if not isinstance(data, dict):
        raise SegmentResolutionFailure("Directions response is not an object.")
    routes = data.get("routes")
    if not isinstance(routes, list) or not routes:
        raise SegmentResolutionFailure("Directions response contains no routes.")

    route = routes[0]
    try:
        encoded = route["polyline"]["encodedPolyline"]
        distance_meters = float(route.get("distanceMeters", 0))
        duration_seconds = parse_duration_seconds(route["duration"])
        geometry = decode_polyline(encoded)
    except (KeyError, TypeError, ValueError, IndexError) as exc:
        raise SegmentResolutionFailure(f"Malformed directions route: {exc}") from exc

    if len(geometry) < 2:
        raise SegmentResolutionFailure("Directions polyline has fewer than two points.")

    return RoadLeg(
        geometry=geometry,
        distance_km=distance_meters / 1000.0,
        duration_minutes=duration_seconds / 60.0,
    )


def parse_duration_seconds(value: object) -> float:
    """Parse a protobuf duration string such as ``"754s"``."""

    if isinstance(value, (int, float)):
        return float(value)
    match = _DURATION_PATTERN.match(str(value))
    if not match:
        raise ValueError(f"Unrecognised duration '{value}'.")
    return float(match.group(1))


def decode_polyline(polyline: str) -> list[Coordinate]:
    """Decode an encoded polyline string (1e-5 precision) into coordinates.

    Each value is a zig-zag encoded delta split into 5-bit chunks, offset by
    63; a chunk with bit 0x20 set continues the current value.
    """
    coordinates: list[Coordinate] = []
    index = 0
    lat = 0
    lon = 0

    while index < len(polyline):
        values = []
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
            values.append(~(result >> 1) if (result & 1) else (result >> 1))
        lat += values[0]
        lon += values[1]
        coordinates.append(Coordinate(lat / 1e5, lon / 1e5))

    return coordinates


async def check_health(api_key: Optional[str] = None, transport: httpx.AsyncBaseTransport | None = None) -> bool:
    """Probe the provider with a short leg near the depot."""

    key = api_key or settings.directions_api_key
    if not key:
        return False
    origin = Coordinate(settings.depot_latitude, settings.depot_longitude)
    destination = Coordinate(settings.depot_latitude + 0.001, settings.depot_longitude + 0.001)
    try:
        async with DirectionsClient(api_key=key, timeout=5.0, transport=transport) as client:
            await client.compute_route(origin, destination)
        return True
    except SegmentResolutionFailure as exc:
        logger.warning(f"Directions health probe failed: {exc}")
        return False
