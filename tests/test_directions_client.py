import asyncio
import json

import httpx
import pytest

from src.wasteroute.config import settings
from src.wasteroute.errors import ProviderDisabledError, SegmentResolutionFailure
from src.wasteroute.models.domain import Coordinate
from src.wasteroute.services.routing.directions_client import (
    FIELD_MASK,
    DirectionsClient,
    decode_polyline,
    parse_duration_seconds,
    parse_route_response,
)

ORIGIN = Coordinate(38.5, -120.2)
DESTINATION = Coordinate(43.252, -126.453)
SAMPLE_POLYLINE = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"


def _route_payload(encoded: str = SAMPLE_POLYLINE, meters: int = 1234, duration: str = "754s") -> dict:
    return {
        "routes": [
            {
                "distanceMeters": meters,
                "duration": duration,
                "polyline": {"encodedPolyline": encoded},
            }
        ]
    }


def _compute(handler, origin: Coordinate = ORIGIN, destination: Coordinate = DESTINATION):
    async def run():
        async with DirectionsClient(api_key="test-key", transport=httpx.MockTransport(handler)) as client:
            return await client.compute_route(origin, destination)

    return asyncio.run(run())


def test_decode_polyline_reference_string():
    points = decode_polyline(SAMPLE_POLYLINE)

    assert [p.latitude for p in points] == pytest.approx([38.5, 40.7, 43.252])
    assert [p.longitude for p in points] == pytest.approx([-120.2, -120.95, -126.453])


def test_decode_empty_polyline():
    assert decode_polyline("") == []


def test_parse_duration_seconds():
    assert parse_duration_seconds("754s") == 754.0
    assert parse_duration_seconds("12.5s") == 12.5
    assert parse_duration_seconds(30) == 30.0
    with pytest.raises(ValueError):
        parse_duration_seconds("soon")


def test_compute_route_sends_drive_request_with_field_mask():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_route_payload())

    leg = _compute(handler)

    assert seen["headers"]["X-Goog-Api-Key"] == "test-key"
    assert seen["headers"]["X-Goog-FieldMask"] == FIELD_MASK
    body = seen["body"]
    assert body["travelMode"] == "DRIVE"
    assert body["routingPreference"] == "TRAFFIC_AWARE"
    assert body["origin"]["location"]["latLng"] == {"latitude": 38.5, "longitude": -120.2}
    assert body["destination"]["location"]["latLng"] == {"latitude": 43.252, "longitude": -126.453}
    assert body["computeAlternativeRoutes"] is False

    assert leg.distance_km == pytest.approx(1.234)
    assert leg.duration_minutes == pytest.approx(754 / 60)
    assert len(leg.geometry) == 3


def test_forbidden_response_disables_provider():
    with pytest.raises(ProviderDisabledError):
        _compute(lambda request: httpx.Response(403, json={"error": {"status": "PERMISSION_DENIED"}}))


def test_server_error_is_a_segment_failure_only():
    with pytest.raises(SegmentResolutionFailure) as excinfo:
        _compute(lambda request: httpx.Response(500, text="upstream"))
    assert not isinstance(excinfo.value, ProviderDisabledError)


def test_transport_error_is_a_segment_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(SegmentResolutionFailure):
        _compute(handler)


def test_invalid_json_is_a_segment_failure():
    with pytest.raises(SegmentResolutionFailure):
        _compute(lambda request: httpx.Response(200, text="not json"))


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {},
        {"routes": []},
        {"routes": [{"duration": "10s"}]},
        {"routes": [{"duration": "later", "polyline": {"encodedPolyline": SAMPLE_POLYLINE}}]},
        {"routes": [{"duration": "10s", "polyline": {"encodedPolyline": "_p~iF~ps|U"}}]},
    ],
)
def test_malformed_payloads_are_rejected(payload):
    with pytest.raises(SegmentResolutionFailure):
        parse_route_response(payload)


def test_client_requires_api_key(monkeypatch):
    monkeypatch.setattr(settings, "directions_api_key", None)
    with pytest.raises(ValueError):
        DirectionsClient()
