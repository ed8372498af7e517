import asyncio

import pytest

from src.wasteroute.errors import ProviderDisabledError, RouteComputationError
from src.wasteroute.models.domain import Container, Coordinate
from src.wasteroute.services.routing import service as routing_service
from src.wasteroute.services.routing.models import RoadLeg, SegmentState
from src.wasteroute.services.routing.resolver import PlanningSession

DEPOT = Coordinate(40.9765, 28.8706)


def _container(cid: int, lat: float, lon: float, ratio: float) -> Container:
    return Container(
        id=cid,
        container_code=f"K-{cid:03d}",
        name=f"Container {cid}",
        latitude=lat,
        longitude=lon,
        occupancy_ratio=ratio,
        is_full=ratio >= 1.0,
    )


def _scenario() -> list[Container]:
    return [
        _container(1, 40.98, 28.88, 0.9),
        _container(2, 40.97, 28.86, 0.5),
        _container(3, 40.975, 28.875, 0.75),
    ]


class DummyDirections:
    instances: list["DummyDirections"] = []

    def __init__(self, *args, **kwargs):
        self.calls = []
        self.closed = False
        DummyDirections.instances.append(self)

    async def compute_route(self, origin: Coordinate, destination: Coordinate) -> RoadLeg:
        self.calls.append((origin, destination))
        via = Coordinate((origin.latitude + destination.latitude) / 2, origin.longitude)
        return RoadLeg(geometry=[origin, via, destination], distance_km=2.0, duration_minutes=5.0)

    async def aclose(self):
        self.closed = True


class ForbiddenDirections(DummyDirections):
    async def compute_route(self, origin: Coordinate, destination: Coordinate) -> RoadLeg:
        self.calls.append((origin, destination))
        raise ProviderDisabledError("Directions provider returned HTTP 403")


@pytest.fixture(autouse=True)
def reset_dummy_instances():
    DummyDirections.instances = []
    yield
    DummyDirections.instances = []


def test_compute_collection_plan_orders_selected_containers():
    plan = routing_service.compute_collection_plan(_scenario(), depot=DEPOT, threshold=0.7)

    assert [c.id for c in plan.selected] == [1, 3]
    assert [c.id for c in plan.stops] == [3, 1]
    assert plan.route == (DEPOT, Coordinate(40.975, 28.875), Coordinate(40.98, 28.88), DEPOT)
    assert len(plan.info.segments) == 3
    assert all(s.state is SegmentState.PENDING for s in plan.info.segments)
    assert plan.info.total_distance_km == pytest.approx(plan.info.road_distance_km)
    assert plan.info.total_distance_km > 0


def test_empty_selection_routes_depot_only():
    containers = [_container(1, 40.98, 28.88, 0.1)]

    plan = routing_service.compute_collection_plan(containers, depot=DEPOT, threshold=0.7)

    assert plan.stops == []
    assert plan.route == (DEPOT,)
    assert plan.info.segments == []
    assert plan.info.total_distance_km == 0.0


@pytest.mark.parametrize("threshold", [-0.1, 1.5])
def test_invalid_threshold_is_rejected(threshold):
    with pytest.raises(ValueError):
        routing_service.compute_collection_plan(_scenario(), depot=DEPOT, threshold=threshold)


def test_unexpected_failure_becomes_route_computation_error(monkeypatch):
    def broken(depot, targets):
        raise ZeroDivisionError("bad input")

    monkeypatch.setattr(routing_service, "order_targets", broken)

    with pytest.raises(RouteComputationError, match="bad input"):
        routing_service.compute_collection_plan(_scenario(), depot=DEPOT, threshold=0.7)


def test_plan_collection_route_resolves_road_segments(monkeypatch):
    monkeypatch.setattr(routing_service, "DirectionsClient", DummyDirections)
    session = PlanningSession()

    plan = asyncio.run(
        routing_service.plan_collection_route(session, _scenario(), threshold=0.7, resolve_road_segments=True)
    )

    client = DummyDirections.instances[0]
    assert len(client.calls) == 3
    assert client.closed
    assert all(s.state is SegmentState.RESOLVED for s in plan.info.segments)
    assert plan.info.road_distance_km == pytest.approx(6.0)
    assert plan.info.total_duration_minutes == pytest.approx(15.0)
    assert plan.metadata["resolution_complete"] is True
    assert not plan.superseded
    assert session.plan is plan

    overlays = plan.metadata["map_overlays"]
    assert len(overlays["markers"]) == 3
    assert [m["needs_collection"] for m in overlays["markers"]] == [True, False, True]
    assert len(overlays["arrows"]) == 3
    assert [step["kind"] for step in overlays["steps"]] == ["depot_start", "container", "container", "depot_end"]


def test_unchanged_selection_reuses_resolved_pass(monkeypatch):
    monkeypatch.setattr(routing_service, "DirectionsClient", DummyDirections)
    session = PlanningSession()

    first = asyncio.run(
        routing_service.plan_collection_route(session, _scenario(), threshold=0.7, resolve_road_segments=True)
    )
    second = asyncio.run(
        routing_service.plan_collection_route(session, _scenario(), threshold=0.7, resolve_road_segments=True)
    )

    assert len(DummyDirections.instances) == 1
    assert second.metadata["pass_id"] == first.metadata["pass_id"]
    assert all(s.state is SegmentState.RESOLVED for s in second.info.segments)


def test_plan_without_resolution_keeps_straight_segments(monkeypatch):
    monkeypatch.setattr(routing_service, "DirectionsClient", DummyDirections)
    session = PlanningSession()

    plan = asyncio.run(
        routing_service.plan_collection_route(session, _scenario(), threshold=0.7, resolve_road_segments=False)
    )

    assert DummyDirections.instances == []
    assert all(s.state is SegmentState.PENDING and s.dashed for s in plan.info.segments)
    assert plan.metadata["resolution_complete"] is False


def test_forbidden_provider_marks_plan(monkeypatch):
    monkeypatch.setattr(routing_service, "DirectionsClient", ForbiddenDirections)
    session = PlanningSession()

    plan = asyncio.run(
        routing_service.plan_collection_route(session, _scenario(), threshold=0.7, resolve_road_segments=True)
    )

    assert plan.provider_disabled is True
    assert len(DummyDirections.instances[0].calls) == 1
    assert all(s.state is SegmentState.FALLBACK for s in plan.info.segments)
    assert plan.info.road_distance_km == pytest.approx(plan.info.total_distance_km)


def test_missing_api_key_falls_back_without_client(monkeypatch):
    def unavailable():
        raise ValueError("Directions API key is not configured.")

    monkeypatch.setattr(routing_service, "DirectionsClient", unavailable)
    session = PlanningSession()

    plan = asyncio.run(
        routing_service.plan_collection_route(session, _scenario(), threshold=0.7, resolve_road_segments=True)
    )

    assert all(s.state is SegmentState.FALLBACK for s in plan.info.segments)
    assert plan.provider_disabled is False


def test_plan_to_response_lists_stops_with_distances():
    plan = routing_service.compute_collection_plan(_scenario(), depot=DEPOT, threshold=0.7)

    response = routing_service.plan_to_response(plan)

    assert [stop.container_id for stop in response.stops] == [3, 1]
    assert [stop.sequence for stop in response.stops] == [1, 2]
    assert response.container_count == 3
    assert response.selected_count == 2
    assert response.formatted_distance.endswith(" km")
    assert response.formatted_duration.endswith("dk")
    assert len(response.segments) == 3
    assert response.segments[0].color == "#FF6B6B"


class SlowDirections(DummyDirections):
    async def compute_route(self, origin: Coordinate, destination: Coordinate) -> RoadLeg:
        for _ in range(3):
            await asyncio.sleep(0)
        return await super().compute_route(origin, destination)


def test_concurrent_plans_for_one_route_report_the_finished_pass(monkeypatch):
    monkeypatch.setattr(routing_service, "DirectionsClient", SlowDirections)
    session = PlanningSession()

    async def plan_twice():
        return await asyncio.gather(
            routing_service.plan_collection_route(session, _scenario(), threshold=0.7, resolve_road_segments=True),
            routing_service.plan_collection_route(session, _scenario(), threshold=0.7, resolve_road_segments=True),
        )

    first, second = asyncio.run(plan_twice())

    assert len(DummyDirections.instances) == 1
    assert len(DummyDirections.instances[0].calls) == 3
    for plan in (first, second):
        assert [s.state for s in plan.info.segments] == [SegmentState.RESOLVED] * 3
        assert plan.info.road_distance_km == pytest.approx(6.0)
        assert plan.info.total_duration_minutes == pytest.approx(15.0)
        assert plan.metadata["resolution_complete"] is True
        assert not plan.superseded
    assert first.metadata["pass_id"] == second.metadata["pass_id"]
    assert all(a is not b for a, b in zip(first.info.segments, second.info.segments))
    assert session.plan is second


def test_plan_info_is_not_changed_by_later_resolution(monkeypatch):
    monkeypatch.setattr(routing_service, "DirectionsClient", DummyDirections)
    session = PlanningSession()

    straight = asyncio.run(
        routing_service.plan_collection_route(session, _scenario(), threshold=0.7, resolve_road_segments=False)
    )
    resolved = asyncio.run(
        routing_service.plan_collection_route(session, _scenario(), threshold=0.7, resolve_road_segments=True)
    )

    assert all(s.state is SegmentState.PENDING for s in straight.info.segments)
    assert straight.info.road_distance_km == pytest.approx(straight.info.total_distance_km)
    assert all(s.state is SegmentState.RESOLVED for s in resolved.info.segments)
    assert resolved.info.road_distance_km == pytest.approx(6.0)


def test_nothing_to_collect_is_reported_complete(monkeypatch):
    monkeypatch.setattr(routing_service, "DirectionsClient", DummyDirections)
    containers = [_container(1, 40.98, 28.88, 0.1)]

    plan = asyncio.run(
        routing_service.plan_collection_route(
            PlanningSession(), containers, threshold=0.7, resolve_road_segments=True
        )
    )

    assert plan.route == (DEPOT,)
    assert plan.metadata["resolution_complete"] is True
    assert DummyDirections.instances == []


def test_segment_arrows_carry_screen_rotation_and_heading():
    plan = asyncio.run(
        routing_service.plan_collection_route(
            PlanningSession(), _scenario(), threshold=0.7, resolve_road_segments=False
        )
    )

    arrows = plan.metadata["map_overlays"]["arrows"]
    # Depot to container 3 runs east-south-east.
    assert 90 < arrows[0]["heading"] < 180
    assert -90 < arrows[0]["rotation"] < 0
    assert all(0 <= arrow["heading"] < 360 for arrow in arrows)
