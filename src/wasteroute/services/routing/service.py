"""Routing orchestration service."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ...config import settings
from ...errors import RouteComputationError
from ...models.domain import Container, Coordinate, default_depot
from ...schemas.routing import (
    CoordinateModel,
    RoutePlanResponse,
    RouteSegmentModel,
    RouteStopModel,
)
from ..containers import occupancy_status_color, select_for_collection
from ..geospatial import arrow_rotation, bearing_degrees, distance, fit_region, midpoint
from ..outputs.routing_formatter import route_steps
from .directions_client import DirectionsClient
from .metrics import build_route_info, format_distance, format_duration
from .models import CollectionPlan, RouteSegment
from .resolver import PlanningSession, RoadSegmentResolver, SegmentCallback, build_segments
from .solver import order_targets, route_through

logger = logging.getLogger(__name__)


def route_key(depot: Coordinate, selected: Sequence[Container]) -> tuple:
    """Identity of a route: the depot and the ordered selection of containers."""

    return (
        depot.as_pair(),
        tuple((container.id, container.latitude, container.longitude) for container in selected),
    )


def compute_collection_plan(
    containers: Sequence[Container],
    *,
    depot: Coordinate | None = None,
    threshold: float | None = None,
) -> CollectionPlan:
    """Select containers, order them and compute straight-line metrics."""

    limit = settings.occupancy_threshold if threshold is None else threshold
    if not 0.0 <= limit <= 1.0:
        raise ValueError(f"Occupancy threshold must be between 0 and 1, got {limit}.")
    depot = depot or default_depot()

    try:
        selected = select_for_collection(containers, limit)
        stops = order_targets(depot, selected)
        route = route_through(depot, stops)
        segments = build_segments(route)
        info = build_route_info(route, segments)
    except Exception as exc:
        logger.exception(f"Route computation failed for {len(containers)} containers")
        raise RouteComputationError(f"Failed to compute collection route: {exc}") from exc

    return CollectionPlan(
        depot=depot,
        threshold=limit,
        containers=list(containers),
        selected=selected,
        stops=stops,
        route=route,
        info=info,
    )


def _build_directions_client() -> Optional[DirectionsClient]:
    try:
        return DirectionsClient()
    except ValueError as exc:
        logger.warning(f"Directions provider not available: {exc}. Using straight-line segments.")
        return None


async def plan_collection_route(
    session: PlanningSession,
    containers: Sequence[Container],
    *,
    threshold: float | None = None,
    resolve_road_segments: bool | None = None,
    on_segment: SegmentCallback | None = None,
) -> CollectionPlan:
    """Plan the route and, when enabled, upgrade its legs to road geometry.

    The session's pass is reused while the depot and selection are unchanged,
    so repeated calls do not re-query the provider.
    """

    plan = compute_collection_plan(containers, threshold=threshold)
    resolution, started = session.pass_for(plan.route, route_key(plan.depot, plan.stops))
    if started:
        logger.info(
            f"Planned route over {len(plan.stops)} of {len(plan.containers)} containers "
            f"({format_distance(plan.info.total_distance_km)}), pass {resolution.pass_id}"
        )

    resolve = settings.resolve_road_segments if resolve_road_segments is None else resolve_road_segments
    if resolve and not resolution.started and resolution.segments:
        client = _build_directions_client()
        try:
            await RoadSegmentResolver(client).resolve(session, resolution, on_segment)
        finally:
            if client is not None:
                await client.aclose()
    elif resolve and resolution.started:
        # Another request owns this pass; report its outcome rather than a partial view.
        await resolution.finished.wait()

    try:
        plan.info = build_route_info(plan.route, resolution.segments)
    except Exception as exc:
        raise RouteComputationError(f"Failed to compute route metrics: {exc}") from exc
    plan.provider_disabled = resolution.provider_disabled
    plan.superseded = not session.is_current(resolution)
    plan.metadata = {
        "pass_id": resolution.pass_id,
        "resolution_complete": resolution.completed,
        "map_overlays": _build_map_overlays(plan),
    }
    if not plan.superseded:
        session.plan = plan
    return plan


def _build_map_overlays(plan: CollectionPlan) -> dict:
    selected_ids = {container.id for container in plan.selected}
    markers = [
        {
            "container_id": container.id,
            "container_code": container.container_code,
            "latitude": container.latitude,
            "longitude": container.longitude,
            "status_color": occupancy_status_color(container.occupancy_ratio, plan.threshold),
            "needs_collection": container.id in selected_ids,
        }
        for container in plan.containers
    ]
    arrows = []
    for segment in plan.info.segments:
        anchor = midpoint(segment.origin, segment.destination)
        arrows.append(
            {
                "segment_index": segment.index,
                "latitude": anchor.latitude,
                "longitude": anchor.longitude,
                "rotation": arrow_rotation(segment.origin, segment.destination),
                "heading": bearing_degrees(segment.origin, segment.destination),
                "color": segment.color,
            }
        )
    region = fit_region([container.position for container in plan.containers] or [plan.depot])
    return {
        "markers": markers,
        "arrows": arrows,
        "region": region,
        "steps": route_steps(plan),
    }


def _coordinate(value: Coordinate) -> CoordinateModel:
    return CoordinateModel(latitude=value.latitude, longitude=value.longitude)


def _segment_model(segment: RouteSegment) -> RouteSegmentModel:
    return RouteSegmentModel(
        index=segment.index,
        origin=_coordinate(segment.origin),
        destination=_coordinate(segment.destination),
        geometry=[_coordinate(point) for point in segment.geometry],
        distance_km=segment.distance_km,
        duration_minutes=segment.duration_minutes,
        color=segment.color,
        state=segment.state.value,
        is_fallback=segment.is_fallback,
        dashed=segment.dashed,
    )


def plan_to_response(plan: CollectionPlan) -> RoutePlanResponse:
    stops: list[RouteStopModel] = []
    previous = plan.depot
    for sequence, container in enumerate(plan.stops, start=1):
        stops.append(
            RouteStopModel(
                sequence=sequence,
                container_id=container.id,
                container_code=container.container_code,
                name=container.name,
                latitude=container.latitude,
                longitude=container.longitude,
                occupancy_ratio=container.occupancy_ratio,
                distance_from_prev_km=distance(previous, container.position),
            )
        )
        previous = container.position

    info = plan.info
    return RoutePlanResponse(
        depot=_coordinate(plan.depot),
        threshold=plan.threshold,
        container_count=len(plan.containers),
        selected_count=len(plan.selected),
        stops=stops,
        route=[_coordinate(point) for point in plan.route],
        segments=[_segment_model(segment) for segment in info.segments],
        total_distance_km=info.total_distance_km,
        road_distance_km=info.road_distance_km,
        total_duration_minutes=info.total_duration_minutes,
        formatted_distance=format_distance(info.total_distance_km),
        formatted_road_distance=format_distance(info.road_distance_km),
        formatted_duration=format_duration(info.total_duration_minutes),
        provider_disabled=plan.provider_disabled,
        superseded=plan.superseded,
        metadata=plan.metadata,
    )
