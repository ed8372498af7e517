"""GeoJSON export utilities."""

from __future__ import annotations

from typing import Any, Dict, List

from ...models.domain import Coordinate
from ..containers import occupancy_status_color
from ..routing.metrics import format_distance, format_duration
from ..routing.models import CollectionPlan

DEPOT_COLOR = "#1976D2"


def _position(coordinate: Coordinate) -> List[float]:
    # GeoJSON positions are [lon, lat]
    return [coordinate.longitude, coordinate.latitude]


def export_plan_to_geojson(plan: CollectionPlan) -> Dict[str, Any]:
    """Convert a collection plan to a GeoJSON FeatureCollection.

    Args:
        plan: Planned (and possibly road-resolved) collection route

    Returns:
        FeatureCollection with one LineString per segment, one Point per
        container and one Point for the depot
    """
    features: List[Dict[str, Any]] = []

    for segment in plan.info.segments:
        if len(segment.geometry) < 2:
            continue
        features.append(
            {
                "type": "Feature",
                "geometry": {
                    "type": "LineString",
                    "coordinates": [_position(point) for point in segment.geometry],
                },
                "properties": {
                    "kind": "segment",
                    "segment_index": segment.index,
                    "state": segment.state.value,
                    "color": segment.color,
                    "dashed": segment.dashed,
                    "distance_km": segment.distance_km,
                    "duration_minutes": segment.duration_minutes,
                },
            }
        )

    selected_ids = {container.id for container in plan.selected}
    for container in plan.containers:
        features.append(
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": _position(container.position)},
                "properties": {
                    "kind": "container",
                    "container_id": container.id,
                    "container_code": container.container_code,
                    "name": container.name,
                    "occupancy_ratio": container.occupancy_ratio,
                    "needs_collection": container.id in selected_ids,
                    "color": occupancy_status_color(container.occupancy_ratio, plan.threshold),
                },
            }
        )

    features.append(
        {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": _position(plan.depot)},
            "properties": {"kind": "depot", "color": DEPOT_COLOR},
        }
    )

    return {
        "type": "FeatureCollection",
        "features": features,
        "properties": {
            "total_distance": format_distance(plan.info.total_distance_km),
            "total_duration": format_duration(plan.info.total_duration_minutes),
            "stop_count": len(plan.stops),
            "provider_disabled": plan.provider_disabled,
        },
    }
