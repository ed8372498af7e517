"""Serializers for routing outputs."""

from __future__ import annotations

import csv
import io

from ..routing.metrics import format_distance
from ..routing.models import CollectionPlan


def route_steps(plan: CollectionPlan) -> list[dict]:
    """Step list for a route details panel: depot, each stop, depot."""

    steps: list[dict] = [{"step": 1, "kind": "depot_start", "label": "Depot"}]
    for position, container in enumerate(plan.stops, start=2):
        steps.append(
            {
                "step": position,
                "kind": "container",
                "label": container.container_code,
                "container_id": container.id,
                "occupancy_percent": round(container.occupancy_ratio * 100),
            }
        )
    if plan.stops:
        steps.append({"step": len(plan.stops) + 2, "kind": "depot_end", "label": "Depot"})
    return steps


def routing_plan_to_csv(plan: CollectionPlan) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "segment",
        "state",
        "origin_latitude",
        "origin_longitude",
        "destination_latitude",
        "destination_longitude",
        "geometry_points",
        "distance_km",
        "duration_minutes",
        "color",
        "total_distance",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    total_label = format_distance(plan.info.total_distance_km)
    for segment in plan.info.segments:
        writer.writerow(
            {
                "segment": segment.index,
                "state": segment.state.value,
                "origin_latitude": segment.origin.latitude,
                "origin_longitude": segment.origin.longitude,
                "destination_latitude": segment.destination.latitude,
                "destination_longitude": segment.destination.longitude,
                "geometry_points": len(segment.geometry),
                "distance_km": "" if segment.distance_km is None else round(segment.distance_km, 3),
                "duration_minutes": "" if segment.duration_minutes is None else round(segment.duration_minutes, 1),
                "color": segment.color,
                "total_distance": total_label,
            }
        )
    return buffer.getvalue()
