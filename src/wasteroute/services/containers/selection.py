"""Container selection and occupancy helpers."""

from __future__ import annotations

from typing import Optional, Sequence

from ...config import settings
from ...models.domain import Container

FULL_STATUS_COLOR = "#ff0000"
OK_STATUS_COLOR = "#00cc00"


def _resolve_threshold(threshold: Optional[float]) -> float:
    return settings.occupancy_threshold if threshold is None else threshold


def select_for_collection(
    containers: Sequence[Container],
    threshold: Optional[float] = None,
) -> list[Container]:
    """Return containers whose occupancy ratio reaches the threshold, in input order."""

    limit = _resolve_threshold(threshold)
    return [container for container in containers if container.occupancy_ratio >= limit]


def occupancy_status_color(ratio: float, threshold: Optional[float] = None) -> str:
    return FULL_STATUS_COLOR if ratio >= _resolve_threshold(threshold) else OK_STATUS_COLOR


def summarize_containers(
    containers: Sequence[Container],
    threshold: Optional[float] = None,
) -> dict:
    limit = _resolve_threshold(threshold)
    total = len(containers)
    selected = sum(1 for container in containers if container.occupancy_ratio >= limit)
    reported_full = sum(1 for container in containers if container.is_full)
    mean_occupancy = 0.0
    if total:
        mean_occupancy = round(sum(container.occupancy_ratio for container in containers) / total, 3)
    return {
        "total": total,
        "needs_collection": selected,
        "reported_full": reported_full,
        "mean_occupancy": mean_occupancy,
        "threshold": limit,
    }
