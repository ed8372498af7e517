"""Container service helpers."""

from .selection import (
    occupancy_status_color,
    select_for_collection,
    summarize_containers,
)

__all__ = [
    "select_for_collection",
    "occupancy_status_color",
    "summarize_containers",
]
