"""Export services."""

from .geojson import export_plan_to_geojson

__all__ = ["export_plan_to_geojson"]
