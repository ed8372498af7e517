"""Route group exports."""

from . import containers, health, routes

__all__ = ["containers", "routes", "health"]
