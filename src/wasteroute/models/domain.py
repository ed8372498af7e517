"""Domain models for container records and map coordinates."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import settings

COORDINATE_EPSILON = 1e-5


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A latitude/longitude pair in degrees."""

    latitude: float
    longitude: float

    def matches(self, other: "Coordinate", epsilon: float = COORDINATE_EPSILON) -> bool:
        """Return True when both axes differ by no more than ``epsilon``."""

        return (
            abs(self.latitude - other.latitude) <= epsilon
            and abs(self.longitude - other.longitude) <= epsilon
        )

    def as_pair(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(frozen=True, slots=True)
class Container:
    """Represents a waste container as reported by the container source."""

    id: int
    container_code: str
    name: str
    latitude: float
    longitude: float
    occupancy_ratio: float
    is_full: bool

    @property
    def position(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)


def default_depot() -> Coordinate:
    """Return the configured depot the truck leaves from and returns to."""

    return Coordinate(settings.depot_latitude, settings.depot_longitude)
