"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ...models.domain import Container, Coordinate


class SegmentState(str, Enum):
    PENDING = "pending"
    RESOLVING = "resolving"
    RESOLVED = "resolved"
    FALLBACK = "fallback"


@dataclass(slots=True)
class RouteSegment:
    index: int
    origin: Coordinate
    destination: Coordinate
    geometry: List[Coordinate]
    color: str
    state: SegmentState = SegmentState.PENDING
    distance_km: Optional[float] = None
    duration_minutes: Optional[float] = None

    @property
    def is_fallback(self) -> bool:
        return self.state is SegmentState.FALLBACK

    @property
    def dashed(self) -> bool:
        return self.state is not SegmentState.RESOLVED


@dataclass(slots=True)
class RoadLeg:
    """Provider answer for one origin/destination pair."""

    geometry: List[Coordinate]
    distance_km: float
    duration_minutes: float


@dataclass(slots=True)
class RouteInfo:
    total_distance_km: float
    road_distance_km: float
    total_duration_minutes: float
    segments: List[RouteSegment]


@dataclass(slots=True)
class CollectionPlan:
    depot: Coordinate
    threshold: float
    containers: List[Container]
    selected: List[Container]
    stops: List[Container]
    route: tuple[Coordinate, ...]
    info: RouteInfo
    provider_disabled: bool = False
    superseded: bool = False
    metadata: dict = field(default_factory=dict)
