"""Routing request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from .containers import ContainerRecord


class CoordinateModel(BaseModel):
    latitude: float
    longitude: float


class RoutePlanRequest(BaseModel):
    containers: Optional[List[ContainerRecord]] = Field(
        default=None,
        description="Container snapshot to plan over. Fetched from the container source when omitted.",
    )
    threshold: Optional[float] = Field(default=None, ge=0, le=1)
    resolve_road_segments: Optional[bool] = Field(
        default=None,
        description="Upgrade straight legs to road geometry. Defaults to the server setting.",
    )


class RouteStopModel(BaseModel):
    sequence: int
    container_id: int
    container_code: str
    name: str
    latitude: float
    longitude: float
    occupancy_ratio: float
    distance_from_prev_km: float


class RouteSegmentModel(BaseModel):
    index: int
    origin: CoordinateModel
    destination: CoordinateModel
    geometry: List[CoordinateModel]
    distance_km: Optional[float] = None
    duration_minutes: Optional[float] = None
    color: str
    state: str
    is_fallback: bool
    dashed: bool


class RoutePlanResponse(BaseModel):
    depot: CoordinateModel
    threshold: float
    container_count: int
    selected_count: int
    stops: List[RouteStopModel]
    route: List[CoordinateModel]
    segments: List[RouteSegmentModel]
    total_distance_km: float
    road_distance_km: float
    total_duration_minutes: float
    formatted_distance: str
    formatted_road_distance: str
    formatted_duration: str
    provider_disabled: bool
    superseded: bool
    metadata: dict
