"""Container request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import Container


class ContainerRecord(BaseModel):
    """Container as published by the container source (``lang``/``long`` are latitude/longitude)."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    container_code: str
    name: str = ""
    latitude: float = Field(..., alias="lang", ge=-90, le=90)
    longitude: float = Field(..., alias="long", ge=-180, le=180)
    occupancy_ratio: float = Field(..., ge=0, le=1)
    is_full: bool = False

    def to_domain(self) -> Container:
        return Container(
            id=self.id,
            container_code=self.container_code,
            name=self.name,
            latitude=self.latitude,
            longitude=self.longitude,
            occupancy_ratio=self.occupancy_ratio,
            is_full=self.is_full,
        )


class ContainerModel(BaseModel):
    id: int
    container_code: str
    name: str
    latitude: float
    longitude: float
    occupancy_ratio: float
    is_full: bool
    needs_collection: bool
    status_color: str


class ContainerSummary(BaseModel):
    total: int
    needs_collection: int
    reported_full: int
    mean_occupancy: float
    threshold: float


class ContainerListResponse(BaseModel):
    containers: List[ContainerModel]
    summary: ContainerSummary
    fetched_at: Optional[str] = None
    stale: bool = False
    error: Optional[str] = Field(default=None, description="Last fetch error when serving a stale snapshot.")
