"""Container endpoints."""

from __future__ import annotations

from typing import Optional, Sequence

from fastapi import APIRouter, HTTPException, Query, Request, status

from ...config import settings
from ...data.containers_repository import ContainerRepository
from ...errors import DataFetchError
from ...models.domain import Container
from ...schemas.containers import ContainerListResponse, ContainerModel, ContainerSummary
from ...services.containers import occupancy_status_color, select_for_collection, summarize_containers

router = APIRouter(prefix="/containers", tags=["containers"])


def _to_models(containers: Sequence[Container], threshold: float) -> list[ContainerModel]:
    return [
        ContainerModel(
            id=container.id,
            container_code=container.container_code,
            name=container.name,
            latitude=container.latitude,
            longitude=container.longitude,
            occupancy_ratio=container.occupancy_ratio,
            is_full=container.is_full,
            needs_collection=container.occupancy_ratio >= threshold,
            status_color=occupancy_status_color(container.occupancy_ratio, threshold),
        )
        for container in containers
    ]


async def load_containers(repository: ContainerRepository) -> tuple[tuple[Container, ...], bool]:
    """Fetch a snapshot, translating an unrecoverable fetch failure into HTTP 502."""
    try:
        return await repository.snapshot()
    except DataFetchError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc


def _build_response(
    repository: ContainerRepository,
    containers: Sequence[Container],
    threshold: float,
    stale: bool,
    listed: Sequence[Container],
) -> ContainerListResponse:
    return ContainerListResponse(
        containers=_to_models(listed, threshold),
        summary=ContainerSummary(**summarize_containers(containers, threshold)),
        fetched_at=repository.fetched_at.isoformat() if repository.fetched_at else None,
        stale=stale,
        error=repository.last_error if stale else None,
    )


@router.get("", response_model=ContainerListResponse, status_code=status.HTTP_200_OK)
async def list_containers(
    request: Request,
    threshold: Optional[float] = Query(default=None, ge=0, le=1),
) -> ContainerListResponse:
    repository: ContainerRepository = request.app.state.container_repository
    limit = settings.occupancy_threshold if threshold is None else threshold
    containers, stale = await load_containers(repository)
    return _build_response(repository, containers, limit, stale, containers)


@router.get("/collection", response_model=ContainerListResponse, status_code=status.HTTP_200_OK)
async def list_collection_containers(
    request: Request,
    threshold: Optional[float] = Query(default=None, ge=0, le=1),
) -> ContainerListResponse:
    """Containers whose occupancy reaches the threshold, in source order."""
    repository: ContainerRepository = request.app.state.container_repository
    limit = settings.occupancy_threshold if threshold is None else threshold
    containers, stale = await load_containers(repository)
    selected = select_for_collection(containers, limit)
    return _build_response(repository, containers, limit, stale, selected)
