"""Routing endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from ...errors import RouteComputationError
from ...schemas.routing import RoutePlanRequest, RoutePlanResponse
from ...services.export.geojson import export_plan_to_geojson
from ...services.outputs.routing_formatter import routing_plan_to_csv
from ...services.routing.models import CollectionPlan
from ...services.routing.resolver import PlanningSession
from ...services.routing.service import plan_collection_route, plan_to_response
from .containers import load_containers

router = APIRouter(prefix="/routes", tags=["routes"])

logger = logging.getLogger(__name__)


def _current_plan(request: Request) -> CollectionPlan:
    session: PlanningSession = request.app.state.planning_session
    if session.plan is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No route has been planned yet.")
    return session.plan


@router.post("/plan", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
async def plan(payload: RoutePlanRequest, request: Request) -> RoutePlanResponse:
    session: PlanningSession = request.app.state.planning_session
    stale = False
    if payload.containers is not None:
        containers = [record.to_domain() for record in payload.containers]
    else:
        containers, stale = await load_containers(request.app.state.container_repository)

    try:
        result = await plan_collection_route(
            session,
            containers,
            threshold=payload.threshold,
            resolve_road_segments=payload.resolve_road_segments,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except RouteComputationError as exc:
        logger.exception(f"Error planning collection route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Route could not be calculated: {exc}",
        ) from exc

    response = plan_to_response(result)
    response.metadata["stale_containers"] = stale
    return response


@router.get("/current", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
def current(request: Request) -> RoutePlanResponse:
    return plan_to_response(_current_plan(request))


@router.get("/current.csv", response_class=PlainTextResponse, status_code=status.HTTP_200_OK)
def current_csv(request: Request) -> PlainTextResponse:
    return PlainTextResponse(routing_plan_to_csv(_current_plan(request)), media_type="text/csv")


@router.get("/current.geojson", status_code=status.HTTP_200_OK)
def current_geojson(request: Request) -> dict:
    return export_plan_to_geojson(_current_plan(request))
