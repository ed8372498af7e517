"""Sequential road-geometry resolution for route segments.

A :class:`PlanningSession` holds the route currently on screen and the
:class:`ResolutionPass` working on it. Every new route starts a new pass; a
pass that is no longer current stops requesting segments and drops whatever
answer it was waiting for.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Hashable, Optional, Sequence

from ...errors import ProviderDisabledError, SegmentResolutionFailure
from ...models.domain import Coordinate
from .colors import colors_for
from .directions_client import DirectionsClient
from .models import RoadLeg, RouteSegment, SegmentState

logger = logging.getLogger(__name__)

SegmentCallback = Callable[[RouteSegment], Awaitable[None]]


def build_segments(route: Sequence[Coordinate]) -> list[RouteSegment]:
    """Straight segments for each consecutive pair of route points, all pending."""

    count = max(len(route) - 1, 0)
    colors = colors_for(count)
    return [
        RouteSegment(
            index=index,
            origin=route[index],
            destination=route[index + 1],
            geometry=[route[index], route[index + 1]],
            color=colors[index],
        )
        for index in range(count)
    ]


@dataclass(slots=True)
class ResolutionPass:
    pass_id: int
    route_key: Hashable
    route: tuple[Coordinate, ...]
    segments: list[RouteSegment]
    provider_disabled: bool = False
    started: bool = False
    discarded: bool = False
    completed: bool = False
    # Set once resolution has stopped, whether completed or superseded.
    finished: asyncio.Event = field(default_factory=asyncio.Event, repr=False, compare=False)

    def mark_finished(self) -> None:
        self.finished.set()


@dataclass(slots=True)
class PlanningSession:
    """Current route and resolution state owned by the calling application."""

    current_pass: Optional[ResolutionPass] = None
    plan: Optional[object] = None
    _counter: itertools.count = field(default_factory=lambda: itertools.count(1))

    def begin_pass(self, route: Sequence[Coordinate], route_key: Hashable | None = None) -> ResolutionPass:
        """Start a fresh pass for ``route``, superseding any pass in progress."""

        route = tuple(route)
        previous = self.current_pass
        if previous is not None and not previous.completed:
            previous.discarded = True
            logger.info(f"Superseding resolution pass {previous.pass_id}")
        resolution = ResolutionPass(
            pass_id=next(self._counter),
            route_key=route_key if route_key is not None else route,
            route=route,
            segments=build_segments(route),
        )
        if not resolution.segments:
            # Depot-only route: nothing to resolve.
            resolution.completed = True
            resolution.mark_finished()
        self.current_pass = resolution
        return resolution

    def pass_for(self, route: Sequence[Coordinate], route_key: Hashable | None = None) -> tuple[ResolutionPass, bool]:
        """Return the pass for ``route`` and whether it was newly started.

        The current pass is reused while the route key is unchanged.
        """

        key = route_key if route_key is not None else tuple(route)
        current = self.current_pass
        if current is not None and current.route_key == key:
            return current, False
        return self.begin_pass(route, key), True

    def is_current(self, resolution: ResolutionPass) -> bool:
        return self.current_pass is resolution and not resolution.discarded


def _fallback(segment: RouteSegment) -> None:
    segment.state = SegmentState.FALLBACK
    segment.geometry = [segment.origin, segment.destination]
    segment.distance_km = None
    segment.duration_minutes = None


def _anchor_geometry(segment: RouteSegment, geometry: Sequence[Coordinate]) -> list[Coordinate]:
    points = list(geometry)
    if points and points[0].matches(segment.origin):
        points[0] = segment.origin
    else:
        points.insert(0, segment.origin)
    if len(points) > 1 and points[-1].matches(segment.destination):
        points[-1] = segment.destination
    else:
        points.append(segment.destination)
    return points


class RoadSegmentResolver:
    """Upgrades straight segments to road paths one request at a time."""

    def __init__(self, client: DirectionsClient | None) -> None:
        self.client = client

    async def resolve(
        self,
        session: PlanningSession,
        resolution: ResolutionPass,
        on_segment: SegmentCallback | None = None,
    ) -> ResolutionPass:
        """Walk the pass's segments in index order until done or superseded."""

        resolution.started = True
        try:
            await self._walk(session, resolution, on_segment)
        finally:
            resolution.mark_finished()
        return resolution

    async def _walk(
        self,
        session: PlanningSession,
        resolution: ResolutionPass,
        on_segment: SegmentCallback | None,
    ) -> None:
        for segment in resolution.segments:
            if not session.is_current(resolution):
                logger.info(f"Stopping superseded resolution pass {resolution.pass_id} at segment {segment.index}")
                return
            if segment.state in (SegmentState.RESOLVED, SegmentState.FALLBACK):
                continue

            leg = await self._request(resolution, segment)
            if not session.is_current(resolution):
                logger.info(
                    f"Discarding segment {segment.index} result for superseded pass {resolution.pass_id}"
                )
                return

            if leg is None:
                _fallback(segment)
            else:
                segment.geometry = _anchor_geometry(segment, leg.geometry)
                segment.distance_km = leg.distance_km
                segment.duration_minutes = leg.duration_minutes
                segment.state = SegmentState.RESOLVED

            if on_segment is not None:
                await on_segment(segment)

        resolution.completed = True

    async def _request(self, resolution: ResolutionPass, segment: RouteSegment) -> Optional[RoadLeg]:
        if resolution.provider_disabled or self.client is None:
            return None

        segment.state = SegmentState.RESOLVING
        try:
            return await self.client.compute_route(segment.origin, segment.destination)
        except ProviderDisabledError as exc:
            resolution.provider_disabled = True
            logger.warning(f"Directions provider disabled for pass {resolution.pass_id}: {exc}")
        except SegmentResolutionFailure as exc:
            logger.warning(f"Segment {segment.index} falls back to a straight line: {exc}")
        return None
