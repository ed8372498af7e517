"""Nearest-neighbour route construction for a single collection truck."""

from __future__ import annotations

import math
from typing import Sequence

from ...models.domain import Container, Coordinate
from ..geospatial import distance


def order_targets(depot: Coordinate, targets: Sequence[Container]) -> list[Container]:
    """Return the containers in greedy nearest-neighbour visiting order.

    From the current position the closest unvisited container is taken next.
    The scan runs left to right with a strict comparison, so on an exact tie
    the container listed first in ``targets`` wins.
    """

    visited = [False] * len(targets)
    ordered: list[Container] = []
    current = depot

    for _ in range(len(targets)):
        best_distance = math.inf
        best_index = -1
        for index, target in enumerate(targets):
            if visited[index]:
                continue
            candidate = distance(current, target.position)
            if candidate < best_distance:
                best_distance = candidate
                best_index = index

        if best_index == -1:
            # Only reachable when every remaining distance is NaN.
            best_index = visited.index(False)

        visited[best_index] = True
        ordered.append(targets[best_index])
        current = targets[best_index].position

    return ordered


def plan_route(depot: Coordinate, targets: Sequence[Container]) -> tuple[Coordinate, ...]:
    """Build the depot loop visiting every target once.

    An empty target list yields ``(depot,)``, meaning no trip.
    """

    return route_through(depot, order_targets(depot, targets))


def route_through(depot: Coordinate, stops: Sequence[Container]) -> tuple[Coordinate, ...]:
    """Depot, the stops in the given order, then the depot again."""

    if not stops:
        return (depot,)
    return (depot, *(container.position for container in stops), depot)
