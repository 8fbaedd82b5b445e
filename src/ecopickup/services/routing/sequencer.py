"""Nearest-neighbour visit ordering for small pickup routes.

Each step travels to the closest stop not yet visited. This is a greedy
approximation of the travelling-salesperson tour and can be noticeably longer
than optimal; routes are expected to hold a handful of pickups per shift.
"""

from __future__ import annotations

from typing import Optional, Sequence

from ...models.domain import GeoPoint
from ..geospatial import distance_km
from .models import RouteConfig, RoutePlan, RouteStop, RouteSummary


def sequence_route(
    start: GeoPoint,
    stops: Sequence[GeoPoint],
    stop_ids: Optional[Sequence[Optional[str]]] = None,
) -> list[RouteStop]:
    """Order ``stops`` by repeatedly visiting the nearest unvisited one.

    Equal distances resolve to the stop that appears first in ``stops``.
    """
    if stop_ids is not None and len(stop_ids) != len(stops):
        raise ValueError("stop_ids must have the same length as stops")

    remaining = list(range(len(stops)))
    route: list[RouteStop] = []
    current = start

    while remaining:
        nearest_pos = 0
        nearest_distance = distance_km(current, stops[remaining[0]])
        for pos in range(1, len(remaining)):
            candidate_distance = distance_km(current, stops[remaining[pos]])
            if candidate_distance < nearest_distance:
                nearest_distance = candidate_distance
                nearest_pos = pos

        index = remaining.pop(nearest_pos)
        route.append(
            RouteStop(
                point=stops[index],
                sequence=len(route) + 1,
                distance_from_prev_km=nearest_distance,
                stop_id=stop_ids[index] if stop_ids is not None else None,
            )
        )
        current = stops[index]

    return route


def summarize_route(route: Sequence[RouteStop], config: RouteConfig | None = None) -> RouteSummary:
    """Total distance (2 dp) and estimated minutes (whole minutes) for a sequenced route."""
    config = config or RouteConfig.from_settings()
    if not route:
        return RouteSummary(total_distance_km=0.0, stop_count=0, estimated_minutes=0.0)

    total_distance = sum(stop.distance_from_prev_km for stop in route)
    minutes = (total_distance / config.speed_kmh) * 60 + len(route) * config.service_minutes_per_stop
    return RouteSummary(
        total_distance_km=round(total_distance, 2),
        stop_count=len(route),
        estimated_minutes=float(round(minutes)),
    )


def plan_route(
    start: GeoPoint,
    stops: Sequence[GeoPoint],
    stop_ids: Optional[Sequence[Optional[str]]] = None,
    config: RouteConfig | None = None,
) -> RoutePlan:
    route = sequence_route(start, stops, stop_ids)
    return RoutePlan(start=start, stops=route, summary=summarize_route(route, config))
