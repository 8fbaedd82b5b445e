"""Route planning service."""

from __future__ import annotations

import logging

from ...schemas.geo import GeoPointModel
from ...schemas.routing import RoutePlanRequest, RoutePlanResponse, RouteStopModel, RouteSummaryModel
from .models import RouteConfig, RoutePlan
from .sequencer import plan_route


def _build_config(payload: RoutePlanRequest) -> RouteConfig:
    base = RouteConfig.from_settings()
    return RouteConfig(
        speed_kmh=payload.speed_kmh if payload.speed_kmh is not None else base.speed_kmh,
        service_minutes_per_stop=payload.service_minutes_per_stop
        if payload.service_minutes_per_stop is not None
        else base.service_minutes_per_stop,
    )


def route_plan_to_response(plan: RoutePlan) -> RoutePlanResponse:
    return RoutePlanResponse(
        start=GeoPointModel.from_domain(plan.start),
        stops=[
            RouteStopModel(
                stop_id=stop.stop_id,
                sequence=stop.sequence,
                latitude=stop.point.latitude,
                longitude=stop.point.longitude,
                distance_from_prev_km=stop.distance_from_prev_km,
            )
            for stop in plan.stops
        ],
        summary=RouteSummaryModel(
            total_distance_km=plan.summary.total_distance_km,
            stop_count=plan.summary.stop_count,
            estimated_minutes=plan.summary.estimated_minutes,
        ),
    )


def plan_route_request(payload: RoutePlanRequest) -> RoutePlanResponse:
    start = payload.start.to_domain()
    stops = [stop.to_domain() for stop in payload.stops]
    stop_ids = [stop.stop_id for stop in payload.stops]

    plan = plan_route(start, stops, stop_ids, config=_build_config(payload))
    logging.info(
        f"Planned route with {plan.summary.stop_count} stops, "
        f"{plan.summary.total_distance_km} km, ~{plan.summary.estimated_minutes:.0f} min"
    )
    return route_plan_to_response(plan)
