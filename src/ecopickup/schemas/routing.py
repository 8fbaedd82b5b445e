"""Routing request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from .geo import GeoPointModel


class RouteStopInput(GeoPointModel):
    stop_id: Optional[str] = Field(default=None, description="Caller's identifier for the stop, e.g. a pickup id.")


class RoutePlanRequest(BaseModel):
    start: GeoPointModel
    stops: List[RouteStopInput] = Field(default_factory=list, max_length=200)
    speed_kmh: Optional[float] = Field(default=None, gt=0, description="Overrides the configured average speed.")
    service_minutes_per_stop: Optional[float] = Field(
        default=None,
        ge=0,
        description="Overrides the configured time spent at each stop.",
    )


class RouteStopModel(BaseModel):
    stop_id: Optional[str] = None
    sequence: int
    latitude: float
    longitude: float
    distance_from_prev_km: float


class RouteSummaryModel(BaseModel):
    total_distance_km: float
    stop_count: int
    estimated_minutes: float


class RoutePlanResponse(BaseModel):
    start: GeoPointModel
    stops: List[RouteStopModel]
    summary: RouteSummaryModel
