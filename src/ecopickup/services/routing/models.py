"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ...config import settings
from ...models.domain import GeoPoint


@dataclass(frozen=True, slots=True)
class RouteConfig:
    """Travel assumptions used to turn distance into an estimated duration."""

    speed_kmh: float = 30.0
    service_minutes_per_stop: float = 15.0

    @classmethod
    def from_settings(cls) -> "RouteConfig":
        return cls(
            speed_kmh=settings.route_speed_kmh,
            service_minutes_per_stop=settings.route_service_minutes_per_stop,
        )


@dataclass(slots=True)
class RouteStop:
    point: GeoPoint
    sequence: int
    distance_from_prev_km: float
    stop_id: Optional[str] = None


@dataclass(slots=True)
class RouteSummary:
    total_distance_km: float
    stop_count: int
    estimated_minutes: float


@dataclass(slots=True)
class RoutePlan:
    start: GeoPoint
    stops: List[RouteStop]
    summary: RouteSummary
