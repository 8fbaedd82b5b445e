"""Route sequencing and planning."""

from .models import RouteConfig, RoutePlan, RouteStop, RouteSummary
from .sequencer import plan_route, sequence_route, summarize_route

__all__ = [
    "RouteConfig",
    "RoutePlan",
    "RouteStop",
    "RouteSummary",
    "plan_route",
    "sequence_route",
    "summarize_route",
]
