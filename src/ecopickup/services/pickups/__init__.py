"""Pickup request services."""

from .service import (
    accept_pickup,
    cancel_pickup,
    create_pickup,
    get_pickup,
    list_nearby_pickups,
    list_pickups,
    plan_picker_route,
    update_pickup_status,
)

__all__ = [
    "create_pickup",
    "list_nearby_pickups",
    "list_pickups",
    "get_pickup",
    "accept_pickup",
    "update_pickup_status",
    "cancel_pickup",
    "plan_picker_route",
]
