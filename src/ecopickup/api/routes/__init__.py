"""Route group exports."""

from . import geo, health, pickups, routes

__all__ = ["geo", "health", "pickups", "routes"]
