"""Domain models for coordinates, waste pickers and pickup requests."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class InvalidCoordinatesError(ValueError):
    """Raised when a latitude/longitude pair is not a finite, in-range number."""


class InvalidRadiusError(ValueError):
    """Raised when a search radius is not strictly positive."""


class PickupNotFoundError(LookupError):
    """Raised when a pickup request id does not exist."""


class PickupStateError(ValueError):
    """Raised when a pickup request cannot move to the requested status."""


class WasteType(str, Enum):
    PLASTIC = "plastic"
    PAPER = "paper"
    METAL = "metal"
    GLASS = "glass"
    ELECTRONICS = "electronics"
    ORGANIC = "organic"
    MIXED = "mixed"


class PickupStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def _check_coordinate(name: str, value: object, limit: float) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidCoordinatesError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidCoordinatesError(f"{name} must be finite, got {value!r}")
    if not -limit <= value <= limit:
        raise InvalidCoordinatesError(f"{name} must be between -{limit:g} and {limit:g}, got {value!r}")


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A validated latitude/longitude pair in degrees.

    Construction fails with ``InvalidCoordinatesError`` for NaN, infinite or
    out-of-range values, so distance code never sees bad geometry.
    """

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        _check_coordinate("Latitude", self.latitude, 90.0)
        _check_coordinate("Longitude", self.longitude, 180.0)

    def as_tuple(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(slots=True)
class WastePicker:
    """A waste picker joined with their profile."""

    user_id: str
    first_name: str
    last_name: str
    latitude: Optional[float]
    longitude: Optional[float]
    phone: Optional[str] = None
    email: Optional[str] = None
    rating: float = 0.0
    service_radius_km: Optional[float] = None
    specializations: list[str] = field(default_factory=list)
    is_verified: bool = False
    status: str = "active"


@dataclass(slots=True)
class PickupRequest:
    """A household's request to have waste collected."""

    pickup_id: str
    requester_id: str
    waste_type: WasteType
    pickup_address: str
    latitude: Optional[float]
    longitude: Optional[float]
    status: PickupStatus = PickupStatus.PENDING
    waste_picker_id: Optional[str] = None
    estimated_weight_kg: Optional[float] = None
    description: Optional[str] = None
    preferred_date: Optional[datetime] = None
    preferred_time_slot: Optional[str] = None
    actual_weight_kg: Optional[float] = None
    cancellation_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
