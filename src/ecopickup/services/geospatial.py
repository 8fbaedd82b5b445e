"""Geospatial helper functions."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

from shapely.geometry import Point, Polygon

from ..models.domain import GeoPoint, InvalidCoordinatesError

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True, slots=True)
class ServiceArea:
    """A circular service area around a center point."""

    center: GeoPoint
    radius_km: float


@dataclass(frozen=True, slots=True)
class Bounds:
    southwest: GeoPoint
    northeast: GeoPoint
    center: GeoPoint


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # rounding can push a just past 1.0 for antipodal points
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_km(point_a: GeoPoint, point_b: GeoPoint) -> float:
    """Great-circle distance in kilometres between two validated points."""

    return haversine_km(point_a.latitude, point_a.longitude, point_b.latitude, point_b.longitude)


def validate_coordinates(latitude: object, longitude: object) -> GeoPoint:
    """Parse raw latitude/longitude values (numbers or numeric strings) into a GeoPoint."""

    try:
        lat = float(latitude)  # type: ignore[arg-type]
        lon = float(longitude)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise InvalidCoordinatesError("Coordinates must be valid numbers") from exc
    return GeoPoint(lat, lon)


def compute_bounds(points: Sequence[GeoPoint]) -> Bounds | None:
    """Return the bounding box and its center, or None for an empty sequence."""

    if not points:
        return None
    min_lat = min(point.latitude for point in points)
    max_lat = max(point.latitude for point in points)
    min_lon = min(point.longitude for point in points)
    max_lon = max(point.longitude for point in points)
    return Bounds(
        southwest=GeoPoint(min_lat, min_lon),
        northeast=GeoPoint(max_lat, max_lon),
        center=GeoPoint((min_lat + max_lat) / 2, (min_lon + max_lon) / 2),
    )


def is_within_service_area(point: GeoPoint, areas: Iterable[ServiceArea]) -> bool:
    """Return True if the point falls inside any of the circular service areas."""

    return any(distance_km(point, area.center) <= area.radius_km for area in areas)


def point_in_polygon(point: GeoPoint, polygon_coords: Sequence[tuple[float, float]]) -> bool:
    """Return True if the point is inside the polygon denoted by (lat, lon) pairs."""

    polygon = Polygon([(lng, lat) for lat, lng in polygon_coords])
    return polygon.contains(Point(point.longitude, point.latitude))
