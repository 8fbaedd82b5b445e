"""Coordinate utility endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, HTTPException, Query, status

from ...models.domain import GeoPoint
from ...schemas.geo import (
    BoundsRequest,
    BoundsResponse,
    DistanceResponse,
    GeoPointModel,
    LocationSuggestionModel,
    ServiceAreaCheckRequest,
    ServiceAreaCheckResponse,
)
from ...services.geospatial import (
    ServiceArea,
    compute_bounds,
    distance_km,
    is_within_service_area,
    point_in_polygon,
)
from ...services.locations import get_location_suggestions

router = APIRouter(prefix="/geo", tags=["geo"])


@router.get("/distance", response_model=DistanceResponse, status_code=status.HTTP_200_OK)
def distance(
    origin_latitude: float = Query(..., ge=-90, le=90),
    origin_longitude: float = Query(..., ge=-180, le=180),
    destination_latitude: float = Query(..., ge=-90, le=90),
    destination_longitude: float = Query(..., ge=-180, le=180),
) -> DistanceResponse:
    origin = GeoPoint(origin_latitude, origin_longitude)
    destination = GeoPoint(destination_latitude, destination_longitude)
    return DistanceResponse(
        origin=GeoPointModel.from_domain(origin),
        destination=GeoPointModel.from_domain(destination),
        distance_km=round(distance_km(origin, destination), 2),
    )


@router.post("/bounds", response_model=BoundsResponse, status_code=status.HTTP_200_OK)
def bounds(payload: BoundsRequest) -> BoundsResponse:
    """Bounding box of the given points; all fields are null for an empty list."""
    result = compute_bounds([point.to_domain() for point in payload.points])
    if result is None:
        return BoundsResponse()
    return BoundsResponse(
        southwest=GeoPointModel.from_domain(result.southwest),
        northeast=GeoPointModel.from_domain(result.northeast),
        center=GeoPointModel.from_domain(result.center),
    )


@router.get("/suggestions", response_model=List[LocationSuggestionModel], status_code=status.HTTP_200_OK)
def suggestions(
    q: str = Query(..., min_length=1, description="Partial location name"),
    limit: int = Query(default=5, ge=1, le=20),
) -> List[LocationSuggestionModel]:
    return [LocationSuggestionModel(**entry) for entry in get_location_suggestions(q, limit)]


@router.post("/service-area/check", response_model=ServiceAreaCheckResponse, status_code=status.HTTP_200_OK)
def check_service_area(payload: ServiceAreaCheckRequest) -> ServiceAreaCheckResponse:
    point = payload.point.to_domain()
    areas = [ServiceArea(center=area.center.to_domain(), radius_km=area.radius_km) for area in payload.areas]
    within_polygon = None
    if payload.polygon is not None:
        if len(payload.polygon) < 3:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A polygon needs at least 3 vertices",
            )
        within_polygon = point_in_polygon(point, [vertex.to_domain().as_tuple() for vertex in payload.polygon])
    return ServiceAreaCheckResponse(
        within_areas=is_within_service_area(point, areas),
        within_polygon=within_polygon,
    )
