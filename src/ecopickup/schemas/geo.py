"""Coordinate request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import GeoPoint


class GeoPointModel(BaseModel):
    latitude: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180, le=180, allow_inf_nan=False)

    def to_domain(self) -> GeoPoint:
        return GeoPoint(self.latitude, self.longitude)

    @classmethod
    def from_domain(cls, point: GeoPoint) -> "GeoPointModel":
        return cls(latitude=point.latitude, longitude=point.longitude)


class DistanceResponse(BaseModel):
    origin: GeoPointModel
    destination: GeoPointModel
    distance_km: float


class BoundsRequest(BaseModel):
    points: List[GeoPointModel] = Field(default_factory=list)


class BoundsResponse(BaseModel):
    southwest: Optional[GeoPointModel] = None
    northeast: Optional[GeoPointModel] = None
    center: Optional[GeoPointModel] = None


class LocationSuggestionModel(BaseModel):
    name: str
    latitude: float
    longitude: float


class CircularAreaModel(BaseModel):
    center: GeoPointModel
    radius_km: float = Field(..., ge=0)


class ServiceAreaCheckRequest(BaseModel):
    point: GeoPointModel
    areas: List[CircularAreaModel] = Field(default_factory=list)
    polygon: Optional[List[GeoPointModel]] = Field(
        default=None,
        description="Optional polygon outline as latitude/longitude vertices (at least 3).",
    )


class ServiceAreaCheckResponse(BaseModel):
    within_areas: bool
    within_polygon: Optional[bool] = None
