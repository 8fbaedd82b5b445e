"""Pickup request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import PickupStatus, WasteType


class PickupCreateRequest(BaseModel):
    requester_id: str = Field(..., min_length=1)
    waste_type: WasteType
    pickup_address: str = Field(..., min_length=1)
    pickup_latitude: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    pickup_longitude: float = Field(..., ge=-180, le=180, allow_inf_nan=False)
    estimated_weight_kg: Optional[float] = Field(default=None, ge=0)
    description: Optional[str] = None
    preferred_date: Optional[datetime] = None
    preferred_time_slot: Optional[str] = None


class AcceptPickupRequest(BaseModel):
    waste_picker_id: str = Field(..., min_length=1)


class PickupStatusUpdateRequest(BaseModel):
    status: PickupStatus
    actual_weight_kg: Optional[float] = Field(default=None, ge=0.1)


class CancelPickupRequest(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class PickupModel(BaseModel):
    pickup_id: str
    requester_id: str
    waste_type: WasteType
    pickup_address: str
    latitude: Optional[float]
    longitude: Optional[float]
    status: PickupStatus
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


class NearbyWastePickerModel(BaseModel):
    user_id: str
    first_name: str
    last_name: str
    rating: float
    service_radius_km: Optional[float]
    distance_km: float


class PickupCreateResponse(BaseModel):
    pickup: PickupModel
    notified_waste_pickers: List[NearbyWastePickerModel]
    skipped_candidates: int = 0


class NearbyPickupModel(BaseModel):
    pickup: PickupModel
    distance_km: float


class NearbyPickupsResponse(BaseModel):
    radius_km: float
    items: List[NearbyPickupModel]
    skipped_candidates: int = 0


class PickupListResponse(BaseModel):
    items: List[PickupModel]
    page: int
    page_size: int
    total: int
    has_next_page: bool
