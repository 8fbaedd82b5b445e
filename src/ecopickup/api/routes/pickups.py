"""Pickup request endpoints."""

from __future__ import annotations

import logging

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from ...config import settings
from ...models.domain import GeoPoint, PickupStatus, WasteType
from ...schemas.pickups import (
    AcceptPickupRequest,
    CancelPickupRequest,
    NearbyPickupsResponse,
    PickupCreateRequest,
    PickupCreateResponse,
    PickupListResponse,
    PickupModel,
    PickupStatusUpdateRequest,
)
from ...services.pickups import service as pickup_service

router = APIRouter(prefix="/pickups", tags=["pickups"])


@router.post("", response_model=PickupCreateResponse, status_code=status.HTTP_201_CREATED)
def create_pickup(payload: PickupCreateRequest) -> PickupCreateResponse:
    try:
        return pickup_service.create_pickup(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error creating pickup request: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create pickup request: {str(exc)}",
        ) from exc


@router.get("/nearby", response_model=NearbyPickupsResponse, status_code=status.HTTP_200_OK)
def nearby_pickups(
    latitude: float = Query(..., ge=-90, le=90, description="Waste picker latitude"),
    longitude: float = Query(..., ge=-180, le=180, description="Waste picker longitude"),
    radius: float = Query(
        default=settings.default_search_radius_km,
        ge=settings.min_search_radius_km,
        le=settings.max_search_radius_km,
        description="Search radius in kilometres",
    ),
) -> NearbyPickupsResponse:
    """Pending pickups around the caller, closest first."""
    try:
        return pickup_service.list_nearby_pickups(GeoPoint(latitude, longitude), radius)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error listing nearby pickups: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to get nearby pickups: {str(exc)}",
        ) from exc


@router.get("", response_model=PickupListResponse, status_code=status.HTTP_200_OK)
def list_pickups(
    status_filter: Optional[PickupStatus] = Query(default=None, alias="status"),
    waste_type: Optional[WasteType] = Query(default=None),
    requester_id: Optional[str] = Query(default=None),
    waste_picker_id: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> PickupListResponse:
    try:
        return pickup_service.list_pickups(
            status=status_filter,
            waste_type=waste_type,
            requester_id=requester_id,
            waste_picker_id=waste_picker_id,
            page=page,
            page_size=page_size,
        )
    except Exception as exc:
        logging.exception(f"Error listing pickup requests: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to list pickup requests: {str(exc)}",
        ) from exc


@router.get("/{pickup_id}", response_model=PickupModel, status_code=status.HTTP_200_OK)
def get_pickup(pickup_id: str) -> PickupModel:
    try:
        return pickup_service.get_pickup(pickup_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.put("/{pickup_id}/accept", response_model=PickupModel, status_code=status.HTTP_200_OK)
def accept_pickup(pickup_id: str, payload: AcceptPickupRequest) -> PickupModel:
    try:
        return pickup_service.accept_pickup(pickup_id, payload.waste_picker_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error accepting pickup request: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to accept pickup request: {str(exc)}",
        ) from exc


@router.put("/{pickup_id}/status", response_model=PickupModel, status_code=status.HTTP_200_OK)
def update_pickup_status(pickup_id: str, payload: PickupStatusUpdateRequest) -> PickupModel:
    try:
        return pickup_service.update_pickup_status(
            pickup_id, payload.status, actual_weight_kg=payload.actual_weight_kg
        )
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error updating pickup status: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update pickup status: {str(exc)}",
        ) from exc


@router.put("/{pickup_id}/cancel", response_model=PickupModel, status_code=status.HTTP_200_OK)
def cancel_pickup(pickup_id: str, payload: Optional[CancelPickupRequest] = None) -> PickupModel:
    try:
        return pickup_service.cancel_pickup(pickup_id, payload.reason if payload else None)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error cancelling pickup request: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to cancel pickup request: {str(exc)}",
        ) from exc
