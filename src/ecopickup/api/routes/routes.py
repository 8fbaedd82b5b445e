"""Route planning endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, status

from ...models.domain import GeoPoint
from ...schemas.routing import RoutePlanRequest, RoutePlanResponse
from ...services.pickups import service as pickup_service
from ...services.routing.service import plan_route_request

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/plan", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
def plan(payload: RoutePlanRequest) -> RoutePlanResponse:
    try:
        return plan_route_request(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error planning route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to plan route: {str(exc)}",
        ) from exc


@router.get("/pickers/{waste_picker_id}", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
def picker_route(
    waste_picker_id: str,
    latitude: float = Query(..., ge=-90, le=90, description="Current latitude of the waste picker"),
    longitude: float = Query(..., ge=-180, le=180, description="Current longitude of the waste picker"),
) -> RoutePlanResponse:
    """Visiting order for the waste picker's accepted pickups, starting from their position."""
    try:
        return pickup_service.plan_picker_route(waste_picker_id, GeoPoint(latitude, longitude))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error planning route for waste picker {waste_picker_id}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to plan route: {str(exc)}",
        ) from exc
