"""Pickup request orchestration: creation, nearby search, status lifecycle and route planning."""

from __future__ import annotations

import logging
import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Optional

from ...config import settings
from ...data.pickups_repository import PickupStore, get_pickup_store
from ...data.waste_pickers_repository import get_active_waste_pickers
from ...models.domain import (
    GeoPoint,
    PickupNotFoundError,
    PickupRequest,
    PickupStateError,
    PickupStatus,
    WasteType,
)
from ...schemas.pickups import (
    NearbyPickupModel,
    NearbyPickupsResponse,
    NearbyWastePickerModel,
    PickupCreateRequest,
    PickupCreateResponse,
    PickupListResponse,
    PickupModel,
)
from ...schemas.routing import RoutePlanResponse
from ..matching import find_nearby, pickup_candidate, waste_picker_candidate
from ..notifications import NotificationDispatcher
from ..routing.models import RouteConfig
from ..routing.sequencer import plan_route
from ..routing.service import route_plan_to_response

ROUTABLE_STATUSES = (PickupStatus.ACCEPTED, PickupStatus.IN_PROGRESS)
CANCELLABLE_STATUSES = (PickupStatus.PENDING, PickupStatus.ACCEPTED, PickupStatus.IN_PROGRESS)

# current status -> statuses reachable through a status update
STATUS_TRANSITIONS = {
    PickupStatus.ACCEPTED: (PickupStatus.IN_PROGRESS,),
    PickupStatus.IN_PROGRESS: (PickupStatus.COMPLETED,),
}


def _pickup_model(pickup: PickupRequest) -> PickupModel:
    return PickupModel(**asdict(pickup))


def create_pickup(
    payload: PickupCreateRequest,
    *,
    store: Optional[PickupStore] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
) -> PickupCreateResponse:
    """Store a new pending pickup and alert verified waste pickers within reach of it."""
    store = store or get_pickup_store()
    dispatcher = dispatcher or NotificationDispatcher()

    origin = GeoPoint(payload.pickup_latitude, payload.pickup_longitude)
    now = datetime.now(timezone.utc)
    pickup = store.add(
        PickupRequest(
            pickup_id=str(uuid.uuid4()),
            requester_id=payload.requester_id,
            waste_type=payload.waste_type,
            pickup_address=payload.pickup_address,
            latitude=origin.latitude,
            longitude=origin.longitude,
            status=PickupStatus.PENDING,
            estimated_weight_kg=payload.estimated_weight_kg,
            description=payload.description,
            preferred_date=payload.preferred_date,
            preferred_time_slot=payload.preferred_time_slot,
            created_at=now,
            updated_at=now,
        )
    )

    dispatcher.notify(
        pickup.requester_id,
        "pickup_request",
        "Pickup Request Submitted",
        f"Your {pickup.waste_type.value} pickup request has been received.",
        {"pickup_request_id": pickup.pickup_id},
    )

    candidates = [waste_picker_candidate(picker) for picker in get_active_waste_pickers(verified_only=True)]
    nearby = find_nearby(origin, settings.default_search_radius_km, candidates)

    notified: list[NearbyWastePickerModel] = []
    for match in nearby.matches:
        picker = match.candidate.payload
        dispatcher.notify(
            picker.user_id,
            "pickup_request",
            "New Pickup Request Available",
            f"A new {pickup.waste_type.value} pickup request is available near you.",
            {"pickup_request_id": pickup.pickup_id, "distance_km": round(match.distance_km, 2)},
        )
        notified.append(
            NearbyWastePickerModel(
                user_id=picker.user_id,
                first_name=picker.first_name,
                last_name=picker.last_name,
                rating=picker.rating,
                service_radius_km=match.candidate.service_radius_km,
                distance_km=match.distance_km,
            )
        )

    logging.info(
        f"Created pickup {pickup.pickup_id}; notified {len(notified)} waste picker(s) "
        f"within {settings.default_search_radius_km} km"
    )
    return PickupCreateResponse(
        pickup=_pickup_model(pickup),
        notified_waste_pickers=notified,
        skipped_candidates=nearby.skipped_count,
    )


def list_nearby_pickups(
    origin: GeoPoint,
    radius_km: float | None = None,
    *,
    store: Optional[PickupStore] = None,
) -> NearbyPickupsResponse:
    """Pending pickups within ``radius_km`` of the waste picker, closest first."""
    store = store or get_pickup_store()
    radius = settings.default_search_radius_km if radius_km is None else radius_km

    pending = store.list_by_status([PickupStatus.PENDING])
    nearby = find_nearby(origin, radius, [pickup_candidate(pickup) for pickup in pending])
    return NearbyPickupsResponse(
        radius_km=radius,
        items=[
            NearbyPickupModel(pickup=_pickup_model(match.candidate.payload), distance_km=match.distance_km)
            for match in nearby.matches
        ],
        skipped_candidates=nearby.skipped_count,
    )


def get_pickup(pickup_id: str, *, store: Optional[PickupStore] = None) -> PickupModel:
    store = store or get_pickup_store()
    pickup = store.get(pickup_id)
    if pickup is None:
        raise PickupNotFoundError(f"Pickup request '{pickup_id}' not found")
    return _pickup_model(pickup)


def accept_pickup(
    pickup_id: str,
    waste_picker_id: str,
    *,
    store: Optional[PickupStore] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
) -> PickupModel:
    """Assign a pending pickup to a waste picker and tell the requester.

    Only one of several concurrent accepts can win; the others get
    ``PickupStateError``.
    """
    store = store or get_pickup_store()
    dispatcher = dispatcher or NotificationDispatcher()

    pickup = store.accept(pickup_id, waste_picker_id)

    dispatcher.notify(
        pickup.requester_id,
        "pickup_accepted",
        "Pickup Request Accepted",
        f"Your {pickup.waste_type.value} pickup request has been accepted.",
        {"pickup_request_id": pickup.pickup_id, "waste_picker_id": waste_picker_id},
    )
    logging.info(f"Pickup {pickup_id} accepted by waste picker {waste_picker_id}")
    return _pickup_model(pickup)


def update_pickup_status(
    pickup_id: str,
    status: PickupStatus,
    *,
    actual_weight_kg: Optional[float] = None,
    store: Optional[PickupStore] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
) -> PickupModel:
    """Move an assigned pickup forward: accepted -> in_progress -> completed."""
    store = store or get_pickup_store()
    dispatcher = dispatcher or NotificationDispatcher()

    allowed_from = [source for source, targets in STATUS_TRANSITIONS.items() if status in targets]
    if not allowed_from:
        raise PickupStateError(f"Pickups cannot be moved to '{status.value}' with a status update")

    now = datetime.now(timezone.utc)
    changes: dict = {"status": status, "updated_at": now}
    if status is PickupStatus.COMPLETED:
        changes["completed_at"] = now
        if actual_weight_kg is not None:
            changes["actual_weight_kg"] = actual_weight_kg

    pickup = store.transition(pickup_id, allowed_from, changes)

    if status is PickupStatus.COMPLETED:
        dispatcher.notify(
            pickup.requester_id,
            "pickup_completed",
            "Pickup Completed",
            f"Your {pickup.waste_type.value} pickup has been completed.",
            {"pickup_request_id": pickup.pickup_id},
        )
    logging.info(f"Pickup {pickup_id} moved to {status.value}")
    return _pickup_model(pickup)


def cancel_pickup(
    pickup_id: str,
    reason: Optional[str] = None,
    *,
    store: Optional[PickupStore] = None,
) -> PickupModel:
    """Cancel a pickup that has not been completed or cancelled already."""
    store = store or get_pickup_store()
    now = datetime.now(timezone.utc)
    pickup = store.transition(
        pickup_id,
        CANCELLABLE_STATUSES,
        {
            "status": PickupStatus.CANCELLED,
            "cancelled_at": now,
            "cancellation_reason": reason,
            "updated_at": now,
        },
    )
    logging.info(f"Pickup {pickup_id} cancelled")
    return _pickup_model(pickup)


def list_pickups(
    *,
    status: Optional[PickupStatus] = None,
    waste_type: Optional[WasteType] = None,
    requester_id: Optional[str] = None,
    waste_picker_id: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
    store: Optional[PickupStore] = None,
) -> PickupListResponse:
    """Filtered pickups, newest first, one page at a time."""
    store = store or get_pickup_store()
    pickups = store.query(
        statuses=[status] if status is not None else None,
        waste_type=waste_type,
        requester_id=requester_id,
        waste_picker_id=waste_picker_id,
    )
    offset = (page - 1) * page_size
    items = pickups[offset : offset + page_size]
    return PickupListResponse(
        items=[_pickup_model(pickup) for pickup in items],
        page=page,
        page_size=page_size,
        total=len(pickups),
        has_next_page=offset + len(items) < len(pickups),
    )


def plan_picker_route(
    waste_picker_id: str,
    start: GeoPoint,
    *,
    config: Optional[RouteConfig] = None,
    store: Optional[PickupStore] = None,
) -> RoutePlanResponse:
    """Visiting order over the waste picker's accepted and in-progress pickups."""
    store = store or get_pickup_store()
    candidates = [
        pickup_candidate(pickup) for pickup in store.list_for_waste_picker(waste_picker_id, ROUTABLE_STATUSES)
    ]
    routable = [candidate for candidate in candidates if candidate.location is not None]
    if len(routable) < len(candidates):
        logging.warning(
            f"Left {len(candidates) - len(routable)} pickup(s) without coordinates out of the route "
            f"for waste picker {waste_picker_id}"
        )

    plan = plan_route(
        start,
        [candidate.location for candidate in routable],
        [candidate.candidate_id for candidate in routable],
        config=config,
    )
    return route_plan_to_response(plan)
