"""Pickup request storage backends."""

from __future__ import annotations

import dataclasses
import functools
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from ..db.supabase import get_supabase_client
from ..models.domain import (
    PickupNotFoundError,
    PickupRequest,
    PickupStateError,
    PickupStatus,
    WasteType,
)


class PickupStore(ABC):
    """Contract for pickup request persistence."""

    @abstractmethod
    def add(self, pickup: PickupRequest) -> PickupRequest:
        raise NotImplementedError

    @abstractmethod
    def get(self, pickup_id: str) -> Optional[PickupRequest]:
        raise NotImplementedError

    @abstractmethod
    def transition(
        self,
        pickup_id: str,
        allowed_from: Iterable[PickupStatus],
        changes: dict[str, Any],
    ) -> PickupRequest:
        """Apply ``changes`` only if the pickup is currently in one of ``allowed_from``.

        The status check and the write happen as one step. Raises
        ``PickupNotFoundError`` or ``PickupStateError``.
        """
        raise NotImplementedError

    @abstractmethod
    def query(
        self,
        *,
        statuses: Optional[Iterable[PickupStatus]] = None,
        waste_type: Optional[WasteType] = None,
        requester_id: Optional[str] = None,
        waste_picker_id: Optional[str] = None,
    ) -> list[PickupRequest]:
        """Pickups matching every given filter, newest first."""
        raise NotImplementedError

    def accept(self, pickup_id: str, waste_picker_id: str) -> PickupRequest:
        return self.transition(
            pickup_id,
            [PickupStatus.PENDING],
            {
                "status": PickupStatus.ACCEPTED,
                "waste_picker_id": waste_picker_id,
                "updated_at": datetime.now(timezone.utc),
            },
        )

    def list_by_status(self, statuses: Iterable[PickupStatus]) -> list[PickupRequest]:
        return self.query(statuses=statuses)

    def list_for_waste_picker(
        self, waste_picker_id: str, statuses: Iterable[PickupStatus]
    ) -> list[PickupRequest]:
        return self.query(statuses=statuses, waste_picker_id=waste_picker_id)


def _state_error(pickup: PickupRequest, allowed_from: Iterable[PickupStatus]) -> PickupStateError:
    expected = ", ".join(status.value for status in allowed_from)
    return PickupStateError(
        f"Pickup request '{pickup.pickup_id}' is {pickup.status.value}; expected one of: {expected}"
    )


def _newest_first(pickups: list[PickupRequest]) -> list[PickupRequest]:
    oldest = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(pickups, key=lambda pickup: pickup.created_at or oldest, reverse=True)


class InMemoryPickupStore(PickupStore):
    """Process-local store used when no database is configured and in tests."""

    def __init__(self, pickups: Iterable[PickupRequest] = ()) -> None:
        self._lock = threading.Lock()
        self._pickups: dict[str, PickupRequest] = {pickup.pickup_id: pickup for pickup in pickups}

    def add(self, pickup: PickupRequest) -> PickupRequest:
        with self._lock:
            if pickup.pickup_id in self._pickups:
                raise ValueError(f"Pickup '{pickup.pickup_id}' already exists.")
            self._pickups[pickup.pickup_id] = pickup
        return pickup

    def get(self, pickup_id: str) -> Optional[PickupRequest]:
        with self._lock:
            pickup = self._pickups.get(pickup_id)
            return dataclasses.replace(pickup) if pickup else None

    def transition(
        self,
        pickup_id: str,
        allowed_from: Iterable[PickupStatus],
        changes: dict[str, Any],
    ) -> PickupRequest:
        allowed = tuple(allowed_from)
        with self._lock:
            current = self._pickups.get(pickup_id)
            if current is None:
                raise PickupNotFoundError(f"Pickup request '{pickup_id}' not found")
            if current.status not in allowed:
                raise _state_error(current, allowed)
            updated = dataclasses.replace(current, **changes)
            self._pickups[pickup_id] = updated
            return dataclasses.replace(updated)

    def query(
        self,
        *,
        statuses: Optional[Iterable[PickupStatus]] = None,
        waste_type: Optional[WasteType] = None,
        requester_id: Optional[str] = None,
        waste_picker_id: Optional[str] = None,
    ) -> list[PickupRequest]:
        wanted = set(statuses) if statuses is not None else None
        with self._lock:
            matches = [
                dataclasses.replace(pickup)
                for pickup in self._pickups.values()
                if (wanted is None or pickup.status in wanted)
                and (waste_type is None or pickup.waste_type == waste_type)
                and (requester_id is None or pickup.requester_id == requester_id)
                and (waste_picker_id is None or pickup.waste_picker_id == waste_picker_id)
            ]
        return _newest_first(matches)


def _parse_datetime(value: object) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _optional_float(value: object) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)  # type: ignore[arg-type]


def _coordinate_or_none(value: object) -> Optional[float]:
    # unparseable coordinates are left for the matching step to skip and count
    try:
        return _optional_float(value)
    except (TypeError, ValueError):
        return None


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


# PickupRequest field -> (column, encoder)
_COLUMNS: dict[str, tuple[str, Any]] = {
    "pickup_id": ("id", None),
    "requester_id": ("requester_id", None),
    "waste_picker_id": ("waste_picker_id", None),
    "waste_type": ("waste_type", lambda value: value.value),
    "estimated_weight_kg": ("estimated_weight", None),
    "actual_weight_kg": ("actual_weight", None),
    "description": ("description", None),
    "pickup_address": ("pickup_address", None),
    # stored as text columns
    "latitude": ("pickup_latitude", lambda value: None if value is None else str(value)),
    "longitude": ("pickup_longitude", lambda value: None if value is None else str(value)),
    "preferred_date": ("preferred_date", _isoformat),
    "preferred_time_slot": ("preferred_time_slot", None),
    "status": ("status", lambda value: value.value),
    "cancellation_reason": ("cancellation_reason", None),
    "created_at": ("created_at", _isoformat),
    "updated_at": ("updated_at", _isoformat),
    "completed_at": ("completed_at", _isoformat),
    "cancelled_at": ("cancelled_at", _isoformat),
}


def changes_to_row(changes: dict[str, Any]) -> dict:
    row = {}
    for field_name, value in changes.items():
        column, encode = _COLUMNS[field_name]
        row[column] = encode(value) if encode else value
    return row


def pickup_to_row(pickup: PickupRequest) -> dict:
    return changes_to_row({field_name: getattr(pickup, field_name) for field_name in _COLUMNS})


def pickup_from_row(row: dict) -> PickupRequest:
    return PickupRequest(
        pickup_id=str(row["id"]),
        requester_id=str(row["requester_id"]),
        waste_picker_id=str(row["waste_picker_id"]) if row.get("waste_picker_id") else None,
        waste_type=WasteType(row["waste_type"]),
        estimated_weight_kg=_optional_float(row.get("estimated_weight")),
        actual_weight_kg=_optional_float(row.get("actual_weight")),
        description=row.get("description"),
        pickup_address=row.get("pickup_address") or "",
        latitude=_coordinate_or_none(row.get("pickup_latitude")),
        longitude=_coordinate_or_none(row.get("pickup_longitude")),
        preferred_date=_parse_datetime(row.get("preferred_date")),
        preferred_time_slot=row.get("preferred_time_slot"),
        status=PickupStatus(row.get("status") or PickupStatus.PENDING.value),
        cancellation_reason=row.get("cancellation_reason"),
        created_at=_parse_datetime(row.get("created_at")),
        updated_at=_parse_datetime(row.get("updated_at")),
        completed_at=_parse_datetime(row.get("completed_at")),
        cancelled_at=_parse_datetime(row.get("cancelled_at")),
    )


class SupabasePickupStore(PickupStore):
    """Pickup requests stored in the ``pickup_requests`` table."""

    table_name = "pickup_requests"

    def __init__(self, client) -> None:
        self.client = client

    def _rows_to_pickups(self, rows: list[dict]) -> list[PickupRequest]:
        pickups: list[PickupRequest] = []
        for row in rows:
            try:
                pickups.append(pickup_from_row(row))
            except (KeyError, ValueError, TypeError) as e:
                logging.warning(f"Skipping invalid pickup row {row.get('id')}: {e}")
        return pickups

    def add(self, pickup: PickupRequest) -> PickupRequest:
        self.client.table(self.table_name).insert(pickup_to_row(pickup)).execute()
        return pickup

    def get(self, pickup_id: str) -> Optional[PickupRequest]:
        response = self.client.table(self.table_name).select("*").eq("id", pickup_id).limit(1).execute()
        pickups = self._rows_to_pickups(response.data or [])
        return pickups[0] if pickups else None

    def transition(
        self,
        pickup_id: str,
        allowed_from: Iterable[PickupStatus],
        changes: dict[str, Any],
    ) -> PickupRequest:
        allowed = tuple(allowed_from)
        # the status filter makes the update conditional on the row's current state
        response = (
            self.client.table(self.table_name)
            .update(changes_to_row(changes))
            .eq("id", pickup_id)
            .in_("status", [status.value for status in allowed])
            .execute()
        )
        updated = self._rows_to_pickups(response.data or [])
        if updated:
            return updated[0]

        current = self.get(pickup_id)
        if current is None:
            raise PickupNotFoundError(f"Pickup request '{pickup_id}' not found")
        raise _state_error(current, allowed)

    def query(
        self,
        *,
        statuses: Optional[Iterable[PickupStatus]] = None,
        waste_type: Optional[WasteType] = None,
        requester_id: Optional[str] = None,
        waste_picker_id: Optional[str] = None,
    ) -> list[PickupRequest]:
        request = self.client.table(self.table_name).select("*")
        if statuses is not None:
            request = request.in_("status", [status.value for status in statuses])
        if waste_type is not None:
            request = request.eq("waste_type", waste_type.value)
        if requester_id is not None:
            request = request.eq("requester_id", requester_id)
        if waste_picker_id is not None:
            request = request.eq("waste_picker_id", waste_picker_id)
        response = request.order("created_at", desc=True).execute()
        return self._rows_to_pickups(response.data or [])


@functools.lru_cache(maxsize=1)
def get_pickup_store() -> PickupStore:
    """Supabase-backed store when configured, otherwise an in-memory one."""
    client = get_supabase_client()
    if client is not None:
        return SupabasePickupStore(client)
    logging.info("Using in-memory pickup store")
    return InMemoryPickupStore()
