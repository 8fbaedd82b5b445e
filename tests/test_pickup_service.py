import math
import threading
from datetime import datetime, timedelta, timezone

import pytest

from ecopickup.data.pickups_repository import InMemoryPickupStore
from ecopickup.models.domain import (
    GeoPoint,
    PickupNotFoundError,
    PickupRequest,
    PickupStateError,
    PickupStatus,
    WastePicker,
    WasteType,
)
from ecopickup.schemas.pickups import PickupCreateRequest
from ecopickup.services.geospatial import EARTH_RADIUS_KM
from ecopickup.services.pickups import service as pickup_service

ORIGIN = GeoPoint(6.5, 3.3)


def _north_of(km: float) -> GeoPoint:
    return GeoPoint(ORIGIN.latitude + math.degrees(km / EARTH_RADIUS_KM), ORIGIN.longitude)


class RecordingDispatcher:
    def __init__(self):
        self.sent = []

    def notify(self, user_id, notification_type, title, message, data=None):
        self.sent.append({"user_id": user_id, "type": notification_type, "title": title, "data": data or {}})
        return True


def _picker(user_id: str, km: float | None, service_radius_km: float | None) -> WastePicker:
    location = _north_of(km) if km is not None else None
    return WastePicker(
        user_id=user_id,
        first_name=f"Picker {user_id}",
        last_name="Test",
        latitude=location.latitude if location else None,
        longitude=location.longitude if location else None,
        rating=4.5,
        service_radius_km=service_radius_km,
        is_verified=True,
    )


def _pickup(pickup_id: str, km: float | None, status: PickupStatus = PickupStatus.PENDING, picker: str | None = None):
    location = _north_of(km) if km is not None else None
    return PickupRequest(
        pickup_id=pickup_id,
        requester_id=f"H-{pickup_id}",
        waste_type=WasteType.PLASTIC,
        pickup_address=f"{pickup_id} Broad Street",
        latitude=location.latitude if location else None,
        longitude=location.longitude if location else None,
        status=status,
        waste_picker_id=picker,
    )


def _create_request() -> PickupCreateRequest:
    return PickupCreateRequest(
        requester_id="H1",
        waste_type="plastic",
        pickup_address="12 Marina Road, Lagos Island",
        pickup_latitude=ORIGIN.latitude,
        pickup_longitude=ORIGIN.longitude,
        estimated_weight_kg=12.5,
    )


def test_create_pickup_notifies_pickers_in_reach(monkeypatch):
    pickers = [
        _picker("P-far-small-radius", 8, 5),
        _picker("P-near", 4, 5),
        _picker("P-default-radius", 8, None),
        _picker("P-out-of-range", 15, 50),
        _picker("P-no-location", None, 10),
    ]
    monkeypatch.setattr(pickup_service, "get_active_waste_pickers", lambda **kwargs: pickers)
    store = InMemoryPickupStore()
    dispatcher = RecordingDispatcher()

    response = pickup_service.create_pickup(_create_request(), store=store, dispatcher=dispatcher)

    assert response.pickup.status == PickupStatus.PENDING
    assert store.get(response.pickup.pickup_id) is not None
    assert [picker.user_id for picker in response.notified_waste_pickers] == ["P-near", "P-default-radius"]
    assert response.notified_waste_pickers[1].service_radius_km == 10
    assert response.skipped_candidates == 1

    recipients = [message["user_id"] for message in dispatcher.sent]
    assert recipients == ["H1", "P-near", "P-default-radius"]
    assert dispatcher.sent[1]["data"]["pickup_request_id"] == response.pickup.pickup_id


def test_create_pickup_asks_for_verified_pickers(monkeypatch):
    seen = {}

    def fake_pickers(**kwargs):
        seen.update(kwargs)
        return []

    monkeypatch.setattr(pickup_service, "get_active_waste_pickers", fake_pickers)

    response = pickup_service.create_pickup(
        _create_request(), store=InMemoryPickupStore(), dispatcher=RecordingDispatcher()
    )

    assert seen == {"verified_only": True}
    assert response.notified_waste_pickers == []


def test_list_nearby_pickups_returns_pending_sorted():
    store = InMemoryPickupStore(
        [
            _pickup("K1", 6),
            _pickup("K2", 1),
            _pickup("K3", 2, status=PickupStatus.ACCEPTED, picker="P1"),
            _pickup("K4", 25),
            _pickup("K5", None),
        ]
    )

    response = pickup_service.list_nearby_pickups(ORIGIN, 10, store=store)

    assert [item.pickup.pickup_id for item in response.items] == ["K2", "K1"]
    assert response.items[0].distance_km == pytest.approx(1)
    assert response.radius_km == 10
    assert response.skipped_candidates == 1


def test_list_nearby_pickups_defaults_radius():
    store = InMemoryPickupStore([_pickup("K1", 9.5), _pickup("K2", 10.5)])

    response = pickup_service.list_nearby_pickups(ORIGIN, store=store)

    assert response.radius_km == 10
    assert [item.pickup.pickup_id for item in response.items] == ["K1"]


def test_get_pickup_missing():
    with pytest.raises(PickupNotFoundError):
        pickup_service.get_pickup("missing", store=InMemoryPickupStore())


def test_accept_pickup_assigns_and_notifies_requester():
    store = InMemoryPickupStore([_pickup("K1", 1)])
    dispatcher = RecordingDispatcher()

    accepted = pickup_service.accept_pickup("K1", "P1", store=store, dispatcher=dispatcher)

    assert accepted.status == PickupStatus.ACCEPTED
    assert accepted.waste_picker_id == "P1"
    assert store.get("K1").status is PickupStatus.ACCEPTED
    assert dispatcher.sent[0]["user_id"] == "H-K1"
    assert dispatcher.sent[0]["type"] == "pickup_accepted"


def test_accept_pickup_twice_fails():
    store = InMemoryPickupStore([_pickup("K1", 1)])
    pickup_service.accept_pickup("K1", "P1", store=store, dispatcher=RecordingDispatcher())

    with pytest.raises(PickupStateError):
        pickup_service.accept_pickup("K1", "P2", store=store, dispatcher=RecordingDispatcher())


def test_accept_missing_pickup():
    with pytest.raises(PickupNotFoundError):
        pickup_service.accept_pickup("nope", "P1", store=InMemoryPickupStore(), dispatcher=RecordingDispatcher())


def test_plan_picker_route_orders_assigned_pickups():
    store = InMemoryPickupStore(
        [
            _pickup("K1", 6, status=PickupStatus.ACCEPTED, picker="P1"),
            _pickup("K2", 2, status=PickupStatus.IN_PROGRESS, picker="P1"),
            _pickup("K3", 4, status=PickupStatus.ACCEPTED, picker="P1"),
            _pickup("K4", 1, status=PickupStatus.ACCEPTED, picker="P2"),
            _pickup("K5", 3, status=PickupStatus.COMPLETED, picker="P1"),
            _pickup("K6", None, status=PickupStatus.ACCEPTED, picker="P1"),
        ]
    )

    plan = pickup_service.plan_picker_route("P1", ORIGIN, store=store)

    assert [stop.stop_id for stop in plan.stops] == ["K2", "K3", "K1"]
    assert plan.summary.stop_count == 3
    assert plan.summary.total_distance_km == pytest.approx(6, abs=0.01)


def test_plan_picker_route_without_pickups():
    plan = pickup_service.plan_picker_route("P1", ORIGIN, store=InMemoryPickupStore())

    assert plan.stops == []
    assert plan.summary.total_distance_km == 0
    assert plan.summary.stop_count == 0


def test_concurrent_accepts_have_a_single_winner():
    store = InMemoryPickupStore([_pickup("K1", 1)])
    pickers = [f"P{index}" for index in range(8)]
    barrier = threading.Barrier(len(pickers))
    winners, losers = [], []

    def accept(picker_id):
        barrier.wait()
        try:
            pickup_service.accept_pickup("K1", picker_id, store=store, dispatcher=RecordingDispatcher())
        except PickupStateError:
            losers.append(picker_id)
        else:
            winners.append(picker_id)

    threads = [threading.Thread(target=accept, args=(picker_id,)) for picker_id in pickers]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(winners) == 1
    assert len(losers) == len(pickers) - 1
    assert store.get("K1").waste_picker_id == winners[0]


def test_update_pickup_status_walks_the_lifecycle():
    store = InMemoryPickupStore([_pickup("K1", 1, status=PickupStatus.ACCEPTED, picker="P1")])
    dispatcher = RecordingDispatcher()

    started = pickup_service.update_pickup_status("K1", PickupStatus.IN_PROGRESS, store=store, dispatcher=dispatcher)
    completed = pickup_service.update_pickup_status(
        "K1", PickupStatus.COMPLETED, actual_weight_kg=11.2, store=store, dispatcher=dispatcher
    )

    assert started.status == PickupStatus.IN_PROGRESS
    assert completed.status == PickupStatus.COMPLETED
    assert completed.actual_weight_kg == 11.2
    assert completed.completed_at is not None
    assert [message["type"] for message in dispatcher.sent] == ["pickup_completed"]
    assert dispatcher.sent[0]["user_id"] == "H-K1"


@pytest.mark.parametrize(
    "current, target",
    [
        (PickupStatus.PENDING, PickupStatus.COMPLETED),
        (PickupStatus.PENDING, PickupStatus.IN_PROGRESS),
        (PickupStatus.ACCEPTED, PickupStatus.COMPLETED),
        (PickupStatus.COMPLETED, PickupStatus.IN_PROGRESS),
        (PickupStatus.ACCEPTED, PickupStatus.CANCELLED),
        (PickupStatus.ACCEPTED, PickupStatus.PENDING),
    ],
)
def test_update_pickup_status_rejects_skipped_or_backward_moves(current, target):
    store = InMemoryPickupStore([_pickup("K1", 1, status=current, picker="P1")])

    with pytest.raises(PickupStateError):
        pickup_service.update_pickup_status("K1", target, store=store, dispatcher=RecordingDispatcher())

    assert store.get("K1").status is current


def test_update_status_of_missing_pickup():
    with pytest.raises(PickupNotFoundError):
        pickup_service.update_pickup_status(
            "nope", PickupStatus.IN_PROGRESS, store=InMemoryPickupStore(), dispatcher=RecordingDispatcher()
        )


@pytest.mark.parametrize("current", [PickupStatus.PENDING, PickupStatus.ACCEPTED, PickupStatus.IN_PROGRESS])
def test_cancel_pickup_records_reason(current):
    store = InMemoryPickupStore([_pickup("K1", 1, status=current)])

    cancelled = pickup_service.cancel_pickup("K1", "No longer needed", store=store)

    assert cancelled.status == PickupStatus.CANCELLED
    assert cancelled.cancellation_reason == "No longer needed"
    assert cancelled.cancelled_at is not None
    assert store.get("K1").status is PickupStatus.CANCELLED


@pytest.mark.parametrize("current", [PickupStatus.COMPLETED, PickupStatus.CANCELLED])
def test_cancel_pickup_rejects_finished_pickups(current):
    store = InMemoryPickupStore([_pickup("K1", 1, status=current, picker="P1")])

    with pytest.raises(PickupStateError):
        pickup_service.cancel_pickup("K1", store=store)

    assert store.get("K1").status is current


def test_cancel_missing_pickup():
    with pytest.raises(PickupNotFoundError):
        pickup_service.cancel_pickup("nope", store=InMemoryPickupStore())


def test_list_pickups_filters_and_pages():
    start = datetime(2026, 3, 1, tzinfo=timezone.utc)
    pickups = []
    for index in range(5):
        pickup = _pickup(f"K{index}", 1)
        pickup.created_at = start + timedelta(hours=index)
        pickups.append(pickup)
    pickups[1].status = PickupStatus.ACCEPTED
    store = InMemoryPickupStore(pickups)

    first = pickup_service.list_pickups(status=PickupStatus.PENDING, page_size=3, store=store)
    second = pickup_service.list_pickups(status=PickupStatus.PENDING, page=2, page_size=3, store=store)
    by_requester = pickup_service.list_pickups(requester_id="H-K2", store=store)

    assert [item.pickup_id for item in first.items] == ["K4", "K3", "K2"]
    assert first.total == 4
    assert first.has_next_page is True
    assert [item.pickup_id for item in second.items] == ["K0"]
    assert second.has_next_page is False
    assert [item.pickup_id for item in by_requester.items] == ["K2"]
