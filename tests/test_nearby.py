import math

import pytest

from ecopickup.models.domain import GeoPoint, InvalidRadiusError, PickupRequest, WasteType, WastePicker
from ecopickup.services.geospatial import EARTH_RADIUS_KM
from ecopickup.services.matching import Candidate, find_nearby, pickup_candidate, waste_picker_candidate

ORIGIN = GeoPoint(6.5, 3.3)


def _north_of(origin: GeoPoint, km: float) -> GeoPoint:
    return GeoPoint(origin.latitude + math.degrees(km / EARTH_RADIUS_KM), origin.longitude)


def _candidate(cid: str, km: float | None, service_radius_km: float | None = None) -> Candidate:
    location = None if km is None else _north_of(ORIGIN, km)
    return Candidate(candidate_id=cid, location=location, service_radius_km=service_radius_km)


def test_candidate_service_radius_caps_search_radius():
    result = find_nearby(ORIGIN, 10, [_candidate("far", 8, 5), _candidate("near", 4, 5)])

    assert [match.candidate.candidate_id for match in result.matches] == ["near"]
    assert result.matches[0].distance_km == pytest.approx(4)


def test_search_radius_caps_candidate_service_radius():
    result = find_nearby(ORIGIN, 3, [_candidate("C1", 4, 50)])

    assert result.matches == []


def test_candidate_without_service_radius_uses_search_radius():
    result = find_nearby(ORIGIN, 10, [_candidate("C1", 8), _candidate("C2", 12)])

    assert [match.candidate.candidate_id for match in result.matches] == ["C1"]


def test_results_sorted_by_distance():
    candidates = [
        _candidate("C1", 7.5),
        _candidate("C2", 0.5),
        _candidate("C3", 3),
        _candidate("C4", 9.9),
        _candidate("C5", 2),
    ]
    result = find_nearby(ORIGIN, 10, candidates)

    distances = [match.distance_km for match in result.matches]
    assert len(distances) == 5
    assert all(left <= right for left, right in zip(distances, distances[1:]))
    assert [match.candidate.candidate_id for match in result.matches] == ["C2", "C5", "C3", "C1", "C4"]


def test_equal_distances_ordered_by_candidate_id():
    result = find_nearby(ORIGIN, 10, [_candidate("b", 2), _candidate("c", 2), _candidate("a", 2)])

    assert [match.candidate.candidate_id for match in result.matches] == ["a", "b", "c"]


def test_candidates_without_location_are_skipped_and_counted():
    result = find_nearby(ORIGIN, 10, [_candidate("C1", None), _candidate("C2", 1), _candidate("C3", None)])

    assert [match.candidate.candidate_id for match in result.matches] == ["C2"]
    assert result.skipped_count == 2
    assert result.skipped_ids == ["C1", "C3"]


def test_no_candidates_in_range_is_empty_result():
    result = find_nearby(ORIGIN, 1, [_candidate("C1", 5)])

    assert result.matches == []
    assert result.skipped_count == 0


@pytest.mark.parametrize("radius", [0, -1, float("nan"), float("inf"), "10"])
def test_invalid_radius_raises(radius):
    with pytest.raises(InvalidRadiusError):
        find_nearby(ORIGIN, radius, [])


def _picker(user_id: str, lat: float | None, lon: float | None, service_radius_km: float | None) -> WastePicker:
    return WastePicker(
        user_id=user_id,
        first_name="Ada",
        last_name="Obi",
        latitude=lat,
        longitude=lon,
        service_radius_km=service_radius_km,
        is_verified=True,
    )


def test_waste_picker_candidate_defaults_service_radius():
    candidate = waste_picker_candidate(_picker("P1", 6.5, 3.3, None), default_service_radius_km=10)

    assert candidate.candidate_id == "P1"
    assert candidate.service_radius_km == 10
    assert candidate.location == GeoPoint(6.5, 3.3)


def test_waste_picker_candidate_keeps_declared_radius():
    candidate = waste_picker_candidate(_picker("P1", 6.5, 3.3, 5), default_service_radius_km=10)

    assert candidate.service_radius_km == 5


def test_waste_picker_candidate_with_bad_coordinates_has_no_location():
    assert waste_picker_candidate(_picker("P1", None, 3.3, 5)).location is None
    assert waste_picker_candidate(_picker("P2", 123.0, 3.3, 5)).location is None


def test_pickup_candidate_has_no_service_radius():
    pickup = PickupRequest(
        pickup_id="K1",
        requester_id="H1",
        waste_type=WasteType.PLASTIC,
        pickup_address="12 Marina Road",
        latitude=6.45,
        longitude=3.39,
    )
    candidate = pickup_candidate(pickup)

    assert candidate.service_radius_km is None
    assert candidate.location == GeoPoint(6.45, 3.39)
    assert candidate.payload is pickup
