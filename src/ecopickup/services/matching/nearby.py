"""Radius search over waste pickers and pickup requests."""

from __future__ import annotations

import logging
import math
from typing import Iterable, Optional

from ...config import settings
from ...models.domain import GeoPoint, InvalidCoordinatesError, InvalidRadiusError, PickupRequest, WastePicker
from ..geospatial import distance_km, validate_coordinates
from .models import Candidate, NearbyMatch, NearbyResult


def _location_or_none(latitude: object, longitude: object) -> Optional[GeoPoint]:
    if latitude is None or longitude is None:
        return None
    try:
        return validate_coordinates(latitude, longitude)
    except InvalidCoordinatesError:
        return None


def waste_picker_candidate(picker: WastePicker, default_service_radius_km: float | None = None) -> Candidate:
    """Wrap a waste picker, falling back to the default service radius when none is declared."""
    fallback = settings.default_service_radius_km if default_service_radius_km is None else default_service_radius_km
    radius = picker.service_radius_km if picker.service_radius_km else fallback
    return Candidate(
        candidate_id=picker.user_id,
        location=_location_or_none(picker.latitude, picker.longitude),
        service_radius_km=radius,
        payload=picker,
    )


def pickup_candidate(pickup: PickupRequest) -> Candidate:
    return Candidate(
        candidate_id=pickup.pickup_id,
        location=_location_or_none(pickup.latitude, pickup.longitude),
        service_radius_km=None,
        payload=pickup,
    )


def find_nearby(origin: GeoPoint, radius_km: float, candidates: Iterable[Candidate]) -> NearbyResult:
    """Return candidates within reach of ``origin``, closest first.

    A candidate matches when its distance is within both ``radius_km`` and its
    own service radius. Candidates without a usable location are skipped and
    counted. Ties on distance are ordered by candidate id.
    """
    if isinstance(radius_km, bool) or not isinstance(radius_km, (int, float)):
        raise InvalidRadiusError(f"Radius must be a number, got {radius_km!r}")
    if not math.isfinite(radius_km) or radius_km <= 0:
        raise InvalidRadiusError(f"Radius must be greater than 0 km, got {radius_km!r}")

    result = NearbyResult()
    for candidate in candidates:
        if candidate.location is None:
            result.skipped_count += 1
            result.skipped_ids.append(candidate.candidate_id)
            continue

        distance = distance_km(origin, candidate.location)
        limit = radius_km
        if candidate.service_radius_km is not None:
            limit = min(radius_km, candidate.service_radius_km)
        if distance <= limit:
            result.matches.append(NearbyMatch(candidate=candidate, distance_km=distance))

    result.matches.sort(key=lambda match: (match.distance_km, str(match.candidate.candidate_id)))

    if result.skipped_count:
        logging.warning(
            f"Skipped {result.skipped_count} candidate(s) without a usable location: "
            f"{', '.join(result.skipped_ids[:10])}"
        )
    return result
