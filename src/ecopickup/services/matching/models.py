"""Matching domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from ...models.domain import GeoPoint


@dataclass(slots=True)
class Candidate:
    """Something that can be matched by location: a waste picker or a pickup.

    ``service_radius_km`` of None means the candidate is bounded only by the
    searcher's radius.
    """

    candidate_id: str
    location: Optional[GeoPoint]
    service_radius_km: Optional[float] = None
    payload: Any = None


@dataclass(slots=True)
class NearbyMatch:
    candidate: Candidate
    distance_km: float


@dataclass(slots=True)
class NearbyResult:
    matches: List[NearbyMatch] = field(default_factory=list)
    skipped_count: int = 0
    skipped_ids: List[str] = field(default_factory=list)
