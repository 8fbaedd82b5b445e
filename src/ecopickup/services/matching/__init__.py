"""Nearby-entity matching."""

from .models import Candidate, NearbyMatch, NearbyResult
from .nearby import find_nearby, pickup_candidate, waste_picker_candidate

__all__ = [
    "Candidate",
    "NearbyMatch",
    "NearbyResult",
    "find_nearby",
    "pickup_candidate",
    "waste_picker_candidate",
]
