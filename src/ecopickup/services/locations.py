"""Location lookup helpers."""

from __future__ import annotations

from ..models.domain import GeoPoint

# Static gazetteer until a geocoding provider is wired in.
KNOWN_LOCATIONS: tuple[tuple[str, GeoPoint], ...] = (
    ("Lagos Island, Lagos", GeoPoint(6.4541, 3.3947)),
    ("Victoria Island, Lagos", GeoPoint(6.4281, 3.4219)),
    ("Ikeja, Lagos", GeoPoint(6.5954, 3.3364)),
    ("Abuja, FCT", GeoPoint(9.0579, 7.4951)),
    ("Port Harcourt, Rivers", GeoPoint(4.8156, 7.0498)),
)


def get_location_suggestions(query: str, limit: int = 5) -> list[dict]:
    needle = query.strip().lower()
    if not needle:
        return []
    matches = [
        {"name": name, "latitude": point.latitude, "longitude": point.longitude}
        for name, point in KNOWN_LOCATIONS
        if needle in name.lower()
    ]
    return matches[:limit]
