"""Waste picker data loader with database-first approach, falling back to a CSV seed file."""

from __future__ import annotations

import csv
import functools
import logging
from pathlib import Path
from typing import Optional

from ..config import settings
from ..db.supabase import get_supabase_client
from ..models.domain import WastePicker


def _coerce_float(value: object) -> Optional[float]:
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).replace(",", ""))
    except ValueError as exc:
        raise ValueError(f"Unable to parse float from value '{value}'") from exc


def _coerce_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"1", "true", "yes", "y"}


def _coerce_specializations(value: object) -> list[str]:
    if isinstance(value, list):
        return [str(item) for item in value]
    return [item.strip() for item in str(value or "").split(";") if item.strip()]


def _text(value: object) -> str:
    return str(value or "").strip()


def _picker_from_row(row: dict) -> WastePicker:
    return WastePicker(
        user_id=_text(row.get("user_id") or row.get("id")),
        first_name=_text(row.get("first_name")),
        last_name=_text(row.get("last_name")),
        phone=_text(row.get("phone")) or None,
        email=_text(row.get("email")) or None,
        latitude=_coerce_float(row.get("latitude")),
        longitude=_coerce_float(row.get("longitude")),
        rating=_coerce_float(row.get("rating")) or 0.0,
        service_radius_km=_coerce_float(row.get("service_radius_km") or row.get("service_radius")),
        specializations=_coerce_specializations(row.get("specializations")),
        is_verified=_coerce_bool(row.get("is_verified")),
        status=(_text(row.get("status")) or "active").lower(),
    )


def _load_waste_pickers_from_database() -> tuple[WastePicker, ...] | None:
    """Load active waste pickers from Supabase. Returns None if the database is not available."""
    supabase = get_supabase_client()
    if not supabase:
        return None

    try:
        response = supabase.table("waste_pickers").select("*").eq("status", "active").execute()
    except Exception as e:
        logging.warning(f"Waste picker query failed, falling back to file: {e}")
        return None

    pickers: list[WastePicker] = []
    for row in response.data or []:
        try:
            pickers.append(_picker_from_row(row))
        except (KeyError, ValueError, TypeError) as e:
            logging.warning(f"Skipping invalid waste picker row: {e}")
    return tuple(pickers)


@functools.lru_cache(maxsize=1)
def load_waste_pickers(source: Optional[Path] = None) -> tuple[WastePicker, ...]:
    """Load waste pickers from the configured CSV seed file."""

    csv_path = source or settings.waste_pickers_file
    if not csv_path.exists():
        logging.warning(f"Waste picker file not found: {csv_path}")
        return tuple()

    pickers: list[WastePicker] = []
    with csv_path.open(mode="r", encoding="utf-8-sig", newline="") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            raise ValueError(f"Waste picker file '{csv_path}' is missing a header row.")
        for row in reader:
            try:
                picker = _picker_from_row(row)
            except ValueError as e:
                logging.warning(f"Skipping invalid waste picker row in {csv_path.name}: {e}")
                continue
            if picker.user_id:
                pickers.append(picker)
    return tuple(pickers)


def get_active_waste_pickers(*, verified_only: bool = False) -> list[WastePicker]:
    """Active waste pickers, database first.

    Pickers without coordinates are returned too; the matching step counts and
    skips them.
    """
    pickers = _load_waste_pickers_from_database()
    if pickers is None:
        pickers = load_waste_pickers()

    return [
        picker
        for picker in pickers
        if picker.status == "active" and (picker.is_verified or not verified_only)
    ]
