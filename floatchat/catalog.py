# floatchat/catalog.py — float list search/filter and display helpers
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from floatchat.models import FloatRecord, coerce_number

ALL = "all"

STATUS_COLORS = {
    "active": "green",
    "inactive": "gray",
    "lost": "red",
}


def _contains(field: Optional[str], term: str) -> bool:
    return field is not None and term in str(field).lower()


def filter_floats(
    floats: Sequence[FloatRecord],
    search_term: str = "",
    status: str = ALL,
    region: str = ALL,
) -> List[FloatRecord]:
    """
    Floats matching a free-text search plus status/region filters.
    The search looks at float_id, ocean_region and country (case-insensitive);
    "all" disables a filter. Input order is preserved and the input is not modified.
    """
    term = (search_term or "").lower()
    out = []
    for f in floats:
        matches_search = (
            _contains(f.float_id, term)
            or _contains(f.ocean_region, term)
            or _contains(f.country, term)
        )
        matches_status = status == ALL or f.status == status
        matches_region = region == ALL or f.ocean_region == region
        if matches_search and matches_status and matches_region:
            out.append(f)
    return out


def region_options(floats: Sequence[FloatRecord]) -> List[str]:
    seen: Dict[str, None] = {}
    for f in floats:
        if f.ocean_region:
            seen.setdefault(f.ocean_region, None)
    return list(seen)


# ---------- Display helpers ----------
def format_coordinate(value: Any, suffix: str) -> str:
    num = coerce_number(value)
    if num is None:
        return "N/A"
    return f"{num:.4f}°{suffix}"


def format_date(d: Any) -> str:
    if d is None or d == "":
        return "N/A"
    try:
        return pd.to_datetime(d).strftime("%b %d, %Y")
    except (ValueError, TypeError, OverflowError):
        return str(d)


def status_color(status: str) -> str:
    return STATUS_COLORS.get(status, "gray")


def ingest_message(payload: Dict[str, Any]) -> str:
    float_info = payload.get("float") or {}
    float_id = float_info.get("float_id", "") if isinstance(float_info, dict) else ""
    inserted = payload.get("insertedProfiles") or 0
    return f"Ingested float {float_id} with {inserted} profiles."
