# floatchat/models.py
from __future__ import annotations

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

FLOAT_STATUSES = ("active", "inactive", "lost", "unknown")


# =============================================================================
# Numeric coercion (the one place string-typed numbers become floats)
# =============================================================================
def coerce_number(value: Any) -> Optional[float]:
    """
    Parse a backend value into a finite float, or return None.

    Native ints/floats pass through; bools are not treated as numbers.
    Strings are stripped and parsed with float(). NaN/inf and anything
    unparsable are rejected.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        out = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            out = float(text)
        except ValueError:
            return None
    else:
        return None
    return out if math.isfinite(out) else None


def coerce_latitude(value: Any) -> Optional[float]:
    lat = coerce_number(value)
    if lat is None or not -90.0 <= lat <= 90.0:
        return None
    return lat


def coerce_longitude(value: Any) -> Optional[float]:
    lon = coerce_number(value)
    if lon is None or not -180.0 <= lon <= 180.0:
        return None
    return lon


# =============================================================================
# Records
# =============================================================================
class FloatRecord(BaseModel):
    """ARGO float as listed by GET /api/floats (or float-shaped query rows)."""
    model_config = ConfigDict(frozen=True, extra="allow")

    float_id: str
    wmo_id: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    status: str = "unknown"
    ocean_region: Optional[str] = None
    total_profiles: int = 0
    deployment_date: Optional[str] = None
    last_profile_date: Optional[str] = None
    institution: Optional[str] = None
    country: Optional[str] = None

    @field_validator("float_id", "wmo_id", mode="before")
    @classmethod
    def _stringify_ids(cls, v):
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @field_validator("latitude", mode="before")
    @classmethod
    def _parse_latitude(cls, v):
        return coerce_latitude(v)

    @field_validator("longitude", mode="before")
    @classmethod
    def _parse_longitude(cls, v):
        return coerce_longitude(v)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, v):
        s = str(v or "").strip().lower()
        return s if s in FLOAT_STATUSES else "unknown"

    @field_validator("total_profiles", mode="before")
    @classmethod
    def _parse_total_profiles(cls, v):
        n = coerce_number(v)
        return int(n) if n is not None else 0

    @field_validator("deployment_date", "last_profile_date", mode="before")
    @classmethod
    def _stringify_dates(cls, v):
        if v is None or v == "":
            return None
        return str(v)

    @property
    def has_position(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class ProfileRecord(BaseModel):
    """One depth level of a float profile (GET /api/profiles/{floatId})."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    depth: float
    temperature: Optional[float] = None
    salinity: Optional[float] = None
    oxygen: Optional[float] = None

    @field_validator("depth", mode="before")
    @classmethod
    def _parse_depth(cls, v):
        depth = coerce_number(v)
        if depth is None:
            raise ValueError(f"unparsable depth: {v!r}")
        return depth

    @field_validator("temperature", "salinity", "oxygen", mode="before")
    @classmethod
    def _parse_metric(cls, v):
        return coerce_number(v)


class QueryResult(BaseModel):
    """Normalized output of POST /api/query."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    results: List[Dict[str, Any]] = Field(default_factory=list)
    count: int = 0
    summary: Optional[str] = None
    natural_query: Optional[str] = Field(default=None, alias="naturalQuery")
    sql_query: Optional[str] = Field(default=None, alias="sqlQuery")

    @model_validator(mode="before")
    @classmethod
    def _default_count(cls, data):
        # backend may omit count; fall back to the number of rows returned
        if isinstance(data, dict) and data.get("count") is None:
            rows = data.get("results")
            data = {**data, "count": len(rows) if isinstance(rows, list) else 0}
        return data

    @property
    def has_rows(self) -> bool:
        return len(self.results) > 0

    @property
    def is_float_shaped(self) -> bool:
        return self.has_rows and all(
            isinstance(r, Mapping) and r.get("float_id") is not None for r in self.results
        )


class ChartKind(str, Enum):
    TEMPERATURE = "temperature"
    SALINITY = "salinity"
    OXYGEN = "oxygen"
    DISTRIBUTION = "distribution"
    QUERY_RESULTS = "query_results"

    @property
    def is_profile(self) -> bool:
        return self in (ChartKind.TEMPERATURE, ChartKind.SALINITY, ChartKind.OXYGEN)


class ChatTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    role: Literal["user", "bot"]
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    data: Optional[QueryResult] = None
    error: bool = False
    original_query: Optional[str] = None


# ------------------ parsing helpers ------------------

def parse_floats(rows: Any) -> List[FloatRecord]:
    """Build FloatRecords from a list of mappings; rows without a float_id are skipped."""
    out: List[FloatRecord] = []
    for r in rows or []:
        if isinstance(r, FloatRecord):
            out.append(r)
        elif isinstance(r, Mapping) and r.get("float_id") is not None:
            out.append(FloatRecord.model_validate(dict(r)))
    return out


def parse_profiles(rows: Any) -> List[ProfileRecord]:
    """Build ProfileRecords; rows whose depth does not parse are rejected."""
    out: List[ProfileRecord] = []
    for r in rows or []:
        if isinstance(r, ProfileRecord):
            out.append(r)
            continue
        if not isinstance(r, Mapping) or coerce_number(r.get("depth")) is None:
            continue
        out.append(ProfileRecord.model_validate(dict(r)))
    return out


def unique_floats(floats: Sequence[FloatRecord]) -> List[FloatRecord]:
    """First record per float_id, in input order."""
    seen: Dict[str, FloatRecord] = {}
    for f in floats:
        seen.setdefault(f.float_id, f)
    return list(seen.values())
