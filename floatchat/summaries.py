# floatchat/summaries.py — chat reply text for query results
from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import numpy as np

from floatchat.errors import FloatChatError
from floatchat.models import QueryResult, coerce_number

logger = logging.getLogger(__name__)

PREVIEW_ROWS = 3
SAMPLE_LIMIT = 100
MAX_NUMERIC_COLUMNS = 3
MAX_CATEGORICAL_COLUMNS = 2
TOP_VALUES = 3
EXAMPLE_COLUMNS = 6

NO_RESULTS_MESSAGE = "No results available to explain."
SUMMARY_FAILED_MESSAGE = "Failed to summarize results."
INSIGHT_HEADER = "Data insight (plain text)"

RowsLike = Union[QueryResult, Mapping[str, Any], Sequence[Mapping[str, Any]], None]


# ---------- Formatting helpers ----------
def _fmt_value(v: Any) -> str:
    if v is None:
        return "N/A"
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)


def _present(row: Mapping[str, Any], key: str) -> bool:
    return row.get(key) is not None and row.get(key) != ""


def _float_line(row: Mapping[str, Any]) -> str:
    parts = [f"Float ID: {_fmt_value(row['float_id'])}"]
    if _present(row, "latitude") and _present(row, "longitude"):
        parts.append(f"Location: {_fmt_value(row['latitude'])}°N, {_fmt_value(row['longitude'])}°E")
    if _present(row, "status"):
        parts.append(f"Status: {_fmt_value(row['status'])}")
    if _present(row, "ocean_region"):
        parts.append(f"Region: {_fmt_value(row['ocean_region'])}")
    if _present(row, "total_profiles"):
        parts.append(f"Profiles: {_fmt_value(row['total_profiles'])}")
    return " | ".join(parts)


def _profile_line(row: Mapping[str, Any]) -> str:
    depth = row.get("depth")
    parts = [f"Depth: {_fmt_value(depth)}m" if depth is not None else "Depth: N/A"]
    if row.get("temperature") is not None:
        parts.append(f"Temperature: {_fmt_value(row['temperature'])}°C")
    if row.get("salinity") is not None:
        parts.append(f"Salinity: {_fmt_value(row['salinity'])} PSU")
    return " | ".join(parts)


def format_row(row: Any) -> str:
    """One-line rendering of a result row, shaped by the fields it carries."""
    if not isinstance(row, Mapping):
        return _fmt_value(row)
    if _present(row, "float_id"):
        return _float_line(row)
    if "depth" in row:
        return _profile_line(row)
    return " | ".join(f"{k}: {_fmt_value(v)}" for k, v in row.items())


# ---------- Bot replies ----------
def short_summary(result: QueryResult, original_query: Optional[str] = None, emojis: bool = True) -> str:
    ok = "✅ " if emojis else ""
    table = "📊 " if emojis else ""
    bulb = "💡 " if emojis else ""
    memo = "📝 " if emojis else ""

    rows = list(result.results)
    header = f"{ok}**Query Results:** Found {result.count} records"
    if original_query and original_query.strip():
        header += f' for "{original_query.strip()}"'
    lines = [header, ""]

    if rows:
        lines += [f"{table}**Data Results:**", ""]
        for i, row in enumerate(rows[:PREVIEW_ROWS], start=1):
            lines.append(f"**{i}.** {format_row(row)}")
        if len(rows) > PREVIEW_ROWS:
            lines += ["", f"... and {len(rows) - PREVIEW_ROWS} more results (see detailed view below)"]
        lines.append("")

    lines.append(f"{bulb}**Visualization:** The data has been loaded into the map and charts for interactive exploration!")
    text = "\n".join(lines)

    if result.summary:
        text = f"{memo}**Summary:** {result.summary}\n\n" + text
    return text


def error_reply(err: FloatChatError, emojis: bool = True) -> str:
    cross = "❌ " if emojis else ""
    bulb = "💡 " if emojis else ""
    tips = "\n".join(f"• {s}" for s in err.suggestions)
    return (
        f"{cross}I encountered an error processing your query.\n\n"
        f"**Error:** {err.user_message}\n\n"
        f"{bulb}**Suggestions:**\n{tips}"
    )


def suggestions_reply(suggestions: Sequence[str], emojis: bool = True) -> str:
    bulb = "💡 " if emojis else ""
    cleaned = [s for s in suggestions if s and str(s).strip()]
    if not cleaned:
        body = "No suggestions available."
    else:
        body = "\n".join(f"{i}. {s}" for i, s in enumerate(cleaned, start=1))
    return f"{bulb}Suggestions:\n\n{body}"


# ---------- Insight digest ----------
def _rows_of(result: RowsLike) -> List[Any]:
    if result is None:
        return []
    if isinstance(result, QueryResult):
        return list(result.results)
    if isinstance(result, Mapping):
        return list(result.get("results") or [])
    return list(result)


def _column_order(sample: Sequence[Mapping[str, Any]]) -> List[str]:
    seen: Dict[str, None] = {}
    for r in sample:
        for k in r.keys():
            seen.setdefault(k, None)
    return list(seen)


def insight_digest(result: RowsLike) -> str:
    """
    Plain-text digest of a result set: columns, numeric stats, top categorical
    values and an example row. Computed on the first 100 rows.

    Best-effort: never raises. Returns NO_RESULTS_MESSAGE for an empty set and
    SUMMARY_FAILED_MESSAGE if anything goes wrong while summarizing.
    """
    try:
        rows = _rows_of(result)
        if not rows:
            return NO_RESULTS_MESSAGE

        sample = rows[:SAMPLE_LIMIT]
        columns = _column_order(sample)
        numeric = [k for k in columns if any(coerce_number(r.get(k)) is not None for r in sample)]
        categorical = [k for k in columns if k not in numeric]

        lines = [f"Results: {len(rows)} rows. Columns: {', '.join(columns)}."]

        for k in numeric[:MAX_NUMERIC_COLUMNS]:
            vals = [v for v in (coerce_number(r.get(k)) for r in sample) if v is not None]
            if not vals:
                continue
            arr = np.array(vals, dtype=float)
            lines.append(
                f"{k}: avg {arr.mean():.3f}, min {arr.min():.3f}, max {arr.max():.3f} "
                f"(based on {arr.size} values)."
            )

        for k in categorical[:MAX_CATEGORICAL_COLUMNS]:
            freq = Counter(r.get(k) for r in sample if r.get(k) is not None and r.get(k) != "")
            # most_common keeps first-seen order among equal counts
            top = freq.most_common(TOP_VALUES)
            if top:
                desc = ", ".join(f"{_fmt_value(v)} ({c})" for v, c in top)
                lines.append(f"{k}: top values → {desc}.")

        first = sample[0]
        preview = " | ".join(f"{k}={_fmt_value(first.get(k))}" for k in columns[:EXAMPLE_COLUMNS])
        lines.append(f"Example row: {preview}")

        return f"{INSIGHT_HEADER}\n\n" + "\n".join(lines)
    except Exception as e:
        logger.error(f"Insight digest failed: {e}")
        return SUMMARY_FAILED_MESSAGE
