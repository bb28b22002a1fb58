# floatchat/charts.py — Plotly figure dicts for the chart panel
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from floatchat.models import ChartKind, QueryResult, coerce_number

TABLE_ROW_LIMIT = 10

# layout.meta["state"] values
READY = "ready"
NO_PROFILE_DATA = "no_profile_data"
NO_FLOAT_DATA = "no_float_data"
NO_REGION_DATA = "no_region_data"
NO_QUERY_RESULTS = "no_query_results"

# kind -> (row field, series name, axis title, line color)
PROFILE_METRICS = {
    ChartKind.TEMPERATURE: ("temperature", "Temperature", "Temperature (°C)", "#0ea5e9"),
    ChartKind.SALINITY: ("salinity", "Salinity", "Salinity (PSU)", "#22c55e"),
    ChartKind.OXYGEN: ("oxygen", "Oxygen", "Oxygen (mg/L)", "#f59e0b"),
}


def _get(row: Any, key: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(key)
    return getattr(row, key, None)


def _layout(title: str, kind: ChartKind, state: str, **extra) -> Dict[str, Any]:
    layout = {
        "title": title,
        "margin": {"l": 60, "r": 20, "t": 40, "b": 50},
        "plot_bgcolor": "rgba(0,0,0,0)",
        "paper_bgcolor": "rgba(0,0,0,0)",
        "font": {"color": "#374151"},
        "meta": {"kind": kind.value, "state": state},
    }
    layout.update(extra)
    return layout


def _empty(title: str, kind: ChartKind, state: str) -> Dict[str, Any]:
    return {"data": [], "layout": _layout(title, kind, state)}


def chart_state(spec: Optional[Dict[str, Any]]) -> Optional[str]:
    if not spec:
        return None
    return spec.get("layout", {}).get("meta", {}).get("state")


# =============================================================================
# Projections
# =============================================================================
def profile_points(rows: Sequence[Any], field: str) -> List[Tuple[float, float]]:
    """(depth, value) pairs with both parts present, shallowest first."""
    pts = []
    for r in rows or []:
        depth = coerce_number(_get(r, "depth"))
        value = coerce_number(_get(r, field))
        if depth is None or value is None:
            continue
        pts.append((depth, value))
    return sorted(pts, key=lambda p: p[0])


def _profile_chart(rows: Sequence[Any], kind: ChartKind) -> Dict[str, Any]:
    field, name, axis_title, color = PROFILE_METRICS[kind]
    pts = profile_points(rows, field)
    if not pts:
        return _empty(f"No {kind.value} data available", kind, NO_PROFILE_DATA)
    return {
        "data": [{
            "type": "scatter",
            "mode": "lines+markers",
            "x": [v for _, v in pts],
            "y": [d for d, _ in pts],
            "name": name,
            "line": {"color": color},
            "marker": {"size": 6},
        }],
        "layout": _layout(
            f"{name} vs Depth Profile", kind, READY,
            xaxis={"title": axis_title},
            # oceanographic convention: surface at the top
            yaxis={"title": "Depth (m)", "autorange": "reversed"},
        ),
    }


def _distribution_chart(floats: Sequence[Any]) -> Dict[str, Any]:
    kind = ChartKind.DISTRIBUTION
    if not floats:
        return _empty("No Float Data Available", kind, NO_FLOAT_DATA)
    regions = [_get(f, "ocean_region") for f in floats if _get(f, "ocean_region")]
    if not regions:
        return _empty("No Ocean Region Data Available", kind, NO_REGION_DATA)
    return {
        "data": [{
            "type": "histogram",
            "x": regions,
            "name": "Floats by Region",
            "marker": {"color": "#8b5cf6"},
        }],
        "layout": _layout(
            "Float Distribution by Ocean Region", kind, READY,
            xaxis={"title": "Ocean Region"},
            yaxis={"title": "Number of Floats"},
        ),
    }


def _cell(v: Any) -> Any:
    return "N/A" if v is None else v


def _query_table(rows: Sequence[Mapping[str, Any]], total: Optional[int]) -> Dict[str, Any]:
    kind = ChartKind.QUERY_RESULTS
    if not rows:
        return _empty("No Query Results Available", kind, NO_QUERY_RESULTS)
    shown = list(rows[:TABLE_ROW_LIMIT])
    columns = list(shown[0].keys())
    return {
        "data": [{
            "type": "table",
            "header": {
                "values": columns,
                "fill": {"color": "#0ea5e9"},
                "font": {"color": "white", "size": 12},
            },
            "cells": {
                "values": [[_cell(r.get(c)) for r in shown] for c in columns],
                "fill": {"color": [["#f8fafc"], ["#eef2f7"]]},
                "font": {"size": 10},
            },
        }],
        "layout": _layout(
            f"Query Results ({total if total is not None else len(rows)} total)", kind, READY
        ),
    }


def project(
    rows: Sequence[Any],
    kind: Union[ChartKind, str],
    aux_floats: Optional[Sequence[Any]] = None,
    total: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Build the figure dict for a chart kind.

    ``rows`` are profile levels for the profile kinds and query rows for
    ``query_results``; ``aux_floats`` feeds the distribution histogram.
    Never raises for empty input: each kind has an explicit empty state,
    named in ``layout.meta.state``.
    """
    kind = ChartKind(kind)
    if kind.is_profile:
        return _profile_chart(rows, kind)
    if kind is ChartKind.DISTRIBUTION:
        return _distribution_chart(aux_floats or [])
    return _query_table(rows or [], total)


class ChartPanel:
    """Currently selected chart kind and its rendered spec."""

    def __init__(self, kind: Union[ChartKind, str] = ChartKind.TEMPERATURE):
        self.kind = ChartKind(kind)
        self.spec: Optional[Dict[str, Any]] = None

    def show(
        self,
        kind: Union[ChartKind, str],
        profiles: Sequence[Any] = (),
        floats: Sequence[Any] = (),
        query_result: Optional[QueryResult] = None,
    ) -> Dict[str, Any]:
        self.kind = ChartKind(kind)
        self.spec = None  # never overlay the previous kind
        if self.kind is ChartKind.QUERY_RESULTS:
            rows = query_result.results if query_result else []
            total = query_result.count if query_result else None
            self.spec = project(rows, self.kind, floats, total=total)
        else:
            self.spec = project(profiles, self.kind, floats)
        return self.spec
