# floatchat/export.py — CSV download for query results
from __future__ import annotations

import csv
import re
import time
from typing import Any, Mapping, Optional, Sequence

import pandas as pd


def rows_to_csv(rows: Sequence[Mapping[str, Any]]) -> str:
    """
    CSV text for a list of result rows.

    Columns are the keys of the first row. The header line is plain; every data
    cell is double-quoted and missing/null cells are left empty.
    """
    if not rows:
        return ""
    headers = list(rows[0].keys())
    df = pd.DataFrame([[r.get(h) for h in headers] for r in rows], columns=headers, dtype=object)
    body = df.to_csv(index=False, header=False, quoting=csv.QUOTE_ALL, lineterminator="\n", na_rep="")
    return ",".join(headers) + "\n" + body.rstrip("\n")


def export_filename(query: Optional[str], now_ms: Optional[int] = None) -> str:
    slug = re.sub(r"[^a-zA-Z0-9]", "-", (query or "").strip()) or "results"
    stamp = now_ms if now_ms is not None else time.time_ns() // 1_000_000
    return f"floatchat-{slug}-{stamp}.csv"
