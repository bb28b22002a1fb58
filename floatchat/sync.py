# floatchat/sync.py — shared state behind the map, charts and float list
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import ValidationError

from floatchat.charts import ChartPanel
from floatchat.errors import FloatChatError
from floatchat.models import (
    ChartKind,
    FloatRecord,
    ProfileRecord,
    QueryResult,
    parse_floats,
    parse_profiles,
    unique_floats,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProfileRequest:
    """Ticket for one profile fetch; only the latest ticket may write results."""
    generation: int
    float_id: str


class ViewSynchronizer:
    """
    Owns the latest query result, the float collection, the selected float and
    its profiles. Views read these attributes; they change only through the
    methods below, and always by replacing whole values.
    """

    def __init__(self, chart: Optional[ChartPanel] = None):
        self.query_result: Optional[QueryResult] = None
        self.floats: List[FloatRecord] = []
        self.selected_float: Optional[FloatRecord] = None
        self.profiles: List[ProfileRecord] = []
        self.profile_error: Optional[FloatChatError] = None
        self.catalog_error: Optional[FloatChatError] = None
        self.chart = chart or ChartPanel()
        self._generation = 0
        self._pending: Optional[ProfileRequest] = None

    # ---- query results ----
    def set_query_result(self, result: QueryResult) -> None:
        floats = None
        if result.is_float_shaped:
            try:
                # profile-style rows repeat float_id once per depth level
                floats = unique_floats(parse_floats(result.results))
            except ValidationError as e:
                logger.warning(f"Float-shaped query rows did not validate, keeping catalog: {e}")

        # build everything first, then swap references together
        self.query_result = result
        if floats is not None:
            self.floats = floats
        self.switch_chart(ChartKind.QUERY_RESULTS)

    # ---- float catalog ----
    def set_floats(self, floats: Sequence[Union[FloatRecord, Dict[str, Any]]]) -> None:
        self.floats = unique_floats(parse_floats(floats))
        if self.chart.kind is ChartKind.DISTRIBUTION:
            self.switch_chart(ChartKind.DISTRIBUTION)

    def refresh_catalog(self, client) -> Optional[FloatChatError]:
        """Reload floats from the backend. Returns the error instead of raising."""
        try:
            floats = client.list_floats()
        except FloatChatError as e:
            logger.error(f"Float catalog refresh failed: {e.user_message}")
            self.catalog_error = e
            return e
        self.catalog_error = None
        self.set_floats(floats)
        return None

    # ---- selection & profiles ----
    def select_float(self, f: Optional[FloatRecord]) -> Optional[ProfileRequest]:
        self._generation += 1
        self.selected_float = f
        self.profiles = []
        self.profile_error = None
        self._pending = ProfileRequest(self._generation, f.float_id) if f is not None else None
        if self.chart.kind.is_profile:
            self.switch_chart(self.chart.kind)
        return self._pending

    def is_current(self, request: Optional[ProfileRequest]) -> bool:
        return request is not None and request == self._pending

    def apply_profiles(self, request: Optional[ProfileRequest], rows: Sequence[Any]) -> bool:
        if not self.is_current(request):
            logger.debug(f"Dropping stale profiles: {request}")
            return False
        self.profiles = parse_profiles(rows)
        self.profile_error = None
        self._pending = None
        if self.chart.kind.is_profile:
            self.switch_chart(self.chart.kind)
        return True

    def fail_profiles(self, request: Optional[ProfileRequest], error: FloatChatError) -> bool:
        if not self.is_current(request):
            return False
        self.profiles = []
        self.profile_error = error
        self._pending = None
        return True

    def load_profiles(self, client, request: Optional[ProfileRequest]) -> bool:
        if request is None:
            return False
        try:
            rows = client.get_profiles(request.float_id)
        except FloatChatError as e:
            logger.error(f"Profile fetch for float {request.float_id} failed: {e.user_message}")
            return self.fail_profiles(request, e)
        return self.apply_profiles(request, rows)

    # ---- charts ----
    def switch_chart(self, kind: Union[ChartKind, str]):
        return self.chart.show(
            kind,
            profiles=self.profiles,
            floats=self.floats,
            query_result=self.query_result,
        )
