# floatchat/mapview.py — float markers for the pydeck map
from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional, Sequence

import pandas as pd
import pydeck as pdk

from floatchat.models import FloatRecord

LAYER_ID = "floats"
DEFAULT_CENTER = (15.0, 70.0)  # lat, lon
DEFAULT_ZOOM = 3.5

ACTIVE_COLOR = [2, 132, 199]
IDLE_COLOR = [107, 114, 128]
SELECTED_COLOR = [220, 38, 38]
MARKER_RADIUS = 20000
SELECTED_RADIUS = 40000

MARKER_COLUMNS = [
    "float_id", "wmo_id", "lat", "lon", "status", "ocean_region",
    "total_profiles", "color", "radius",
]

TOOLTIP = {
    "html": (
        "<b>Float {float_id}</b><br/>"
        "WMO: {wmo_id}<br/>"
        "Region: {ocean_region}<br/>"
        "Status: {status}<br/>"
        "Profiles: {total_profiles}"
    )
}


class MapView:
    """
    Builds the map for a float collection.

    Selection goes through the ``on_select`` callback given at construction;
    the map never reaches into session state on its own.
    """

    def __init__(self, on_select: Callable[[Optional[FloatRecord]], Any]):
        self.on_select = on_select
        self._last_pick: Dict[str, Optional[str]] = {}

    def markers(self, floats: Sequence[FloatRecord], selected: Optional[FloatRecord] = None) -> pd.DataFrame:
        rows = []
        selected_id = selected.float_id if selected is not None else None
        for f in floats:
            if not f.has_position:
                continue
            is_selected = f.float_id == selected_id
            if is_selected:
                color = SELECTED_COLOR
            elif f.status == "active":
                color = ACTIVE_COLOR
            else:
                color = IDLE_COLOR
            rows.append({
                "float_id": f.float_id,
                "wmo_id": f.wmo_id or "N/A",
                "lat": f.latitude,
                "lon": f.longitude,
                "status": f.status,
                "ocean_region": f.ocean_region or "N/A",
                "total_profiles": f.total_profiles,
                "color": color,
                "radius": SELECTED_RADIUS if is_selected else MARKER_RADIUS,
            })
        return pd.DataFrame(rows, columns=MARKER_COLUMNS)

    def view_state(self, markers: pd.DataFrame) -> pdk.ViewState:
        if len(markers) == 0:
            lat, lon = DEFAULT_CENTER
        else:
            lat, lon = float(markers["lat"].mean()), float(markers["lon"].mean())
        return pdk.ViewState(latitude=lat, longitude=lon, zoom=DEFAULT_ZOOM)

    def deck(self, floats: Sequence[FloatRecord], selected: Optional[FloatRecord] = None) -> pdk.Deck:
        df = self.markers(floats, selected)
        return pdk.Deck(
            map_style=None,
            initial_view_state=self.view_state(df),
            layers=[pdk.Layer(
                "ScatterplotLayer",
                id=LAYER_ID,
                data=df,
                get_position="[lon, lat]",
                get_fill_color="color",
                get_radius="radius",
                get_line_color=[255, 255, 255],
                line_width_min_pixels=2,
                stroked=True,
                pickable=True,
            )],
            tooltip=TOOLTIP,
        )

    # ---- selection ----
    def select(self, float_id: Optional[str], floats: Sequence[FloatRecord]) -> Optional[FloatRecord]:
        match = None
        if float_id is not None:
            match = next((f for f in floats if f.float_id == str(float_id)), None)
        self.on_select(match)
        return match

    def handle_selection(
        self,
        selection: Optional[Mapping[str, Any]],
        floats: Sequence[FloatRecord],
        source: str = "map",
    ) -> Optional[FloatRecord]:
        """
        Route a pydeck chart selection event to the callback.

        Chart selections persist across reruns, so the callback only fires when
        the pick for ``source`` changes. Cleared picks do not deselect.
        """
        objects = ((selection or {}).get("objects") or {}).get(LAYER_ID) or []
        picked = str(objects[0].get("float_id")) if objects else None
        if picked == self._last_pick.get(source):
            return None
        self._last_pick[source] = picked
        if picked is None:
            return None
        return self.select(picked, floats)
