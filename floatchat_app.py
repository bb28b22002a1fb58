# floatchat_app.py — FloatChat dashboard (Chat + Map + Charts + Float List)
import logging

import plotly.graph_objects as go
import streamlit as st

from floatchat.api import FloatChatClient
from floatchat.catalog import (
    ALL,
    filter_floats,
    format_coordinate,
    format_date,
    ingest_message,
    region_options,
    status_color,
)
from floatchat.charts import READY, chart_state
from floatchat.config import Settings, configure_logging
from floatchat.conversation import ConversationStore
from floatchat.errors import FloatChatError
from floatchat.export import export_filename, rows_to_csv
from floatchat.gateway import QueryGateway
from floatchat.mapview import MapView
from floatchat.models import ChartKind, ChatTurn
from floatchat.summaries import format_row
from floatchat.sync import ViewSynchronizer

# ================= Settings & logging =================
settings = Settings.from_env()
configure_logging(settings.log_level)
logger = logging.getLogger("floatchat.app")

# ================= Streamlit page setup =================
st.set_page_config(page_title="FloatChat Dashboard", page_icon="🌊", layout="wide")

DEMO_QUERIES = [
    "Show me all active ARGO floats",
    "Get temperature profiles for float 6901234",
    "Find floats near latitude 15.5, longitude 70.2",
    "Show salinity data at 100m depth for all floats",
    "How many floats are in the Arabian Sea?",
    "Compare oxygen levels in different regions",
]

MASTER_DEMO_QUERIES = [
    "Show salinity profiles near equator",
    "Floats near 15°N, 70°E",
    "Temperature at 100m depth in Arabian Sea",
]

CHART_LABELS = {
    ChartKind.TEMPERATURE: "🌡️ Temperature",
    ChartKind.SALINITY: "💧 Salinity",
    ChartKind.OXYGEN: "🫧 Oxygen",
    ChartKind.DISTRIBUTION: "📈 Distribution",
    ChartKind.QUERY_RESULTS: "📊 Query Results",
}


# ================= Session =================
def _init_session():
    ss = st.session_state
    if "client" not in ss:
        ss.client = FloatChatClient(settings)
    if "store" not in ss:
        ss.store = ConversationStore()
    if "sync" not in ss:
        ss.sync = ViewSynchronizer()
    if "gateway" not in ss:
        ss.gateway = QueryGateway(ss.client, ss.store, ss.sync)
    if "map_view" not in ss:
        ss.map_view = MapView(on_select=_select_float)
    if "catalog_loaded" not in ss:
        ss.sync.refresh_catalog(ss.client)
        ss.catalog_loaded = True


def _select_float(f):
    ss = st.session_state
    request = ss.sync.select_float(f)
    ss.sync.load_profiles(ss.client, request)


def _queue_query(q: str):
    st.session_state.gateway.enqueue(q)


def _queue_chat_input():
    _queue_query(st.session_state.get("chat_box"))


def _show_error(err: FloatChatError):
    st.error(err.user_message)
    st.caption(" · ".join(err.suggestions))


_init_session()
store: ConversationStore = st.session_state.store
sync: ViewSynchronizer = st.session_state.sync
gateway: QueryGateway = st.session_state.gateway
client: FloatChatClient = st.session_state.client
map_view: MapView = st.session_state.map_view

# read before any widget is drawn; a queued query runs at the end of this run
busy = gateway.busy

# ================= Header =================
head_l, head_r = st.columns([5, 1])
with head_l:
    st.title("🌊 FloatChat Dashboard")
    st.caption("Ask questions about ARGO floats in plain English. Results flow into the map, charts and float list.")
with head_r:
    if st.button("🔄 Refresh", use_container_width=True):
        sync.refresh_catalog(client)

if not settings.api_url:
    st.warning("FLOATCHAT_API_URL is not set. Add it to your .env file so the dashboard can reach the FloatChat API.")
if sync.catalog_error is not None:
    _show_error(sync.catalog_error)


# ---------- Viz helpers ----------
def render_turn_actions(turn: ChatTurn):
    data = turn.data
    cols = st.columns(4)
    if data is not None and data.has_rows:
        with cols[0]:
            st.download_button(
                "📊 Export CSV",
                rows_to_csv(data.results).encode("utf-8"),
                export_filename(data.natural_query or turn.original_query),
                "text/csv",
                key=f"csv-{turn.id}",
            )
    if data is not None:
        with cols[1]:
            st.button("💡 Explain", key=f"explain-{turn.id}", on_click=gateway.explain, args=(data,))
    if turn.original_query:
        with cols[2]:
            st.button("❓ Suggest", key=f"suggest-{turn.id}", on_click=gateway.suggest, args=(turn.original_query,))
    if turn.error and turn.original_query:
        with cols[3]:
            st.button(
                "🔁 Retry", key=f"retry-{turn.id}", on_click=_queue_query, args=(turn.original_query,),
                disabled=busy,
            )


def render_result_records(turn: ChatTurn):
    data = turn.data
    if data is None or not data.has_rows:
        return
    with st.expander(f"📊 Query Results ({data.count} records)"):
        for i, row in enumerate(data.results[:10], start=1):
            st.markdown(f"**Record {i}:** {format_row(row)}")
        if len(data.results) > 10:
            st.caption(f"... and {len(data.results) - 10} more records")
        if data.sql_query:
            st.code(data.sql_query, language="sql")


def render_chat():
    for turn in store:
        role = "user" if turn.role == "user" else "assistant"
        with st.chat_message(role):
            if turn.error:
                st.error(turn.content)
            else:
                st.markdown(turn.content)
            if role == "assistant" and turn.id != store.turns[0].id:
                render_turn_actions(turn)
                render_result_records(turn)


def render_map(key: str, height: int = 500):
    st.subheader("Float locations")
    df = map_view.markers(sync.floats, sync.selected_float)
    if len(df) == 0:
        st.info("No float locations to display. Refresh the catalog or run a float query.")
        return
    event = st.pydeck_chart(
        map_view.deck(sync.floats, sync.selected_float),
        height=height,
        on_select="rerun",
        selection_mode="single-object",
        key=key,
    )
    map_view.handle_selection(event.selection, sync.floats, source=key)
    st.caption(f"{len(df)} of {len(sync.floats)} floats have a valid position.")


def render_selected_float(key: str):
    f = sync.selected_float
    if f is None:
        st.caption("Select a float on the map or in the float list to view its profiles.")
        return
    st.markdown(
        f"**Float {f.float_id}** · :{status_color(f.status)}[{f.status}] · "
        f"{format_coordinate(f.latitude, 'N')}, {format_coordinate(f.longitude, 'E')}"
    )
    if sync.profile_error is not None:
        _show_error(sync.profile_error)
    st.button("Clear selection", key=f"clear-{key}", on_click=_select_float, args=(None,))


def render_charts():
    st.subheader("Data Visualization")
    cols = st.columns(len(CHART_LABELS))
    for col, (kind, label) in zip(cols, CHART_LABELS.items()):
        with col:
            st.button(
                label,
                key=f"chart-{kind.value}",
                on_click=sync.switch_chart,
                args=(kind,),
                type="primary" if sync.chart.kind is kind else "secondary",
                use_container_width=True,
            )

    spec = sync.chart.spec or sync.switch_chart(sync.chart.kind)
    st.plotly_chart(go.Figure(spec), use_container_width=True)
    if chart_state(spec) != READY and sync.chart.kind.is_profile and sync.selected_float is None:
        st.info("Select a float to view its profile data.")

    qr = sync.query_result
    if qr is not None:
        st.markdown("#### Query Results Summary")
        c1, c2, c3 = st.columns(3)
        c1.metric("Total Results", qr.count)
        c2.metric("Query Type", "Natural Language")
        c3.metric("Status", "Success")


def render_uploader():
    with st.container(border=True):
        st.markdown("**Upload ARGO NetCDF**")
        up = st.file_uploader("Select a .nc file", type=["nc"], key="nc_upload")
        if st.button("Upload & Ingest", disabled=up is None):
            try:
                with st.spinner("Uploading and parsing NetCDF…"):
                    payload = client.ingest_netcdf(up.name, up.getvalue())
            except FloatChatError as e:
                logger.error(f"NetCDF upload failed: {e.user_message}")
                _show_error(e)
            else:
                st.success(ingest_message(payload))
                sync.refresh_catalog(client)


def render_float_card(f):
    with st.container(border=True):
        st.markdown(f"#### Float {f.float_id}  :{status_color(f.status)}[{f.status}]")
        st.caption(f"📍 {format_coordinate(f.latitude, 'N')}, {format_coordinate(f.longitude, 'E')}")
        st.markdown(f"**Region:** {f.ocean_region or 'N/A'}")
        m1, m2 = st.columns(2)
        m1.metric("Profiles", f.total_profiles)
        m2.metric("WMO ID", f.wmo_id or "N/A")
        st.caption(f"🗓️ Deployed: {format_date(f.deployment_date)} · Last Profile: {format_date(f.last_profile_date)}")
        if f.institution:
            st.caption(f"Institution: {f.institution}")
        selected = sync.selected_float is not None and sync.selected_float.float_id == f.float_id
        st.button(
            "Selected" if selected else "View profiles",
            key=f"select-{f.float_id}",
            on_click=_select_float,
            args=(f,),
            disabled=selected,
        )


def render_float_list():
    render_uploader()
    st.subheader("🌊 ARGO Float List")
    c1, c2, c3 = st.columns(3)
    with c1:
        term = st.text_input("Search floats...", key="float_search")
    with c2:
        status = st.selectbox("Status", [ALL, "active", "inactive", "lost"], key="float_status")
    with c3:
        region = st.selectbox("Region", [ALL] + region_options(sync.floats), key="float_region")

    shown = filter_floats(sync.floats, term, status, region)
    st.caption(f"{len(shown)} of {len(sync.floats)} floats")
    if not shown:
        st.info("No floats found. Try adjusting your search terms or filters.")
        return
    cols = st.columns(3)
    for i, f in enumerate(shown):
        with cols[i % 3]:
            render_float_card(f)


# ================= UI: Tabs =================
tab_chat, tab_map, tab_charts, tab_floats = st.tabs(["💬 AI Chat", "🗺️ Map View", "📊 Charts", "🌊 Float List"])

# ---------- Chat ----------
with tab_chat:
    left, right = st.columns([2, 1])
    with left:
        render_chat()

        st.markdown("**🏆 Master demo queries**")
        for i, q in enumerate(MASTER_DEMO_QUERIES):
            st.button(q, key=f"master-demo-{i}", on_click=_queue_query, args=(q,), disabled=busy)
        with st.expander("💡 Try these demo queries"):
            for i, q in enumerate(DEMO_QUERIES):
                st.button(q, key=f"demo-{i}", on_click=_queue_query, args=(q,), disabled=busy)
    with right:
        render_map("chat_map", height=380)
        render_selected_float("chat")

st.chat_input(
    "Ask me about ARGO data... (e.g., 'Show me all active floats')",
    key="chat_box",
    on_submit=_queue_chat_input,
    disabled=busy,
)

# ---------- Map ----------
with tab_map:
    render_map("full_map", height=650)
    render_selected_float("map")

# ---------- Charts ----------
with tab_charts:
    render_charts()

# ---------- Float list ----------
with tab_floats:
    render_float_list()

# ---------- Queued query ----------
if gateway.queued is not None:
    with tab_chat:
        with st.spinner("Analyzing your query..."):
            gateway.run_queued()
    st.rerun()
