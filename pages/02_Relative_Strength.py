# 02_Relative_Strength.py — RS table with industry filter and risk columns
import streamlit as st

from smartscore import settings, ui
from smartscore.columns import CanonicalField as F
from smartscore.csv_text import frame_to_csv_text
from smartscore.formatting import AUTO, asof_text, rs_view
from smartscore.loader import load_table
from smartscore.normalize import col
from smartscore.query import ALL, FilterState, SortState, filter_options, run_query, toggle_sort

ui.setup_page("Relative Strength")

VIEW = "relative_strength"
SORT_KEY = "rs_sort"

SORT_OPTIONS = {"RS": col(F.SCORE), "Ticker": col(F.TICKER), "Price": col(F.PRICE)}
SORT_LABELS = {v: k for k, v in SORT_OPTIONS.items()}

# -------------------------
# Load source
# -------------------------
tracker, fresh = ui.mount_view(VIEW)

ui.page_title("Relative Strength", "Global RS ranking with trailing returns, volatility and drawdown")

_, top_r = st.columns([4, 1])
with top_r:
    reload = ui.reload_button(VIEW)

result = ui.view_data(
    VIEW, "table", lambda t: load_table(settings.RS_CSV, tracker=t), tracker, fresh, reload=reload,
)
if result is None:
    st.info("Loading…")
    st.stop()
if not result.ok:
    ui.load_error(result.error)
    ui.render_footer()
    st.stop()

table = result.frame
ui.asof_line(asof_text(table))


# -------------------------
# Controls
# -------------------------
def _on_sort_pick():
    key = SORT_OPTIONS[st.session_state["rs_sort_pick"]]
    st.session_state[SORT_KEY] = toggle_sort(st.session_state.get(SORT_KEY, SortState()), key)


def _flip_sort():
    state = st.session_state.get(SORT_KEY, SortState())
    st.session_state[SORT_KEY] = toggle_sort(state, state.key)


st.session_state.setdefault(SORT_KEY, SortState())
st.session_state.setdefault("rs_sort_pick", SORT_LABELS.get(st.session_state[SORT_KEY].key, "RS"))

c1, c2, c3, c4 = st.columns([1.4, 1.2, 1.6, 1])
with c1:
    q = st.text_input("Ticker", "", placeholder="e.g., TSLA", key="rs_q")
with c2:
    sector = st.selectbox("Sector", filter_options(table, col(F.SECTOR)), key="rs_sector")
with c3:
    industry = st.selectbox("Industry", filter_options(table, col(F.INDUSTRY)), key="rs_industry")
with c4:
    cap = st.selectbox("Cap", filter_options(table, col(F.CAP)), key="rs_cap")

s1, s2, s3 = st.columns([1.2, 0.5, 3])
with s1:
    st.selectbox("Sort by", list(SORT_OPTIONS), key="rs_sort_pick", on_change=_on_sort_pick)
with s2:
    arrow = "↓" if st.session_state[SORT_KEY].descending else "↑"
    st.button(arrow, key="rs_flip", on_click=_flip_sort, help="Reverse sort direction")
with s3:
    with st.popover("Columns"):
        show_perf = st.checkbox("Performance", True, key="rs_col_perf")
        show_risk = st.checkbox("Risk", True, key="rs_col_risk")
        show_sector = st.checkbox("Sector", True, key="rs_col_sector")
        show_industry = st.checkbox("Industry", True, key="rs_col_industry")
        show_cap = st.checkbox("Cap", True, key="rs_col_cap")

# ticker-only search; this table lists gated names too
filters = FilterState(query=q, sector=sector or ALL, industry=industry or ALL, cap=cap or ALL, show_gated=True)
res = run_query(table, filters, st.session_state[SORT_KEY], search_names=False)

st.caption(f"Showing {res.count:,} of {res.total:,}")
if res.empty_reason:
    ui.empty_state(res.empty_reason)
    ui.render_footer()
    st.stop()

view = rs_view(res.frame, mode=AUTO, show_perf=show_perf, show_risk=show_risk)
hidden = [name for name, on in (("Sector", show_sector), ("Industry", show_industry), ("Cap", show_cap)) if not on]
view = view.drop(columns=hidden)

st.dataframe(
    view,
    use_container_width=True,
    height=640,
    hide_index=True,
    column_config={
        "Ticker": st.column_config.TextColumn(width="small"),
        "RS": st.column_config.TextColumn(width="small", help="Global relative-strength score"),
    },
)

st.download_button(
    label="Download current view (CSV)",
    data=frame_to_csv_text(view).encode("utf-8"),
    file_name=f"smart_score_rs_{asof_text(table, 'latest')}.csv",
    mime="text/csv",
    type="secondary",
    key="dl_rs",
)

ui.render_footer()
