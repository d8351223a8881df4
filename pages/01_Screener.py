# 01_Screener.py — Smart Score screener (search, filters, sort, watchlist)
import pandas as pd
import streamlit as st

from smartscore import settings, ui
from smartscore.columns import CanonicalField as F
from smartscore.csv_text import frame_to_csv_text
from smartscore.favorites import favorites_store
from smartscore.formatting import asof_text, screener_view
from smartscore.loader import LoadResult, load_table
from smartscore.normalize import CAP_ORD_COL, col
from smartscore.query import (
    ALL, EMPTY_WATCHLIST, FilterState, SortState, filter_options, run_query, toggle_sort,
)
from smartscore.tiers import get_policy

ui.setup_page("Screener")

VIEW = "screener"
SORT_KEY = "scr_sort"

# widget keys -> FilterState field
FILTER_WIDGETS = {
    "scr_q": "query",
    "scr_sector": "sector",
    "scr_cap": "cap",
    "scr_tier": "tier",
    "scr_top": "top_only",
    "scr_watch": "watchlist_only",
    "scr_gated": "show_gated",
    "scr_pin": "pin_favorites",
}

SORT_OPTIONS = {
    "Score": col(F.SCORE),
    "Ticker": col(F.TICKER),
    "Name": col(F.NAME),
    "Price": col(F.PRICE),
    "Sector": col(F.SECTOR),
    "Cap": CAP_ORD_COL,
    "5D": col(F.R5D),
    "1M": col(F.R1M),
    "3M": col(F.R3M),
    "6M": col(F.R6M),
    "12M": col(F.R12M),
}
SORT_LABELS = {v: k for k, v in SORT_OPTIONS.items()}

policy = get_policy()
store = favorites_store()

# -------------------------
# Load source
# -------------------------
tracker, fresh = ui.mount_view(VIEW)

ui.page_title("Screener", "Every scored US equity, ranked by Smart Score")

top_l, top_r = st.columns([4, 1])
with top_r:
    reload = ui.reload_button(VIEW)

result: LoadResult | None = ui.view_data(
    VIEW, "table", lambda t: load_table(settings.RS_CSV, tracker=t), tracker, fresh, reload=reload,
)

if result is None:
    st.info("Loading…")
    st.stop()
if not result.ok:
    ui.load_error(result.error)
    ui.render_footer()
    st.stop()

table: pd.DataFrame = result.frame
ui.asof_line(asof_text(table))


# -------------------------
# Filter & sort state
# -------------------------
def _reset_filters():
    defaults = FilterState().reset()
    for key, field in FILTER_WIDGETS.items():
        st.session_state[key] = getattr(defaults, field)


def _on_sort_pick():
    key = SORT_OPTIONS[st.session_state["scr_sort_pick"]]
    st.session_state[SORT_KEY] = toggle_sort(st.session_state.get(SORT_KEY, SortState()), key)


def _flip_sort():
    state = st.session_state.get(SORT_KEY, SortState())
    st.session_state[SORT_KEY] = toggle_sort(state, state.key)


for key, field in FILTER_WIDGETS.items():
    st.session_state.setdefault(key, getattr(FilterState(), field))
sort_state: SortState = st.session_state.setdefault(SORT_KEY, SortState())
st.session_state.setdefault("scr_sort_pick", SORT_LABELS.get(sort_state.key, "Score"))

c1, c2, c3, c4 = st.columns([2, 1.2, 1, 1])
with c1:
    st.text_input("Search", key="scr_q", placeholder="Search ticker or name…")
with c2:
    st.selectbox("Sector", filter_options(table, col(F.SECTOR)), key="scr_sector")
with c3:
    st.selectbox("Cap", filter_options(table, col(F.CAP)), key="scr_cap")
with c4:
    st.selectbox("Tier", [ALL] + policy.labels, key="scr_tier")

t1, t2, t3, t4, t5, t6, t7 = st.columns([1.1, 1, 1, 1, 1.2, 0.6, 0.8])
with t1:
    st.toggle(f"Top {settings.TOP_N}", key="scr_top")
with t2:
    st.toggle(f"Watchlist ({len(store)})", key="scr_watch")
with t3:
    st.toggle("Pin ♥ first", key="scr_pin")
with t4:
    st.toggle("Show gated", key="scr_gated")
with t5:
    st.selectbox("Sort by", list(SORT_OPTIONS), key="scr_sort_pick", on_change=_on_sort_pick)
with t6:
    arrow = "↓" if st.session_state[SORT_KEY].descending else "↑"
    st.button(arrow, key="scr_flip", on_click=_flip_sort, help="Reverse sort direction")
with t7:
    st.button("Reset", key="scr_reset", on_click=_reset_filters)

filters = FilterState(**{field: st.session_state[key] for key, field in FILTER_WIDGETS.items()})
sort_state = st.session_state[SORT_KEY]

# -------------------------
# Query
# -------------------------
favs = store.tickers
res = run_query(table, filters, sort_state, favs, policy)

st.caption(f"Showing {res.count:,} of {res.total:,}")

if res.empty_reason:
    ui.empty_state(res.empty_reason)
    if res.empty_reason != EMPTY_WATCHLIST:
        st.button("Reset filters", key="scr_reset_empty", on_click=_reset_filters)
    ui.render_footer()
    st.stop()

view = screener_view(res.frame, policy, settings.RETURN_FORMAT, favs)
view["Watch"] = view["Watch"] == "♥"
view.insert(3, "Chart", [f"Ticker?symbol={t}" for t in view["Ticker"]])

# the editor key changes with the query, so pending edits never land on other rows
editor_key = f"scr_editor_{hash((filters, sort_state, favs))}"
edited = st.data_editor(
    view,
    key=editor_key,
    use_container_width=True,
    height=640,
    hide_index=True,
    disabled=[c for c in view.columns if c != "Watch"],
    column_config={
        "★": st.column_config.TextColumn(width="small", help=f"Top {settings.TOP_N} by score"),
        "Watch": st.column_config.CheckboxColumn("♥", width="small", help="Add to watchlist"),
        "Ticker": st.column_config.TextColumn(width="small"),
        "Chart": st.column_config.LinkColumn(display_text="history", width="small"),
        "Name": st.column_config.TextColumn(width="medium"),
        "Sector": st.column_config.TextColumn(width="medium"),
    },
)

changed = [t for t, before, after in zip(view["Ticker"], view["Watch"], edited["Watch"]) if bool(before) != bool(after)]
if changed:
    for t in changed:
        store.toggle(t)
    st.rerun()

download = view.drop(columns=["Chart"]).assign(Watch=view["Watch"].map(lambda w: "♥" if w else ""))
st.download_button(
    label="Download current view (CSV)",
    data=frame_to_csv_text(download).encode("utf-8"),
    file_name=f"smart_score_screener_{asof_text(table, 'latest')}.csv",
    mime="text/csv",
    type="secondary",
    key="dl_screener",
)

ui.render_footer()
