# 05_Ticker.py — Per-ticker Smart Score and price history
from html import escape

import altair as alt
import pandas as pd
import streamlit as st

from smartscore import settings, ui
from smartscore.artifacts import (
    TIMEFRAMES, TickerHistory, history_symbol, history_window, parse_artifact,
    price_change, price_domain, score_change,
)
from smartscore.favorites import favorites_store
from smartscore.formatting import PLACEHOLDER, fmt_price, fmt_score
from smartscore.loader import load_artifact

ui.setup_page("Ticker")

SCORE_LINE_COLOR = "#60a5fa"
PRICE_AREA_COLOR = "#3f3f46"

# -------------------------
# Symbol (query param or input)
# -------------------------
qp_symbol = history_symbol(st.query_params.get("symbol") or "")
if qp_symbol:
    st.session_state["tk_symbol"] = qp_symbol

sym_in = st.text_input("Ticker", st.session_state.get("tk_symbol", ""), placeholder="e.g., AAPL")
symbol = history_symbol(sym_in)
if symbol != st.session_state.get("tk_symbol"):
    st.session_state["tk_symbol"] = symbol
    st.query_params["symbol"] = symbol

st.page_link("pages/01_Screener.py", label="← Back to Screener")

if not symbol:
    st.info("No ticker specified.")
    ui.render_footer()
    st.stop()

# each symbol is its own view, so switching symbols supersedes the old load
VIEW = f"ticker:{symbol}"
tracker, fresh = ui.mount_view(VIEW)

_, top_r = st.columns([4, 1])
with top_r:
    reload = ui.reload_button("ticker")

loaded = ui.view_data(
    VIEW, "history",
    lambda t: load_artifact(f"{settings.TICKER_HISTORY_DIR}/{symbol}.json", tracker=t),
    tracker, fresh, reload=reload,
)
if loaded is None:
    st.info("Loading…")
    st.stop()
payload, err = loaded
if err:
    st.warning(f"{symbol} not found")
    st.caption(err)
    ui.render_footer()
    st.stop()

hist: TickerHistory = parse_artifact(TickerHistory, payload)

# -------------------------
# Header
# -------------------------
store = favorites_store()
h1, h2 = st.columns([4, 1])
with h1:
    sector = f" · {escape(hist.sector)}" if hist.sector else ""
    st.markdown(
        f'<div style="font-size:28px; font-weight:700;">{escape(hist.ticker or symbol)} '
        f'{ui.tier_pill(hist.tier)}</div>'
        f'<div class="sub">{escape(hist.name)}{sector}</div>',
        unsafe_allow_html=True,
    )
with h2:
    st.markdown(
        f'<div style="text-align:right;"><div class="sub">Smart Score</div>'
        f'<div style="font-size:32px; font-weight:700;">{fmt_score(hist.current_score)}</div>'
        f'<div class="sub">as of {escape(hist.asof or PLACEHOLDER)}</div></div>',
        unsafe_allow_html=True,
    )
    watching = symbol in store
    if st.button("♥ Watching" if watching else "♡ Watch", key="tk_watch"):
        store.toggle(symbol)
        st.rerun()

# -------------------------
# Timeframe + change stats
# -------------------------
timeframe = st.radio("Timeframe", list(TIMEFRAMES), index=2, horizontal=True, key="tk_tf")
points = history_window(hist, timeframe)

sc = score_change(points)
pc = price_change(points)
m1, m2 = st.columns(2)
with m1:
    if sc:
        st.metric(f"Score change ({timeframe})", fmt_score(sc["last"]), f"{sc['delta']:+.1f}")
    else:
        st.metric(f"Score change ({timeframe})", PLACEHOLDER)
with m2:
    if pc:
        st.metric(f"Price change ({timeframe})", fmt_price(pc["last"]), f"{pc['pct']:+.1f}%")
    else:
        st.metric(f"Price change ({timeframe})", PLACEHOLDER)

# -------------------------
# Chart: score line over a price area, two axes
# -------------------------
if len(points) < 2:
    st.info("Not enough history to chart.")
else:
    df = pd.DataFrame([{"Date": h.d, "Score": h.s, "Price": h.p} for h in points])
    df["Date"] = pd.to_datetime(df["Date"], errors="coerce")
    lo, hi = price_domain(points)

    base = alt.Chart(df).encode(x=alt.X("Date:T", title=None))
    price = base.mark_area(opacity=0.35, color=PRICE_AREA_COLOR).encode(
        y=alt.Y("Price:Q", axis=alt.Axis(title="Price", orient="right"), scale=alt.Scale(domain=[lo, hi])),
    )
    score = base.mark_line(color=SCORE_LINE_COLOR, strokeWidth=2).encode(
        y=alt.Y("Score:Q", axis=alt.Axis(title="Smart Score", orient="left"), scale=alt.Scale(domain=[0, 100])),
        tooltip=[alt.Tooltip("Date:T"), alt.Tooltip("Score:Q", format=".1f"), alt.Tooltip("Price:Q", format=",.2f")],
    )
    chart = alt.layer(price, score).resolve_scale(y="independent").properties(height=400)
    st.altair_chart(chart, use_container_width=True)

ui.render_footer()
