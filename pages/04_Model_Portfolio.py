# 04_Model_Portfolio.py — Model portfolio: key stats, equity curve, annual returns, holdings
from html import escape

import altair as alt
import pandas as pd
import streamlit as st

from smartscore import settings, ui
from smartscore.artifacts import ModelPortfolio, excess_return, parse_artifact
from smartscore.formatting import DECIMAL, PLACEHOLDER, fmt_pct, fmt_price, fmt_return, fmt_text
from smartscore.loader import load_artifact

ui.setup_page("Model Portfolio")

VIEW = "portfolio"
BENCH = "SPY"

# -------------------------
# Load source
# -------------------------
tracker, fresh = ui.mount_view(VIEW)

ui.page_title("Model Portfolio")
_, top_r = st.columns([4, 1])
with top_r:
    reload = ui.reload_button(VIEW)

loaded = ui.view_data(
    VIEW, "portfolio",
    lambda t: load_artifact(settings.PORTFOLIO_JSON, tracker=t),
    tracker, fresh, reload=reload,
)
if loaded is None:
    st.info("Loading portfolio data…")
    st.stop()
payload, err = loaded
if err:
    ui.load_error(err)
    st.caption(f"Place {settings.PORTFOLIO_JSON} in the data directory to enable this page.")
    ui.render_footer()
    st.stop()

port: ModelPortfolio = parse_artifact(ModelPortfolio, payload)
s, bs = port.summary, port.benchmark_summary

header = " • ".join(
    p for p in (
        port.model,
        port.weighting,
        f"{port.rebalance_freq} rebalance" if port.rebalance_freq else "",
        f"Since {port.inception}" if port.inception else "",
        f"As of {port.asof}" if port.asof else "",
    ) if p
)
if header:
    st.markdown(f'<div class="asof">{escape(header)}</div>', unsafe_allow_html=True)


def _ratio(v) -> str:
    return PLACEHOLDER if v is None else f"{v:.2f}"


# -------------------------
# Key stats
# -------------------------
ex = fmt_return(excess_return(port), DECIMAL)
cols = st.columns(6)
ui.stat_card(cols[0], "Ann. Excess", ex.text, f"vs {BENCH} annualized", ui.TONE_COLORS[ex.sign])
ui.stat_card(cols[1], "Ann. Return", fmt_pct(s.ann_return), f"{BENCH}: {fmt_pct(bs.ann_return)}")
ui.stat_card(cols[2], "Sharpe", _ratio(s.sharpe), f"{BENCH}: {_ratio(bs.sharpe)}")
ui.stat_card(cols[3], "Max Drawdown", fmt_pct(s.max_drawdown), f"{BENCH}: {fmt_pct(bs.max_drawdown)}")
ui.stat_card(cols[4], "Win Rate", fmt_pct(s.win_rate, 0), "% of months positive")
ui.stat_card(cols[5], "Batting Avg", fmt_pct(s.batting_avg, 0), f"% months beat {BENCH}")

# -------------------------
# Equity curve
# -------------------------
st.markdown("**Equity curve** · growth of $1 vs benchmark")
curve = pd.DataFrame([c.model_dump() for c in port.equity_curve if c.date])
if not curve.empty:
    curve["date"] = pd.to_datetime(curve["date"], errors="coerce")
    curve = curve.dropna(subset=["date"]).rename(columns={"portfolio": "Portfolio", "benchmark": BENCH})
    chart = (
        alt.Chart(curve)
        .transform_fold(["Portfolio", BENCH], as_=["Series", "Value"])
        .mark_line()
        .encode(
            x=alt.X("date:T", title=None),
            y=alt.Y("Value:Q", title=None, scale=alt.Scale(zero=False)),
            color=alt.Color("Series:N", scale=alt.Scale(range=["#10b981", "#9ca3af"])),
            tooltip=[alt.Tooltip("date:T"), "Series:N", alt.Tooltip("Value:Q", format=".2f")],
        )
        .properties(height=320)
    )
    st.altair_chart(chart, use_container_width=True)
else:
    st.info("No equity curve data.")

left, right = st.columns([1.4, 1])

# -------------------------
# Annual returns
# -------------------------
with left:
    st.markdown("**Annual returns**")
    if port.annual_returns:
        rows = []
        for r in port.annual_returns:
            rows.append({
                "Year": r.year,
                "Portfolio": fmt_pct(r.portfolio),
                BENCH: fmt_pct(r.benchmark),
                "Excess": fmt_pct(r.excess_value),
            })
        st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)
    else:
        st.info("No annual return data.")

# -------------------------
# Risk profile
# -------------------------
with right:
    st.markdown("**Risk profile**")
    risk = [
        ("Ann. volatility", fmt_pct(s.ann_vol, 1, plus=False)),
        ("Max drawdown", fmt_pct(s.max_drawdown)),
        ("Best month", fmt_pct(s.best_month)),
        ("Worst month", fmt_pct(s.worst_month)),
        ("Win rate", fmt_pct(s.win_rate, 0)),
        ("Avg turnover", fmt_pct(s.avg_turnover, 0, plus=False)),
        ("Months", PLACEHOLDER if s.months is None else str(s.months)),
        (f"{BENCH} ann. return", fmt_pct(bs.ann_return)),
        (f"{BENCH} max drawdown", fmt_pct(bs.max_drawdown)),
    ]
    body = "".join(f'<tr><td>{escape(k)}</td><td class="right">{escape(v)}</td></tr>' for k, v in risk)
    st.markdown(f'<table class="tbl">{body}</table>', unsafe_allow_html=True)

# -------------------------
# Current holdings
# -------------------------
st.markdown("**Current holdings**")
holdings = port.current_holdings
n = port.n_holdings if port.n_holdings is not None else len(holdings)
st.caption(f"As of {port.asof or PLACEHOLDER} • {n} positions • {port.weighting or 'Equal weight'}")
if holdings:
    hold_df = pd.DataFrame([
        {
            "#": i + 1,
            "Ticker": fmt_text(h.ticker),
            "Name": fmt_text(h.name),
            "Smart Score": PLACEHOLDER if h.score is None else f"{h.score:.1f}",
            "Price": f"${fmt_price(h.price)}" if h.price else PLACEHOLDER,
            "Weight": PLACEHOLDER if h.weight is None else f"{h.weight:.1f}%",
        }
        for i, h in enumerate(holdings)
    ])
    st.dataframe(hold_df, hide_index=True, use_container_width=True)
else:
    st.info("No holdings listed.")

ui.render_footer()
