# Home.py — Smart Score home: tier evidence from the backtest summary
from html import escape

import pandas as pd
import streamlit as st

from smartscore import settings, ui
from smartscore.artifacts import BACKTEST_TIERS, HORIZONS, TierBacktest, parse_artifact
from smartscore.formatting import fmt_number, fmt_pct
from smartscore.loader import load_artifact

ui.setup_page("Home")

VIEW = "home"

# -------------------------
# Load source
# -------------------------
tracker, fresh = ui.mount_view(VIEW)

ui.page_title(
    "Smart Score",
    "A single 0–100 score ranking US equities by relative strength, with tiers backed by forward-return history.",
)

nav_l, nav_m, nav_r = st.columns([1, 1, 1])
with nav_l:
    st.page_link("pages/01_Screener.py", label="Screener →")
with nav_m:
    st.page_link("pages/03_Dashboard.py", label="Dashboard →")
with nav_r:
    st.page_link("pages/04_Model_Portfolio.py", label="Model Portfolio →")

reload = ui.reload_button(VIEW)
payload, err = ui.view_data(
    VIEW, "tier_backtest",
    lambda t: load_artifact(settings.TIER_BACKTEST_JSON, tracker=t),
    tracker, fresh, reload=reload,
) or (None, None)

# A missing backtest file leaves the cards on placeholders.
if err:
    st.caption(f"Tier history unavailable ({err}).")
bt: TierBacktest = parse_artifact(TierBacktest, payload)

# -------------------------
# Tier evidence cards
# -------------------------
st.markdown(
    '<div style="font-size:18px; font-weight:700; margin-top:12px;">Historical tier returns</div>',
    unsafe_allow_html=True,
)
meta = bt.meta_line()
st.caption("Average forward return by score bucket." + (f" {meta}" if meta else ""))


def _tier_card(key: str, score_range: str, label: str) -> str:
    s = bt.tier_stats(key)
    count = s.get("count")
    count_html = f'<span class="sub">&nbsp;&nbsp;{fmt_number(count, 0)} stocks</span>' if count is not None else ""
    cells = "".join(
        f'<td class="right"><div class="sub">{h.upper()}</div><b>{fmt_pct(s.get(h), 1)}</b></td>'
        for h in HORIZONS
    )
    return f"""
<div class="card">
  <table style="width:100%; border:none;"><tr>
    <td><span class="sub" style="font-weight:700; letter-spacing:1px;">{escape(score_range)}</span>
        &nbsp;<b>{escape(label)}</b>{count_html}</td>
    {cells}
  </tr></table>
</div>"""


pad_l, mid, pad_r = st.columns([1, 2.8, 1])
with mid:
    for key, rng, label in BACKTEST_TIERS:
        st.markdown(_tier_card(key, rng, label), unsafe_allow_html=True)

    # full detail (n / median / win rate) for the same buckets
    with st.expander("Backtest detail by horizon"):
        rows = []
        for h in HORIZONS:
            table = bt.table(h)
            for key, rng, label in BACKTEST_TIERS:
                r = table.get(key)
                rows.append({
                    "Horizon": h.upper(),
                    "Tier": f"{rng} {label}",
                    "Signals": fmt_number(r.n, 0) if r else "—",
                    "Avg": fmt_pct(r.avg) if r else "—",
                    "Median": fmt_pct(r.median) if r else "—",
                    "Win rate": fmt_pct(r.win_rate, plus=False) if r else "—",
                })
        st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)

ui.render_footer()
