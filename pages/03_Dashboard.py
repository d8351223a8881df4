# 03_Dashboard.py — Market regime, score distribution, dispersion, migration, sectors
from html import escape

import altair as alt
import pandas as pd
import streamlit as st

from smartscore import settings, ui
from smartscore.artifacts import (
    DashboardData, dispersion_comment, parse_artifact, regime_tone, sector_tone,
)
from smartscore.formatting import PLACEHOLDER, fmt_number, fmt_score
from smartscore.loader import load_artifact, load_table
from smartscore.ranking import score_dispersion, score_distribution
from smartscore.tiers import bucket_labels

ui.setup_page("Dashboard")

VIEW = "dashboard"
MIGRATION_ROWS = 8

# -------------------------
# Load source
# -------------------------
tracker, fresh = ui.mount_view(VIEW)

ui.page_title("Dashboard")
_, top_r = st.columns([4, 1])
with top_r:
    reload = ui.reload_button(VIEW)

loaded = ui.view_data(
    VIEW, "dashboard",
    lambda t: load_artifact(settings.DASHBOARD_JSON, tracker=t),
    tracker, fresh, reload=reload,
)
if loaded is None:
    st.info("Loading…")
    st.stop()
payload, err = loaded
if err:
    ui.load_error(err)
    ui.render_footer()
    st.stop()

data: DashboardData = parse_artifact(DashboardData, payload)

prior = f" • Prior: {data.prev_asof}" if data.prev_asof else ""
st.markdown(f'<div class="asof">Snapshot as of {escape(data.asof)}{escape(prior)}</div>', unsafe_allow_html=True)

# Distribution and dispersion fall back to the latest screener table when
# the aggregate file leaves them out.
needs_table = not data.score_distribution or data.dispersion.top10_avg is None
fallback = None
if needs_table:
    res = ui.view_data(VIEW, "table", lambda t: load_table(settings.RS_CSV, tracker=t), tracker, fresh, reload=reload)
    if res is not None and res.ok:
        fallback = res.frame

# -------------------------
# Regime
# -------------------------
tone = regime_tone(data.regime.label)
detail = "".join(
    f'<tr><td>{escape(d.label)}</td><td class="right">{escape(d.value)}</td></tr>'
    for d in data.regime.detail
)
last = (
    f'<div class="sub" style="margin-top:6px;">Last regime change: {escape(data.regime.last_change)}</div>'
    if data.regime.last_change else ""
)
st.markdown(
    ui.card(
        "Market Regime",
        f'<div class="big">{ui.colored(data.regime.label, tone)}</div>'
        + (f'<table class="tbl" style="margin-top:8px;">{detail}</table>' if detail else "")
        + last,
    ),
    unsafe_allow_html=True,
)

left, right = st.columns(2)

# -------------------------
# Score distribution
# -------------------------
with left:
    st.markdown("**Score Distribution** · current universe breakdown by tier")
    if data.score_distribution:
        dist = {k: data.bucket(k) for k, _ in bucket_labels()}
        rows = [{"Bucket": label, "Stocks": dist[k].count, "Pct": dist[k].pct} for k, label in bucket_labels()]
        total = data.distribution_total()
    elif fallback is not None:
        d = score_distribution(fallback)
        rows = [{"Bucket": label, "Stocks": d[k]["count"], "Pct": d[k]["pct"]} for k, label in bucket_labels()]
        total = sum(r["Stocks"] for r in rows)
    else:
        rows, total = [], None

    if rows:
        dist_df = pd.DataFrame(rows)
        chart = (
            alt.Chart(dist_df)
            .mark_bar()
            .encode(
                x=alt.X("Pct:Q", title="% of universe"),
                y=alt.Y("Bucket:N", sort=[label for _, label in bucket_labels()], title=None),
                tooltip=["Bucket", "Stocks", alt.Tooltip("Pct:Q", format=".1f")],
            )
            .properties(height=200)
        )
        st.altair_chart(chart, use_container_width=True)
        lead = rows[0]["Pct"]
        st.caption(f"Total: {fmt_number(total, 0) if total is not None else PLACEHOLDER} stocks · Leadership: {lead:.1f}%")
    else:
        st.info("No distribution data available.")

# -------------------------
# Concentration & dispersion
# -------------------------
with right:
    st.markdown("**Concentration & Dispersion** · leadership breadth vs universe")
    disp = data.dispersion.model_dump()
    if disp.get("top10_avg") is None and fallback is not None:
        disp.update(score_dispersion(fallback))

    s1, s2 = st.columns(2)
    ui.stat_card(s1, "Top 10 Avg Score", fmt_score(disp.get("top10_avg")))
    ui.stat_card(s2, "Universe Avg", fmt_score(disp.get("universe_avg")))
    s3, s4 = st.columns(2)
    ui.stat_card(s3, "Spread", fmt_score(disp.get("spread")))
    chg = disp.get("std_dev_change")
    sub = f"{'+' if chg > 0 else ''}{chg:.1f} vs prior" if chg else ""
    chg_tone = "caution" if chg and chg > 0 else "flat"
    ui.stat_card(s4, "Std Dev", fmt_score(disp.get("std_dev")), sub, ui.TONE_COLORS.get(chg_tone))
    st.caption(dispersion_comment(disp.get("spread")))

# -------------------------
# Leadership migration
# -------------------------
def _migration_card(title: str, entries, enter: bool, empty: str) -> str:
    if not entries:
        return ui.card(f"{title} (0)", f'<div class="sub">{escape(empty)}</div>')
    body = []
    for e in entries[:MIGRATION_ROWS]:
        delta = f"{'+' if enter else ''}{e.score_delta:g}"
        body.append(
            f"<tr><td>{ui.ticker_link(e.ticker)}</td><td>{escape(e.name)}</td>"
            f'<td class="right">{e.score:.1f}</td>'
            f'<td class="right">{ui.colored(delta, "pos" if enter else "neg")}</td></tr>'
        )
    more = len(entries) - MIGRATION_ROWS
    tail = f'<div class="sub" style="padding-top:6px;">+{more} more</div>' if more > 0 else ""
    return ui.card(f"{title} ({len(entries)})", f'<table class="tbl">{"".join(body)}</table>{tail}')


left2, right2 = st.columns(2)
with left2:
    st.markdown("**Leadership Migration** · entering and exiting the 90+ tier vs prior month")
    mig = data.leadership_migration
    st.markdown(_migration_card("Entering Leadership", mig.entering, True, "No new entries this month."), unsafe_allow_html=True)
    st.markdown(_migration_card("Exiting Leadership", mig.exiting, False, "No exits this month."), unsafe_allow_html=True)

# -------------------------
# Sector intelligence
# -------------------------
with right2:
    st.markdown("**Sector Intelligence** · average composite score by sector")
    if data.sector_intelligence:
        sec_df = pd.DataFrame(
            [{"Sector": s.sector, "Avg score": s.avg_score, "Tone": sector_tone(s.avg_score)} for s in data.sector_intelligence]
        )
        tones = ["strong", "positive", "neutral", "weak"]
        chart = (
            alt.Chart(sec_df)
            .mark_bar()
            .encode(
                x=alt.X("Avg score:Q", scale=alt.Scale(domain=[0, 100])),
                y=alt.Y("Sector:N", sort=None, title=None),
                color=alt.Color(
                    "Tone:N",
                    scale=alt.Scale(domain=tones, range=[ui.TONE_COLORS[t] for t in tones]),
                    legend=None,
                ),
                tooltip=["Sector", alt.Tooltip("Avg score:Q", format=".1f")],
            )
            .properties(height=max(160, 26 * len(sec_df)))
        )
        st.altair_chart(chart, use_container_width=True)
    else:
        st.info("No sector data available.")

# -------------------------
# Intelligence brief
# -------------------------
if data.intelligence_brief:
    st.markdown(
        ui.card("Monthly Intelligence Brief", f'<div style="white-space:pre-wrap;">{escape(data.intelligence_brief)}</div>'),
        unsafe_allow_html=True,
    )

ui.render_footer()
