# smartscore/ui.py
# Page chrome shared by Home.py and pages/*: style, logo header, footer,
# view lifecycle (mount / reload) and the load-error + empty states.

import base64
from html import escape
from pathlib import Path
from urllib.parse import quote_plus

import streamlit as st

from smartscore import settings
from smartscore.loader import LoadTracker
from smartscore.log import setup_logging
from smartscore.query import EMPTY_WATCHLIST, NO_DATA, NO_MATCHES

_TRACKERS_KEY = "_ss_trackers"
_ACTIVE_VIEW_KEY = "_ss_active_view"

EMPTY_MESSAGES = {
    EMPTY_WATCHLIST: "Your watchlist is empty. Tap ♥ on any ticker to add it.",
    NO_MATCHES: "No tickers match the current filters.",
    NO_DATA: "No rows in the latest data file.",
}

TIER_COLORS = {
    "Leadership": "rgba(6,95,70,0.30)",
    "Positive":   "rgba(16,185,129,0.25)",
    "Neutral":    "rgba(229,231,235,1.00)",
    "Caution":    "rgba(245,158,11,0.28)",
    "Avoid":      "rgba(239,68,68,0.28)",
    "Negative":   "rgba(239,68,68,0.28)",
}

TONE_COLORS = {
    "on": "#10b981", "caution": "#f59e0b", "off": "#ef4444",
    "strong": "#065f46", "positive": "#10b981", "neutral": "#9ca3af", "weak": "#ef4444",
    "pos": "#059669", "neg": "#dc2626", "flat": "#6b7280",
}


# -------------------------
# Page & shared style
# -------------------------
_CSS = """
<style>
[data-testid="stAppViewContainer"] .main .block-container,
section.main > div {
  width: 95vw;
  max-width: 1800px;
  margin-left: auto;
  margin-right: auto;
}
html, body, [class^="css"], .stMarkdown, .stDataFrame, .stTable, .stText, .stButton {
  font-family: system-ui, -apple-system, "Segoe UI", Roboto, Helvetica, Arial, sans-serif !important;
}
.card {
  border:1px solid #cfcfcf;
  border-radius:8px;
  background:#fff;
  padding:12px 12px 8px 12px;
  margin-bottom:12px;
}
.card h3 { margin:0 0 8px 0; font-size:16px; font-weight:700; color:#1a1a1a; }
.card .big { font-size:26px; font-weight:700; color:#1a1a1a; }
.card .sub { font-size:12px; color:#6b7280; }

.tbl { border-collapse: collapse; width: 100%; table-layout: fixed; }
.tbl th, .tbl td { border:1px solid #d9d9d9; padding:6px 8px; font-size:13px; overflow:hidden; text-overflow:ellipsis; }
.tbl th { background:#f2f2f2; font-weight:700; text-align:left; }
.center { text-align:center; }
.right  { text-align:right; white-space:nowrap; }

.pill { display:inline-block; padding:1px 8px; border-radius:10px; font-size:12px; font-weight:600; }
.asof { text-align:center; font-size:13px; color:#6b7280; margin:-8px 0 12px; }
</style>
"""


def setup_page(title: str) -> None:
    """set_page_config + logging + style + logo; call first on every page."""
    st.set_page_config(page_title=f"Smart Score | {title}", layout="wide")
    setup_logging(settings.LOG_LEVEL)
    st.markdown(_CSS, unsafe_allow_html=True)
    render_logo()


_IMAGE_MIME = {".png": "image/png", ".svg": "image/svg+xml", ".jpg": "image/jpeg", ".jpeg": "image/jpeg"}


def _image_b64(p: Path) -> str:
    with open(p, "rb") as f:
        return base64.b64encode(f.read()).decode()


def logo_html(p: Path, width: int = 360) -> str:
    """Centered inline <img> for the header logo, or "" when the file is missing."""
    if not p.exists():
        return ""
    mime = _IMAGE_MIME.get(p.suffix.lower(), "image/png")
    return (
        f'<div style="text-align:center; margin: 8px 0 16px;">'
        f'<img src="data:{mime};base64,{_image_b64(p)}" width="{width}"></div>'
    )


def render_logo() -> None:
    html = logo_html(settings.LOGO_PATH)
    if html:
        st.markdown(html, unsafe_allow_html=True)


def page_title(title: str, subtitle: str = "") -> None:
    sub = (
        f'<div style="text-align:center; margin:-6px 0 14px; font-size:14px; '
        f'font-weight:500; color:#6b7280;">{escape(subtitle)}</div>'
        if subtitle else ""
    )
    st.markdown(
        f"""
        <div style="text-align:center; margin:0 0 8px; font-size:22px; font-weight:700; color:#1a1a1a;">
            {escape(title)}
        </div>
        {sub}
        """,
        unsafe_allow_html=True,
    )


def asof_line(text: str) -> None:
    st.markdown(f'<div class="asof">Data as of {escape(str(text))}</div>', unsafe_allow_html=True)


def card(title: str, body_html: str) -> str:
    return f'<div class="card"><h3>{escape(title)}</h3>{body_html}</div>'


def stat_card(slot, title: str, value: str, sub: str = "", color: str | None = None) -> None:
    style = f' style="color:{color};"' if color else ""
    with slot:
        st.markdown(
            card(title, f'<div class="big"{style}>{escape(value)}</div><div class="sub">{escape(sub)}</div>'),
            unsafe_allow_html=True,
        )


def tier_pill(tier: str | None) -> str:
    if not tier:
        return ""
    bg = TIER_COLORS.get(tier, "transparent")
    return f'<span class="pill" style="background:{bg};">{escape(tier)}</span>'


def colored(text: str, tone: str) -> str:
    return f'<span style="color:{TONE_COLORS.get(tone, "inherit")}; font-weight:600;">{escape(text)}</span>'


def ticker_link(ticker: str) -> str:
    t = (ticker or "").strip().upper()
    if not t:
        return ""
    return (
        f'<a href="Ticker?symbol={quote_plus(t)}" target="_self" rel="noopener" '
        f'style="text-decoration:none; font-weight:600;">{escape(t)}</a>'
    )


# -------------------------
# View lifecycle
# -------------------------
def mount_view(view: str) -> tuple[LoadTracker, bool]:
    """
    Register `view` as the active page.

    Returns its tracker and whether this run is a fresh visit. Arriving on a
    view invalidates every other view's tracker, so a load still owned by
    the page just left can no longer publish.
    """
    trackers = st.session_state.setdefault(_TRACKERS_KEY, {})
    fresh = st.session_state.get(_ACTIVE_VIEW_KEY) != view
    if fresh:
        for name, t in trackers.items():
            if name != view:
                t.invalidate()
        st.session_state[_ACTIVE_VIEW_KEY] = view
    tracker = trackers.setdefault(view, LoadTracker())
    return tracker, fresh


def view_data(view: str, key: str, load, tracker: LoadTracker, fresh: bool, reload: bool = False):
    """
    Run `load(tracker)` once per visit (or on reload) and keep its result in
    session state for the reruns in between. A superseded load (None) keeps
    whatever was there.
    """
    slot = f"_ss_data_{view}_{key}"
    if fresh or reload or slot not in st.session_state:
        with st.spinner("Loading data…"):
            out = load(tracker)
        if out is not None:
            st.session_state[slot] = out
    return st.session_state.get(slot)


def reload_button(key: str) -> bool:
    return st.button("↻ Reload data", key=f"reload_{key}", type="secondary")


def load_error(err: str) -> None:
    st.error(f"Could not load data: {err}")


def empty_state(reason: str | None) -> None:
    if not reason:
        return
    msg = EMPTY_MESSAGES.get(reason, EMPTY_MESSAGES[NO_MATCHES])
    if reason == EMPTY_WATCHLIST:
        st.info(msg)
    else:
        st.warning(msg)


# -------------------------
# Footer disclaimer
# -------------------------
def render_footer() -> None:
    st.markdown("---")
    st.markdown(
        """
        <div style="font-size: 12px; color: gray;">
        <b>Disclaimer</b>: This content is for informational purposes only.
        Smart Scores and tiers are quantitative rankings, not recommendations regarding any security,
        investment vehicle, or strategy. Past performance, including backtested tier returns and the
        model portfolio, does not guarantee future results. Sources are believed to be reliable, but
        accuracy and completeness are not guaranteed. Consult your financial professional before
        making investment decisions.
        </div>
        """,
        unsafe_allow_html=True,
    )
