# smartscore/formatting.py
# ---------- Shared formatters ----------
# Absent values render as PLACEHOLDER, never as 0, so a true zero return
# stays distinguishable from missing data.

from typing import NamedTuple

import pandas as pd

from smartscore.columns import CanonicalField
from smartscore.normalize import clean, col, is_gated, to_num
from smartscore.ranking import TOP_COL
from smartscore.tiers import TierPolicy

F = CanonicalField

PLACEHOLDER = "—"

DECIMAL = "decimal"   # returns stored as decimals: 0.05 = 5%
AUTO = "auto"         # |x| > 1.5 is taken as already in percent
PERCENT_CUTOFF = 1.5


class ReturnText(NamedTuple):
    text: str
    sign: str   # "pos" | "neg" | "flat"


def _as_pct(n: float, mode: str) -> float:
    if mode == AUTO and abs(n) > PERCENT_CUTOFF:
        return n
    return n * 100.0


def fmt_return(v, mode: str = DECIMAL) -> ReturnText:
    n = to_num(v)
    if n is None:
        return ReturnText(PLACEHOLDER, "flat")
    pct = _as_pct(n, mode)
    sign = "pos" if pct > 0.01 else "neg" if pct < -0.01 else "flat"
    return ReturnText(f"{'+' if pct >= 0 else ''}{pct:.1f}%", sign)


def fmt_pct(v, digits: int = 1, plus: bool = True) -> str:
    """Percent for the JSON pages (decimals up to 1.5 are scaled by 100)."""
    n = to_num(v)
    if n is None:
        return PLACEHOLDER
    p = _as_pct(n, AUTO)
    return f"{'+' if plus and p >= 0 else ''}{p:.{digits}f}%"


def fmt_price(v) -> str:
    n = to_num(v)
    if n is None:
        return PLACEHOLDER
    return f"{n:,.2f}"


def fmt_score(v) -> str:
    n = to_num(v)
    if n is None:
        return PLACEHOLDER
    return f"{n:.1f}"


def fmt_money(v) -> str:
    n = to_num(v)
    if n is None:
        return PLACEHOLDER
    return f"${n:,.0f}"


def fmt_number(v, digits: int = 2) -> str:
    n = to_num(v)
    if n is None:
        return PLACEHOLDER
    if abs(n) >= 1000:
        return f"{n:,.0f}"
    return f"{n:,.{digits}f}"


def fmt_text(v) -> str:
    c = clean(v)
    return PLACEHOLDER if c is None else c


def asof_text(frame: pd.DataFrame, fallback: str = PLACEHOLDER) -> str:
    """First non-absent as-of date in the table."""
    key = col(F.ASOF)
    if frame.empty or key not in frame.columns:
        return fallback
    for v in frame[key].tolist():
        c = clean(v)
        if c:
            return c
    return fallback


# -------------------------
# Display frames
# -------------------------
RETURN_COLUMNS = (
    ("5D", F.R5D),
    ("1M", F.R1M),
    ("3M", F.R3M),
    ("6M", F.R6M),
    ("12M", F.R12M),
)


def screener_view(frame: pd.DataFrame, policy: TierPolicy, mode: str = DECIMAL,
                  favorites=frozenset()) -> pd.DataFrame:
    """Formatted, display-only copy of a query result (screener table)."""
    favs = {str(t).upper() for t in favorites}
    tickers = frame[col(F.TICKER)].tolist() if not frame.empty else []
    view = pd.DataFrame(index=frame.index)
    view["★"] = ["★" if bool(t) else "" for t in frame.get(TOP_COL, pd.Series(False, index=frame.index))]
    view["Watch"] = ["♥" if (clean(t) or "").upper() in favs else "" for t in tickers]
    view["Ticker"] = [fmt_text(t) for t in tickers]
    view["Name"] = frame[col(F.NAME)].map(fmt_text)
    view["Score"] = frame[col(F.SCORE)].map(fmt_score)
    view["Tier"] = frame[col(F.SCORE)].map(lambda s: policy.classify(s) or PLACEHOLDER)
    view["Price"] = frame[col(F.PRICE)].map(fmt_price)
    view["Sector"] = frame[col(F.SECTOR)].map(fmt_text)
    view["Cap"] = frame[col(F.CAP)].map(fmt_text)
    for label, field in RETURN_COLUMNS:
        view[label] = frame[col(field)].map(lambda v: fmt_return(v, mode).text)
    view["Gated"] = frame[col(F.GATE)].map(lambda g: "gated" if is_gated(g) else "")
    return view.reset_index(drop=True)


def rs_view(frame: pd.DataFrame, mode: str = AUTO, show_perf: bool = True,
            show_risk: bool = True) -> pd.DataFrame:
    """Display copy for the relative-strength table."""
    view = pd.DataFrame(index=frame.index)
    view["Ticker"] = frame[col(F.TICKER)].map(fmt_text)
    view["RS"] = frame[col(F.SCORE)].map(fmt_score)
    view["Price"] = frame[col(F.PRICE)].map(fmt_number)
    view["Sector"] = frame[col(F.SECTOR)].map(fmt_text)
    view["Industry"] = frame[col(F.INDUSTRY)].map(fmt_text)
    view["Cap"] = frame[col(F.CAP)].map(fmt_text)
    if show_perf:
        for label, field in RETURN_COLUMNS:
            view[label] = frame[col(field)].map(lambda v: fmt_return(v, mode).text)
    if show_risk:
        view["Vol (63d)"] = frame[col(F.VOL)].map(lambda v: fmt_return(v, mode).text.lstrip("+"))
        view["Max DD (1Y)"] = frame[col(F.MAX_DD)].map(lambda v: fmt_return(v, mode).text.lstrip("+"))
    return view.reset_index(drop=True)
