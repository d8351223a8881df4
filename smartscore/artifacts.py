"""
Typed, defensive readers for the JSON artifacts behind the dashboard,
home, portfolio and ticker pages.

Every field has a default. A field that is missing *or* has the wrong shape
reads as its default instead of failing the whole page, because the
artifacts are produced by an external pipeline whose schema drifts.
"""

import re
from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from smartscore.normalize import clean, to_num


class Artifact(BaseModel):
    model_config = ConfigDict(extra="allow")

    @field_validator("*", mode="wrap")
    @classmethod
    def default_on_error(cls, v, handler, info):
        try:
            return handler(v)
        except ValidationError:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)


def parse_artifact(model: type[Artifact], payload: Any) -> Artifact:
    """Non-dict payloads (null, list, ...) read as an all-defaults model."""
    if not isinstance(payload, dict):
        return model()
    return model.model_validate(payload)


# -------------------------
# dashboard_data.json
# -------------------------
class RegimeDetail(Artifact):
    label: str = ""
    value: str = ""


class Regime(Artifact):
    label: str = "UNKNOWN"
    detail: list[RegimeDetail] = Field(default_factory=list)
    last_change: Optional[str] = None


class BucketStat(Artifact):
    count: int = 0
    pct: float = 0.0


class MigrationEntry(Artifact):
    ticker: str = ""
    name: str = ""
    score: float = 0.0
    score_delta: float = 0.0


class Migration(Artifact):
    entering: list[MigrationEntry] = Field(default_factory=list)
    exiting: list[MigrationEntry] = Field(default_factory=list)


class SectorStat(Artifact):
    sector: str = "Unknown"
    avg_score: float = 0.0


class Dispersion(Artifact):
    top10_avg: Optional[float] = None
    universe_avg: Optional[float] = None
    spread: Optional[float] = None
    std_dev: Optional[float] = None
    std_dev_change: Optional[float] = None


class DashboardData(Artifact):
    asof: str = "—"
    prev_asof: str = ""
    regime: Regime = Field(default_factory=Regime)
    # bucket -> {count, pct}, plus an optional "total"
    score_distribution: dict[str, Any] = Field(default_factory=dict)
    leadership_migration: Migration = Field(default_factory=Migration)
    sector_intelligence: list[SectorStat] = Field(default_factory=list)
    dispersion: Dispersion = Field(default_factory=Dispersion)
    intelligence_brief: str = ""

    def bucket(self, key: str) -> BucketStat:
        raw = self.score_distribution.get(key)
        if isinstance(raw, BucketStat):
            return raw
        return parse_artifact(BucketStat, raw)

    def distribution_total(self) -> Optional[int]:
        n = to_num(self.score_distribution.get("total"))
        return None if n is None else int(n)


def regime_tone(label: str) -> str:
    """"on" / "caution" / "off" for a regime label like RISK-ON or MIXED."""
    u = (label or "").upper()
    # CAUTION contains "ON", so it is checked first and ON must be a whole word
    if "CAUTION" in u or "MIXED" in u:
        return "caution"
    if "ON" in re.split(r"[^A-Z]+", u):
        return "on"
    return "off"


def dispersion_comment(spread) -> str:
    s = to_num(spread)
    if s is not None and s > 30:
        return "Leadership is narrow — high conviction concentrated in few names."
    if s is not None and s > 20:
        return "Moderate concentration — leadership is selective but not extreme."
    return "Leadership is broad — scores are distributed widely across the universe."


def sector_tone(avg_score) -> str:
    s = to_num(avg_score) or 0.0
    if s >= 75:
        return "strong"
    if s >= 60:
        return "positive"
    if s >= 45:
        return "neutral"
    return "weak"


# -------------------------
# tier_backtest.json
# -------------------------
class TierStatRow(Artifact):
    tier: str = ""
    n: int = 0
    avg: Optional[float] = None
    median: Optional[float] = None
    win_rate: Optional[float] = None


class TierBacktest(Artifact):
    asof: Optional[str] = None
    signal_dates_used: Optional[int] = None
    table_3m: list[TierStatRow] = Field(default_factory=list)
    table_6m: list[TierStatRow] = Field(default_factory=list)
    table_12m: list[TierStatRow] = Field(default_factory=list)
    current_counts: dict[str, int] = Field(default_factory=dict)

    def table(self, horizon: str) -> dict[str, TierStatRow]:
        return index_tier_table(getattr(self, f"table_{horizon}", None))

    def meta_line(self) -> Optional[str]:
        """"N snapshots through DATE", only when both parts are present."""
        if not self.asof or not self.signal_dates_used:
            return None
        return f"{self.signal_dates_used} snapshots through {self.asof}."

    def tier_stats(self, key: str) -> dict:
        """Average forward return per horizon plus the current count for one bucket."""
        out = {}
        for h in HORIZONS:
            row = self.table(h).get(key)
            out[h] = row.avg if row is not None else None
        out["count"] = self.current_counts.get(key)
        return out


HORIZONS = ("3m", "6m", "12m")

# (bucket key, score range, label)
BACKTEST_TIERS = (
    ("90s", "90–100", "Leadership"),
    ("80s", "80–89", "Positive Bias"),
    ("70s", "70–79", "Neutral"),
    ("<60", "< 60", "Avoid"),
)


def index_tier_table(rows) -> dict[str, TierStatRow]:
    out = {}
    for r in rows or []:
        if r is not None and r.tier:
            out[str(r.tier)] = r
    return out


# -------------------------
# model_portfolio.json
# -------------------------
class PortfolioSummary(Artifact):
    ann_return: Optional[float] = None
    ann_vol: Optional[float] = None
    sharpe: Optional[float] = None
    max_drawdown: Optional[float] = None
    win_rate: Optional[float] = None
    batting_avg: Optional[float] = None
    best_month: Optional[float] = None
    worst_month: Optional[float] = None
    avg_turnover: Optional[float] = None
    months: Optional[int] = None


class AnnualReturn(Artifact):
    year: str = ""
    portfolio: Optional[float] = None
    benchmark: Optional[float] = None
    excess: Optional[float] = None

    @field_validator("year", mode="before")
    @classmethod
    def year_as_text(cls, v):
        return "" if v is None else str(v)

    @property
    def excess_value(self) -> Optional[float]:
        if self.excess is not None:
            return self.excess
        if self.portfolio is None or self.benchmark is None:
            return None
        return self.portfolio - self.benchmark


class CurvePoint(Artifact):
    date: str = ""
    portfolio: Optional[float] = None
    benchmark: Optional[float] = None


class Holding(Artifact):
    ticker: str = ""
    name: str = ""
    score: Optional[float] = None
    weight: Optional[float] = None
    price: Optional[float] = None


class ModelPortfolio(Artifact):
    model: str = ""
    weighting: str = ""
    rebalance_freq: str = ""
    inception: str = ""
    asof: str = ""
    n_holdings: Optional[int] = None
    summary: PortfolioSummary = Field(default_factory=PortfolioSummary)
    benchmark_summary: PortfolioSummary = Field(default_factory=PortfolioSummary)
    annual_returns: list[AnnualReturn] = Field(default_factory=list)
    equity_curve: list[CurvePoint] = Field(default_factory=list)
    current_holdings: list[Holding] = Field(default_factory=list)


def excess_return(port: ModelPortfolio) -> float:
    """Annualized excess over the benchmark (missing sides count as 0)."""
    p = to_num(port.summary.ann_return) or 0.0
    b = to_num(port.benchmark_summary.ann_return) or 0.0
    return p - b


# -------------------------
# ticker_history/<SYMBOL>.json
# -------------------------
class HistoryPoint(Artifact):
    d: str = ""
    s: Optional[float] = None
    p: Optional[float] = None


class TickerHistory(Artifact):
    ticker: str = ""
    name: str = ""
    sector: str = ""
    current_score: Optional[float] = None
    tier: str = "Neutral"
    asof: str = ""
    history: list[HistoryPoint] = Field(default_factory=list)


TIMEFRAMES = {"3M": 90, "6M": 180, "1Y": 365, "3Y": 1095, "MAX": None}


def _day(s: str) -> Optional[date]:
    try:
        return date.fromisoformat((s or "")[:10])
    except ValueError:
        return None


def history_window(hist: TickerHistory, label: str) -> list[HistoryPoint]:
    """Points within `label` (3M/6M/1Y/3Y/MAX) of the latest point."""
    pts = [h for h in hist.history if _day(h.d) is not None]
    if not pts or label not in TIMEFRAMES or TIMEFRAMES[label] is None:
        return pts
    latest = _day(pts[-1].d)
    days = TIMEFRAMES[label]
    return [h for h in pts if (latest - _day(h.d)).days <= days]


def score_change(points: list[HistoryPoint]) -> Optional[dict]:
    scored = [h for h in points if h.s is not None]
    if len(scored) < 2:
        return None
    first, last = scored[0].s, scored[-1].s
    return {"first": first, "last": last, "delta": last - first}


def price_change(points: list[HistoryPoint]) -> Optional[dict]:
    priced = [h for h in points if h.p is not None]
    if len(priced) < 2:
        return None
    first, last = priced[0].p, priced[-1].p
    if not first:
        return None
    return {"first": first, "last": last, "pct": (last - first) / first * 100.0}


def history_symbol(raw: str) -> str:
    """Upper-cased symbol usable as a file name, or "" when blank."""
    c = clean(raw)
    if not c:
        return ""
    return "".join(ch for ch in c.upper() if ch.isalnum() or ch in ".-^=")


def price_domain(points: list[HistoryPoint], pad: float = 0.08) -> tuple[float, float]:
    """Price-axis range with `pad` of the span on each side, floored at 0."""
    prices = [h.p for h in points if h.p is not None]
    if not prices:
        return (0.0, 100.0)
    lo, hi = min(prices), max(prices)
    margin = (hi - lo) * pad
    return (max(0.0, lo - margin), hi + margin)
