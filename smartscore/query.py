# smartscore/query.py
# Filter / sort over the normalized table. Pure functions over plain state
# objects; the pages own the state and pass it in on every rerun.

from dataclasses import dataclass, replace
from typing import Iterable, Optional

import pandas as pd

from smartscore.columns import CanonicalField
from smartscore.normalize import CAP_ORD_COL, clean, col, gated_mask, to_num
from smartscore.ranking import TOP_COL
from smartscore.tiers import TierPolicy, get_policy

F = CanonicalField

ALL = "All"
ASC = "asc"
DESC = "desc"

TICKER = col(F.TICKER)
NAME = col(F.NAME)
SCORE = col(F.SCORE)

NUMERIC_KEYS = frozenset(
    [col(f) for f in (F.SCORE, F.PRICE, F.R5D, F.R1M, F.R3M, F.R6M, F.R12M, F.VOL, F.MAX_DD)]
    + [CAP_ORD_COL]
)
# identifier / name / categorical keys open ascending; cap sorts by its rank
ASC_KEYS = frozenset(
    [col(f) for f in (F.TICKER, F.NAME, F.SECTOR, F.INDUSTRY, F.CAP, F.ASOF)] + [CAP_ORD_COL]
)

EMPTY_WATCHLIST = "empty_watchlist"
NO_MATCHES = "no_matches"
NO_DATA = "no_data"


@dataclass(frozen=True)
class FilterState:
    query: str = ""
    sector: str = ALL
    industry: str = ALL
    cap: str = ALL
    tier: str = ALL
    top_only: bool = False
    watchlist_only: bool = False
    show_gated: bool = False
    pin_favorites: bool = False

    def reset(self) -> "FilterState":
        return FilterState()

    @property
    def pins(self) -> bool:
        return self.pin_favorites or self.watchlist_only


@dataclass(frozen=True)
class SortState:
    key: str = SCORE
    direction: str = DESC

    @property
    def descending(self) -> bool:
        return self.direction == DESC


@dataclass
class QueryResult:
    frame: pd.DataFrame
    total: int
    empty_reason: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.frame)


def default_direction(key: str) -> str:
    return ASC if key in ASC_KEYS else DESC


def toggle_sort(state: SortState, key: str) -> SortState:
    """Same key flips direction; a new key starts at its type default."""
    if key == state.key:
        return replace(state, direction=ASC if state.descending else DESC)
    return SortState(key=key, direction=default_direction(key))


def normalize_favorites(favorites: Iterable[str] | None) -> frozenset:
    out = set()
    for t in favorites or ():
        c = clean(t)
        if c:
            out.add(c.upper())
    return frozenset(out)


# -------------------------
# Filter
# -------------------------
def _text_contains(series: pd.Series, needle: str) -> pd.Series:
    return series.map(lambda v: needle in (clean(v) or "").upper())


def filter_frame(
    frame: pd.DataFrame,
    filters: FilterState,
    favorites: Iterable[str] | None = None,
    policy: TierPolicy | None = None,
    search_names: bool = True,
) -> pd.DataFrame:
    """
    Rows passing every active filter (logical AND). The result is always a
    subset of `frame`, in input order.
    """
    if frame.empty:
        return frame.copy()

    keep = pd.Series(True, index=frame.index)

    q = (clean(filters.query) or "").upper()
    if q:
        hit = _text_contains(frame[TICKER], q)
        if search_names and NAME in frame.columns:
            hit = hit | _text_contains(frame[NAME], q)
        keep &= hit

    for field, wanted in ((F.SECTOR, filters.sector), (F.INDUSTRY, filters.industry), (F.CAP, filters.cap)):
        if wanted and wanted != ALL:
            keep &= frame[col(field)] == wanted

    if filters.tier and filters.tier != ALL:
        policy = policy or get_policy()
        keep &= frame[SCORE].map(policy.classify) == filters.tier

    if filters.top_only:
        top = frame[TOP_COL] if TOP_COL in frame.columns else pd.Series(False, index=frame.index)
        keep &= top.fillna(False).astype(bool)

    if filters.watchlist_only:
        favs = normalize_favorites(favorites)
        keep &= frame[TICKER].map(lambda v: (clean(v) or "").upper() in favs)

    if not filters.show_gated:
        keep &= ~gated_mask(frame)

    return frame.loc[keep.astype(bool)].copy()


# -------------------------
# Sort
# -------------------------
def _sort_value(v, numeric: bool):
    return to_num(v) if numeric else clean(v)


def sort_frame(
    frame: pd.DataFrame,
    sort: SortState,
    favorites: Iterable[str] | None = None,
    pin: bool = False,
) -> pd.DataFrame:
    """
    Stable single-key sort.

    Numeric keys compare as numbers, everything else as case-sensitive
    strings. Rows without a value go last in both directions. With `pin`,
    favorited rows form a leading partition, each partition sorted the same way.
    """
    if frame.empty or sort.key not in frame.columns:
        return frame.copy()

    numeric = sort.key in NUMERIC_KEYS
    values = [_sort_value(v, numeric) for v in frame[sort.key].tolist()]

    present = [i for i, v in enumerate(values) if v is not None]
    absent = [i for i, v in enumerate(values) if v is None]
    # list.sort is stable with reverse=True as well
    present.sort(key=lambda i: values[i], reverse=sort.descending)
    order = present + absent

    if pin:
        favs = normalize_favorites(favorites)
        if favs:
            tickers = [(clean(t) or "").upper() for t in frame[TICKER].tolist()]
            order = [i for i in order if tickers[i] in favs] + [i for i in order if tickers[i] not in favs]

    return frame.iloc[order].copy()


# -------------------------
# Query
# -------------------------
def run_query(
    frame: pd.DataFrame,
    filters: FilterState,
    sort: SortState,
    favorites: Iterable[str] | None = None,
    policy: TierPolicy | None = None,
    search_names: bool = True,
) -> QueryResult:
    favs = normalize_favorites(favorites)
    total = len(frame)

    if filters.watchlist_only and not favs:
        return QueryResult(frame.iloc[0:0].copy(), total, EMPTY_WATCHLIST)

    subset = filter_frame(frame, filters, favs, policy, search_names=search_names)
    ordered = sort_frame(subset, sort, favs, pin=filters.pins)

    reason = None
    if ordered.empty:
        reason = NO_DATA if total == 0 else NO_MATCHES
    return QueryResult(ordered, total, reason)


def filter_options(frame: pd.DataFrame, column: str) -> list[str]:
    """Select-box options: "All" then the distinct values, sorted."""
    if frame.empty or column not in frame.columns:
        return [ALL]
    vals = {c for c in (clean(v) for v in frame[column].tolist()) if c}
    return [ALL] + sorted(vals)
