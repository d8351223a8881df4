# smartscore/columns.py
# Canonical fields and the header aliases seen across score exports.

from enum import Enum
from typing import Iterable, Optional

import pandas as pd

from smartscore.log import get_logger

log = get_logger(__name__)


class CanonicalField(str, Enum):
    TICKER = "ticker"
    NAME = "name"
    SECTOR = "sector"
    INDUSTRY = "industry"
    CAP = "cap"
    SCORE = "score"
    PRICE = "price"
    ASOF = "asof"
    R5D = "r5d"
    R1M = "r1m"
    R3M = "r3m"
    R6M = "r6m"
    R12M = "r12m"
    GATE = "gate"
    VOL = "vol"
    MAX_DD = "max_dd"


F = CanonicalField

# canonical -> accepted header names, in priority order (first match wins)
ALIASES: dict[CanonicalField, list[str]] = {
    F.TICKER:   ["ticker", "symbol"],
    F.NAME:     ["name", "shortName", "company_name", "company"],
    F.SECTOR:   ["sector", "gics_sector"],
    F.INDUSTRY: ["industry", "gics_industry"],
    F.CAP:      ["cap_bucket", "market_cap_bucket", "capBucket", "Market Cap"],
    F.SCORE:    ["RS_Global", "RS", "score", "RS Score", "RS_Score"],
    F.PRICE:    ["price", "last_price", "close", "adj_close"],
    F.ASOF:     ["asof_date", "as_of", "date", "asof"],
    F.R5D:      ["ret_5d", "return_5d", "ret_5", "ret_1w", "ret_7d"],
    F.R1M:      ["ret_1m", "return_1m", "r1m"],
    F.R3M:      ["ret_3m", "return_3m", "r3m"],
    F.R6M:      ["ret_6m", "return_6m", "r6m"],
    F.R12M:     ["ret_12m", "return_12m", "r12m"],
    F.GATE:     ["gate_pass", "gate"],
    F.VOL:      ["vol_63", "volatility_63d", "volatility (63d)"],
    F.MAX_DD:   ["max_dd_252", "max_dd_1y", "max_drawdown_252", "Max Drawdown (1Y)"],
}

ColumnMap = dict[CanonicalField, Optional[str]]


def norm_key(k) -> str:
    return str(k).strip().lower()


def resolve_columns(
    columns: Iterable[str],
    aliases: dict[CanonicalField, list[str]] = ALIASES,
) -> ColumnMap:
    """
    Map every canonical field to the observed header it lives under.

    Matching ignores case and surrounding whitespace on both sides. Aliases
    are tried in declared order and the first hit wins; fields with no hit
    map to None. An empty header resolves nothing.
    """
    observed = {norm_key(c): c for c in columns}
    out: ColumnMap = {}
    for field, cands in aliases.items():
        out[field] = None
        for cand in cands:
            actual = observed.get(norm_key(cand))
            if actual is not None:
                out[field] = actual
                break
    return out


def resolve_frame(frame: pd.DataFrame, aliases: dict[CanonicalField, list[str]] = ALIASES) -> ColumnMap:
    """Resolve once per data set, from the header of the first record."""
    if frame is None or frame.empty:
        return {field: None for field in aliases}

    mapping = resolve_columns(frame.columns, aliases)
    missing = [f.value for f, col in mapping.items() if col is None]
    if missing:
        log.debug("unresolved canonical fields: %s", ", ".join(missing))
    return mapping
