# smartscore/normalize.py
# RawRecord table -> canonical record table.

import math

import numpy as np
import pandas as pd

from smartscore.columns import CanonicalField, ColumnMap, resolve_frame
from smartscore.log import get_logger

log = get_logger(__name__)

F = CanonicalField

# tokens that mean "no data" (compared lower-cased, after trimming)
SENTINELS = frozenset({"", "nan", "null", "none", "undefined"})

# gate flags that mark a row as failing the quality checks
GATE_FAIL = frozenset({"false", "f", "no", "n", "0"})

CATEGORICAL = (F.SECTOR, F.INDUSTRY, F.CAP)
NUMERIC = (F.SCORE, F.PRICE, F.R5D, F.R1M, F.R3M, F.R6M, F.R12M, F.VOL, F.MAX_DD)
UNKNOWN = "Unknown"

CAP_ORDER = {"mega": 1, "large": 2, "mid": 3, "small": 4, "micro": 5, "nano": 6, "unknown": 99}
CAP_ORDER_OTHER = 50   # any bucket not in the table: after the known ones

CAP_ORD_COL = "_cap_ord"


def col(field: CanonicalField) -> str:
    """Name of the canonical column for a field (e.g. `_score`)."""
    return f"_{field.value}"


CANONICAL_COLUMNS = [col(f) for f in CanonicalField] + [CAP_ORD_COL]


def clean(v):
    """Trimmed string, or None for missing values and sentinel tokens."""
    if v is None or v is pd.NA:
        return None
    if isinstance(v, float) and math.isnan(v):
        return None
    s = str(v).strip()
    if s.lower() in SENTINELS:
        return None
    return s


def to_num(v):
    """
    Shared numeric coercion: float, or None when absent/unparseable/non-finite.
    Never raises and never falls back to zero. Negative zero reads as 0.0.
    """
    if isinstance(v, bool):
        return None
    if isinstance(v, (int, float, np.integer, np.floating)):
        f = float(v)
        return f + 0.0 if math.isfinite(f) else None
    s = clean(v)
    if s is None or "_" in s:
        return None
    try:
        f = float(s)
    except (TypeError, ValueError):
        return None
    return f + 0.0 if math.isfinite(f) else None


def to_num_series(series: pd.Series) -> pd.Series:
    """Vectorised `to_num`: float Series, NaN where there is no value."""
    if series is None or len(series) == 0:
        return pd.Series(dtype="float64")
    return pd.to_numeric(series.map(to_num), errors="coerce").astype("float64")


def cap_rank(cap) -> int:
    c = clean(cap)
    if c is None:
        return CAP_ORDER["unknown"]
    return CAP_ORDER.get(c.lower(), CAP_ORDER_OTHER)


def is_gated(gate) -> bool:
    g = clean(gate)
    return g is not None and g.lower() in GATE_FAIL


def _column_values(raw: pd.DataFrame, source) -> list:
    """Cleaned cells of one raw column as a plain list (None = absent)."""
    if source is None or source not in raw.columns:
        return [None] * len(raw)
    return [clean(v) for v in raw[source].tolist()]


def _gate_value(v):
    c = clean(v)
    return None if c is None else c.lower()


def normalize_frame(raw: pd.DataFrame, mapping: ColumnMap | None = None) -> pd.DataFrame:
    """
    Attach the canonical `_<field>` columns to every record.

    Raw columns are kept as a passthrough payload. Strings are trimmed and
    sentinels become None; sector/industry/cap fall back to "Unknown"; numeric
    fields keep their cleaned string and are parsed at use via `to_num`.

    Canonical columns are built from lists with an explicit object dtype so
    pandas never infers a string dtype that turns None into NaN.
    """
    if raw is None:
        raw = pd.DataFrame()
    if mapping is None:
        mapping = resolve_frame(raw)

    out = raw.copy()
    for field in CanonicalField:
        values = _column_values(raw, mapping.get(field))
        if field in CATEGORICAL:
            values = [UNKNOWN if v is None else v for v in values]
        elif field == F.GATE:
            values = [_gate_value(v) for v in values]
        out[col(field)] = pd.Series(values, index=raw.index, dtype=object)

    out[CAP_ORD_COL] = pd.Series([cap_rank(v) for v in out[col(F.CAP)].tolist()], index=raw.index, dtype="int64")

    resolved = sum(1 for v in mapping.values() if v is not None)
    log.info("normalized %d rows (%d/%d canonical fields resolved)", len(out), resolved, len(mapping))
    return out


def gated_mask(frame: pd.DataFrame) -> pd.Series:
    if frame.empty:
        return pd.Series(dtype=bool)
    return pd.Series([is_gated(v) for v in frame[col(F.GATE)].tolist()], index=frame.index, dtype=bool)
