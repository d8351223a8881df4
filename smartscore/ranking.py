# smartscore/ranking.py
# Whole-table derived attributes. These run once, right after normalization
# and before any filter, so they never shrink with the visible subset.

import pandas as pd

from smartscore.columns import CanonicalField
from smartscore.normalize import clean, col, to_num_series
from smartscore.tiers import bucket_labels, score_bucket

TOP_COL = "_top"

SCORE = col(CanonicalField.SCORE)
TICKER = col(CanonicalField.TICKER)


def tag_top_n(frame: pd.DataFrame, n: int = 100) -> pd.DataFrame:
    """
    Flag the N highest-scoring rows of the complete table in `_top`.

    Rows without a ticker or without a numeric score are not ranked and do
    not count toward N. Equal scores keep their input order.
    """
    out = frame.copy()
    if out.empty:
        out[TOP_COL] = pd.Series(dtype=bool)
        return out

    scores = to_num_series(out[SCORE])
    has_ticker = out[TICKER].map(lambda v: clean(v) is not None)
    eligible = scores[scores.notna() & has_ticker]

    ranked = eligible.sort_values(ascending=False, kind="stable")
    top_idx = set(ranked.index[: max(int(n), 0)])

    out[TOP_COL] = [i in top_idx for i in out.index]
    return out


def score_dispersion(frame: pd.DataFrame, top: int = 10) -> dict:
    """Concentration numbers for the score column (None when no scores)."""
    scores = to_num_series(frame[SCORE]).dropna() if not frame.empty else pd.Series(dtype="float64")
    if scores.empty:
        return {"top10_avg": None, "universe_avg": None, "spread": None, "std_dev": None}

    top_avg = float(scores.sort_values(ascending=False).head(top).mean())
    uni_avg = float(scores.mean())
    std = float(scores.std(ddof=0))
    return {
        "top10_avg": top_avg,
        "universe_avg": uni_avg,
        "spread": top_avg - uni_avg,
        "std_dev": std,
    }


def score_distribution(frame: pd.DataFrame) -> dict:
    """{bucket: {"count": int, "pct": float}} over rows that have a score."""
    keys = [k for k, _ in bucket_labels()]
    if frame.empty:
        return {k: {"count": 0, "pct": 0.0} for k in keys}

    buckets = frame[SCORE].map(score_bucket).dropna()
    total = len(buckets)
    counts = buckets.value_counts()
    out = {}
    for k in keys:
        c = int(counts.get(k, 0))
        out[k] = {"count": c, "pct": (c / total * 100.0) if total else 0.0}
    return out
