"""Tests for whole-table ranking (top-N tag, dispersion, distribution)."""

import math

import pytest

from smartscore.loader import build_table
from smartscore.query import FilterState, filter_frame
from smartscore.ranking import TOP_COL, score_dispersion, score_distribution, tag_top_n

from conftest import tickers


def _frame(rows, top_n=100):
    text = "ticker,RS_Global\n" + "\n".join(f"{t},{s}" for t, s in rows) + "\n"
    return build_table(text, top_n=top_n).frame


class TestTagTopN:
    def test_top_n_by_score(self, table):
        top = table[table[TOP_COL]]
        assert tickers(top) == ["AAPL", "MSFT", "JPM"]

    def test_rows_without_score_or_ticker_never_top(self):
        frame = _frame([("", 99), ("A", ""), ("B", 10)], top_n=3)
        assert frame[TOP_COL].tolist() == [False, False, True]

    def test_ties_keep_input_order(self):
        frame = _frame([("A", 50), ("B", 50), ("C", 50)], top_n=2)
        assert frame[TOP_COL].tolist() == [True, True, False]

    def test_zero_n(self):
        frame = tag_top_n(_frame([("A", 1)]), 0)
        assert not frame[TOP_COL].any()

    def test_n_larger_than_table(self):
        frame = _frame([("A", 1), ("B", 2)], top_n=100)
        assert frame[TOP_COL].all()

    def test_stable_under_filtering(self, table):
        variants = [
            FilterState(query="A"),
            FilterState(sector="Technology"),
            FilterState(cap="Large", show_gated=True),
            FilterState(query="co", show_gated=True),
        ]
        for f in variants:
            subset = filter_frame(table, f)
            assert subset[TOP_COL].tolist() == table.loc[subset.index, TOP_COL].tolist()

    def test_empty_frame(self):
        frame = tag_top_n(build_table("ticker,RS_Global\n").frame, 10)
        assert TOP_COL in frame.columns
        assert frame.empty


class TestScoreDispersion:
    def test_numbers(self):
        d = score_dispersion(_frame([("A", 100), ("B", 80), ("C", 60)]), top=2)
        assert d["top10_avg"] == pytest.approx(90.0)
        assert d["universe_avg"] == pytest.approx(80.0)
        assert d["spread"] == pytest.approx(10.0)
        assert d["std_dev"] == pytest.approx(math.sqrt(800 / 3))

    def test_absent_scores_ignored(self):
        d = score_dispersion(_frame([("A", 100), ("B", "nan")]))
        assert d["universe_avg"] == pytest.approx(100.0)

    def test_no_scores(self):
        d = score_dispersion(_frame([("A", "")]))
        assert d == {"top10_avg": None, "universe_avg": None, "spread": None, "std_dev": None}


class TestScoreDistribution:
    def test_counts_and_pct(self, table):
        d = score_distribution(table)
        # AAPL 95.2, MSFT 91, JPM 82.5, XOM 71, SJC 65; BAD has no score
        assert d["90s"] == {"count": 2, "pct": pytest.approx(40.0)}
        assert d["80s"]["count"] == 1
        assert d["70s"]["count"] == 1
        assert d["60s"]["count"] == 1
        assert d["below_60"]["count"] == 0

    def test_empty(self):
        d = score_distribution(build_table("").frame)
        assert all(v == {"count": 0, "pct": 0.0} for v in d.values())
