"""Tests for value cleaning, numeric coercion and record normalization."""

import math

import numpy as np
import pandas as pd
import pytest

from smartscore.columns import CanonicalField as F
from smartscore.csv_text import read_records
from smartscore.normalize import (
    CAP_ORD_COL,
    CAP_ORDER,
    CAP_ORDER_OTHER,
    UNKNOWN,
    cap_rank,
    clean,
    col,
    gated_mask,
    is_gated,
    normalize_frame,
    to_num,
    to_num_series,
)

SENTINEL_TOKENS = ["", "  ", "NaN", "nan", "null", "NULL", "None", "none", "undefined", "Undefined", " nan "]


# =====================================================================
# SENTINELS
# =====================================================================

class TestClean:
    @pytest.mark.parametrize("token", SENTINEL_TOKENS)
    def test_sentinels_are_absent(self, token):
        assert clean(token) is None

    def test_missing_values_are_absent(self):
        assert clean(None) is None
        assert clean(float("nan")) is None
        assert clean(pd.NA) is None

    def test_trims(self):
        assert clean("  AAPL ") == "AAPL"

    def test_zero_is_a_value(self):
        assert clean("0") == "0"

    @pytest.mark.parametrize("token", SENTINEL_TOKENS)
    def test_sentinel_row_normalizes_like_empty_row(self, token):
        text_sentinel = f"ticker,sector,RS_Global,ret_1m\nX,{token},{token},{token}\n"
        text_empty = "ticker,sector,RS_Global,ret_1m\nX,,,\n"
        a = normalize_frame(read_records(text_sentinel))
        b = normalize_frame(read_records(text_empty))
        for field in (F.SECTOR, F.SCORE, F.R1M):
            assert a.loc[0, col(field)] == b.loc[0, col(field)]


# =====================================================================
# NUMERIC COERCION
# =====================================================================

class TestToNum:
    @pytest.mark.parametrize("raw, expected", [
        ("95.2", 95.2),
        (" 3 ", 3.0),
        ("-0.04", -0.04),
        ("1e2", 100.0),
        (0, 0.0),
        (7, 7.0),
        (np.float64(2.5), 2.5),
        (np.int64(4), 4.0),
    ])
    def test_parses(self, raw, expected):
        assert to_num(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", [None, "", "abc", "NaN", "null", "1_000", "inf", "-Infinity", float("nan"), True, "1,234"])
    def test_no_value(self, raw):
        assert to_num(raw) is None

    def test_zero_is_not_absent(self):
        assert to_num("0") == 0.0
        assert to_num("0.0") is not None

    @pytest.mark.parametrize("raw", ["-0.0", "-0", -0.0])
    def test_negative_zero_is_plain_zero(self, raw):
        assert math.copysign(1.0, to_num(raw)) == 1.0

    def test_series(self):
        s = to_num_series(pd.Series(["1", "x", None, "2.5"]))
        assert s.iloc[0] == 1.0
        assert math.isnan(s.iloc[1]) and math.isnan(s.iloc[2])
        assert s.iloc[3] == 2.5


# =====================================================================
# CAP / GATE
# =====================================================================

class TestCapAndGate:
    def test_cap_rank_order(self):
        assert cap_rank("Mega") < cap_rank("large") < cap_rank("Mid") < cap_rank("small")
        assert cap_rank("Micro") < cap_rank("nano")

    def test_unknown_caps(self):
        assert cap_rank(None) == CAP_ORDER["unknown"]
        assert cap_rank("Unknown") == CAP_ORDER["unknown"]
        assert cap_rank("Giant") == CAP_ORDER_OTHER

    @pytest.mark.parametrize("gate", ["false", "FALSE", "f", "No", "n", "0"])
    def test_gated(self, gate):
        assert is_gated(gate)

    @pytest.mark.parametrize("gate", ["true", "1", "yes", None, "", "pass"])
    def test_not_gated(self, gate):
        assert not is_gated(gate)


# =====================================================================
# NORMALIZE
# =====================================================================

class TestNormalizeFrame:
    def test_canonical_columns_added(self, table):
        for field in F:
            assert col(field) in table.columns
        assert CAP_ORD_COL in table.columns

    def test_raw_columns_kept(self, table):
        assert "RS_Global" in table.columns
        assert "cap_bucket" in table.columns

    def test_categoricals_default_unknown(self, table):
        bad = table[table["_ticker"] == "BAD"].iloc[0]
        assert bad[col(F.SECTOR)] == UNKNOWN
        assert bad[col(F.INDUSTRY)] == UNKNOWN
        assert bad[col(F.CAP)] == UNKNOWN
        assert bad[CAP_ORD_COL] == CAP_ORDER["unknown"]

    def test_numeric_absent_is_none(self, table):
        bad = table[table["_ticker"] == "BAD"].iloc[0]
        assert bad[col(F.SCORE)] is None
        assert bad[col(F.PRICE)] is None
        assert bad[col(F.NAME)] is None

    def test_gate_lower_cased(self):
        frame = normalize_frame(read_records("ticker,gate_pass\nA,FALSE\nB,True\n"))
        assert frame[col(F.GATE)].tolist() == ["false", "true"]
        assert gated_mask(frame).tolist() == [True, False]

    def test_unresolved_field_is_absent_not_zero(self):
        frame = normalize_frame(read_records("ticker,RS_Global\nA,50\n"))
        assert frame.loc[0, col(F.R1M)] is None
        assert to_num(frame.loc[0, col(F.R1M)]) is None

    def test_empty_input(self):
        frame = normalize_frame(pd.DataFrame())
        assert frame.empty
        assert gated_mask(frame).empty

    def test_blank_gate_cell_is_absent(self):
        frame = normalize_frame(read_records("ticker,RS_Global,ret_1m,gate_pass\nAAPL,95.2,0.034,true\nBAD,,nan,\n"))
        bad = frame.iloc[1]
        assert bad[col(F.SCORE)] is None
        assert bad[col(F.R1M)] is None
        assert bad[col(F.GATE)] is None
        assert gated_mask(frame).tolist() == [False, False]

    def test_canonical_columns_hold_none_not_nan(self):
        frame = normalize_frame(read_records("ticker,name,sector\nA,,\nB,Beta,Energy\n"))
        for field in F:
            assert frame[col(field)].dtype == object
        assert frame[col(F.NAME)].tolist() == [None, "Beta"]
        assert frame[col(F.SECTOR)].tolist() == [UNKNOWN, "Energy"]
