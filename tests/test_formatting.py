"""Tests for display formatting."""

import pandas as pd
import pytest

from smartscore.formatting import (
    AUTO,
    DECIMAL,
    PLACEHOLDER,
    ReturnText,
    asof_text,
    fmt_money,
    fmt_number,
    fmt_pct,
    fmt_price,
    fmt_return,
    fmt_score,
    fmt_text,
    rs_view,
    screener_view,
)
from smartscore.loader import build_table
from smartscore.tiers import SCHEME_A


class TestFmtReturn:
    def test_decimal(self):
        assert fmt_return(0.034) == ReturnText("+3.4%", "pos")
        assert fmt_return("-0.051") == ReturnText("-5.1%", "neg")

    def test_true_zero_is_not_placeholder(self):
        assert fmt_return(0) == ReturnText("+0.0%", "flat")
        assert fmt_return("0.0").text != PLACEHOLDER

    @pytest.mark.parametrize("v", ["-0.0", "-0", -0.0])
    def test_negative_zero_reads_as_zero(self, v):
        assert fmt_return(v) == ReturnText("+0.0%", "flat")
        assert fmt_return(v, AUTO).text == "+0.0%"
        assert fmt_pct(v) == "+0.0%"
        assert fmt_score(v) == "0.0"
        assert fmt_price(v) == "0.00"

    @pytest.mark.parametrize("v", [None, "", "nan", "null", "abc"])
    def test_absent(self, v):
        assert fmt_return(v) == ReturnText(PLACEHOLDER, "flat")

    def test_auto_mode_keeps_percent_values(self):
        assert fmt_return(12.5, AUTO).text == "+12.5%"
        assert fmt_return(0.125, AUTO).text == "+12.5%"
        assert fmt_return(1.5, AUTO).text == "+150.0%"

    def test_decimal_mode_always_scales(self):
        assert fmt_return(12.5, DECIMAL).text == "+1250.0%"

    def test_sign_band(self):
        assert fmt_return(0.00005).sign == "flat"
        assert fmt_return(0.0002).sign == "pos"
        assert fmt_return(-0.0002).sign == "neg"


class TestOtherFormatters:
    def test_fmt_pct(self):
        assert fmt_pct(0.5) == "+50.0%"
        assert fmt_pct(25) == "+25.0%"
        assert fmt_pct(-0.123, 2) == "-12.30%"
        assert fmt_pct(0.61, 0, plus=False) == "61%"
        assert fmt_pct(None) == PLACEHOLDER

    def test_fmt_price(self):
        assert fmt_price(1234.5) == "1,234.50"
        assert fmt_price("nan") == PLACEHOLDER

    def test_fmt_score(self):
        assert fmt_score("95.24") == "95.2"
        assert fmt_score(None) == PLACEHOLDER

    def test_fmt_money(self):
        assert fmt_money(1500) == "$1,500"

    def test_fmt_number(self):
        assert fmt_number(1234.56) == "1,235"
        assert fmt_number(12.5) == "12.50"
        assert fmt_number(3, 0) == "3"
        assert fmt_number("x") == PLACEHOLDER

    def test_fmt_text(self):
        assert fmt_text(" Energy ") == "Energy"
        assert fmt_text("NaN") == PLACEHOLDER


class TestAsof:
    def test_first_present(self, table):
        assert asof_text(table) == "2024-06-28"

    def test_missing(self, scenario_table):
        assert asof_text(scenario_table) == PLACEHOLDER
        assert asof_text(pd.DataFrame(), "latest") == "latest"


class TestViews:
    def test_scenario_rendering(self, scenario_table):
        view = screener_view(scenario_table, SCHEME_A)
        aapl, bad = view.iloc[0], view.iloc[1]
        assert aapl["Score"] == "95.2"
        assert aapl["1M"] == "+3.4%"
        assert aapl["Tier"] == "Leadership"
        assert bad["Score"] == PLACEHOLDER
        assert bad["1M"] == PLACEHOLDER
        assert bad["Tier"] == PLACEHOLDER

    def test_screener_columns_and_flags(self, table):
        view = screener_view(table, SCHEME_A, favorites={"msft"})
        assert list(view.columns) == [
            "★", "Watch", "Ticker", "Name", "Score", "Tier", "Price", "Sector", "Cap",
            "5D", "1M", "3M", "6M", "12M", "Gated",
        ]
        by_ticker = view.set_index("Ticker")
        assert by_ticker.loc["AAPL", "★"] == "★"
        assert by_ticker.loc["XOM", "★"] == ""
        assert by_ticker.loc["MSFT", "Watch"] == "♥"
        assert by_ticker.loc["SJC", "Gated"] == "gated"
        assert by_ticker.loc["JPM", "1M"] == "+0.0%"
        assert by_ticker.loc["BAD", "Name"] == PLACEHOLDER

    def test_screener_negative_zero_return(self):
        frame = build_table("ticker,RS_Global,ret_1m\nA,50,-0.0\n").frame
        assert screener_view(frame, SCHEME_A).loc[0, "1M"] == "+0.0%"

    def test_rs_view_column_groups(self, table):
        full = rs_view(table)
        assert "Vol (63d)" in full.columns and "12M" in full.columns
        assert full.loc[0, "Vol (63d)"] == "24.0%"
        assert full.loc[0, "Max DD (1Y)"] == "-12.0%"

        bare = rs_view(table, show_perf=False, show_risk=False)
        assert list(bare.columns) == ["Ticker", "RS", "Price", "Sector", "Industry", "Cap"]
