"""Shared fixtures for Smart Score tests."""

import sys
from pathlib import Path

import pytest

# Ensure project root is importable
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from smartscore.loader import build_table  # noqa: E402

HEADER = (
    "ticker,name,sector,industry,cap_bucket,RS_Global,price,asof_date,"
    "ret_5d,ret_1m,ret_3m,ret_6m,ret_12m,gate_pass,vol_63,max_dd_252"
)

SAMPLE_CSV = "\n".join([
    HEADER,
    "AAPL,Apple Inc.,Technology,Consumer Electronics,Mega,95.2,190.50,2024-06-28,0.012,0.034,0.08,0.15,0.22,true,0.24,-0.12",
    "MSFT,Microsoft Corp.,Technology,Software,Mega,91.0,420.10,2024-06-28,-0.005,0.021,0.05,0.11,0.30,true,0.21,-0.10",
    'JPM,"JPMorgan Chase & Co.",Financials,Banks,Large,82.5,198.00,2024-06-28,0.002,0.0,0.04,0.09,0.25,true,0.19,-0.08',
    "XOM,Exxon Mobil,Energy,Oil & Gas,Large,71.0,112.30,2024-06-28,-0.02,-0.04,-0.01,0.03,0.05,true,0.27,-0.18",
    'SJC,"Smith, Jones & Co.",Industrials,Machinery,Small,65.0,42.00,2024-06-28,0.0,0.01,0.02,0.03,0.04,false,0.35,-0.25',
    "BAD,,NaN,null,,,nan",
]) + "\n"

SCENARIO_CSV = "ticker,RS_Global,ret_1m\nAAPL,95.2,0.034\nBAD,,nan\n"


@pytest.fixture
def sample_csv():
    return SAMPLE_CSV


@pytest.fixture
def table():
    """Normalized, ranked sample table (top 3 tagged)."""
    return build_table(SAMPLE_CSV, top_n=3).frame


@pytest.fixture
def scenario_table():
    return build_table(SCENARIO_CSV, top_n=100).frame


def tickers(frame):
    return frame["_ticker"].tolist()
