# smartscore/settings.py

import os
from pathlib import Path

from smartscore.log import get_logger

log = get_logger(__name__)

# -------------------------
# Paths (portable for Cloud)
# -------------------------
APP_DIR = Path(__file__).resolve().parent.parent

DATA_DIR = Path(os.getenv("SMARTSCORE_DATA_DIR", APP_DIR / "data")).resolve()
ASSETS_DIR = APP_DIR / "assets"
LOGO_PATH = ASSETS_DIR / "smartscore_logo.svg"

# Optional: serve artifacts from a static host instead of the local data dir
DATA_URL = (os.getenv("SMARTSCORE_DATA_URL") or "").strip().rstrip("/")

# -------------------------
# Data files
# -------------------------
RS_CSV = "rs_latest.csv"
DASHBOARD_JSON = "dashboard_data.json"
TIER_BACKTEST_JSON = "tier_backtest.json"
PORTFOLIO_JSON = "model_portfolio.json"
TICKER_HISTORY_DIR = "ticker_history"


def _env_choice(name: str, allowed: tuple, default: str) -> str:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    for a in allowed:
        if raw.lower() == a.lower():
            return a
    log.warning("%s=%r not in %s, using %r", name, raw, allowed, default)
    return default


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        v = int(raw)
    except ValueError:
        log.warning("%s=%r is not an integer, using %d", name, raw, default)
        return default
    if v < minimum:
        log.warning("%s=%d below %d, using %d", name, v, minimum, default)
        return default
    return v


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        v = float(raw)
    except ValueError:
        log.warning("%s=%r is not a number, using %s", name, raw, default)
        return default
    return v if v > 0 else default


# -------------------------
# Behaviour
# -------------------------
TIER_SCHEME = _env_choice("SMARTSCORE_TIER_SCHEME", ("A", "B"), "A")
RETURN_FORMAT = _env_choice("SMARTSCORE_RETURN_FORMAT", ("decimal", "auto"), "decimal")
TOP_N = _env_int("SMARTSCORE_TOP_N", 100)
FAVORITES_KEY = (os.getenv("SMARTSCORE_FAVORITES_KEY") or "smartscore_favorites").strip()
FETCH_TIMEOUT = _env_float("SMARTSCORE_FETCH_TIMEOUT", 10.0)
LOG_LEVEL = (os.getenv("SMARTSCORE_LOG_LEVEL") or "INFO").strip().upper()
