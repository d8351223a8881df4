# smartscore/loader.py
# Fetch static artifacts and run the table pipeline:
#   parse -> resolve -> normalize -> rank
# The pipeline re-runs in full for every fresh fetch.

import itertools
import json
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import pandas as pd
import requests

from smartscore import settings
from smartscore.columns import ColumnMap, resolve_frame
from smartscore.csv_text import read_records
from smartscore.errors import DataLoadError
from smartscore.log import get_logger
from smartscore.normalize import normalize_frame
from smartscore.ranking import tag_top_n

log = get_logger(__name__)


# -------------------------
# Fetch
# -------------------------
def _url_for(name: str, base_url: str) -> str:
    return f"{base_url.rstrip('/')}/{name.lstrip('/')}"


def fetch_text(name: str, data_dir: Path | None = None, base_url: str | None = None,
               timeout: float | None = None) -> str:
    """
    Read one data file as UTF-8 text.

    With a base URL the file is requested over HTTP (no retry); otherwise it
    is read from the data directory. Any failure raises DataLoadError.
    """
    base_url = settings.DATA_URL if base_url is None else base_url
    timeout = settings.FETCH_TIMEOUT if timeout is None else timeout

    if base_url:
        url = _url_for(name, base_url)
        try:
            r = requests.get(url, timeout=timeout, headers={"Cache-Control": "no-store"})
        except requests.RequestException as e:
            log.warning("fetch failed for %s: %s", url, e)
            raise DataLoadError(name, message=str(e)) from e
        if not r.ok:
            log.warning("fetch %s returned %s", url, r.status_code)
            raise DataLoadError(name, status=r.status_code)
        r.encoding = r.encoding or "utf-8"
        return r.text

    p = Path(data_dir or settings.DATA_DIR) / name
    if not p.exists():
        log.warning("data file missing: %s", p)
        raise DataLoadError(name, status=404)
    try:
        return p.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise DataLoadError(name, message=str(e)) from e


def fetch_json(name: str, data_dir: Path | None = None, base_url: str | None = None,
               timeout: float | None = None):
    text = fetch_text(name, data_dir=data_dir, base_url=base_url, timeout=timeout)
    try:
        return json.loads(text)
    except ValueError as e:
        log.warning("invalid JSON in %s: %s", name, e)
        raise DataLoadError(name, message="invalid JSON") from e


# -------------------------
# Latest-wins bookkeeping
# -------------------------
class LoadTracker:
    """
    Generation counter for loads owned by one view.

    Each load takes a token from `begin()`; when it finishes it only
    publishes its result if `is_current(token)` still holds. A newer
    `begin()` or an `invalidate()` (view left) supersedes older tokens.
    Nothing is cancelled, late results are just dropped.
    """

    def __init__(self):
        self._counter = itertools.count(1)
        self._current = 0
        self._lock = threading.Lock()

    def begin(self) -> int:
        with self._lock:
            self._current = next(self._counter)
            return self._current

    def invalidate(self) -> None:
        with self._lock:
            self._current = next(self._counter)

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._current


# -------------------------
# Table pipeline
# -------------------------
@dataclass
class LoadResult:
    frame: pd.DataFrame = field(default_factory=pd.DataFrame)
    mapping: ColumnMap = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_table(text: str, top_n: int | None = None) -> LoadResult:
    """Synchronous pipeline over already-fetched CSV text."""
    top_n = settings.TOP_N if top_n is None else top_n
    raw = read_records(text)
    mapping = resolve_frame(raw)
    frame = normalize_frame(raw, mapping)
    frame = tag_top_n(frame, top_n)
    return LoadResult(frame=frame, mapping=mapping)


def load_table(name: str = settings.RS_CSV, tracker: LoadTracker | None = None,
               top_n: int | None = None, **fetch_kwargs) -> Optional[LoadResult]:
    """
    Fetch + build. Returns None when `tracker` says a newer load superseded
    this one; a fetch failure comes back as a LoadResult with `error` set.
    """
    token = tracker.begin() if tracker is not None else None
    try:
        text = fetch_text(name, **fetch_kwargs)
        result = build_table(text, top_n=top_n)
    except DataLoadError as e:
        result = LoadResult(error=str(e))

    if tracker is not None and not tracker.is_current(token):
        log.info("discarding superseded load of %s", name)
        return None
    return result


def load_artifact(name: str, tracker: LoadTracker | None = None, **fetch_kwargs):
    """JSON counterpart of load_table: (payload, error) or None if superseded."""
    token = tracker.begin() if tracker is not None else None
    try:
        out = (fetch_json(name, **fetch_kwargs), None)
    except DataLoadError as e:
        out = (None, str(e))

    if tracker is not None and not tracker.is_current(token):
        log.info("discarding superseded load of %s", name)
        return None
    return out
