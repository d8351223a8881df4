# smartscore/favorites.py
# The one piece of client state that survives across sessions: the set of
# favorited tickers, stored as a JSON array under a single named key.

import json
from typing import Iterable

import streamlit as st
from streamlit_cookies_manager import CookieManager

from smartscore import settings
from smartscore.log import get_logger
from smartscore.normalize import clean

log = get_logger(__name__)

_MANAGER_KEY = "_ss_cookie_manager"


def dumps_favorites(tickers: Iterable[str]) -> str:
    return json.dumps(sorted(_canon(tickers)))


def loads_favorites(raw) -> set[str]:
    """Parse a stored payload; anything malformed reads as no favorites."""
    if not raw:
        return set()
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        log.warning("favorites payload is not JSON; starting empty")
        return set()
    if not isinstance(data, list):
        log.warning("favorites payload is not a list; starting empty")
        return set()
    return _canon(v for v in data if isinstance(v, str))


def _canon(tickers: Iterable[str]) -> set[str]:
    out = set()
    for t in tickers:
        c = clean(t)
        if c:
            out.add(c.upper())
    return out


class FavoritesStore:
    """
    Read once at mount, written wholesale on every toggle.

    `backend` is anything with `get(key)` and item assignment; a `save()`
    method is called after each write when present (CookieManager has one).
    """

    def __init__(self, backend, key: str | None = None):
        self.backend = backend
        self.key = key or settings.FAVORITES_KEY
        self._tickers: set[str] = set()

    def load(self) -> frozenset:
        self._tickers = loads_favorites(self.backend.get(self.key))
        return self.tickers

    @property
    def tickers(self) -> frozenset:
        return frozenset(self._tickers)

    def __contains__(self, ticker) -> bool:
        c = clean(ticker)
        return bool(c) and c.upper() in self._tickers

    def __len__(self) -> int:
        return len(self._tickers)

    def toggle(self, ticker) -> bool:
        """Flip membership, persist, and return the new state."""
        c = clean(ticker)
        if not c:
            return False
        t = c.upper()
        if t in self._tickers:
            self._tickers.discard(t)
            on = False
        else:
            self._tickers.add(t)
            on = True
        self.save()
        return on

    def set_many(self, tickers: Iterable[str]) -> None:
        self._tickers = _canon(tickers)
        self.save()

    def save(self) -> None:
        self.backend[self.key] = dumps_favorites(self._tickers)
        save = getattr(self.backend, "save", None)
        if callable(save):
            save()


# -------------------------
# Cookie backend
# -------------------------
def get_cookies() -> CookieManager:
    """
    Return ONE CookieManager instance per Streamlit session
    (prevents DuplicateWidgetID).
    """
    if _MANAGER_KEY not in st.session_state:
        st.session_state[_MANAGER_KEY] = CookieManager()

    cookies = st.session_state[_MANAGER_KEY]

    if not cookies.ready():
        st.info("Loading your watchlist… one moment.")
        st.stop()

    return cookies


def favorites_store() -> FavoritesStore:
    """Session-scoped store, loaded from the cookie the first time."""
    store = st.session_state.get("_ss_favorites")
    if store is None:
        store = FavoritesStore(get_cookies())
        store.load()
        st.session_state["_ss_favorites"] = store
    return store
