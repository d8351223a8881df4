"""Tests for fetching, the table pipeline and latest-wins load tracking."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from smartscore.columns import CanonicalField as F
from smartscore.errors import DataLoadError
from smartscore.loader import (
    LoadResult,
    LoadTracker,
    build_table,
    fetch_json,
    fetch_text,
    load_artifact,
    load_table,
)
from smartscore.ranking import TOP_COL

from conftest import SAMPLE_CSV, tickers


def _response(status=200, text=""):
    r = MagicMock()
    r.status_code = status
    r.ok = 200 <= status < 300
    r.text = text
    r.encoding = "utf-8"
    return r


# =====================================================================
# LOCAL FETCH
# =====================================================================

class TestLocalFetch:
    def test_reads_file(self, tmp_path):
        (tmp_path / "rs_latest.csv").write_text("ticker\nA\n", encoding="utf-8")
        assert fetch_text("rs_latest.csv", data_dir=tmp_path, base_url="") == "ticker\nA\n"

    def test_strips_bom(self, tmp_path):
        (tmp_path / "x.csv").write_bytes("\ufeffticker\nA\n".encode("utf-8"))
        assert fetch_text("x.csv", data_dir=tmp_path, base_url="").startswith("ticker")

    def test_missing_file_is_404(self, tmp_path):
        with pytest.raises(DataLoadError) as exc:
            fetch_text("nope.csv", data_dir=tmp_path, base_url="")
        assert exc.value.status == 404
        assert str(exc.value) == "nope.csv (404)"

    def test_subdirectory_name(self, tmp_path):
        (tmp_path / "ticker_history").mkdir()
        (tmp_path / "ticker_history" / "AAPL.json").write_text('{"ticker": "AAPL"}', encoding="utf-8")
        assert fetch_json("ticker_history/AAPL.json", data_dir=tmp_path, base_url="") == {"ticker": "AAPL"}

    def test_invalid_json(self, tmp_path):
        (tmp_path / "d.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(DataLoadError, match="invalid JSON"):
            fetch_json("d.json", data_dir=tmp_path, base_url="")


# =====================================================================
# HTTP FETCH
# =====================================================================

class TestHttpFetch:
    @patch("smartscore.loader.requests.get")
    def test_success(self, mock_get):
        mock_get.return_value = _response(200, "ticker\nA\n")
        text = fetch_text("rs_latest.csv", base_url="https://data.example.com/data/", timeout=3)
        assert text == "ticker\nA\n"
        args, kwargs = mock_get.call_args
        assert args[0] == "https://data.example.com/data/rs_latest.csv"
        assert kwargs["timeout"] == 3

    @patch("smartscore.loader.requests.get")
    def test_any_2xx_is_success(self, mock_get):
        mock_get.return_value = _response(203, "ticker\nA\n")
        assert fetch_text("rs_latest.csv", base_url="https://data.example.com") == "ticker\nA\n"

    @patch("smartscore.loader.requests.get")
    def test_non_success_status(self, mock_get):
        mock_get.return_value = _response(503)
        with pytest.raises(DataLoadError) as exc:
            fetch_text("rs_latest.csv", base_url="https://data.example.com")
        assert exc.value.status == 503
        assert "503" in str(exc.value)

    @patch("smartscore.loader.requests.get")
    def test_network_error_message(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(DataLoadError) as exc:
            fetch_text("rs_latest.csv", base_url="https://data.example.com")
        assert exc.value.status is None
        assert "connection refused" in str(exc.value)

    @patch("smartscore.loader.requests.get")
    def test_no_retry(self, mock_get):
        mock_get.return_value = _response(500)
        with pytest.raises(DataLoadError):
            fetch_text("rs_latest.csv", base_url="https://data.example.com")
        assert mock_get.call_count == 1


# =====================================================================
# PIPELINE
# =====================================================================

class TestBuildTable:
    def test_scenario(self):
        result = build_table("ticker,RS_Global,ret_1m\nAAPL,95.2,0.034\nBAD,,nan\n")
        assert result.ok
        frame = result.frame
        assert frame.loc[0, "_score"] == "95.2"
        assert frame.loc[1, "_score"] is None
        assert frame.loc[1, "_r1m"] is None
        assert result.mapping[F.SCORE] == "RS_Global"
        assert frame[TOP_COL].tolist() == [True, False]

    def test_sample(self):
        result = build_table(SAMPLE_CSV, top_n=2)
        assert len(result.frame) == 6
        assert tickers(result.frame[result.frame[TOP_COL]]) == ["AAPL", "MSFT"]

    def test_blank_gate_cell_never_raises(self):
        result = build_table("ticker,RS_Global,ret_1m,gate_pass\nAAPL,95.2,0.034,true\nBAD,,nan,\n")
        frame = result.frame
        assert [frame.loc[1, c] for c in ("_score", "_r1m", "_gate")] == [None, None, None]
        assert frame[TOP_COL].tolist() == [True, False]

    def test_garbage_never_raises(self):
        result = build_table('"\n,,,\n"""')
        assert result.ok


class TestLoadTable:
    def test_local(self, tmp_path):
        (tmp_path / "rs_latest.csv").write_text(SAMPLE_CSV, encoding="utf-8")
        result = load_table("rs_latest.csv", data_dir=tmp_path, base_url="", top_n=3)
        assert isinstance(result, LoadResult)
        assert result.ok
        assert len(result.frame) == 6

    def test_error_becomes_result(self, tmp_path):
        result = load_table("rs_latest.csv", data_dir=tmp_path, base_url="")
        assert not result.ok
        assert result.error == "rs_latest.csv (404)"
        assert result.frame.empty

    def test_superseded_load_is_discarded(self, tmp_path):
        (tmp_path / "rs_latest.csv").write_text(SAMPLE_CSV, encoding="utf-8")
        tracker = LoadTracker()

        def newer_load_starts(*args, **kwargs):
            tracker.begin()
            return SAMPLE_CSV

        with patch("smartscore.loader.fetch_text", side_effect=newer_load_starts):
            assert load_table("rs_latest.csv", tracker=tracker) is None

    def test_current_load_publishes(self, tmp_path):
        (tmp_path / "rs_latest.csv").write_text(SAMPLE_CSV, encoding="utf-8")
        result = load_table("rs_latest.csv", tracker=LoadTracker(), data_dir=tmp_path, base_url="")
        assert result is not None and result.ok


class TestLoadArtifact:
    def test_payload(self, tmp_path):
        (tmp_path / "d.json").write_text('{"asof": "2024-06-28"}', encoding="utf-8")
        assert load_artifact("d.json", data_dir=tmp_path, base_url="") == ({"asof": "2024-06-28"}, None)

    def test_error(self, tmp_path):
        payload, err = load_artifact("d.json", data_dir=tmp_path, base_url="")
        assert payload is None
        assert err == "d.json (404)"

    def test_unmounted_view_discards(self, tmp_path):
        (tmp_path / "d.json").write_text("{}", encoding="utf-8")
        tracker = LoadTracker()

        def view_left(*args, **kwargs):
            tracker.invalidate()
            return {}

        with patch("smartscore.loader.fetch_json", side_effect=view_left):
            assert load_artifact("d.json", tracker=tracker) is None


class TestLoadTracker:
    def test_latest_wins(self):
        t = LoadTracker()
        first = t.begin()
        second = t.begin()
        assert not t.is_current(first)
        assert t.is_current(second)

    def test_invalidate(self):
        t = LoadTracker()
        token = t.begin()
        t.invalidate()
        assert not t.is_current(token)
