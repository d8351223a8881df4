"""Tests for the pure helpers behind the shared page chrome."""

import base64

from smartscore import settings
from smartscore.ui import logo_html, ticker_link, tier_pill


class TestLogo:
    def test_shipped_logo_exists(self):
        assert settings.LOGO_PATH.exists()

    def test_shipped_logo_renders_inline(self):
        html = logo_html(settings.LOGO_PATH)
        assert "data:image/svg+xml;base64," in html
        encoded = html.split("base64,", 1)[1].split('"', 1)[0]
        assert base64.b64decode(encoded) == settings.LOGO_PATH.read_bytes()

    def test_png_mime(self, tmp_path):
        p = tmp_path / "logo.png"
        p.write_bytes(b"\x89PNG\r\n")
        assert "data:image/png;base64," in logo_html(p, width=120)
        assert 'width="120"' in logo_html(p, width=120)

    def test_missing_file_renders_nothing(self, tmp_path):
        assert logo_html(tmp_path / "nope.svg") == ""


class TestSnippets:
    def test_ticker_link(self):
        html = ticker_link(" brk.b ")
        assert 'href="Ticker?symbol=BRK.B"' in html
        assert ">BRK.B</a>" in html
        assert ticker_link("") == ""

    def test_tier_pill(self):
        assert "Leadership" in tier_pill("Leadership")
        assert tier_pill(None) == ""
