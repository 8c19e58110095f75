"""Tests for ciprov.tools.http module."""

from __future__ import annotations

import base64
from pathlib import Path

from ciprov.core.config import Credentials
from ciprov.core.result import Err, Ok
from ciprov.tools.http import HttpClient, HttpError, MockHttpClient, RealHttpClient


class TestHttpError:
    def test_str_with_status(self) -> None:
        error = HttpError(url="https://x/y", status=404, message="Not Found")
        assert str(error) == "HTTP 404: Not Found (https://x/y)"

    def test_str_without_status(self) -> None:
        error = HttpError(url="https://x/y", status=0, message="timed out")
        assert str(error) == "timed out (https://x/y)"


class TestRealHttpClient:
    """Request construction only; no network."""

    def test_is_http_client(self) -> None:
        assert isinstance(RealHttpClient(), HttpClient)

    def test_user_agent(self) -> None:
        request = RealHttpClient(user_agent="ciprov/test")._build("https://x", None)

        assert request.get_header("User-agent") == "ciprov/test"
        assert request.get_header("Authorization") is None

    def test_basic_auth(self) -> None:
        request = RealHttpClient()._build("https://x", Credentials(user="ci", token="tok"))

        expected = base64.b64encode(b"ci:tok").decode("ascii")
        assert request.get_header("Authorization") == f"Basic {expected}"

    def test_timeout(self) -> None:
        assert RealHttpClient(timeout=5).timeout == 5


class TestMockHttpClient:
    def test_unknown_url_is_404(self) -> None:
        result = MockHttpClient().get_json("https://x")

        assert isinstance(result, Err)
        assert result.error.status == 404

    def test_json(self) -> None:
        http = MockHttpClient()
        http.set_json("https://x/json", {"a": 1})

        assert http.get_json("https://x/json") == Ok({"a": 1})
        assert http.calls == [("get_json", "https://x/json")]

    def test_download(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        http.set_download("https://x/a.tar.gz", b"data")

        result = http.download("https://x/a.tar.gz", tmp_path / "d" / "a")

        assert result == Ok(tmp_path / "d" / "a")
        assert (tmp_path / "d" / "a").read_bytes() == b"data"
        assert http.downloads() == ["https://x/a.tar.gz"]

    def test_configured_error(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        error = HttpError(url="https://x/a", status=500, message="boom")
        http.set_download("https://x/a", error)

        assert http.download("https://x/a", tmp_path / "a") == Err(error)
