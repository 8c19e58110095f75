"""HTTP client abstraction for registry queries and release downloads.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: urllib implementation with optional Basic auth
- MockHttpClient: canned responses for tests
"""

from __future__ import annotations

import base64
import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ciprov import __version__
from ciprov.core.result import Err, Ok, Result

if TYPE_CHECKING:
    from ciprov.core.config import Credentials

__all__ = [
    "HttpClient",
    "RealHttpClient",
    "MockHttpClient",
    "HttpError",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network and parse errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations."""

    def get_json(
        self, url: str, *, auth: Credentials | None = None
    ) -> Result[object, HttpError]:
        """Fetch URL and decode the body as JSON (object or array)."""
        ...

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        """Stream URL into ``dest``."""
        ...


class RealHttpClient:
    """HTTP client using urllib.

    Redirects are followed (GitHub release assets redirect to a CDN). The
    Authorization header is only sent on the request it was given for.
    """

    def __init__(self, timeout: float = 30.0, user_agent: str = f"ciprov/{__version__}") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def _build(self, url: str, auth: Credentials | None) -> urllib.request.Request:
        headers = {"User-Agent": self.user_agent}
        if auth is not None:
            raw = f"{auth.user}:{auth.token}".encode()
            headers["Authorization"] = "Basic " + base64.b64encode(raw).decode("ascii")
        return urllib.request.Request(url, headers=headers)

    def _request(self, url: str, auth: Credentials | None) -> Result[bytes, HttpError]:
        try:
            with urllib.request.urlopen(
                self._build(url, auth),
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(response.read())
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

    def get_json(
        self, url: str, *, auth: Credentials | None = None
    ) -> Result[object, HttpError]:
        result = self._request(url, auth)
        if isinstance(result, Err):
            return result
        try:
            data: object = json.loads(result.value.decode("utf-8"))
        except UnicodeDecodeError as e:
            return Err(HttpError(url=url, status=0, message=f"Decode error: {e}"))
        except json.JSONDecodeError as e:
            return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}"))
        return Ok(data)

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        try:
            with urllib.request.urlopen(
                self._build(url, None),
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                dest.parent.mkdir(parents=True, exist_ok=True)
                with open(dest, "wb") as f:
                    while chunk := response.read(64 * 1024):
                        f.write(chunk)
                return Ok(dest)
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Download timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))


class MockHttpClient:
    """Mock HTTP client for testing.

    Unknown URLs answer 404. Every call is recorded in ``calls`` as
    ``(method, url)``; authenticated calls are listed in ``authed``.

    Usage:
        client = MockHttpClient()
        client.set_json("https://crates.io/api/v1/crates/sccache", {"crate": {...}})
        client.set_download("https://example.com/tool.tar.gz", archive_bytes)
    """

    def __init__(self) -> None:
        self._json: dict[str, object | HttpError] = {}
        self._downloads: dict[str, bytes | HttpError] = {}
        self.calls: list[tuple[str, str]] = []
        self.authed: list[str] = []

    def set_json(self, url: str, response: object | HttpError) -> None:
        self._json[url] = response

    def set_download(self, url: str, response: bytes | HttpError) -> None:
        self._downloads[url] = response

    def _record(self, method: str, url: str, auth: Credentials | None) -> None:
        self.calls.append((method, url))
        if auth is not None:
            self.authed.append(url)

    def get_json(
        self, url: str, *, auth: Credentials | None = None
    ) -> Result[object, HttpError]:
        self._record("get_json", url, auth)
        if url not in self._json:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        response = self._json[url]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        self._record("download", url, None)
        if url not in self._downloads:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        response = self._downloads[url]
        if isinstance(response, HttpError):
            return Err(response)

        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(response)
        return Ok(dest)

    def downloads(self) -> list[str]:
        """URLs passed to ``download`` so far."""
        return [url for method, url in self.calls if method == "download"]
