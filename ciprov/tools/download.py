"""Release archive downloads.

Archives land in the work directory under a name derived from the URL. The
URL of a release asset carries its version, so an archive already present from
an interrupted earlier run is reused instead of fetched again.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from ciprov.core.result import Err, Ok, Result
from ciprov.tools.http import HttpError

if TYPE_CHECKING:
    from ciprov.tools.http import HttpClient

__all__ = ["Downloader", "DownloadResult"]


@dataclass(frozen=True, slots=True)
class DownloadResult:
    """Result of a download.

    Attributes:
        path: Local archive path
        from_cache: True if no network transfer happened
        size: File size in bytes
    """

    path: Path
    from_cache: bool
    size: int


class Downloader:
    """Downloads archives into ``dest_dir``.

    Usage:
        downloader = Downloader(http, config.work_dir / "downloads")
        result = downloader.download(url)
        if isinstance(result, Ok):
            print(result.value.path)
    """

    def __init__(self, http: HttpClient, dest_dir: Path) -> None:
        self._http = http
        self._dest_dir = dest_dir

    @property
    def dest_dir(self) -> Path:
        return self._dest_dir

    def cache_key(self, url: str) -> str:
        """File name for ``url``: short URL hash plus the original file name.

        The original name is kept last so the archive suffix (``.tar.bz2``)
        still selects the extractor.
        """
        filename = PurePosixPath(urlparse(url).path).name or "download"
        url_hash = hashlib.sha256(url.encode()).hexdigest()[:8]
        return f"{url_hash}_{filename}"

    def path_for(self, url: str) -> Path:
        return self._dest_dir / self.cache_key(url)

    def download(self, url: str) -> Result[DownloadResult, HttpError]:
        """Download ``url`` unless a complete copy is already present.

        Returns:
            Ok with DownloadResult, or Err with HttpError
        """
        path = self.path_for(url)

        if path.exists():
            return Ok(DownloadResult(path=path, from_cache=True, size=path.stat().st_size))

        self._dest_dir.mkdir(parents=True, exist_ok=True)
        # Write under a temporary name so an interrupted transfer is never
        # mistaken for a complete archive on the next run.
        partial = path.with_name(path.name + ".part")
        result = self._http.download(url, partial)
        if isinstance(result, Err):
            partial.unlink(missing_ok=True)
            return result

        partial.replace(path)
        return Ok(DownloadResult(path=path, from_cache=False, size=path.stat().st_size))
