"""Remote version and release queries.

Pure functions over an injected HttpClient / CommandRunner:
- crate_latest_cargo_search: ``cargo search`` against the default registry
- crate_latest_crates_io: crates.io JSON API
- github_release_asset_url: first release asset matching a pattern
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from ciprov.core.result import Err, Ok, Result
from ciprov.core.structured import as_obj_list, as_str_dict, get_list, get_str, get_table
from ciprov.platform.process import ProcessError
from ciprov.tools.http import HttpError
from ciprov.tools.probes import ProbeError, parse_registry_search

if TYPE_CHECKING:
    from ciprov.core.config import Credentials
    from ciprov.platform.process import CommandRunner
    from ciprov.tools.http import HttpClient

__all__ = [
    "CRATES_IO_API",
    "GITHUB_API",
    "crate_latest_cargo_search",
    "crate_latest_crates_io",
    "github_release_asset_url",
]

CRATES_IO_API = "https://crates.io/api/v1/crates"
GITHUB_API = "https://api.github.com"


def crate_latest_cargo_search(
    runner: CommandRunner, crate: str
) -> Result[str, ProcessError | ProbeError]:
    """Latest published version of ``crate`` via ``cargo search``.

    Example:
        >>> crate_latest_cargo_search(SubprocessRunner(), "sccache")
        Ok('0.2.15')
    """
    output = runner.run(["cargo", "search", "-q", crate])
    if isinstance(output, Err):
        return output
    return parse_registry_search(output.value, crate)


def crate_latest_crates_io(http: HttpClient, crate: str) -> Result[str, HttpError]:
    """Latest stable version of ``crate`` from the crates.io API.

    Uses ``crate.max_stable_version`` and falls back to ``max_version`` for
    crates that never published a stable release.
    """
    url = f"{CRATES_IO_API}/{crate}"
    result = http.get_json(url)
    if isinstance(result, Err):
        return result

    data = as_str_dict(result.value)
    info = get_table(data, "crate") if data is not None else None
    if info is None:
        return Err(HttpError(url=url, status=0, message="Missing 'crate' object in response"))

    version = get_str(info, "max_stable_version") or get_str(info, "max_version")
    if version is None:
        return Err(HttpError(url=url, status=0, message="Missing version in response"))
    return Ok(version)


def github_release_asset_url(
    http: HttpClient,
    repo: str,
    pattern: str,
    *,
    auth: Credentials | None = None,
) -> Result[tuple[str, str], HttpError]:
    """Find the newest release asset matching ``pattern``.

    Releases are scanned newest first, as the API lists them. Within a
    release, the first asset whose file name contains ``pattern`` wins. A
    release whose tag contains ``pattern`` but none of whose file names do
    yields its asset when it has exactly one. Autobuilds publish one release
    per host, e.g. ``master-linux-v2.520`` holding only
    ``vitasdk-x86_64-linux-gnu-<date>.tar.bz2``. The tag alone never picks
    between assets of a mixed release.

    Args:
        http: HTTP client
        repo: Repository in "owner/repo" format
        pattern: Substring of the asset file name or release tag
        auth: Credentials; authenticated requests get a higher rate limit

    Returns:
        Ok with (tag_name, download_url), or Err with HttpError
    """
    url = f"{GITHUB_API}/repos/{repo}/releases"
    result = http.get_json(url, auth=auth)
    if isinstance(result, Err):
        return result

    releases = as_obj_list(result.value)
    if releases is None:
        return Err(HttpError(url=url, status=0, message="Expected JSON array of releases"))

    for release_obj in releases:
        release = as_str_dict(release_obj)
        if release is None:
            continue
        tag = get_str(release, "tag_name")

        assets: list[tuple[str, str]] = []
        for asset_obj in get_list(release, "assets") or []:
            asset = as_str_dict(asset_obj)
            if asset is None:
                continue
            download_url = get_str(asset, "browser_download_url")
            if download_url is None:
                continue
            filename = get_str(asset, "name") or PurePosixPath(urlparse(download_url).path).name
            assets.append((filename, download_url))

        for filename, download_url in assets:
            if pattern in filename:
                return Ok((tag or filename, download_url))
        if tag is not None and pattern in tag and len(assets) == 1:
            return Ok((tag, assets[0][1]))

    return Err(HttpError(url=url, status=0, message=f"No release asset matching {pattern!r}"))
