"""Vita SDK tool definition.

The SDK is published as nightly autobuild releases on GitHub. Each release
carries one bzip2 tarball per host; the Linux one is picked by matching its
download URL against ``sdk.asset_pattern``. The tarball holds a single
top-level ``vitasdk/`` directory, stripped on extraction.

The SDK cannot report its own version, so the release tag is recorded in the
SDK directory after a successful install.

GitHub: https://github.com/vitasdk/autobuilds
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from ciprov.core.result import Err, Ok, Result
from ciprov.tools.api import github_release_asset_url
from ciprov.tools.base import InstallActionError, LatestError, Tool, ToolSpec
from ciprov.tools.http import HttpError
from ciprov.tools.installer import InstallError
from ciprov.tools.probes import NONE_VERSION, ProbeError
from ciprov.tools.state import get_installed_version, set_installed_version

if TYPE_CHECKING:
    from ciprov.tools.base import ToolContext

__all__ = ["VitaSdkTool"]


class VitaSdkTool(Tool):
    """Vita SDK, extracted into ``$VITASDK``."""

    spec = ToolSpec(id="vitasdk", name="Vita SDK")

    def __init__(self) -> None:
        # tag -> asset URL, filled by latest_version() for install().
        self._assets: dict[str, str] = {}

    def _lookup(self, ctx: ToolContext) -> Result[tuple[str, str], HttpError]:
        sdk = ctx.config.sdk
        return github_release_asset_url(
            ctx.http, sdk.repo, sdk.asset_pattern, auth=ctx.config.credentials
        )

    def installed_version(self, ctx: ToolContext) -> Result[str, ProbeError]:
        version = get_installed_version(ctx.config.sdk_dir, self.spec.id)
        return Ok(version or NONE_VERSION)

    def latest_version(self, ctx: ToolContext) -> Result[str, LatestError]:
        result = self._lookup(ctx)
        if isinstance(result, Err):
            return result
        tag, url = result.value
        self._assets[tag] = url
        return Ok(tag)

    def install(self, version: str, ctx: ToolContext) -> Result[Path, InstallActionError]:
        url = self._assets.get(version)
        if url is None:
            lookup = self._lookup(ctx)
            if isinstance(lookup, Err):
                return lookup
            tag, url = lookup.value
            if tag != version:
                return Err(
                    HttpError(url=url, status=0, message=f"Release {version} superseded by {tag}")
                )

        ctx.console.print(f"Installing toolchain from {url}...")
        dres = ctx.downloader.download(url)
        if isinstance(dres, Err):
            return dres

        sdk_dir = ctx.config.sdk_dir
        # Extract over the existing tree; packages added to the SDK later (vdpm)
        # live in the same directory.
        ires = ctx.installer.install(dres.value.path, sdk_dir, strip_components=1, clean=False)
        if isinstance(ires, Err):
            return ires

        try:
            set_installed_version(sdk_dir, self.spec.id, version)
        except OSError as e:
            return Err(InstallError(archive=dres.value.path, message=f"Cannot record version: {e}"))
        return Ok(sdk_dir)
