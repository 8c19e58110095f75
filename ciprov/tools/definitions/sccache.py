"""sccache tool definition.

sccache is the compilation cache used by CI builds. Versions come from
crates.io; the binary comes prebuilt from GitHub releases, so installing it
takes seconds instead of a full ``cargo install``.

GitHub: https://github.com/mozilla/sccache
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from ciprov.core.result import Err, Ok, Result
from ciprov.platform.files import place_executable
from ciprov.tools.base import CrateTool, InstallActionError, ToolSpec
from ciprov.tools.installer import InstallError

if TYPE_CHECKING:
    from ciprov.tools.base import ToolContext

__all__ = ["SccacheTool"]


class SccacheTool(CrateTool):
    """sccache, installed from the release tarball for the host target.

    Release layout::

        sccache-<version>-<target>.tar.gz
        └── sccache-<version>-<target>/
            └── sccache
    """

    spec = ToolSpec(
        id="sccache",
        name="sccache",
        version_command=("sccache", "--version"),
        version_program="sccache",
    )
    crate = "sccache"
    repo = "mozilla/sccache"

    def asset_stem(self, version: str, target: str) -> str:
        return f"sccache-{version}-{target}"

    def download_url(self, version: str, target: str) -> str:
        asset = f"{self.asset_stem(version, target)}.tar.gz"
        return f"https://github.com/{self.repo}/releases/download/{version}/{asset}"

    def install(self, version: str, ctx: ToolContext) -> Result[Path, InstallActionError]:
        target = ctx.config.target
        url = self.download_url(version, target)
        ctx.console.debug(f"download {url}")

        dres = ctx.downloader.download(url)
        if isinstance(dres, Err):
            return dres

        extract_dir = ctx.config.work_dir / self.spec.id
        ires = ctx.installer.install(dres.value.path, extract_dir)
        if isinstance(ires, Err):
            return ires

        binary = extract_dir / self.asset_stem(version, target) / ctx.platform.exe_name("sccache")
        dest = ctx.config.bin_dir / ctx.platform.exe_name("sccache")
        if not binary.is_file():
            return Err(InstallError(archive=dres.value.path, message=f"Missing {binary.name}"))
        try:
            return Ok(place_executable(binary, dest))
        except OSError as e:
            return Err(InstallError(archive=dres.value.path, message=f"Cannot place {dest}: {e}"))
