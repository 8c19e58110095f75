"""cargo-make tool definition.

cargo-make is the task runner the CI jobs call (``cargo make ci-flow``). It
has no prebuilt binaries for every target, so it is built from source with
``cargo install``. A debug build is enough for a task runner and compiles much
faster than a release build.

Crate: https://crates.io/crates/cargo-make
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from ciprov.core.result import Err, Ok, Result
from ciprov.tools.base import CrateTool, InstallActionError, ToolSpec

if TYPE_CHECKING:
    from ciprov.tools.base import ToolContext

__all__ = ["CargoMakeTool"]


class CargoMakeTool(CrateTool):
    """cargo-make, built from source into ``bin_dir``.

    ``cargo install --root R`` writes binaries to ``R/bin``, so the root is the
    parent of ``bin_dir`` (``$CARGO_HOME`` by default).
    """

    spec = ToolSpec(
        id="cargo-make",
        name="cargo-make",
        version_command=("cargo", "make", "--version"),
        version_program="cargo-make",
    )
    crate = "cargo-make"

    def install_command(self, version: str, bin_dir: Path) -> list[str]:
        # --force replaces an older build in place.
        return [
            "cargo",
            "install",
            "--debug",
            "--force",
            "--root",
            str(bin_dir.parent),
            "--version",
            version,
            self.crate,
        ]

    def install(self, version: str, ctx: ToolContext) -> Result[Path, InstallActionError]:
        result = ctx.runner.run_live(self.install_command(version, ctx.config.bin_dir))
        if isinstance(result, Err):
            return result
        return Ok(ctx.config.bin_dir / ctx.platform.exe_name("cargo-make"))
