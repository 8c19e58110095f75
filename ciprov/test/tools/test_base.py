"""Tests for ciprov.tools.base module."""

from __future__ import annotations

from pathlib import Path

import pytest

from ciprov.core.config import LatestSource, ProvisionConfig
from ciprov.core.result import Err, Ok, Result
from ciprov.output.console import MockConsole
from ciprov.platform.detection import Platform
from ciprov.platform.process import MockProcessRunner, SubprocessRunner
from ciprov.tools.api import CRATES_IO_API
from ciprov.tools.base import (
    CrateTool,
    InstallActionError,
    LatestError,
    Tool,
    ToolContext,
    ToolSpec,
)
from ciprov.tools.http import MockHttpClient, RealHttpClient
from ciprov.tools.probes import NONE_VERSION


def _config(tmp_path: Path, **overrides: object) -> ProvisionConfig:
    values: dict[str, object] = {
        "cache_dir": tmp_path / "cache",
        "sdk_dir": tmp_path / "vitasdk",
        "bin_dir": tmp_path / "bin",
        "work_dir": tmp_path / "work",
        "target": "x86_64-unknown-linux-musl",
    }
    values.update(overrides)
    return ProvisionConfig(**values)  # type: ignore[arg-type]


def _ctx(tmp_path: Path, **overrides: object) -> ToolContext:
    return ToolContext(
        config=_config(tmp_path, **overrides),
        runner=MockProcessRunner(),
        http=MockHttpClient(),
        console=MockConsole(),
        platform=Platform.LINUX,
    )


class DemoTool(CrateTool):
    spec = ToolSpec(
        id="demo",
        name="Demo",
        version_command=("demo", "--version"),
        version_program="demo",
    )
    crate = "demo"

    def install(self, version: str, ctx: ToolContext) -> Result[Path, InstallActionError]:
        return Ok(ctx.config.bin_dir / "demo")


class NoProbeTool(Tool):
    spec = ToolSpec(id="no-probe", name="No probe")

    def latest_version(self, ctx: ToolContext) -> Result[str, LatestError]:
        return Ok("1")

    def install(self, version: str, ctx: ToolContext) -> Result[Path, InstallActionError]:
        return Ok(ctx.config.bin_dir)


class TestToolSpec:
    def test_valid(self) -> None:
        spec = ToolSpec(
            id="cargo-make", name="cargo-make", version_command=("x",), version_program="x"
        )
        assert spec.id == "cargo-make"

    @pytest.mark.parametrize("tool_id", ["", "Sccache", "1tool", "cargo_make"])
    def test_invalid_id(self, tool_id: str) -> None:
        with pytest.raises(ValueError, match="kebab-case"):
            ToolSpec(id=tool_id, name="x")

    def test_empty_name(self) -> None:
        with pytest.raises(ValueError, match="name"):
            ToolSpec(id="x", name="")

    def test_command_needs_program(self) -> None:
        with pytest.raises(ValueError, match="version_program"):
            ToolSpec(id="x", name="x", version_command=("x", "--version"))


class TestToolContext:
    def test_downloader_in_work_dir(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path)
        assert ctx.downloader.dest_dir == tmp_path / "work" / "downloads"

    def test_create_uses_real_collaborators(self, tmp_path: Path) -> None:
        ctx = ToolContext.create(_config(tmp_path, http_timeout=7.0), MockConsole())

        assert isinstance(ctx.runner, SubprocessRunner)
        assert isinstance(ctx.http, RealHttpClient)
        assert ctx.http.timeout == 7.0

    def test_create_accepts_overrides(self, tmp_path: Path) -> None:
        runner = MockProcessRunner()
        http = MockHttpClient()

        ctx = ToolContext.create(_config(tmp_path), MockConsole(), runner=runner, http=http)

        assert ctx.runner is runner
        assert ctx.http is http


class TestInstalledVersion:
    def test_parses_output(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path)
        assert isinstance(ctx.runner, MockProcessRunner)
        ctx.runner.set_output(["demo", "--version"], "demo 1.2.3\n")

        assert DemoTool().installed_version(ctx) == Ok("1.2.3")

    def test_missing_command_is_none(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path)

        assert DemoTool().installed_version(ctx) == Ok(NONE_VERSION)

    def test_failing_command_is_none(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path)
        assert isinstance(ctx.runner, MockProcessRunner)
        ctx.runner.set_failure(["demo", "--version"], returncode=2)

        assert DemoTool().installed_version(ctx) == Ok(NONE_VERSION)

    def test_unexpected_output_is_error(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path)
        assert isinstance(ctx.runner, MockProcessRunner)
        ctx.runner.set_output(["demo", "--version"], "error: no such subcommand\n")

        assert isinstance(DemoTool().installed_version(ctx), Err)

    def test_no_version_command(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path)

        assert NoProbeTool().installed_version(ctx) == Ok(NONE_VERSION)
        assert isinstance(ctx.runner, MockProcessRunner)
        assert ctx.runner.calls == []


class TestCrateLatestVersion:
    def test_cargo_search_backend(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path)
        assert isinstance(ctx.runner, MockProcessRunner)
        ctx.runner.set_output(["cargo", "search", "-q", "demo"], 'demo = "2.0.0"\n')

        assert DemoTool().latest_version(ctx) == Ok("2.0.0")

    def test_crates_io_backend(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path, latest_source=LatestSource.CRATES_IO)
        assert isinstance(ctx.http, MockHttpClient)
        ctx.http.set_json(f"{CRATES_IO_API}/demo", {"crate": {"max_stable_version": "2.1.0"}})

        assert DemoTool().latest_version(ctx) == Ok("2.1.0")
        assert isinstance(ctx.runner, MockProcessRunner)
        assert ctx.runner.calls == []
