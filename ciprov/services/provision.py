"""Install-or-reuse provisioning.

``VersionedToolInstaller.ensure_installed`` is the routine every tool goes
through: probe the installed version, probe the latest version, report both,
and install only when they differ. ``ProvisionService`` runs the tools in
order and stops at the first failure.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import TYPE_CHECKING

from ciprov.core.result import Err, Ok, Result
from ciprov.output.console import Style
from ciprov.services.provision_errors import (
    CacheDirFailed,
    DownloadFailed,
    InstallFailed,
    ProbeFailed,
    ProvisionError,
    UnknownTool,
)
from ciprov.tools.definitions import ALL_TOOLS
from ciprov.tools.http import HttpError

if TYPE_CHECKING:
    from ciprov.core.config import ProvisionConfig
    from ciprov.tools.base import Tool, ToolContext

__all__ = [
    "Action",
    "InstallOutcome",
    "ProvisionReport",
    "ProvisionService",
    "ToolStatus",
    "VersionedToolInstaller",
    "ensure_cache_dir",
]

# The compilation cache directory is prepared right after the cache tool.
CACHE_DIR_AFTER = "sccache"


class Action(Enum):
    """What ``ensure_installed`` did."""

    REUSED = auto()
    INSTALLED = auto()
    SKIPPED = auto()

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, slots=True)
class InstallOutcome:
    """Result of one ``ensure_installed`` call.

    Attributes:
        tool_id: Tool identifier
        installed: Version found before the step ("none" if absent)
        latest: Latest available version
        action: REUSED, INSTALLED, or SKIPPED (dry run)
        path: Installed binary or directory, when an install ran
    """

    tool_id: str
    installed: str
    latest: str
    action: Action
    path: Path | None = None


def _empty_outcomes() -> list[InstallOutcome]:
    return []


@dataclass
class ProvisionReport:
    """Outcome of a provisioning run.

    ``outcomes`` holds every step that completed before ``error`` (if any).
    """

    outcomes: list[InstallOutcome] = field(default_factory=_empty_outcomes)
    error: ProvisionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def count(self, action: Action) -> int:
        return sum(1 for o in self.outcomes if o.action == action)

    @property
    def installed_count(self) -> int:
        return self.count(Action.INSTALLED)


@dataclass(frozen=True, slots=True)
class ToolStatus:
    """Installed vs latest version of one tool, without installing anything."""

    tool_id: str
    installed: str | None
    latest: str | None
    error: str | None = None

    @property
    def up_to_date(self) -> bool:
        return self.error is None and self.installed == self.latest


def ensure_cache_dir(config: ProvisionConfig) -> Result[Path, CacheDirFailed]:
    """Create the compilation cache directory if it is absent."""
    try:
        config.cache_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return Err(CacheDirFailed(path=config.cache_dir, reason=str(e)))
    return Ok(config.cache_dir)


class VersionedToolInstaller:
    """Brings one tool up to its latest version, reusing a matching install."""

    def __init__(self, ctx: ToolContext) -> None:
        self._ctx = ctx

    def probe(self, tool: Tool) -> Result[tuple[str, str], ProvisionError]:
        """Return (installed, latest) for ``tool``."""
        tool_id = tool.spec.id

        installed = tool.installed_version(self._ctx)
        if isinstance(installed, Err):
            return Err(ProbeFailed(tool_id=tool_id, probe="installed", cause=installed.error))

        latest = tool.latest_version(self._ctx)
        if isinstance(latest, Err):
            return Err(ProbeFailed(tool_id=tool_id, probe="latest", cause=latest.error))

        return Ok((installed.value, latest.value))

    def ensure_installed(
        self,
        tool: Tool,
        *,
        dry_run: bool = False,
        force: bool = False,
    ) -> Result[InstallOutcome, ProvisionError]:
        """Install the latest version of ``tool`` unless it is already installed.

        Versions are compared as opaque strings; any difference, including
        the "none" sentinel, triggers exactly one install.

        Args:
            tool: Tool to provision
            dry_run: Probe and report, never install
            force: Install even when the versions match

        Returns:
            Ok with InstallOutcome, or Err naming the failed probe or action
        """
        console = self._ctx.console
        tool_id = tool.spec.id

        console.print(f"Fetching latest available '{tool_id}' version...", Style.DIM)
        probed = self.probe(tool)
        if isinstance(probed, Err):
            return probed
        installed, latest = probed.value
        console.print(f"'{tool_id}' installed: {installed}, latest: {latest}")

        if installed == latest and not force:
            console.success(f"Using cached '{tool_id}'")
            return Ok(InstallOutcome(tool_id, installed, latest, Action.REUSED))

        if dry_run:
            console.info(f"would install '{tool_id}' {latest}")
            return Ok(InstallOutcome(tool_id, installed, latest, Action.SKIPPED))

        console.print(f"Installing latest '{tool_id}' ({latest})")
        result = tool.install(latest, self._ctx)
        if isinstance(result, Err):
            cause = result.error
            if isinstance(cause, HttpError):
                return Err(DownloadFailed(tool_id=tool_id, cause=cause))
            return Err(InstallFailed(tool_id=tool_id, cause=cause))

        console.success(f"Installed '{tool_id}' {latest} -> {result.value}")
        return Ok(InstallOutcome(tool_id, installed, latest, Action.INSTALLED, result.value))


class ProvisionService:
    """Runs the provisioning steps in order, fail-fast.

    Usage:
        ctx = ToolContext.create(config, RichConsole())
        report = ProvisionService(ctx).run()
        if not report.ok:
            ...
    """

    def __init__(self, ctx: ToolContext, tools: Sequence[Tool] = ALL_TOOLS) -> None:
        self._ctx = ctx
        self._tools = tuple(tools)
        self._installer = VersionedToolInstaller(ctx)

    @property
    def tool_ids(self) -> tuple[str, ...]:
        return tuple(tool.spec.id for tool in self._tools)

    def select(self, only: Sequence[str] | None = None) -> Result[list[Tool], UnknownTool]:
        """Tools to run, in provisioning order. ``only`` restricts by id."""
        if not only:
            return Ok(list(self._tools))
        for tool_id in only:
            if tool_id not in self.tool_ids:
                return Err(UnknownTool(tool_id=tool_id, available=self.tool_ids))
        return Ok([tool for tool in self._tools if tool.spec.id in only])

    def run(
        self,
        only: Sequence[str] | None = None,
        *,
        dry_run: bool = False,
        force: bool = False,
    ) -> ProvisionReport:
        report = ProvisionReport()

        selected = self.select(only)
        if isinstance(selected, Err):
            report.error = selected.error
            return report

        console = self._ctx.console
        for tool in selected.value:
            console.header(f"Setup {tool.spec.name}")
            outcome = self._installer.ensure_installed(tool, dry_run=dry_run, force=force)
            if isinstance(outcome, Err):
                report.error = outcome.error
                return report
            report.outcomes.append(outcome.value)

            if tool.spec.id == CACHE_DIR_AFTER:
                if dry_run:
                    console.debug(f"would create {self._ctx.config.cache_dir}")
                    continue
                cache = ensure_cache_dir(self._ctx.config)
                if isinstance(cache, Err):
                    report.error = cache.error
                    return report
                console.debug(f"cache directory: {cache.value}")

        return report

    def status(self, only: Sequence[str] | None = None) -> Result[list[ToolStatus], UnknownTool]:
        """Probe every selected tool without installing.

        A failing probe is reported on its row instead of aborting, so one
        unreachable registry does not hide the state of the other tools.
        """
        selected = self.select(only)
        if isinstance(selected, Err):
            return selected

        rows: list[ToolStatus] = []
        for tool in selected.value:
            installed = tool.installed_version(self._ctx)
            if isinstance(installed, Err):
                rows.append(ToolStatus(tool.spec.id, None, None, str(installed.error)))
                continue
            latest = tool.latest_version(self._ctx)
            if isinstance(latest, Err):
                rows.append(ToolStatus(tool.spec.id, installed.value, None, str(latest.error)))
                continue
            rows.append(ToolStatus(tool.spec.id, installed.value, latest.value))
        return Ok(rows)

