"""Base definitions for provisioned tools.

This module defines the core abstractions:
- ToolSpec: Immutable tool metadata
- ToolContext: Collaborators a tool needs (config, runner, HTTP, console)
- Tool: Abstract base class with the three probes/actions
- CrateTool: Base for tools published on crates.io
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, TypeAlias

from ciprov.core.config import LatestSource
from ciprov.core.result import Err, Ok, Result
from ciprov.platform.detection import Platform, detect_platform
from ciprov.tools.api import crate_latest_cargo_search, crate_latest_crates_io
from ciprov.tools.download import Downloader
from ciprov.tools.installer import Installer
from ciprov.tools.probes import NONE_VERSION, ProbeError, parse_version_output

if TYPE_CHECKING:
    from ciprov.core.config import ProvisionConfig
    from ciprov.output.console import ConsoleProtocol
    from ciprov.platform.process import CommandRunner, ProcessError
    from ciprov.tools.http import HttpClient, HttpError
    from ciprov.tools.installer import InstallError

__all__ = [
    "ToolSpec",
    "ToolContext",
    "Tool",
    "CrateTool",
    "LatestError",
    "InstallActionError",
]

LatestError: TypeAlias = "HttpError | ProcessError | ProbeError"
InstallActionError: TypeAlias = "HttpError | ProcessError | InstallError"

_TOOL_ID = re.compile(r"^[a-z][a-z0-9-]*$")


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """Immutable tool metadata.

    Attributes:
        id: Unique identifier, also the CLI name (e.g. "sccache", "cargo-make")
        name: Human-readable name
        version_command: Command printing the installed version, empty if none
        version_program: Program name that command prints before the version
    """

    id: str
    name: str
    version_command: tuple[str, ...] = ()
    version_program: str = ""

    def __post_init__(self) -> None:
        if not _TOOL_ID.match(self.id):
            raise ValueError(f"Tool id must be lowercase kebab-case: {self.id!r}")
        if not self.name:
            raise ValueError("Tool name cannot be empty")
        if self.version_command and not self.version_program:
            raise ValueError(f"{self.id}: version_command needs version_program")


@dataclass(slots=True)
class ToolContext:
    """Everything a tool touches outside its own definition.

    Build one per run with ``ToolContext.create``; tests pass mocks for
    ``runner`` and ``http``.
    """

    config: ProvisionConfig
    runner: CommandRunner
    http: HttpClient
    console: ConsoleProtocol
    platform: Platform = field(default_factory=detect_platform)
    downloader: Downloader = field(init=False)
    installer: Installer = field(default_factory=Installer)

    def __post_init__(self) -> None:
        self.downloader = Downloader(self.http, self.config.work_dir / "downloads")

    @classmethod
    def create(
        cls,
        config: ProvisionConfig,
        console: ConsoleProtocol,
        *,
        runner: CommandRunner | None = None,
        http: HttpClient | None = None,
    ) -> ToolContext:
        from ciprov.platform.process import SubprocessRunner
        from ciprov.tools.http import RealHttpClient

        return cls(
            config=config,
            runner=runner or SubprocessRunner(),
            http=http or RealHttpClient(timeout=config.http_timeout),
            console=console,
        )


class Tool(ABC):
    """Abstract base class for provisioned tools.

    Subclasses define ``spec`` plus:
    - latest_version(): query the remote index
    - install(): fetch and place the given version

    ``installed_version`` defaults to running ``spec.version_command``.
    """

    spec: ToolSpec

    def installed_version(self, ctx: ToolContext) -> Result[str, ProbeError]:
        """Version currently installed, or ``NONE_VERSION``.

        A command that is missing or exits non-zero means "not installed".
        Output that does not match the expected format is an error.
        """
        if not self.spec.version_command:
            return Ok(NONE_VERSION)
        output = ctx.runner.run(list(self.spec.version_command))
        if isinstance(output, Err):
            ctx.console.debug(f"{' '.join(self.spec.version_command)}: {output.error}")
            return Ok(NONE_VERSION)
        return parse_version_output(output.value, self.spec.version_program)

    @abstractmethod
    def latest_version(self, ctx: ToolContext) -> Result[str, LatestError]:
        """Latest version available from the remote source."""
        ...

    @abstractmethod
    def install(self, version: str, ctx: ToolContext) -> Result[Path, InstallActionError]:
        """Install ``version``.

        Returns:
            Ok with the installed binary or directory, or Err
        """
        ...


class CrateTool(Tool):
    """Tool whose versions are published on crates.io.

    Subclasses set ``crate``; the lookup backend follows
    ``config.latest_source``.
    """

    crate: str

    def latest_version(self, ctx: ToolContext) -> Result[str, LatestError]:
        match ctx.config.latest_source:
            case LatestSource.CRATES_IO:
                return crate_latest_crates_io(ctx.http, self.crate)
            case LatestSource.CARGO:
                return crate_latest_cargo_search(ctx.runner, self.crate)
