"""Provisioning failure variants.

Each variant names the step that failed so the CLI can say which tool broke
the run and pick an exit code.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from ciprov.platform.process import ProcessError
from ciprov.tools.http import HttpError
from ciprov.tools.installer import InstallError
from ciprov.tools.probes import ProbeError


@dataclass(frozen=True, slots=True)
class UnknownTool:
    tool_id: str
    available: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ProbeFailed:
    tool_id: str
    probe: Literal["installed", "latest"]
    cause: HttpError | ProcessError | ProbeError


@dataclass(frozen=True, slots=True)
class DownloadFailed:
    tool_id: str
    cause: HttpError


@dataclass(frozen=True, slots=True)
class InstallFailed:
    tool_id: str
    cause: ProcessError | InstallError


@dataclass(frozen=True, slots=True)
class CacheDirFailed:
    path: Path
    reason: str


ProvisionError = UnknownTool | ProbeFailed | DownloadFailed | InstallFailed | CacheDirFailed


def failed_step(error: ProvisionError) -> str:
    """Name of the step that produced ``error``."""
    match error:
        case CacheDirFailed():
            return "cache-dir"
        case UnknownTool():
            return "select"
        case ProbeFailed(tool_id=tool_id):
            return tool_id
        case DownloadFailed(tool_id=tool_id) | InstallFailed(tool_id=tool_id):
            return tool_id
