"""Error presentation.

Centralized formatting and exit code mapping for provisioning failures.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ciprov.core.errors import ErrorCode
from ciprov.output.console import Style
from ciprov.platform.process import ProcessError
from ciprov.services.provision_errors import (
    CacheDirFailed,
    DownloadFailed,
    InstallFailed,
    ProbeFailed,
    ProvisionError,
    UnknownTool,
)
from ciprov.tools.http import HttpError

if TYPE_CHECKING:
    from ciprov.output.console import ConsoleProtocol

__all__ = ["describe_cause", "print_provision_error", "provision_error_exit_code"]


def describe_cause(cause: object) -> str:
    """One-line detail for an underlying error; commands include their stderr."""
    if isinstance(cause, ProcessError):
        stderr = cause.stderr.strip()
        return f"{cause}: {stderr}" if stderr else str(cause)
    return str(cause)


def print_provision_error(error: ProvisionError, console: ConsoleProtocol) -> None:
    """Print a provisioning failure with its underlying cause."""
    match error:
        case UnknownTool(tool_id=tool_id, available=available):
            console.error(f"unknown tool: {tool_id}")
            console.print(f"available: {', '.join(available)}", Style.DIM)
        case ProbeFailed(tool_id=tool_id, probe=probe, cause=cause):
            console.error(f"{tool_id}: could not determine {probe} version")
            console.print(describe_cause(cause), Style.DIM)
        case DownloadFailed(tool_id=tool_id, cause=cause):
            console.error(f"{tool_id}: download failed")
            console.print(describe_cause(cause), Style.DIM)
        case InstallFailed(tool_id=tool_id, cause=cause):
            console.error(f"{tool_id}: install failed")
            console.print(describe_cause(cause), Style.DIM)
        case CacheDirFailed(path=path, reason=reason):
            console.error(f"cannot create cache directory {path}")
            console.print(reason, Style.DIM)


def provision_error_exit_code(error: ProvisionError) -> int:
    """Exit code for a provisioning failure."""
    match error:
        case UnknownTool():
            return int(ErrorCode.USER_ERROR)
        case ProbeFailed(cause=HttpError()) | DownloadFailed():
            return int(ErrorCode.NETWORK_ERROR)
        case ProbeFailed() | InstallFailed(cause=ProcessError()):
            return int(ErrorCode.ENV_ERROR)
        case InstallFailed() | CacheDirFailed():
            return int(ErrorCode.IO_ERROR)
