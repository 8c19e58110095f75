from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from ciprov.core.config import ProvisionConfig, load_config
from ciprov.core.errors import ErrorCode
from ciprov.core.result import Err
from ciprov.output.console import ConsoleProtocol, RichConsole
from ciprov.tools.base import ToolContext


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: ProvisionConfig
    console: ConsoleProtocol
    tools: ToolContext


def build_context(*, config_path: Path | None = None, verbose: bool = False) -> CLIContext:
    """Read configuration from the environment once and wire the collaborators."""
    console = RichConsole(verbose=verbose)

    config_result = load_config(os.environ, config_path)
    if isinstance(config_result, Err):
        console.error(f"invalid configuration: {config_result.error}")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    config = config_result.value
    return CLIContext(
        config=config,
        console=console,
        tools=ToolContext.create(config, console),
    )
