"""Status command - installed vs latest version of each tool."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ciprov.cli.context import build_context
from ciprov.core.result import Err
from ciprov.output.errors import print_provision_error, provision_error_exit_code
from ciprov.services.provision import ProvisionService, ToolStatus
from ciprov.tools.probes import NONE_VERSION

_console = Console(soft_wrap=True)


def render_status(rows: list[ToolStatus]) -> Table:
    table = Table(title="Toolchain status", title_justify="left")
    table.add_column("tool")
    table.add_column("installed")
    table.add_column("latest")
    table.add_column("state")

    for row in rows:
        if row.error is not None:
            state = f"[red]error[/red] {row.error}"
        elif row.up_to_date:
            state = "[green]up to date[/green]"
        elif row.installed == NONE_VERSION:
            state = "[yellow]missing[/yellow]"
        else:
            state = "[yellow]outdated[/yellow]"
        table.add_row(row.tool_id, row.installed or "?", row.latest or "?", state)
    return table


def status(
    config: Path | None = typer.Option(
        None,
        "--config",
        help="TOML overrides (default: $CIPROV_CONFIG).",
        exists=True,
        dir_okay=False,
    ),
    check: bool = typer.Option(
        False, "--check", help="Exit non-zero unless every tool is up to date."
    ),
) -> None:
    """Show installed and latest versions without installing anything."""
    ctx = build_context(config_path=config)
    result = ProvisionService(ctx.tools).status()
    if isinstance(result, Err):
        print_provision_error(result.error, ctx.console)
        raise typer.Exit(code=provision_error_exit_code(result.error))

    rows = result.value
    _console.print(render_status(rows))
    if check and not all(row.up_to_date for row in rows):
        raise typer.Exit(code=1)
