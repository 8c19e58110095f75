from __future__ import annotations

from pathlib import Path

import typer

from ciprov.cli.context import build_context
from ciprov.output.console import Style
from ciprov.output.errors import print_provision_error, provision_error_exit_code
from ciprov.services.provision import Action, ProvisionService
from ciprov.services.provision_errors import failed_step
from ciprov.tools.definitions import TOOL_IDS


def provision(
    only: list[str] | None = typer.Option(
        None,
        "--only",
        help=f"Provision only this tool (repeatable): {', '.join(TOOL_IDS)}.",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report versions without installing."),
    force: bool = typer.Option(False, "--force", help="Reinstall even if up to date."),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="TOML overrides (default: $CIPROV_CONFIG).",
        exists=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show command details."),
) -> None:
    """Install or reuse the CI toolchain (sccache, cargo-make, Vita SDK)."""
    ctx = build_context(config_path=config, verbose=verbose)
    service = ProvisionService(ctx.tools)

    report = service.run(only, dry_run=dry_run, force=force)
    if report.error is not None:
        print_provision_error(report.error, ctx.console)
        ctx.console.print(
            f"stopped at step '{failed_step(report.error)}' "
            f"({len(report.outcomes)} completed)",
            Style.DIM,
        )
        raise typer.Exit(code=provision_error_exit_code(report.error))

    reused = report.count(Action.REUSED)
    if dry_run:
        skipped = report.count(Action.SKIPPED)
        ctx.console.info(f"dry run: {skipped} would be installed, {reused} cached")
        return
    ctx.console.success(f"toolchain ready ({report.installed_count} installed, {reused} cached)")
