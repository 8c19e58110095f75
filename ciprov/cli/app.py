from __future__ import annotations

import typer

from ciprov import __version__
from ciprov.cli.commands.provision import provision
from ciprov.cli.commands.status import status


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


app.command()(provision)
app.command()(status)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_print_version,
        is_eager=True,
    ),
) -> None:
    """Provision the CI toolchain: reuse what is current, install what is not."""


def main() -> None:
    app()
