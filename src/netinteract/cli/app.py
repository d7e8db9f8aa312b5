"""netinteract CLI — Main Typer entry point.

Registers all subcommands and provides --version / --verbose global options.
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console

from netinteract import __version__

console = Console()

TAGLINE = "Declarative, target-graph web interaction scripts."

# ── Version callback ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"netinteract [bold]v{__version__}[/bold]")
        console.print(f"  {TAGLINE}", style="dim")
        raise typer.Exit()


# ── Main app ──────────────────────────────────────────────────────────────

app = typer.Typer(
    name="netinteract",
    help=TAGLINE,
    rich_markup_mode="rich",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show netinteract version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
) -> None:
    """netinteract -- run YAML interaction scripts against web sites."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s  %(message)s")


# ── Register subcommands ──────────────────────────────────────────────────

from netinteract.cli.run import run  # noqa: E402
from netinteract.cli.validate import validate  # noqa: E402

app.command(name="run", help="Run a script and print its outputs.")(run)
app.command(name="validate", help="Load a script and report problems without running it.")(validate)
