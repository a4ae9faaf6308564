"""
QueryAdvisor CLI - heuristic SQL query analyzer.

Usage:
    queryadvisor analyze query.sql --registry indexes.yaml
    queryadvisor format query.sql
    queryadvisor demo
    queryadvisor --help
"""

from __future__ import annotations

import logging
from typing import Annotated, Optional

import typer
from rich.console import Console

from queryadvisor import __version__
from queryadvisor.cli.commands import analyze as analyze_commands

app = typer.Typer(
    name="queryadvisor",
    help="Heuristic SQL query analyzer: synthetic plan, index advice, statistics",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"QueryAdvisor version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-V", help="Enable debug logging."),
    ] = False,
) -> None:
    """QueryAdvisor - heuristic SQL query analyzer."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


analyze_commands.register(app)


if __name__ == "__main__":
    app()
