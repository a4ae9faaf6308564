"""Core commands: analyze, format, demo."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from queryadvisor.analyzer.models import Severity
from queryadvisor.config import get_config
from queryadvisor.demo import DEMO_QUERY, DEMO_REGISTRY
from queryadvisor.engine import AnalysisBundle, AnalysisService
from queryadvisor.exceptions import QueryAdvisorError
from queryadvisor.formatter import format_sql
from queryadvisor.output.renderers import STATISTICS_LABELS, OutputFormat, render
from queryadvisor.registry import IndexRegistrySnapshot, load_registry

console = Console()
error_console = Console(stderr=True)

SEVERITY_STYLES = {
    Severity.HIGH: "red bold",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "blue",
}


def _read_sql(sql_file: str) -> str:
    if sql_file == "-":
        return sys.stdin.read()
    path = Path(sql_file)
    if not path.is_file():
        error_console.print(f"[red]Error:[/red] SQL file not found: {escape(sql_file)}")
        raise typer.Exit(code=1)
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        error_console.print(f"[red]Error:[/red] Cannot read SQL file {escape(sql_file)}: {escape(str(e))}")
        raise typer.Exit(code=1)


def _resolve_registry(registry_file: Path | None) -> IndexRegistrySnapshot:
    if registry_file is None:
        registry_file = get_config().default_registry_file
    if registry_file is None:
        return IndexRegistrySnapshot.empty()
    return load_registry(registry_file)


def _service(seed: int | None) -> AnalysisService:
    config = get_config()
    if seed is not None:
        config = config.model_copy(update={"random_seed": seed})
    return AnalysisService(config=config)


def print_bundle(bundle: AnalysisBundle, output_format: OutputFormat) -> None:
    """Print an analysis bundle to the console."""
    if output_format == OutputFormat.JSON:
        console.print_json(render(bundle, format=OutputFormat.JSON))
        return
    if output_format == OutputFormat.MARKDOWN:
        console.print(
            render(bundle, format=OutputFormat.MARKDOWN),
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
        return

    plan = bundle.plan

    # Execution plan
    plan_table = Table(title=f"Query Execution Plan (total cost {plan.total_cost})")
    plan_table.add_column("#", justify="right")
    plan_table.add_column("Operation", style="cyan")
    plan_table.add_column("Cost", justify="right")
    plan_table.add_column("Description")
    for op in plan.operations:
        plan_table.add_row(str(op.id), op.type.value, str(op.cost), escape(op.description))
    console.print(plan_table)

    if plan.warnings:
        console.print(Panel(
            "\n".join(f"- {escape(w)}" for w in plan.warnings),
            title="Warnings",
            border_style="yellow",
        ))

    # Recommendations
    if bundle.recommendations:
        console.print(f"\n[bold]{len(bundle.recommendations)} recommendation(s):[/bold]\n")
    else:
        console.print("\n[green]No recommendations.[/green]\n")

    for rec in bundle.recommendations:
        style = SEVERITY_STYLES[rec.severity]
        console.print(
            f"[{style}][{rec.severity.value.upper()}][/{style}] "
            f"[bold]{rec.type.value.upper()}[/bold] {escape(rec.description)}"
        )
        for line in rec.code.split("\n"):
            if line.startswith("--"):
                console.print(f"   [dim]{escape(line)}[/dim]")
            elif line:
                console.print(f"   [green]{escape(line)}[/green]")
        console.print()

    # Statistics
    stats_table = Table(title="Performance Statistics")
    stats_table.add_column("Statistic")
    stats_table.add_column("Value", justify="right", style="magenta")
    for key, value in bundle.statistics.formatted().items():
        stats_table.add_row(STATISTICS_LABELS[key], value)
    console.print(stats_table)


def register(app: typer.Typer) -> None:
    """Register core commands on the given Typer app."""

    @app.command()
    def analyze(
        sql_file: Annotated[
            str,
            typer.Argument(help="Path to a SQL file, or - to read from stdin"),
        ],
        registry_file: Annotated[
            Optional[Path],
            typer.Option(
                "--registry",
                "-r",
                help="YAML/JSON file with index definitions per table",
                exists=True,
                readable=True,
                resolve_path=True,
            ),
        ] = None,
        output_format: Annotated[
            OutputFormat,
            typer.Option("--format", "-f", help="Output format"),
        ] = OutputFormat.TEXT,
        seed: Annotated[
            Optional[int],
            typer.Option("--seed", help="Seed for synthetic costs and statistics"),
        ] = None,
    ) -> None:
        """
        Analyze a SQL query against your index definitions.

        Examples:

            $ queryadvisor analyze query.sql --registry indexes.yaml
            $ echo "SELECT * FROM Customers" | queryadvisor analyze - -f json
        """
        sql = _read_sql(sql_file)
        try:
            registry = _resolve_registry(registry_file)
            bundle = _service(seed).analyze(sql, registry)
        except QueryAdvisorError as e:
            error_console.print(f"[red]Error:[/red] {escape(e.message)}")
            raise typer.Exit(code=1)

        print_bundle(bundle, output_format)

    @app.command("format")
    def format_command(
        sql_file: Annotated[
            str,
            typer.Argument(help="Path to a SQL file, or - to read from stdin"),
        ],
    ) -> None:
        """Pretty-print a SQL query (re-indent, upper-case keywords)."""
        formatted = format_sql(_read_sql(sql_file))
        if not formatted:
            error_console.print("[red]Error:[/red] Please enter a SQL query to format")
            raise typer.Exit(code=1)
        console.print(formatted, markup=False, highlight=False, soft_wrap=True)

    @app.command()
    def demo(
        output_format: Annotated[
            OutputFormat,
            typer.Option("--format", "-f", help="Output format"),
        ] = OutputFormat.TEXT,
        seed: Annotated[
            Optional[int],
            typer.Option("--seed", help="Seed for synthetic costs and statistics"),
        ] = None,
    ) -> None:
        """Analyze the sample Customers/Orders query against sample indexes."""
        if output_format == OutputFormat.TEXT:
            console.print(Panel(escape(DEMO_QUERY), title="Demo query", border_style="cyan"))
            table = Table(title="Demo index registry")
            table.add_column("Table", style="cyan")
            table.add_column("Index definitions")
            for entry in DEMO_REGISTRY:
                table.add_row(entry.table_name, escape(entry.index_definition))
            console.print(table)

        try:
            bundle = _service(seed).analyze(DEMO_QUERY, DEMO_REGISTRY)
        except QueryAdvisorError as e:
            error_console.print(f"[red]Error:[/red] {escape(e.message)}")
            raise typer.Exit(code=1)

        print_bundle(bundle, output_format)
