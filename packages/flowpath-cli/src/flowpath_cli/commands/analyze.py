"""Trace batch analysis: optimal path and per-trace comparison."""
from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from flowpath_core.config import FlowpathConfig
from flowpath_core.errors import ConfigError, NoPathFoundError, TraceValidationError
from flowpath_optimizer import OptimizationPipeline, load_batch
from flowpath_optimizer.types import END, START
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from flowpath_optimizer.types import AnalysisReport

console = Console()


def _styled_path(path: tuple[str, ...]) -> str:
    parts = []
    for node in path:
        if node == START:
            parts.append(f"[bold green]{node}[/bold green]")
        elif node == END:
            parts.append(f"[bold red]{node}[/bold red]")
        else:
            parts.append(f"[cyan]{node}[/cyan]")
    return " → ".join(parts)


def analyze_command(
    file: Path = typer.Argument(..., help="JSON or YAML trace batch"),
    as_json: bool = typer.Option(
        False, "--json", help="Print the report as JSON"
    ),
    penalty: float | None = typer.Option(
        None, "--penalty", help="Cost multiplier after a failed tool call"
    ),
    tolerance: float | None = typer.Option(
        None, "--tolerance", help="Seconds within which a trace counts as optimal"
    ),
) -> None:
    """Find the cheapest tool path in a trace batch and compare every trace."""
    try:
        analysis = FlowpathConfig.load().analysis
        overrides = {}
        if penalty is not None:
            overrides["failure_penalty"] = penalty
        if tolerance is not None:
            overrides["optimal_tolerance"] = tolerance
        if overrides:
            analysis = replace(analysis, **overrides)
        pipeline = OptimizationPipeline.from_config(analysis)
    except ConfigError as exc:
        console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(1) from exc

    try:
        traces = load_batch(file)
        report = pipeline.run(traces)
    except FileNotFoundError as exc:
        console.print(f"[red]File not found:[/red] {file}")
        raise typer.Exit(1) from exc
    except TraceValidationError as exc:
        console.print(f"[red]Invalid trace batch:[/red] {exc}")
        raise typer.Exit(1) from exc
    except NoPathFoundError as exc:
        console.print(f"[red]No valid path found:[/red] {exc}")
        raise typer.Exit(1) from exc

    if as_json:
        typer.echo(json.dumps(report.to_dict(), indent=2))
        return

    _render(report)


def _render(report: AnalysisReport) -> None:
    optimal = report.optimal
    console.print(Panel(
        f"{_styled_path(optimal.path)}\n\n"
        f"[dim]Total duration: {optimal.distance:.2f}s • "
        f"{optimal.tool_count} tools[/dim]",
        title="Optimal Path",
        border_style="green",
    ))

    table = Table(
        title="Actual Paths",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Case", style="bold")
    table.add_column("Path")
    table.add_column("Duration", justify="right")
    table.add_column("Tools", justify="right")
    table.add_column("Result")

    for row in report.comparisons:
        if row.is_optimal:
            verdict = "[bold green]OPTIMAL[/bold green]"
        elif row.efficiency is None:
            verdict = f"[yellow]+{row.time_wasted:.1f}s[/yellow]"
        else:
            verdict = (
                f"[yellow]{row.efficiency:.0f}% efficient, "
                f"+{row.time_wasted:.1f}s wasted "
                f"({row.time_wasted_pct:.0f}%)[/yellow]"
            )
        table.add_row(
            row.case_id,
            _styled_path(row.actual_path),
            f"{row.actual_duration:.2f}s",
            str(row.tool_count),
            verdict,
        )

    console.print(table)
    console.print(
        f"\n[dim]{report.optimal_count}/{report.trace_count} trace(s) optimal.[/dim]"
    )
