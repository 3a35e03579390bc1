"""Action search command: rank catalog actions against a free-text query."""
from __future__ import annotations

import typer
from flowpath_core.config import FlowpathConfig
from flowpath_core.errors import ActionSearchError, ConfigError
from flowpath_optimizer.search import KeywordActionSearch, load_catalog
from rich.console import Console
from rich.table import Table

console = Console()


def _score_style(percent: float) -> str:
    if percent >= 80:
        return "green"
    if percent >= 60:
        return "yellow"
    return "dim"


def _build_search(config: FlowpathConfig) -> KeywordActionSearch:
    """Build a KeywordActionSearch from the ``[search]`` config section."""
    labels = None
    if config.search.catalog_path:
        labels = load_catalog(config.search.catalog_path)
    return KeywordActionSearch(
        labels, min_similarity=config.search.min_similarity
    )


def search_command(
    query: list[str] = typer.Argument(..., help="Free-text search query"),
    limit: int | None = typer.Option(
        None, "--limit", "-n", help="Maximum number of results"
    ),
) -> None:
    """Search the action catalog for phrases similar to the query."""
    text = " ".join(query)
    try:
        config = FlowpathConfig.load()
        search = _build_search(config)
        if limit is None:
            limit = config.search.limit
        results = search.search(text, limit=limit)
    except FileNotFoundError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc
    except (ActionSearchError, ConfigError) as exc:
        console.print(f"[red]Search failed:[/red] {exc}")
        raise typer.Exit(1) from exc

    console.print(f"\n[cyan]Searching:[/cyan] \"{text}\"\n")
    if not results:
        console.print("[yellow]No matching actions.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right")
    table.add_column("Action", style="bold")
    table.add_column("Similarity", justify="right")

    for rank, match in enumerate(results, start=1):
        percent = match.similarity * 100
        style = _score_style(percent)
        table.add_row(
            str(rank),
            match.label,
            f"[{style}]{percent:.1f}%[/{style}]",
        )

    console.print(table)
    console.print(f"\n[dim]{len(results)} result(s).[/dim]")
