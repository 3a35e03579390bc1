from __future__ import annotations

from dataclasses import asdict
from pathlib import Path

import typer
from flowpath_core.config import FlowpathConfig
from flowpath_core.errors import ConfigError
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

console = Console()

config_app = typer.Typer(
    name="config",
    help="View flowpath configuration",
    invoke_without_command=True,
)


def _config_files() -> list[tuple[str, Path]]:
    global_path = Path.home() / ".flowpath" / "config.toml"
    project_path = Path.cwd() / ".flowpath" / "config.toml"
    if not project_path.exists():
        project_path = Path.cwd() / "flowpath.toml"
    return [("Global", global_path), ("Project", project_path)]


@config_app.callback(invoke_without_command=True)
def config_command(ctx: typer.Context) -> None:
    """Show the merged configuration."""
    if ctx.invoked_subcommand is not None:
        return

    try:
        config = FlowpathConfig.load()
    except ConfigError as exc:
        console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(1) from exc

    table = Table(
        title=f"Configuration ({config.project_name})",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Key", style="bold")
    table.add_column("Value")

    for section, values in asdict(config).items():
        if not isinstance(values, dict):
            continue
        for key, value in values.items():
            table.add_row(f"{section}.{key}", repr(value))

    console.print(table)


@config_app.command("files")
def config_files() -> None:
    """Print the config files that contribute to the merged view."""
    found = False
    for label, path in _config_files():
        if not path.exists():
            continue
        found = True
        console.print(f"[bold]{label}[/bold] ({path}):")
        console.print(Syntax(path.read_text(), "toml", theme="monokai"))
        console.print()

    if not found:
        console.print(
            "[yellow]No config files found; using built-in defaults.[/yellow]"
        )
