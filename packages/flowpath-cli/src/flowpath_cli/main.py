from __future__ import annotations

from dataclasses import replace

import typer
from flowpath_core import __version__
from flowpath_core.config import FlowpathConfig
from flowpath_core.errors import ConfigError
from flowpath_core.logging import configure_logging

from flowpath_cli.commands.analyze import analyze_command
from flowpath_cli.commands.config import config_app
from flowpath_cli.commands.search import search_command

app = typer.Typer(
    name="flowpath",
    help="Flowpath — optimal tool paths from workflow traces",
    no_args_is_help=True,
)

app.command("analyze")(analyze_command)
app.command("search")(search_command)
app.add_typer(
    config_app,
    name="config",
    help="View configuration",
)


@app.callback()
def _setup(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log analysis progress to stderr"
    ),
) -> None:
    """Configure logging before any subcommand runs."""
    try:
        logging_config = FlowpathConfig.load().logging
    except ConfigError:
        # Commands report config problems themselves
        return
    level = "DEBUG" if verbose else logging_config.level
    configure_logging(replace(logging_config, level=level))


@app.command()
def version() -> None:
    """Show the flowpath version."""
    from rich.console import Console
    Console().print(f"flowpath {__version__}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
