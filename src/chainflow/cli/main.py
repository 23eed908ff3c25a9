"""Main CLI application for chainflow."""

import sys
from pathlib import Path

import typer
from loguru import logger

from .. import __version__
from ..config.settings import ChainFlowConfig
from ..core.exceptions import ConfigError
from .commands.graph import chain_command, relations_command, stats_command
from .commands.visualize.cli import export_command, serve_command
from .output import console, print_error

app = typer.Typer(
    name="chainflow",
    help="🔗 Chain-relationship graphs for iptables rule sets",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

app.command("stats")(stats_command)
app.command("relations")(relations_command)
app.command("chain")(chain_command)
app.command("export")(export_command)
app.command("serve")(serve_command)


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "WARNING",
        format="<level>{level: <8}</level> | {name}:{function} - {message}",
    )


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"chainflow version {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML settings file (defaults to $CHAINFLOW_CONFIG)",
        dir_okay=False,
        rich_help_panel="🔧 Global Options",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
        rich_help_panel="🔧 Global Options",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """🔗 Visualize how iptables chains jump into each other.

    [bold cyan]Examples:[/bold cyan]

    [green]Chain statistics of a saved listing:[/green]
        $ iptables -L -n -v -x --line-numbers > rules.txt
        $ chainflow stats rules.txt

    [green]Export the graph as SVG:[/green]
        $ chainflow export rules.txt --format svg -o chains.svg

    [green]Browse the graph:[/green]
        $ chainflow serve rules.txt
    """
    _configure_logging(verbose)

    try:
        if config_path is not None:
            config = ChainFlowConfig.load(config_path)
        else:
            config = ChainFlowConfig.from_env()
    except ConfigError as e:
        print_error(f"Invalid configuration: {e}")
        raise typer.Exit(1)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose
    logger.debug(f"Configuration: {config.to_dict()}")


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
