"""Export and serve commands for the chain-flow visualization."""

from enum import StrEnum
from pathlib import Path

import typer

from ...output import console, print_error, print_info, print_success
from ..common import build_graph_or_exit, get_config, load_rules_or_exit
from ..graph import RULES_ARGUMENT, TABLE_OPTION
from .exporters import export_to_json, export_to_svg, graph_to_json
from .server import find_free_port, start_visualization_server
from .templates import render_svg


class ExportFormat(StrEnum):
    JSON = "json"
    SVG = "svg"


def export_command(
    ctx: typer.Context,
    rules_file: Path = RULES_ARGUMENT,
    table: str | None = TABLE_OPTION,
    format: ExportFormat = typer.Option(
        ExportFormat.JSON,
        "--format",
        "-f",
        help="Output format: json or svg",
        case_sensitive=False,
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file (prints to stdout when omitted)",
        dir_okay=False,
    ),
) -> None:
    """📦 Export the chain graph as JSON or SVG.

    [bold cyan]Examples:[/bold cyan]

    [green]Graph JSON on stdout:[/green]
        $ chainflow export rules.txt

    [green]SVG drawing of the nat table:[/green]
        $ chainflow export rules.txt --table nat --format svg -o nat.svg
    """
    graph = build_graph_or_exit(ctx, rules_file, table)

    if output is None:
        if format == ExportFormat.SVG:
            typer.echo(render_svg(graph))
        else:
            typer.echo(graph_to_json(graph).decode())
        return

    try:
        if format == ExportFormat.SVG:
            export_to_svg(graph, output)
        else:
            export_to_json(graph, output)
    except OSError as e:
        print_error(f"Cannot write {output}: {e}")
        raise typer.Exit(1)

    print_success(
        f"Exported {len(graph.all_chains)} chains and "
        f"{len(graph.relations)} jumps to {output}"
    )


def serve_command(
    ctx: typer.Context,
    rules_file: Path = RULES_ARGUMENT,
    port: int | None = typer.Option(
        None,
        "--port",
        "-p",
        help="Port for the visualization server (default: first free from config)",
        min=1024,
        max=65535,
    ),
    no_browser: bool = typer.Option(
        False, "--no-browser", help="Do not open a browser window"
    ),
) -> None:
    """🌐 Serve the interactive chain graph over HTTP.

    [bold cyan]Examples:[/bold cyan]

    [green]Serve on the first free port:[/green]
        $ chainflow serve rules.txt

    [green]Fixed port, no browser:[/green]
        $ chainflow serve rules.txt --port 9000 --no-browser
    """
    config = get_config(ctx)

    # Fail fast on a broken rule file before binding a port
    rules = load_rules_or_exit(rules_file)
    print_info(f"Loaded {len(rules)} rules from {rules_file}")

    if port is None:
        try:
            port = find_free_port(config.server.port, config.server.port_range_end)
        except OSError as e:
            print_error(str(e))
            raise typer.Exit(1)
        if port != config.server.port:
            console.print(
                f"[yellow]Port {config.server.port} in use, "
                f"using {port} instead[/yellow]"
            )

    start_visualization_server(
        rules_file,
        config,
        port=port,
        auto_open=config.server.auto_open and not no_browser,
    )
