"""HTTP server for the chain-flow visualization.

This module serves the chain graph computed from a rule file as JSON for a
browser UI, plus an SVG drawing and a minimal HTML page embedding it.
"""

import socket
import webbrowser
from pathlib import Path
from typing import Any

import orjson
import typer
import uvicorn
from fastapi import FastAPI, Response
from fastapi.responses import HTMLResponse
from loguru import logger
from rich.console import Console
from rich.panel import Panel

from .... import __version__
from ....config.settings import ChainFlowConfig
from ....core.aggregator import table_options
from ....core.exceptions import RuleLoadError
from ....core.graph_builder import ChainGraph, build_chain_graph, chain_detail
from ....core.models import Rule
from ....core.rule_parser import load_rules
from .templates import generate_html_template, render_svg

console = Console()

SVG_MEDIA_TYPE = "image/svg+xml"


def find_free_port(start_port: int = 8080, end_port: int = 8099) -> int:
    """Find a free port in the given range.

    Args:
        start_port: Starting port number to check
        end_port: Ending port number to check

    Returns:
        First available port in the range

    Raises:
        OSError: If no free ports available in range
    """
    for test_port in range(start_port, end_port + 1):
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                s.bind(("", test_port))
                return test_port
        except OSError:
            continue
    raise OSError(f"No free ports available in range {start_port}-{end_port}")


def _json_response(data: Any, status_code: int = 200) -> Response:
    return Response(
        content=orjson.dumps(data),
        status_code=status_code,
        media_type="application/json",
        headers={"Cache-Control": "no-cache"},
    )


def _error_response(e: RuleLoadError) -> Response:
    logger.warning(f"Cannot load rules: {e}")
    return _json_response({"error": str(e), **_plain(e.context)}, status_code=500)


def _plain(context: dict[str, Any]) -> dict[str, Any]:
    # Validation details are not always JSON-serializable
    return {k: v for k, v in context.items() if isinstance(v, str | int)}


def create_app(rules_path: Path, config: ChainFlowConfig | None = None) -> FastAPI:
    """Create FastAPI application for the visualization server.

    Args:
        rules_path: Rule file to visualize
        config: Layout and default table settings

    Returns:
        Configured FastAPI application

    Design Decision: Re-read the rule file on every request

    The graph is a pure function of the rules and the table filter, so
    recomputing per request keeps the view in step with edits to the file
    without any cache invalidation.

    Error Handling:
    - Unreadable or malformed rule file: 500 with the error message
    - Unknown chain: 404
    """
    config = config or ChainFlowConfig()
    app = FastAPI(title="iptables Chain Flow")

    def _rules() -> list[Rule]:
        return load_rules(rules_path)

    def _graph(table: str | None) -> ChainGraph:
        return build_chain_graph(
            _rules(), table or config.default_table, config.layout
        )

    @app.get("/api/tables")
    async def get_tables() -> Response:
        """Table filter options, ``"all"`` first."""
        try:
            rules = _rules()
        except RuleLoadError as e:
            return _error_response(e)
        return _json_response(
            {"tables": table_options(rules), "default": config.default_table}
        )

    @app.get("/api/graph")
    async def get_graph(table: str | None = None) -> Response:
        """Nodes, relations, edge paths and canvas size for one table filter."""
        try:
            graph = _graph(table)
        except RuleLoadError as e:
            return _error_response(e)
        return _json_response(graph.to_dict())

    @app.get("/api/chains/{chain}")
    async def get_chain(chain: str, table: str | None = None) -> Response:
        """Detail view of one chain."""
        try:
            graph = _graph(table)
        except RuleLoadError as e:
            return _error_response(e)

        detail = chain_detail(graph, chain)
        if detail is None:
            return _json_response(
                {"error": f"Chain not found: {chain}", "chain": chain},
                status_code=404,
            )
        return _json_response(detail.to_dict())

    @app.get("/api/graph.svg")
    async def get_graph_svg(table: str | None = None) -> Response:
        """SVG drawing of the graph."""
        try:
            graph = _graph(table)
        except RuleLoadError as e:
            return _error_response(e)
        return Response(content=render_svg(graph), media_type=SVG_MEDIA_TYPE)

    @app.get("/", response_class=HTMLResponse)
    async def index(table: str | None = None) -> Response:
        """Page embedding the SVG with a table selector."""
        try:
            rules = _rules()
        except RuleLoadError as e:
            return _error_response(e)
        table_filter = table or config.default_table
        graph = build_chain_graph(rules, table_filter, config.layout)
        html = generate_html_template(
            render_svg(graph), table_options(rules), table_filter, __version__
        )
        return HTMLResponse(content=html)

    return app


def start_visualization_server(
    rules_path: Path,
    config: ChainFlowConfig | None = None,
    port: int | None = None,
    auto_open: bool = True,
) -> None:
    """Start HTTP server for the chain-flow visualization.

    Args:
        rules_path: Rule file to visualize
        config: Settings; ``config.server`` supplies host and port defaults
        port: Port number to use instead of the configured one
        auto_open: Whether to automatically open browser

    Raises:
        typer.Exit: If server fails to start
    """
    config = config or ChainFlowConfig()
    port = port or config.server.port
    try:
        app = create_app(rules_path, config)
        url = f"http://localhost:{port}"

        console.print()
        console.print(
            Panel.fit(
                f"[green]✓[/green] Visualization server running\n\n"
                f"URL: [cyan]{url}[/cyan]\n"
                f"Rules: [dim]{rules_path}[/dim]\n\n"
                f"[dim]Press Ctrl+C to stop[/dim]",
                title="Server Started",
                border_style="green",
            )
        )

        if auto_open:
            webbrowser.open(url)

        server_config = uvicorn.Config(
            app,
            host=config.server.host,
            port=port,
            log_level="warning",
            access_log=False,
        )
        server = uvicorn.Server(server_config)
        server.run()

    except KeyboardInterrupt:
        console.print("\n[yellow]Stopping server...[/yellow]")
    except OSError as e:
        if "Address already in use" in str(e):
            console.print(
                f"[red]✗ Port {port} is already in use. "
                f"Try a different port with --port[/red]"
            )
        else:
            console.print(f"[red]✗ Server error: {e}[/red]")
        raise typer.Exit(1)
