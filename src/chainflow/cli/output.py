"""Rich output helpers shared by the CLI commands."""

from typing import Any

import orjson
import typer
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

console = Console()
error_console = Console(stderr=True)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    error_console.print(f"[red]✗[/red] {message}")


def print_success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def print_info(message: str) -> None:
    console.print(f"[blue]ℹ[/blue] {message}")


def print_warning(message: str) -> None:
    console.print(f"[yellow]⚠[/yellow] {message}")


def print_json(data: Any, title: str | None = None) -> None:
    """Print data as highlighted JSON, optionally inside a titled panel."""
    text = orjson.dumps(data, option=orjson.OPT_INDENT_2).decode()
    if title is None:
        # Plain output keeps the JSON machine-readable
        typer.echo(text)
        return
    console.print(
        Panel(Syntax(text, "json", theme="monokai"), title=title, border_style="blue")
    )
