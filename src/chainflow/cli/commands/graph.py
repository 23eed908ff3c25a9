"""Terminal views of the chain graph: statistics, relations and chain detail."""

from pathlib import Path

import typer
from rich.markup import escape
from rich.table import Table

from ...core.chains import chain_group, chain_style, is_builtin, table_color
from ...core.formatters import format_bytes, format_count
from ...core.graph_builder import ChainGraph, chain_detail
from ..output import console, print_error, print_info, print_json
from .common import build_graph_or_exit

RULES_ARGUMENT = typer.Argument(
    ...,
    help="Rule file: JSON, YAML, `iptables -L` or `iptables-save` output",
    exists=True,
    dir_okay=False,
    readable=True,
)
TABLE_OPTION = typer.Option(
    None,
    "--table",
    "-t",
    help="Table filter (filter, nat, mangle, raw, security or 'all')",
)


def _tables_cell(tables: list[str]) -> str:
    return " ".join(f"[{table_color(t)}]{t}[/]" for t in tables)


def _print_stats_table(graph: ChainGraph) -> None:
    table = Table(title=f"Chains (table: {graph.table_filter})", show_lines=False)
    table.add_column("Chain", style="bold", no_wrap=True)
    table.add_column("Group", style="dim")
    table.add_column("Level", justify="right")
    table.add_column("Tables")
    table.add_column("Rules", justify="right")
    table.add_column("Packets", justify="right")
    table.add_column("Bytes", justify="right")

    for chain in graph.all_chains:
        stats = graph.chain_stats[chain]
        name = escape(chain)
        if is_builtin(chain):
            name = f"[{chain_style(chain).color}]{name}[/]"
        table.add_row(
            name,
            chain_group(chain),
            str(graph.levels.get(chain, "")),
            _tables_cell(sorted(stats.tables)),
            format_count(stats.rule_count),
            format_count(stats.packets),
            format_bytes(stats.bytes),
        )

    console.print(table)


def stats_command(
    ctx: typer.Context,
    rules_file: Path = RULES_ARGUMENT,
    table: str | None = TABLE_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """📊 Show per-chain rule, packet and byte counts."""
    graph = build_graph_or_exit(ctx, rules_file, table)

    if json_output:
        print_json([graph.chain_stats[c].to_dict() for c in graph.all_chains])
        return

    if not graph.all_chains:
        print_info(f"No chains found for table '{graph.table_filter}'")
        return

    _print_stats_table(graph)
    console.print(
        f"[dim]{len(graph.all_chains)} chains, "
        f"{len(graph.custom_chains)} custom, "
        f"{len(graph.rules)} rules[/dim]"
    )


def relations_command(
    ctx: typer.Context,
    rules_file: Path = RULES_ARGUMENT,
    table: str | None = TABLE_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """🔀 List the jumps between chains."""
    graph = build_graph_or_exit(ctx, rules_file, table)

    if json_output:
        print_json([r.to_dict() for r in graph.relations])
        return

    if not graph.relations:
        print_info(f"No jumps between chains for table '{graph.table_filter}'")
        return

    table_view = Table(title=f"Jumps (table: {graph.table_filter})")
    table_view.add_column("From", style="bold", no_wrap=True)
    table_view.add_column("To", style="cyan", no_wrap=True)
    table_view.add_column("Rules", justify="right")
    table_view.add_column("Table")
    for relation in graph.relations:
        table_view.add_row(
            escape(relation.from_chain),
            escape(relation.to_chain),
            str(relation.count),
            _tables_cell([relation.table]) if relation.table else "",
        )
    console.print(table_view)


def chain_command(
    ctx: typer.Context,
    rules_file: Path = RULES_ARGUMENT,
    name: str = typer.Argument(..., help="Chain name, e.g. INPUT or KUBE-SERVICES"),
    table: str | None = TABLE_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """🔎 Show one chain: its rules and the chains it jumps to and from."""
    graph = build_graph_or_exit(ctx, rules_file, table)
    detail = chain_detail(graph, name)
    if detail is None:
        print_error(f"Chain '{name}' not found for table '{graph.table_filter}'")
        raise typer.Exit(1)

    if json_output:
        print_json(detail.to_dict())
        return

    style = chain_style(name)
    console.print(
        f"[bold {style.color}]{escape(name)}[/] [dim]{style.description}[/dim]"
    )
    console.print(
        f"Tables: {_tables_cell(sorted(detail.stats.tables)) or '-'}  "
        f"Rules: {format_count(detail.stats.rule_count)}  "
        f"Packets: {format_count(detail.stats.packets)}  "
        f"Bytes: {format_bytes(detail.stats.bytes)}"
    )
    incoming = escape(", ".join(r.from_chain for r in detail.incoming) or "-")
    outgoing = escape(", ".join(r.to_chain for r in detail.outgoing) or "-")
    console.print(f"Jumped from: {incoming}")
    console.print(f"Jumps to: {outgoing}")

    if not detail.rules:
        print_info("Chain has no rules of its own")
        return

    rules_view = Table()
    rules_view.add_column("#", justify="right")
    rules_view.add_column("Table")
    rules_view.add_column("Target", style="bold", no_wrap=True)
    rules_view.add_column("Prot")
    rules_view.add_column("Source")
    rules_view.add_column("Destination")
    rules_view.add_column("Packets", justify="right")
    rules_view.add_column("Bytes", justify="right")
    for rule in detail.rules:
        rules_view.add_row(
            str(rule.line_number),
            rule.table,
            escape(rule.target),
            rule.protocol,
            rule.source,
            rule.destination,
            format_count(rule.packets),
            format_bytes(rule.bytes),
        )
    console.print(rules_view)
