"""Helpers shared by the chainflow commands."""

from pathlib import Path

import typer

from ...config.settings import ChainFlowConfig
from ...core.exceptions import ChainFlowError
from ...core.graph_builder import ChainGraph, build_chain_graph
from ...core.models import Rule
from ...core.rule_parser import load_rules
from ..output import print_error


def get_config(ctx: typer.Context) -> ChainFlowConfig:
    """Configuration stored by the main callback, or the defaults."""
    if ctx.obj and ctx.obj.get("config") is not None:
        return ctx.obj["config"]
    return ChainFlowConfig()


def load_rules_or_exit(rules_file: Path) -> list[Rule]:
    """Load a rule file, reporting failures and exiting with status 1."""
    try:
        return load_rules(rules_file)
    except ChainFlowError as e:
        print_error(str(e))
        raise typer.Exit(1)


def build_graph_or_exit(
    ctx: typer.Context, rules_file: Path, table: str | None
) -> ChainGraph:
    """Load ``rules_file`` and build its graph under the effective filter."""
    config = get_config(ctx)
    rules = load_rules_or_exit(rules_file)
    table_filter = table or config.default_table
    return build_chain_graph(rules, table_filter, config.layout)
