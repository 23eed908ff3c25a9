"""Chain-flow graph construction.

Runs the whole pipeline as one pure function of the rule list and the table
filter:

    rules -> chain statistics + relations -> levels -> positions -> edges

Nothing is cached between calls: every rule-set or filter change rebuilds
the graph from scratch, and identical inputs give identical graphs.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from ..config.settings import LayoutSettings
from .aggregator import ALL_TABLES, aggregate_chain_stats, filter_rules, known_tables
from .chains import chain_group, chain_style, is_builtin
from .edge_paths import RelationEdge, build_edges
from .layout_engine import compute_layout
from .levels import assign_levels
from .models import ChainRelation, ChainStats, NodePosition, Rule
from .relations import adjacency, extract_relations, reverse_adjacency


@dataclass
class ChainGraph:
    """Snapshot of the chain-flow graph for one rule set and table filter."""

    table_filter: str
    tables: list[str]
    rules: list[Rule]
    chain_stats: dict[str, ChainStats]
    relations: list[ChainRelation]
    custom_chains: list[str]
    all_chains: list[str]
    builtin_chains_with_data: list[str]
    levels: dict[str, int]
    positions: dict[str, NodePosition]
    edges: list[RelationEdge] = field(default_factory=list)
    canvas_width: float = 0
    canvas_height: float = 0

    def incoming(self, chain: str) -> list[ChainRelation]:
        """Relations jumping into ``chain``."""
        return [r for r in self.relations if r.to_chain == chain]

    def outgoing(self, chain: str) -> list[ChainRelation]:
        """Relations ``chain`` jumps along."""
        return [r for r in self.relations if r.from_chain == chain]

    def rules_of(self, chain: str) -> list[Rule]:
        """The chain's own rules, ordered by line number."""
        return sorted(
            (r for r in self.rules if r.chain == chain),
            key=lambda r: (r.table, r.line_number),
        )

    def node(self, chain: str) -> dict[str, Any]:
        stats = self.chain_stats[chain]
        style = chain_style(chain)
        position = self.positions.get(chain)
        return {
            **stats.to_dict(),
            "builtin": is_builtin(chain),
            "group": chain_group(chain),
            "color": style.color,
            "icon": style.icon,
            "description": style.description,
            "level": self.levels.get(chain),
            "position": position.to_dict() if position else None,
        }

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation consumed by the browser view."""
        return {
            "table_filter": self.table_filter,
            "tables": self.tables,
            "nodes": [self.node(chain) for chain in self.all_chains],
            "relations": [r.to_dict() for r in self.relations],
            "edges": [e.to_dict() for e in self.edges],
            "custom_chains": self.custom_chains,
            "builtin_chains_with_data": self.builtin_chains_with_data,
            "canvas": {"width": self.canvas_width, "height": self.canvas_height},
        }


@dataclass
class ChainDetail:
    """What the detail view shows for a selected chain."""

    chain: str
    stats: ChainStats
    rules: list[Rule]
    incoming: list[ChainRelation]
    outgoing: list[ChainRelation]

    def to_dict(self) -> dict[str, Any]:
        style = chain_style(self.chain)
        return {
            **self.stats.to_dict(),
            "builtin": is_builtin(self.chain),
            "group": chain_group(self.chain),
            "color": style.color,
            "description": style.description,
            "rules": [r.model_dump(exclude_none=True) for r in self.rules],
            "incoming": [r.to_dict() for r in self.incoming],
            "outgoing": [r.to_dict() for r in self.outgoing],
        }


def build_chain_graph(
    rules: Sequence[Rule],
    table_filter: str = ALL_TABLES,
    settings: LayoutSettings | None = None,
) -> ChainGraph:
    """Build the chain-flow graph for ``rules`` under ``table_filter``.

    Args:
        rules: Full rule list from the rule-list collaborator
        table_filter: ``"all"`` or an exact table name
        settings: Layout geometry; defaults when omitted

    Returns:
        ChainGraph snapshot
    """
    settings = settings or LayoutSettings()
    filtered = filter_rules(rules, table_filter)

    chain_stats = aggregate_chain_stats(filtered)
    relation_set = extract_relations(filtered)

    # Chains only ever jumped to still need a node
    for chain in sorted(relation_set.chains - chain_stats.keys()):
        chain_stats[chain] = ChainStats(chain=chain)

    all_chains = sorted(chain_stats)
    forward = adjacency(relation_set.relations)
    backward = reverse_adjacency(relation_set.relations)

    levels = assign_levels(all_chains, relation_set.builtin_chains_with_data, forward)
    layout = compute_layout(levels, forward, backward, settings)
    edges = build_edges(relation_set.relations, layout.positions, settings)

    graph = ChainGraph(
        table_filter=table_filter,
        tables=known_tables(rules),
        rules=filtered,
        chain_stats=chain_stats,
        relations=relation_set.relations,
        custom_chains=sorted(relation_set.custom_chains),
        all_chains=all_chains,
        builtin_chains_with_data=relation_set.builtin_chains_with_data,
        levels=levels,
        positions=layout.positions,
        edges=edges,
        canvas_width=layout.canvas_width,
        canvas_height=layout.canvas_height,
    )
    logger.debug(
        f"Chain graph (table={table_filter}): {len(all_chains)} chains, "
        f"{len(graph.relations)} relations, {len(edges)} edges"
    )
    return graph


def chain_detail(graph: ChainGraph, chain: str) -> ChainDetail | None:
    """Detail view of ``chain``, or None if the graph does not contain it."""
    stats = graph.chain_stats.get(chain)
    if stats is None:
        return None
    return ChainDetail(
        chain=chain,
        stats=stats,
        rules=graph.rules_of(chain),
        incoming=graph.incoming(chain),
        outgoing=graph.outgoing(chain),
    )
