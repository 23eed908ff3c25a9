"""Fold rule records into per-chain statistics."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from loguru import logger

from .models import ChainStats, Rule

ALL_TABLES = "all"


def filter_rules(rules: Iterable[Rule], table_filter: str = ALL_TABLES) -> list[Rule]:
    """Return the rules belonging to ``table_filter`` (every rule for ``"all"``)."""
    if table_filter == ALL_TABLES:
        return list(rules)
    return [rule for rule in rules if rule.table == table_filter]


def aggregate_chain_stats(
    rules: Sequence[Rule], table_filter: str = ALL_TABLES
) -> dict[str, ChainStats]:
    """Build one ``ChainStats`` per chain observed in the filtered rules.

    Single pass, O(rules). The result is a fresh snapshot; nothing is carried
    over from previous calls. Rules without a chain name are skipped,
    matching the relationship extractor.

    Args:
        rules: Rule records in listing order
        table_filter: ``"all"`` or an exact table name

    Returns:
        Mapping chain name -> ChainStats, in first-seen order
    """
    stats: dict[str, ChainStats] = {}

    for rule in filter_rules(rules, table_filter):
        # Nameless rules cannot become a node
        if not rule.chain:
            continue
        entry = stats.get(rule.chain)
        if entry is None:
            entry = stats[rule.chain] = ChainStats(chain=rule.chain)
        entry.rule_count += 1
        entry.packets += rule.packets
        entry.bytes += rule.bytes
        entry.tables.add(rule.table)

    logger.debug(
        f"Aggregated {sum(s.rule_count for s in stats.values())} rules "
        f"into {len(stats)} chains (table={table_filter})"
    )
    return stats


def known_tables(rules: Iterable[Rule]) -> list[str]:
    """Sorted distinct table names across the unfiltered rule set."""
    return sorted({rule.table for rule in rules if rule.table})


def table_options(rules: Iterable[Rule]) -> list[str]:
    """Choices for a table filter control: ``"all"`` followed by every table."""
    return [ALL_TABLES, *known_tables(rules)]
