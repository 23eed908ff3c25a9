"""Detect chain jumps and accumulate directed, weighted edges between chains."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from loguru import logger

from .chains import BUILTIN_CHAINS, is_builtin, is_jump_target
from .models import ChainRelation, Rule


@dataclass
class RelationSet:
    """Result of one extraction pass.

    Attributes:
        relations: Unique (from, to) edges in first-seen order
        custom_chains: Every non built-in chain seen as a rule owner or jump target
        builtin_chains_with_data: Built-ins owning at least one rule, in
            traversal order
    """

    relations: list[ChainRelation] = field(default_factory=list)
    custom_chains: set[str] = field(default_factory=set)
    builtin_chains_with_data: list[str] = field(default_factory=list)

    @property
    def chains(self) -> set[str]:
        """All chains taking part in a relation, on either end."""
        names: set[str] = set()
        for relation in self.relations:
            names.add(relation.from_chain)
            names.add(relation.to_chain)
        return names


def extract_relations(rules: Iterable[Rule]) -> RelationSet:
    """Extract chain-to-chain jumps from already filtered rules.

    A rule whose target is not a terminal verdict is a jump to the chain
    named by the target. Its edge is keyed by ``(rule.chain, target)``; the
    table of the first rule creating the edge is kept for the edge.

    Rules with an empty target still make their own chain known but add no
    edge.
    """
    by_key: dict[tuple[str, str], ChainRelation] = {}
    custom_chains: set[str] = set()
    builtins_seen: set[str] = set()

    for rule in rules:
        if is_builtin(rule.chain):
            builtins_seen.add(rule.chain)
        elif rule.chain:
            custom_chains.add(rule.chain)

        if not rule.chain or not is_jump_target(rule.target):
            continue

        key = (rule.chain, rule.target)
        relation = by_key.get(key)
        if relation is None:
            relation = by_key[key] = ChainRelation(
                from_chain=rule.chain, to_chain=rule.target, table=rule.table
            )
        relation.count += 1

        if not is_builtin(rule.target):
            custom_chains.add(rule.target)

    result = RelationSet(
        relations=list(by_key.values()),
        custom_chains=custom_chains,
        builtin_chains_with_data=[c for c in BUILTIN_CHAINS if c in builtins_seen],
    )
    logger.debug(
        f"Extracted {len(result.relations)} relations, "
        f"{len(custom_chains)} custom chains, "
        f"roots={result.builtin_chains_with_data}"
    )
    return result


def adjacency(relations: Iterable[ChainRelation]) -> dict[str, list[str]]:
    """Forward adjacency (chain -> jump targets) in relation order."""
    forward: dict[str, list[str]] = {}
    for relation in relations:
        targets = forward.setdefault(relation.from_chain, [])
        if relation.to_chain not in targets:
            targets.append(relation.to_chain)
    return forward


def reverse_adjacency(relations: Iterable[ChainRelation]) -> dict[str, list[str]]:
    """Reverse adjacency (chain -> chains jumping into it) in relation order."""
    backward: dict[str, list[str]] = {}
    for relation in relations:
        sources = backward.setdefault(relation.to_chain, [])
        if relation.from_chain not in sources:
            sources.append(relation.from_chain)
    return backward
