"""Hierarchical level assignment for chains.

Levels are jump-hop depths measured from the traffic entry points. A chain
reached through several paths ends up on the deepest one, so jump edges
point downwards in the drawing.

Design Decision: path-aware longest-path BFS

Rationale: A plain "raise the child whenever a deeper path reaches it" BFS
never drains its queue once a cycle is reachable from a root: INPUT -> A ->
B -> A raises A, which raises B, which raises A again. Each queue entry
carries the chains on the path that reached it, and a child already on that
path is not raised. The edge closing a cycle is left pointing upwards.

Termination:
    Every assigned level equals the length of a simple path from a root, so
    no level exceeds ``len(chains) - 1``. Each raise strictly increases a
    level, so a chain is enqueued at most ``len(chains)`` times and the queue
    always drains.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Mapping, Sequence

from loguru import logger

ROOT_LEVEL = 0
ORPHAN_LEVEL = 1


def assign_levels(
    chains: Iterable[str],
    roots: Sequence[str],
    adjacency: Mapping[str, Sequence[str]],
) -> dict[str, int]:
    """Assign a non-negative level to every chain.

    Args:
        chains: The full chain set of the current graph
        roots: Built-in chains owning rules, in traversal order
            (PREROUTING, INPUT, FORWARD, OUTPUT, POSTROUTING)
        adjacency: Forward adjacency chain -> jump targets

    Returns:
        Mapping chain -> level. Roots are pinned to 0, chains reached
        through jumps are one deeper than their deepest acyclic parent, and
        chains unreachable from any root are ``ORPHAN_LEVEL``.
    """
    chain_set = set(chains)
    root_set = set(roots)
    levels: dict[str, int] = {}
    queue: deque[tuple[str, int, frozenset[str]]] = deque()

    for root in roots:
        if root in levels:
            continue
        chain_set.add(root)
        levels[root] = ROOT_LEVEL
        queue.append((root, ROOT_LEVEL, frozenset((root,))))

    visits = 0
    raises = 0
    while queue:
        chain, level, path = queue.popleft()
        visits += 1
        child_level = level + 1

        for child in adjacency.get(chain, ()):
            if child in path or child in root_set:
                # Back edge of a cycle, or a jump into an entry point
                continue
            current = levels.get(child)
            if current is not None and current >= child_level:
                continue
            if current is not None:
                raises += 1
            chain_set.add(child)
            levels[child] = child_level
            queue.append((child, child_level, path | {child}))

    orphans = sorted(chain_set - levels.keys())
    for chain in orphans:
        levels[chain] = ORPHAN_LEVEL

    logger.debug(
        f"Level assignment: {len(levels)} chains, {visits} visits, "
        f"{raises} raises, {len(orphans)} orphans, "
        f"max level={max(levels.values(), default=0)}"
    )
    return levels


def group_by_level(levels: Mapping[str, int]) -> dict[int, list[str]]:
    """Invert a chain -> level mapping into level -> chains (unordered)."""
    grouped: dict[int, list[str]] = {}
    for chain, level in levels.items():
        grouped.setdefault(level, []).append(chain)
    return grouped
