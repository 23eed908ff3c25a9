"""Coordinate relaxation for the chain-flow diagram.

Chains are placed on horizontal rows by level. Each row starts as an evenly
spaced list and is then relaxed: children move under the average of their
parents, parents move halfway towards the average of their children, and
every move is followed by an exact overlap resolution on the row.

Design Principles:
    - Deterministic: same levels and edges -> same coordinates
    - Anchored: level 0 keeps the fixed built-in order and spacing
    - Exact spacing: chains on one row are never closer than
      ``node_width + horizontal_gap``
    - Heuristic crossings: averaging shortens edges and reduces crossings
      but does not guarantee a crossing-free drawing

Performance: O(iterations * (V log V + E)).
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from loguru import logger

from ..config.settings import LayoutSettings
from .chains import BUILTIN_CHAINS
from .levels import ROOT_LEVEL, group_by_level
from .models import NodePosition

# Final coordinates are rounded to this many decimals
COORDINATE_DIGITS = 6


@dataclass
class LayoutResult:
    """Node rectangles and the canvas size needed to draw them."""

    positions: dict[str, NodePosition] = field(default_factory=dict)
    canvas_width: float = 0
    canvas_height: float = 0


def order_level(level: int, chains: Iterable[str]) -> list[str]:
    """Initial left-to-right order of one row.

    Level 0 follows the traversal order of the built-ins; any other row is
    sorted by name as a stable tie-break.
    """
    if level == ROOT_LEVEL:
        rank = {name: i for i, name in enumerate(BUILTIN_CHAINS)}
        return sorted(chains, key=lambda c: (rank.get(c, len(rank)), c))
    return sorted(chains)


def resolve_overlaps(
    chains: Sequence[str], xs: dict[str, float], min_spacing: float
) -> None:
    """Spread one row so neighbours are at least ``min_spacing`` apart.

    Neighbours that are too close are first pushed apart symmetrically by half
    the deficit each; a left-to-right sweep then closes whatever deficit the
    symmetric pushes reintroduced, which makes the guarantee exact.
    """
    if len(chains) < 2:
        return

    ordered = sorted(chains, key=lambda c: (xs[c], c))

    for left, right in zip(ordered, ordered[1:], strict=False):
        deficit = min_spacing - (xs[right] - xs[left])
        if deficit > 0:
            xs[left] -= deficit / 2
            xs[right] += deficit / 2

    _sweep(ordered, xs, min_spacing)


def _sweep(ordered: Sequence[str], xs: dict[str, float], min_spacing: float) -> None:
    """Push each chain right of its left neighbour by at least ``min_spacing``.

    ``left + min_spacing`` can round below the spacing when subtracted back,
    so the right coordinate is stepped up by single ULPs until the float
    difference itself satisfies the bound.
    """
    for left, right in zip(ordered, ordered[1:], strict=False):
        if xs[right] - xs[left] < min_spacing:
            xs[right] = xs[left] + min_spacing
        while xs[right] - xs[left] < min_spacing:
            xs[right] = math.nextafter(xs[right], math.inf)


def snap_row(chains: Sequence[str], xs: dict[str, float], min_spacing: float) -> None:
    """Round one row to the coordinate grid and restore exact spacing."""
    for chain in chains:
        xs[chain] = round(xs[chain], COORDINATE_DIGITS)
    _sweep(sorted(chains, key=lambda c: (xs[c], c)), xs, min_spacing)


def _mean(values: list[float]) -> float:
    return sum(values) / len(values)


def _relax(
    rows: dict[int, list[str]],
    xs: dict[str, float],
    adjacency: Mapping[str, Sequence[str]],
    reverse_adjacency: Mapping[str, Sequence[str]],
    min_spacing: float,
) -> None:
    """One relaxation iteration: downward pass, then upward pass."""
    max_level = max(rows)

    # Downward: children follow their parents
    for level in range(ROOT_LEVEL + 1, max_level + 1):
        row = rows.get(level)
        if not row:
            continue
        for chain in row:
            parents = [xs[p] for p in reverse_adjacency.get(chain, ()) if p in xs]
            if parents:
                xs[chain] = _mean(parents)
        resolve_overlaps(row, xs, min_spacing)

    # Upward: parents lean towards their children; level 0 stays anchored
    for level in range(max_level - 1, ROOT_LEVEL, -1):
        row = rows.get(level)
        if not row:
            continue
        for chain in row:
            children = [xs[c] for c in adjacency.get(chain, ()) if c in xs]
            if children:
                xs[chain] = 0.5 * xs[chain] + 0.5 * _mean(children)
        resolve_overlaps(row, xs, min_spacing)


def compute_layout(
    levels: Mapping[str, int],
    adjacency: Mapping[str, Sequence[str]],
    reverse_adjacency: Mapping[str, Sequence[str]],
    settings: LayoutSettings | None = None,
) -> LayoutResult:
    """Compute a rectangle for every chain that has a level.

    Args:
        levels: Mapping chain -> level from the level assigner
        adjacency: Forward adjacency chain -> jump targets
        reverse_adjacency: Reverse adjacency chain -> chains jumping into it
        settings: Node geometry, gaps, margin and iteration count

    Returns:
        LayoutResult with positions normalized so the leftmost node sits at
        the margin, and the canvas size covering all nodes

    Example:
        >>> result = compute_layout({"INPUT": 0, "f2b-sshd": 1},
        ...                         {"INPUT": ["f2b-sshd"]},
        ...                         {"f2b-sshd": ["INPUT"]})
        >>> result.positions["f2b-sshd"].x == result.positions["INPUT"].x
        True
    """
    settings = settings or LayoutSettings()

    if not levels:
        logger.debug("No chains to layout")
        return LayoutResult()

    rows = {
        level: order_level(level, chains)
        for level, chains in sorted(group_by_level(levels).items())
    }
    min_spacing = settings.min_spacing
    row_height = settings.node_height + settings.vertical_gap

    xs: dict[str, float] = {}
    for row in rows.values():
        for index, chain in enumerate(row):
            xs[chain] = settings.margin + index * min_spacing

    for _ in range(settings.iterations):
        _relax(rows, xs, adjacency, reverse_adjacency, min_spacing)

    # Normalize so the leftmost node sits at the margin
    shift = settings.margin - min(xs.values())
    for chain in xs:
        xs[chain] += shift
    for row in rows.values():
        snap_row(row, xs, min_spacing)

    min_x = min(xs.values())
    max_x = max(xs.values())
    max_level = max(rows)

    positions = {
        chain: NodePosition(
            x=xs[chain],
            y=settings.margin + levels[chain] * row_height,
            width=settings.node_width,
            height=settings.node_height,
        )
        for row in rows.values()
        for chain in row
    }
    canvas_width = (max_x + settings.node_width) - min_x + 2 * settings.margin
    canvas_height = (max_level + 1) * row_height + settings.margin

    logger.debug(
        f"Relaxation layout: {len(positions)} chains on {len(rows)} levels, "
        f"{settings.iterations} iterations, "
        f"canvas={canvas_width:.0f}x{canvas_height:.0f}"
    )
    return LayoutResult(
        positions=positions, canvas_width=canvas_width, canvas_height=canvas_height
    )
