"""Curved, directed edge paths between chain nodes."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from loguru import logger

from ..config.settings import LayoutSettings
from .models import ChainRelation, NodePosition

Point = tuple[float, float]


@dataclass(frozen=True)
class EdgePath:
    """A quadratic curve from the bottom of one node to the top of another.

    ``label`` is the curve midpoint where the multiplicity badge is drawn.
    Degenerate edges (coincident node centers) have ``control == start`` and
    a zero-length straight ``path``.
    """

    start: Point
    control: Point
    end: Point
    label: Point
    path: str
    degenerate: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": _round_point(self.start),
            "control": _round_point(self.control),
            "end": _round_point(self.end),
            "label": _round_point(self.label),
            "path": self.path,
            "degenerate": self.degenerate,
        }


@dataclass(frozen=True)
class RelationEdge:
    """An ``EdgePath`` bound to the relation it draws."""

    relation: ChainRelation
    geometry: EdgePath

    def to_dict(self) -> dict[str, Any]:
        return {**self.relation.to_dict(), **self.geometry.to_dict()}


def _round_point(point: Point) -> list[float]:
    return [round(point[0], 2), round(point[1], 2)]


def _fmt(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def parallel_shift(index: int, total: int, spacing: float) -> float:
    """Horizontal offset of edge ``index`` among ``total`` edges of one pair.

    Offsets are centered on zero: 3 edges with spacing 16 get -16, 0, 16.
    """
    if total <= 1:
        return 0.0
    return (index - (total - 1) / 2) * spacing


def edge_path(
    source: NodePosition,
    target: NodePosition,
    index: int = 0,
    total: int = 1,
    settings: LayoutSettings | None = None,
) -> EdgePath:
    """Build the curve connecting ``source`` to ``target``.

    The curve leaves the bottom-center of the source and enters the
    top-center of the target; both ends are shifted sideways when several
    edges connect the same pair. The control point sits off the straight
    line, perpendicular to it, at a distance proportional to the edge length
    and capped at ``max_curve_offset``.

    Args:
        source: Rectangle of the jumping chain
        target: Rectangle of the chain jumped to
        index: Position of this edge among the parallel edges of the pair
        total: Number of parallel edges between the pair
        settings: Offset, curvature and cap

    Returns:
        EdgePath; a zero-length straight path when the node centers coincide
    """
    settings = settings or LayoutSettings()

    (scx, scy), (tcx, tcy) = source.center, target.center
    if math.hypot(tcx - scx, tcy - scy) == 0:
        # Self-loop or stacked nodes: nothing sensible to bend
        point = source.bottom_center
        px, py = _fmt(point[0]), _fmt(point[1])
        return EdgePath(
            start=point,
            control=point,
            end=point,
            label=point,
            path=f"M {px} {py} L {px} {py}",
            degenerate=True,
        )

    shift = parallel_shift(index, total, settings.parallel_edge_offset)
    x1, y1 = source.bottom_center
    x2, y2 = target.top_center
    x1 += shift
    x2 += shift

    dx, dy = x2 - x1, y2 - y1
    distance = math.hypot(dx, dy)
    if distance == 0:
        cx, cy = x1, y1
    else:
        bend = min(distance * settings.curvature, settings.max_curve_offset)
        # Parallel edges bend away from each other
        if shift > 0:
            bend = -bend
        cx = (x1 + x2) / 2 - dy / distance * bend
        cy = (y1 + y2) / 2 + dx / distance * bend

    # Quadratic Bezier at t = 0.5
    label = (0.25 * x1 + 0.5 * cx + 0.25 * x2, 0.25 * y1 + 0.5 * cy + 0.25 * y2)

    return EdgePath(
        start=(x1, y1),
        control=(cx, cy),
        end=(x2, y2),
        label=label,
        path=(
            f"M {_fmt(x1)} {_fmt(y1)} "
            f"Q {_fmt(cx)} {_fmt(cy)} {_fmt(x2)} {_fmt(y2)}"
        ),
    )


def build_edges(
    relations: Iterable[ChainRelation],
    positions: Mapping[str, NodePosition],
    settings: LayoutSettings | None = None,
) -> list[RelationEdge]:
    """Build edge paths for every relation whose endpoints are positioned.

    Relations between the same two chains, in either direction, are treated
    as parallel edges and spread apart. Relations with an endpoint that has
    no position are skipped.
    """
    drawable: list[ChainRelation] = []
    skipped = 0
    for relation in relations:
        if relation.from_chain in positions and relation.to_chain in positions:
            drawable.append(relation)
        else:
            skipped += 1

    pairs: dict[frozenset[str], list[ChainRelation]] = {}
    for relation in drawable:
        pair = frozenset((relation.from_chain, relation.to_chain))
        pairs.setdefault(pair, []).append(relation)

    edges: list[RelationEdge] = []
    for relation in drawable:
        group = pairs[frozenset((relation.from_chain, relation.to_chain))]
        geometry = edge_path(
            positions[relation.from_chain],
            positions[relation.to_chain],
            index=group.index(relation),
            total=len(group),
            settings=settings,
        )
        edges.append(RelationEdge(relation=relation, geometry=geometry))

    if skipped:
        logger.debug(f"Skipped {skipped} relations without node positions")
    return edges
