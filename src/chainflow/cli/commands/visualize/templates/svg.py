"""Static SVG rendering of a chain graph."""

from html import escape

from .....core.chains import chain_style, is_builtin
from .....core.formatters import format_bytes, format_count
from .....core.graph_builder import ChainGraph
from .styles import get_svg_styles

BADGE_RADIUS = 9


def _num(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _render_node(graph: ChainGraph, chain: str) -> str:
    position = graph.positions[chain]
    stats = graph.chain_stats[chain]
    style = chain_style(chain)
    kind = "builtin" if is_builtin(chain) else "custom"
    cx, _ = position.center
    name = escape(chain)
    meta = (
        f"{format_count(stats.rule_count)} rules · {format_bytes(stats.bytes)}"
    )
    return (
        f'<g class="node {kind}" data-chain="{name}">'
        f"<title>{name}: {escape(style.description)}</title>"
        f'<rect x="{_num(position.x)}" y="{_num(position.y)}" '
        f'width="{_num(position.width)}" height="{_num(position.height)}" '
        f'fill="{style.color}" stroke="{style.color}"/>'
        f'<text class="name" x="{_num(cx)}" y="{_num(position.y + 32)}" '
        f'text-anchor="middle">{name}</text>'
        f'<text class="meta" x="{_num(cx)}" y="{_num(position.y + 52)}" '
        f'text-anchor="middle">{escape(meta)}</text>'
        "</g>"
    )


def render_svg(graph: ChainGraph) -> str:
    """Render ``graph`` as a standalone SVG document.

    Every positioned chain becomes a rounded rectangle, every drawable
    relation a curved arrow with its rule count in a badge at the midpoint.

    Args:
        graph: Chain graph with positions and edges

    Returns:
        SVG markup
    """
    width = _num(max(graph.canvas_width, 1))
    height = _num(max(graph.canvas_height, 1))

    parts = [
        '<svg xmlns="http://www.w3.org/2000/svg" '
        f'width="{width}" height="{height}" viewBox="0 0 {width} {height}">',
        f"<style>{get_svg_styles()}</style>",
        "<defs>"
        '<marker id="arrow" viewBox="0 0 10 10" refX="10" refY="5" '
        'markerWidth="8" markerHeight="8" orient="auto-start-reverse">'
        '<path d="M 0 0 L 10 5 L 0 10 z" fill="#8b949e"/>'
        "</marker>"
        "</defs>",
        '<g class="edges">',
    ]

    for edge in graph.edges:
        relation = edge.relation
        parts.append(
            f'<path class="edge" d="{edge.geometry.path}" marker-end="url(#arrow)" '
            f'data-from="{escape(relation.from_chain)}" '
            f'data-to="{escape(relation.to_chain)}"/>'
        )
    parts.append("</g>")

    parts.append('<g class="nodes">')
    for chain in graph.all_chains:
        if chain in graph.positions:
            parts.append(_render_node(graph, chain))
    parts.append("</g>")

    # Badges last so they stay above nodes
    parts.append('<g class="badges">')
    for edge in graph.edges:
        lx, ly = edge.geometry.label
        parts.append(
            '<g class="badge" '
            f'data-from="{escape(edge.relation.from_chain)}" '
            f'data-to="{escape(edge.relation.to_chain)}">'
            f'<circle cx="{_num(lx)}" cy="{_num(ly)}" r="{BADGE_RADIUS}"/>'
            f'<text x="{_num(lx)}" y="{_num(ly + 3.5)}" text-anchor="middle">'
            f"{edge.relation.count}</text>"
            "</g>"
        )
    parts.append("</g>")

    parts.append("</svg>")
    return "\n".join(parts)
