"""Export chain graphs to JSON and SVG files."""

from pathlib import Path

import orjson
from loguru import logger

from ....core.graph_builder import ChainGraph
from .templates import render_svg


def graph_to_json(graph: ChainGraph) -> bytes:
    """Serialize ``graph`` to indented JSON bytes."""
    return orjson.dumps(graph.to_dict(), option=orjson.OPT_INDENT_2)


def export_to_json(graph: ChainGraph, output_path: Path) -> Path:
    """Write the graph JSON consumed by the browser view.

    Args:
        graph: Chain graph to export
        output_path: Destination file; parent directories are created

    Returns:
        The written path
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(graph_to_json(graph))
    logger.debug(f"Exported graph JSON to {output_path}")
    return output_path


def export_to_svg(graph: ChainGraph, output_path: Path) -> Path:
    """Write a standalone SVG drawing of the graph."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_svg(graph), encoding="utf-8")
    logger.debug(f"Exported graph SVG to {output_path}")
    return output_path
