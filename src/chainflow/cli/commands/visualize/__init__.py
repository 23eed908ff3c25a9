"""Chain-flow visualization: SVG drawing, exporters and HTTP server."""

from .exporters import export_to_json, export_to_svg, graph_to_json
from .server import create_app, find_free_port, start_visualization_server
from .templates import generate_html_template, render_svg

__all__ = [
    "create_app",
    "export_to_json",
    "export_to_svg",
    "find_free_port",
    "generate_html_template",
    "graph_to_json",
    "render_svg",
    "start_visualization_server",
]
