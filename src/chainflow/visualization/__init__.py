"""Public API for chain graph building and visualization.

This module re-exports the graph engine and the visualization components
from their internal implementation paths, providing a stable public
interface for external consumers.

Exported symbols:

Graph building:
    build_chain_graph: Run the full pipeline for a rule list and table filter.
    chain_detail: Rules, incoming and outgoing jumps of one chain.
    ChainGraph / ChainDetail: Results of the two functions above.
    load_rules: Read rules from JSON, YAML or iptables text files.

View state:
    ViewState: Immutable pan/zoom/selection state.
    reduce: Apply one UI event to a ViewState.

Exporters:
    export_to_json: Export graph data to a JSON file.
    export_to_svg: Export a standalone SVG drawing.

Templates:
    render_svg: Render a graph as SVG markup.
    generate_html_template: Build the HTML page embedding the SVG.

Server:
    create_app: FastAPI application serving the graph for a rule file.
    find_free_port: Find an available TCP port for the local server.
    start_visualization_server: Start the HTTP visualization server.

Example::

    from chainflow.visualization import build_chain_graph, export_to_svg, load_rules

    graph = build_chain_graph(load_rules(Path("rules.txt")), table_filter="nat")
    export_to_svg(graph, output_path=Path("nat.svg"))
"""

from chainflow.cli.commands.visualize.exporters import export_to_json, export_to_svg
from chainflow.cli.commands.visualize.server import (
    create_app,
    find_free_port,
    start_visualization_server,
)
from chainflow.cli.commands.visualize.templates import (
    generate_html_template,
    render_svg,
)
from chainflow.core.graph_builder import (
    ChainDetail,
    ChainGraph,
    build_chain_graph,
    chain_detail,
)
from chainflow.core.rule_parser import load_rules
from chainflow.core.view_state import ViewState, reduce

__all__ = [
    "ChainDetail",
    "ChainGraph",
    "ViewState",
    "build_chain_graph",
    "chain_detail",
    "create_app",
    "export_to_json",
    "export_to_svg",
    "find_free_port",
    "generate_html_template",
    "load_rules",
    "reduce",
    "render_svg",
    "start_visualization_server",
]
