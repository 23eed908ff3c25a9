"""CSS styles for the chain-flow page and SVG drawing."""


def get_base_styles() -> str:
    """Get base styles for body and page layout.

    Returns:
        CSS string for base styling
    """
    return """
        body {
            margin: 0;
            height: 100vh;
            display: flex;
            flex-direction: column;
            font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
            background: #0d1117;
            color: #c9d1d9;
        }

        header {
            display: flex;
            align-items: center;
            gap: 16px;
            padding: 12px 20px;
            border-bottom: 1px solid #30363d;
        }

        h1 { margin: 0; font-size: 18px; }

        select, button {
            background: #161b22;
            color: #c9d1d9;
            border: 1px solid #30363d;
            border-radius: 6px;
            padding: 4px 8px;
            cursor: pointer;
        }

        button:hover { border-color: #58a6ff; }

        #main-container {
            flex: 1;
            display: flex;
            min-height: 0;
        }

        #canvas-container {
            flex: 1;
            overflow: hidden;
            position: relative;
            cursor: grab;
        }

        #canvas-container.panning { cursor: grabbing; }

        #canvas {
            transform-origin: 0 0;
            padding: 20px;
            width: max-content;
        }
    """


def get_toolbar_styles() -> str:
    """Get styles for the zoom toolbar.

    Returns:
        CSS string for toolbar buttons and zoom readout
    """
    return """
        .toolbar {
            display: flex;
            align-items: center;
            gap: 6px;
        }

        #zoom-level {
            min-width: 44px;
            text-align: center;
            font-variant-numeric: tabular-nums;
        }
    """


def get_detail_panel_styles() -> str:
    """Get styles for the chain detail panel.

    Returns:
        CSS string for the side panel, relation tags and rule table
    """
    return """
        #detail-panel {
            width: 420px;
            overflow-y: auto;
            padding: 16px 20px;
            border-left: 1px solid #30363d;
            background: #161b22;
        }

        #detail-panel[hidden] { display: none; }

        .detail-header {
            display: flex;
            justify-content: space-between;
            align-items: center;
        }

        .detail-header h2 { margin: 0; font-size: 16px; }
        #detail-panel h3 { font-size: 13px; margin: 16px 0 6px; }

        .muted { color: #8b949e; }
        .error { color: #f85149; }

        .relation-tag { margin: 2px 0; font-size: 12px; }
        .relation-tag .count {
            background: #1f6feb;
            color: #ffffff;
            border-radius: 8px;
            padding: 0 6px;
        }

        table.rules {
            width: 100%;
            border-collapse: collapse;
            font-size: 12px;
        }

        table.rules th, table.rules td {
            text-align: left;
            padding: 3px 6px;
            border-bottom: 1px solid #30363d;
        }

        table.rules td.target { font-weight: 600; }
    """


def get_svg_styles() -> str:
    """Get styles embedded in the SVG document.

    Returns:
        CSS string for nodes, edges and count badges
    """
    return """
        .node rect { stroke-width: 2; rx: 8; }
        .node.builtin rect { fill-opacity: 0.18; }
        .node.custom rect { fill: #161b22; }
        .node.selected rect { stroke: #f0f6fc; stroke-width: 3; }
        .node .name { font: 600 13px sans-serif; fill: #e6edf3; }
        .node .meta { font: 11px sans-serif; fill: #8b949e; }
        .node, .badge { cursor: pointer; }
        .edge { fill: none; stroke: #8b949e; stroke-width: 1.5; }
        .badge circle { fill: #1f6feb; }
        .badge text { font: 600 10px sans-serif; fill: #ffffff; }
    """


def get_all_styles() -> str:
    """Get all page styles combined.

    Returns:
        Complete CSS string
    """
    return (
        get_base_styles()
        + get_toolbar_styles()
        + get_detail_panel_styles()
        + get_svg_styles()
    )
