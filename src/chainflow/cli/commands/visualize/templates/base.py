"""HTML page served at the root of the visualization server."""

from html import escape

from .scripts import get_all_scripts
from .styles import get_all_styles


def generate_html_template(
    svg: str, tables: list[str], table_filter: str, version: str
) -> str:
    """Generate the index page embedding the rendered graph.

    The SVG sits inside a pannable, zoomable canvas. Clicking a chain opens
    its detail panel, loaded from ``/api/chains/{chain}``.

    Args:
        svg: SVG markup of the chain graph
        tables: Table filter options, ``"all"`` first
        table_filter: Currently selected filter
        version: chainflow version shown in the header

    Returns:
        Complete HTML string
    """
    options = "\n".join(
        f'<option value="{escape(t)}"{" selected" if t == table_filter else ""}>'
        f"{escape(t)}</option>"
        for t in tables
    )
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>iptables chain flow</title>
    <style>
{get_all_styles()}
    </style>
</head>
<body>
    <header>
        <h1>iptables chain flow</h1>
        <form method="get" action="/">
            <label for="table">Table</label>
            <select id="table" name="table" onchange="this.form.submit()">
{options}
            </select>
        </form>
        <div class="toolbar">
            <button id="zoom-out" title="Zoom out">&minus;</button>
            <span id="zoom-level">100%</span>
            <button id="zoom-in" title="Zoom in">+</button>
            <button id="zoom-fit" title="Fit to window">Fit</button>
            <button id="zoom-reset" title="Reset view">Reset</button>
        </div>
        <small>chainflow {escape(version)}</small>
    </header>
    <div id="main-container">
        <main id="canvas-container">
            <div id="canvas">
{svg}
            </div>
        </main>
        <aside id="detail-panel" hidden></aside>
    </div>
    <script>
{get_all_scripts(table_filter)}
    </script>
</body>
</html>
"""
