"""Tests for SVG rendering, the index page and file exporters."""

import xml.etree.ElementTree as ET

import orjson

from chainflow.cli.commands.visualize.exporters import export_to_json, export_to_svg
from chainflow.cli.commands.visualize.templates import (
    generate_html_template,
    get_all_scripts,
    render_svg,
)
from chainflow.core.graph_builder import build_chain_graph
from chainflow.core.view_state import MAX_ZOOM, MIN_ZOOM, ZOOM_STEP

SVG_NS = "{http://www.w3.org/2000/svg}"


class TestRenderSvg:
    """SVG markup of a graph."""

    def test_well_formed_with_nodes_edges_and_badges(self, mixed_table_rules):
        graph = build_chain_graph(mixed_table_rules)
        root = ET.fromstring(render_svg(graph))

        nodes = root.findall(f".//{SVG_NS}g[@class='node builtin']") + root.findall(
            f".//{SVG_NS}g[@class='node custom']"
        )
        edges = root.findall(f".//{SVG_NS}path[@class='edge']")
        badges = root.findall(f".//{SVG_NS}g[@class='badge']")

        assert len(nodes) == len(graph.all_chains)
        assert len(edges) == len(graph.edges)
        assert len(badges) == len(graph.edges)

    def test_canvas_size(self, simple_rules):
        graph = build_chain_graph(simple_rules)
        root = ET.fromstring(render_svg(graph))

        assert float(root.get("width")) == graph.canvas_width
        assert float(root.get("height")) == graph.canvas_height

    def test_badge_shows_relation_count(self, make_rule):
        rules = [make_rule("INPUT", "f2b-sshd") for _ in range(4)]
        svg = render_svg(build_chain_graph(rules))
        root = ET.fromstring(svg)

        texts = [t.text for t in root.findall(f".//{SVG_NS}g[@class='badge']/{SVG_NS}text")]
        assert texts == ["4"]

    def test_badges_name_the_relation(self, make_rule):
        root = ET.fromstring(render_svg(build_chain_graph([make_rule("INPUT", "A")])))
        badge = root.find(f".//{SVG_NS}g[@class='badge']")

        assert badge.get("data-from") == "INPUT"
        assert badge.get("data-to") == "A"

    def test_chain_names_are_escaped(self, make_rule):
        svg = render_svg(build_chain_graph([make_rule("INPUT", "A<B&C")]))

        assert "A&lt;B&amp;C" in svg
        ET.fromstring(svg)

    def test_empty_graph(self):
        root = ET.fromstring(render_svg(build_chain_graph([])))
        assert root.findall(f".//{SVG_NS}path[@class='edge']") == []


class TestIndexPage:
    def test_selected_table_and_embedded_svg(self):
        html = generate_html_template("<svg></svg>", ["all", "filter", "nat"], "nat", "0.3.0")

        assert '<option value="nat" selected>' in html
        assert '<option value="all">' in html
        assert "<svg></svg>" in html
        assert "chainflow 0.3.0" in html

    def test_page_has_canvas_toolbar_and_detail_panel(self):
        html = generate_html_template("<svg></svg>", ["all"], "all", "0.3.0")

        assert '<main id="canvas-container">' in html
        assert '<aside id="detail-panel" hidden>' in html
        for control in ("zoom-in", "zoom-out", "zoom-fit", "zoom-reset"):
            assert f'id="{control}"' in html
        assert get_all_scripts("all") in html


class TestPageScripts:
    """Interaction script embedded in the page."""

    def test_zoom_limits_match_view_state(self):
        script = get_all_scripts("nat")
        config = orjson.loads(
            script.split("const VIEW_CONFIG = ", 1)[1].split(";", 1)[0]
        )

        assert config == {
            "minZoom": MIN_ZOOM,
            "maxZoom": MAX_ZOOM,
            "defaultZoom": 100,
            "zoomStep": ZOOM_STEP,
            "table": "nat",
        }

    def test_table_name_cannot_close_script_element(self):
        script = get_all_scripts("</script><b>")
        assert "</script>" not in script

    def test_handlers_are_wired(self):
        script = get_all_scripts("all")

        assert "addEventListener('wheel', onWheel" in script
        assert "addEventListener('mousedown', onPointerDown)" in script
        assert "addEventListener('click', onCanvasClick)" in script
        assert "`/api/chains/${encodeURIComponent(chain)}?${params}`" in script
        assert "selectChain(badge.dataset.to)" in script
        assert "selectChain(tag.dataset.chain)" in script


class TestExporters:
    def test_export_json(self, tmp_path, simple_rules):
        graph = build_chain_graph(simple_rules)
        path = export_to_json(graph, tmp_path / "out" / "graph.json")

        data = orjson.loads(path.read_bytes())
        assert data["table_filter"] == "all"
        assert {n["chain"] for n in data["nodes"]} == {"INPUT", "CUSTOM1"}

    def test_export_svg(self, tmp_path, simple_rules):
        path = export_to_svg(build_chain_graph(simple_rules), tmp_path / "graph.svg")
        assert path.read_text().startswith("<svg")
