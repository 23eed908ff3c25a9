"""Integration tests for the visualization server."""

import re
import socket

import pytest
from fastapi.testclient import TestClient

from chainflow.cli.commands.visualize.server import create_app, find_free_port
from chainflow.config.settings import ChainFlowConfig


@pytest.fixture
def client(rules_json_file):
    return TestClient(create_app(rules_json_file))


class TestGraphEndpoints:
    """JSON API served for the browser view."""

    def test_tables(self, client):
        response = client.get("/api/tables")

        assert response.status_code == 200
        assert response.json() == {"tables": ["all", "filter", "nat"], "default": "all"}

    def test_graph_all_tables(self, client):
        data = client.get("/api/graph").json()

        chains = {node["chain"] for node in data["nodes"]}
        assert {"INPUT", "PREROUTING", "DOCKER-USER", "f2b-sshd"} <= chains
        assert data["table_filter"] == "all"
        assert len(data["edges"]) == len(data["relations"])

    def test_graph_table_filter(self, client):
        data = client.get("/api/graph", params={"table": "nat"}).json()

        assert {node["chain"] for node in data["nodes"]} == {
            "PREROUTING",
            "DOCKER",
            "POSTROUTING",
        }
        assert data["relations"] == [
            {"from": "PREROUTING", "to": "DOCKER", "count": 1, "table": "nat"}
        ]

    def test_configured_default_table(self, rules_json_file):
        client = TestClient(
            create_app(rules_json_file, ChainFlowConfig(default_table="filter"))
        )
        data = client.get("/api/graph").json()

        assert data["table_filter"] == "filter"
        assert "PREROUTING" not in {node["chain"] for node in data["nodes"]}

    def test_chain_detail(self, client):
        response = client.get("/api/chains/f2b-sshd")

        assert response.status_code == 200
        detail = response.json()
        assert detail["rule_count"] == 1
        assert detail["incoming"][0]["from"] == "INPUT"
        assert detail["rules"][0]["target"] == "REJECT"

    def test_unknown_chain(self, client):
        response = client.get("/api/chains/NOPE")

        assert response.status_code == 404
        assert response.json()["chain"] == "NOPE"

    def test_chain_outside_filter(self, client):
        response = client.get("/api/chains/INPUT", params={"table": "nat"})
        assert response.status_code == 404

    def test_svg(self, client):
        response = client.get("/api/graph.svg", params={"table": "filter"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("image/svg+xml")
        assert response.text.startswith("<svg")

    def test_index_page(self, client):
        response = client.get("/", params={"table": "nat"})

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert '<option value="nat" selected>' in response.text
        assert "<svg" in response.text

    def test_index_page_is_interactive(self, client):
        html = client.get("/", params={"table": "nat"}).text

        assert '"table":"nat"' in html
        assert "addEventListener('wheel', onWheel" in html
        assert "addEventListener('click', onCanvasClick)" in html
        assert "/api/chains/${encodeURIComponent(chain)}" in html
        assert "function fitToContainer()" in html
        assert "function resetView()" in html

    def test_every_clickable_chain_has_detail(self, client):
        html = client.get("/", params={"table": "nat"}).text
        svg = html[html.index("<svg") : html.index("</svg>")]
        chains = set(re.findall(r'data-(?:chain|to)="([^"]+)"', svg))

        assert chains == {"PREROUTING", "DOCKER", "POSTROUTING"}
        for chain in chains:
            response = client.get(f"/api/chains/{chain}", params={"table": "nat"})
            assert response.status_code == 200
            assert response.json()["chain"] == chain

    def test_rules_are_reread_per_request(self, client, rules_json_file):
        assert client.get("/api/tables").json()["tables"] == ["all", "filter", "nat"]

        rules_json_file.write_text('[{"table": "raw", "chain": "PREROUTING", "target": "CT"}]')
        assert client.get("/api/tables").json()["tables"] == ["all", "raw"]


class TestErrors:
    """Broken rule files surface as HTTP errors."""

    def test_malformed_rules(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{")
        client = TestClient(create_app(path))

        for url in ("/api/tables", "/api/graph", "/api/chains/INPUT", "/api/graph.svg", "/"):
            response = client.get(url)
            assert response.status_code == 500
            assert "Invalid JSON" in response.json()["error"]

    def test_missing_rules(self, tmp_path):
        client = TestClient(create_app(tmp_path / "gone.json"))
        response = client.get("/api/graph")

        assert response.status_code == 500
        assert "not found" in response.json()["error"]


class TestFindFreePort:
    def test_returns_port_in_range(self):
        port = find_free_port(20000, 20100)
        assert 20000 <= port <= 20100

    def test_skips_busy_port(self):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as busy:
            busy.bind(("", 0))
            taken = busy.getsockname()[1]

            with pytest.raises(OSError):
                find_free_port(taken, taken)
