"""Tests for chainflow settings."""

from pathlib import Path

import pytest
import yaml

from chainflow.config.settings import (
    CONFIG_ENV_VAR,
    ChainFlowConfig,
    LayoutSettings,
    ServerSettings,
)
from chainflow.core.exceptions import ConfigError


class TestLayoutSettings:
    """Validation of layout geometry."""

    def test_defaults(self):
        settings = LayoutSettings()

        assert (settings.node_width, settings.node_height) == (140, 80)
        assert settings.iterations == 10
        assert settings.min_spacing == 180

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"node_width": 0},
            {"node_height": -1},
            {"horizontal_gap": -5},
            {"iterations": -1},
            {"curvature": 1.5},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            LayoutSettings(**kwargs)


class TestServerSettings:
    def test_invalid_port(self):
        with pytest.raises(ConfigError):
            ServerSettings(port=70000)

    def test_range_end_below_port(self):
        with pytest.raises(ConfigError):
            ServerSettings(port=9000, port_range_end=8000)


class TestChainFlowConfig:
    """Loading from YAML and dicts."""

    def test_missing_file_gives_defaults(self, tmp_path: Path):
        config = ChainFlowConfig.load(tmp_path / "absent.yaml")
        assert config == ChainFlowConfig()

    def test_load_yaml(self, tmp_path: Path):
        path = tmp_path / "chainflow.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "layout": {"node_width": 160, "iterations": 4},
                    "server": {"port": 9000, "port_range_end": 9010},
                    "default_table": "nat",
                }
            )
        )
        config = ChainFlowConfig.load(path)

        assert config.layout.node_width == 160
        assert config.layout.iterations == 4
        assert config.layout.node_height == 80
        assert config.server.port == 9000
        assert config.default_table == "nat"

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert ChainFlowConfig.load(path) == ChainFlowConfig()

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("layout: [oops")

        with pytest.raises(ConfigError) as exc_info:
            ChainFlowConfig.load(path)
        assert exc_info.value.context["path"] == str(path)

    def test_non_mapping(self, tmp_path: Path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(ConfigError):
            ChainFlowConfig.load(path)

    def test_unknown_keys_are_rejected(self):
        with pytest.raises(ConfigError) as exc_info:
            ChainFlowConfig.from_dict({"layout": {"node_widht": 10}})
        assert exc_info.value.context["unknown"] == ["node_widht"]

    def test_section_must_be_mapping(self):
        with pytest.raises(ConfigError):
            ChainFlowConfig.from_dict({"server": 8080})

    def test_to_dict_from_dict(self):
        config = ChainFlowConfig(layout=LayoutSettings(margin=10), default_table="raw")
        assert ChainFlowConfig.from_dict(config.to_dict()) == config

    def test_from_env(self, tmp_path: Path, monkeypatch):
        path = tmp_path / "env.yaml"
        path.write_text("default_table: mangle\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

        assert ChainFlowConfig.from_env().default_table == "mangle"

    def test_from_env_unset(self, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        assert ChainFlowConfig.from_env() == ChainFlowConfig()
