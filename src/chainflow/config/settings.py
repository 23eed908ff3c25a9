"""Layout and server settings for chainflow."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from ..core.exceptions import ConfigError

CONFIG_ENV_VAR = "CHAINFLOW_CONFIG"


@dataclass
class LayoutSettings:
    """Geometry of the chain-flow diagram."""

    # Node rectangle
    node_width: float = 140
    node_height: float = 80

    # Spacing between nodes of one level / between levels
    horizontal_gap: float = 40
    vertical_gap: float = 60
    margin: float = 40

    # Relaxation passes; more passes settle long chains of jumps
    iterations: int = 10

    # Edge curves
    parallel_edge_offset: float = 16  # x shift between edges of one node pair
    curvature: float = 0.15  # control point offset as a share of edge length
    max_curve_offset: float = 60  # cap on the control point offset

    def __post_init__(self) -> None:
        for name in ("node_width", "node_height"):
            if getattr(self, name) <= 0:
                raise ConfigError(
                    f"{name} must be positive", {name: getattr(self, name)}
                )
        for name in (
            "horizontal_gap",
            "vertical_gap",
            "margin",
            "parallel_edge_offset",
        ):
            if getattr(self, name) < 0:
                raise ConfigError(
                    f"{name} must not be negative", {name: getattr(self, name)}
                )
        if self.iterations < 0:
            raise ConfigError(
                "iterations must not be negative", {"iterations": self.iterations}
            )
        if not 0 <= self.curvature <= 1:
            raise ConfigError(
                "curvature must be within [0, 1]", {"curvature": self.curvature}
            )

    @property
    def min_spacing(self) -> float:
        """Minimum center-to-center distance of two chains on one level."""
        return self.node_width + self.horizontal_gap


@dataclass
class ServerSettings:
    """Visualization server options."""

    host: str = "127.0.0.1"
    port: int = 8080
    port_range_end: int = 8099
    auto_open: bool = True

    def __post_init__(self) -> None:
        if not 0 < self.port <= 65535:
            raise ConfigError("port must be within 1-65535", {"port": self.port})
        if self.port_range_end < self.port:
            raise ConfigError(
                "port_range_end must not be below port",
                {"port": self.port, "port_range_end": self.port_range_end},
            )


@dataclass
class ChainFlowConfig:
    """Complete chainflow configuration."""

    layout: LayoutSettings = field(default_factory=LayoutSettings)
    server: ServerSettings = field(default_factory=ServerSettings)
    default_table: str = "all"

    @classmethod
    def load(cls, path: Path) -> ChainFlowConfig:
        """Load configuration from a YAML file.

        A missing file yields the defaults.

        Args:
            path: Path to YAML configuration file

        Returns:
            ChainFlowConfig instance

        Raises:
            ConfigError: If the file is not valid YAML or holds unknown keys
        """
        if not path.exists():
            return cls()

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Invalid YAML in {path}: {e}", {"path": str(path)}
            ) from e

        if not isinstance(data, dict):
            raise ConfigError(
                f"Configuration in {path} must be a mapping", {"path": str(path)}
            )
        return cls.from_dict(data)

    @classmethod
    def from_env(cls) -> ChainFlowConfig:
        """Load the file named by ``CHAINFLOW_CONFIG``, or the defaults."""
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if not env_path:
            return cls()
        return cls.load(Path(env_path))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChainFlowConfig:
        """Create config from dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            ChainFlowConfig instance
        """
        layout_data = data.get("layout") or {}
        server_data = data.get("server") or {}

        return cls(
            layout=_build(LayoutSettings, layout_data, "layout"),
            server=_build(ServerSettings, server_data, "server"),
            default_table=str(data.get("default_table", "all")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "layout": asdict(self.layout),
            "server": asdict(self.server),
            "default_table": self.default_table,
        }


def _build(settings_cls: type, data: dict[str, Any], section: str) -> Any:
    if not isinstance(data, dict):
        raise ConfigError(
            f"Section '{section}' must be a mapping", {"section": section}
        )

    known = {f.name for f in fields(settings_cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(
            f"Unknown {section} settings: {', '.join(unknown)}",
            {"section": section, "unknown": unknown},
        )
    return settings_cls(**data)
