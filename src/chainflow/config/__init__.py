"""Configuration for chainflow."""

from .settings import ChainFlowConfig, LayoutSettings, ServerSettings

__all__ = ["ChainFlowConfig", "LayoutSettings", "ServerSettings"]
