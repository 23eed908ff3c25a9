"""Chain-relationship graph engine.

Submodules, leaf first: ``aggregator`` and ``relations`` fold rules into chain
statistics and jump edges, ``levels`` layers the chains, ``layout_engine``
positions them, ``edge_paths`` draws the jumps and ``view_state`` holds the
pan/zoom/selection state. ``graph_builder`` runs the whole pipeline.
"""

from .exceptions import ChainFlowError, ConfigError, RuleLoadError, RuleParseError

__all__ = ["ChainFlowError", "ConfigError", "RuleLoadError", "RuleParseError"]
