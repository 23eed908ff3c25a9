"""Typed exception hierarchy for chainflow.

Hierarchy
---------
ChainFlowError (base)
├── RuleLoadError      – rule file missing or unreadable
│   └── RuleParseError – malformed JSON / YAML / iptables listing
└── ConfigError        – settings file or value errors

The graph engine itself never raises: malformed rule data is absorbed and a
best-effort layout is produced. These exceptions belong to the loading and
configuration surfaces around it.
"""

from typing import Any


class ChainFlowError(Exception):
    """Base exception for chainflow."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = context or {}


# ── Rule loading ────────────────────────────────────────────────────────


class RuleLoadError(ChainFlowError):
    """Rule source could not be read."""

    pass


class RuleParseError(RuleLoadError):
    """Rule source was read but its content is malformed.

    ``context`` carries ``path`` and, for line-oriented formats, ``line``.
    """

    pass


# ── Configuration ───────────────────────────────────────────────────────


class ConfigError(ChainFlowError):
    """Configuration / validation errors."""

    pass
