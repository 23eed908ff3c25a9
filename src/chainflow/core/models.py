"""Data models for the chain-relationship graph.

``Rule`` is the external record handed over by the rule-list collaborator and
is validated at the boundary with pydantic. Everything derived from it
(``ChainStats``, ``ChainRelation``, ``NodePosition``) is a plain dataclass,
recomputed from scratch on every aggregation pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Rule(BaseModel):
    """A single iptables rule as listed by the firewall backend."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int | None = None
    table: str = Field(default="", description="filter, nat, mangle, raw, security")
    chain: str = Field(default="", description="Chain owning the rule")
    line_number: int = Field(default=0, ge=0)
    target: str = Field(default="", description="Verdict or jump target")
    protocol: str = ""
    source: str = ""
    destination: str = ""
    sport: str = ""
    dport: str = ""
    packets: int = 0
    bytes: int = 0
    options: str = ""
    raw_rule: str = ""

    @field_validator("packets", "bytes", "line_number", mode="before")
    @classmethod
    def _absent_counter_is_zero(cls, value: Any) -> Any:
        return 0 if value is None or value == "" else value

    @field_validator(
        "table",
        "chain",
        "target",
        "protocol",
        "source",
        "destination",
        "sport",
        "dport",
        "options",
        "raw_rule",
        mode="before",
    )
    @classmethod
    def _absent_text_is_empty(cls, value: Any) -> Any:
        if value is None:
            return ""
        return str(value).strip()


@dataclass
class ChainStats:
    """Per-chain counters folded from the filtered rule set."""

    chain: str
    tables: set[str] = field(default_factory=set)
    rule_count: int = 0
    packets: int = 0
    bytes: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "chain": self.chain,
            "tables": sorted(self.tables),
            "rule_count": self.rule_count,
            "packets": self.packets,
            "bytes": self.bytes,
        }


@dataclass
class ChainRelation:
    """A directed, weighted jump from one chain to another.

    ``table`` is the table of the rule that first created the edge; later
    rules for the same pair never overwrite it.
    """

    from_chain: str
    to_chain: str
    count: int = 0
    table: str = ""

    @property
    def key(self) -> tuple[str, str]:
        return (self.from_chain, self.to_chain)

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.from_chain,
            "to": self.to_chain,
            "count": self.count,
            "table": self.table,
        }


@dataclass(frozen=True)
class NodePosition:
    """Top-left anchored rectangle of a chain node on the canvas."""

    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def top_center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y)

    @property
    def bottom_center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height)

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}
