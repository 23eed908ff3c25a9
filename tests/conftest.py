"""Shared fixtures for chainflow tests."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import orjson
import pytest
from loguru import logger

from chainflow.core.models import Rule

RuleFactory = Callable[..., Rule]

LISTING_TEXT = """\
Chain INPUT (policy ACCEPT 0 packets, 0 bytes)
num   pkts bytes target     prot opt in     out     source               destination
1      120  9600 ACCEPT     all  --  lo     *       0.0.0.0/0            0.0.0.0/0
2       45  2700 f2b-sshd   tcp  --  *      *       0.0.0.0/0            0.0.0.0/0            tcp dpt:22
3       10   600            all  --  *      *       0.0.0.0/0            0.0.0.0/0

Chain FORWARD (policy DROP 0 packets, 0 bytes)
num   pkts bytes target     prot opt in     out     source               destination

Chain OUTPUT (policy ACCEPT 0 packets, 0 bytes)
num   pkts bytes target     prot opt in     out     source               destination

Chain f2b-sshd (1 references)
num   pkts bytes target     prot opt in     out     source               destination
1        3   180 REJECT     all  --  *      *       203.0.113.7          0.0.0.0/0            reject-with icmp-port-unreachable
2       42  2520 RETURN     all  --  *      *       0.0.0.0/0            0.0.0.0/0
"""

SAVE_TEXT = """\
# Generated by iptables-save v1.8.7
*nat
:PREROUTING ACCEPT [0:0]
:POSTROUTING ACCEPT [0:0]
:DOCKER - [0:0]
[12:720] -A PREROUTING -m addrtype --dst-type LOCAL -j DOCKER
[7:420] -A POSTROUTING -s 172.17.0.0/16 ! -o docker0 -j MASQUERADE
[0:0] -A DOCKER -i docker0 -j RETURN
COMMIT
*filter
:INPUT ACCEPT [0:0]
-A INPUT -p tcp -m tcp --dport 22 -j ACCEPT
COMMIT
"""


@pytest.fixture
def make_rule() -> RuleFactory:
    """Factory building rules with filter-table defaults."""

    def _make(chain: str, target: str = "", table: str = "filter", **kwargs) -> Rule:
        return Rule(chain=chain, target=target, table=table, **kwargs)

    return _make


@pytest.fixture
def simple_rules(make_rule: RuleFactory) -> list[Rule]:
    """INPUT accepts, jumps once to CUSTOM1, which drops."""
    return [
        make_rule("INPUT", "ACCEPT", line_number=1, packets=10, bytes=1000),
        make_rule("INPUT", "CUSTOM1", line_number=2, packets=5, bytes=500),
        make_rule("CUSTOM1", "DROP", line_number=1, packets=2, bytes=120),
    ]


@pytest.fixture
def mixed_table_rules(make_rule: RuleFactory) -> list[Rule]:
    """Rules spread over the nat and filter tables."""
    return [
        make_rule("PREROUTING", "DOCKER", table="nat", packets=12, bytes=720),
        make_rule("DOCKER", "RETURN", table="nat"),
        make_rule("POSTROUTING", "MASQUERADE", table="nat", packets=7),
        make_rule("INPUT", "ACCEPT", packets=100, bytes=6400),
        make_rule("INPUT", "f2b-sshd", packets=45, bytes=2700),
        make_rule("f2b-sshd", "REJECT", packets=3, bytes=180),
        make_rule("FORWARD", "DOCKER-USER"),
        make_rule("DOCKER-USER", "RETURN"),
    ]


@pytest.fixture
def rules_json_file(tmp_path: Path, mixed_table_rules: list[Rule]) -> Path:
    """Mixed-table rules written as a JSON rule file."""
    path = tmp_path / "rules.json"
    path.write_bytes(
        orjson.dumps({"rules": [r.model_dump(exclude_none=True) for r in mixed_table_rules]})
    )
    return path


@pytest.fixture
def listing_file(tmp_path: Path) -> Path:
    """A saved ``iptables -L -n -v --line-numbers`` listing."""
    path = tmp_path / "rules.txt"
    path.write_text(LISTING_TEXT)
    return path


@pytest.fixture
def save_file(tmp_path: Path) -> Path:
    """A saved ``iptables-save -c`` dump."""
    path = tmp_path / "rules.save"
    path.write_text(SAVE_TEXT)
    return path


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore the default log sink after commands reconfigure it."""
    yield
    logger.remove()
    logger.add(sys.stderr, level="WARNING")
