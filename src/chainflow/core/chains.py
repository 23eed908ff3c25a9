"""Chain identity vocabulary.

Built-in chains are the five netfilter hooks every packet traverses; anything
else is a custom chain reached through a jump. Rule targets are either
terminal verdicts / extension targets or the name of another chain.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# Fixed traversal order, also the BFS root order and level-0 ordering.
BUILTIN_CHAINS: tuple[str, ...] = (
    "PREROUTING",
    "INPUT",
    "FORWARD",
    "OUTPUT",
    "POSTROUTING",
)

# Targets that end evaluation or are handled by an extension module rather
# than by handing the packet to another chain.
TERMINAL_TARGETS: frozenset[str] = frozenset(
    {
        # Verdicts
        "ACCEPT",
        "DROP",
        "REJECT",
        "RETURN",
        "QUEUE",
        "NFQUEUE",
        # NAT
        "SNAT",
        "DNAT",
        "MASQUERADE",
        "REDIRECT",
        "NETMAP",
        # Logging
        "LOG",
        "NFLOG",
        "ULOG",
        "AUDIT",
        "TRACE",
        # Marking / mangling
        "MARK",
        "CONNMARK",
        "CONNSECMARK",
        "SECMARK",
        "CLASSIFY",
        "TOS",
        "DSCP",
        "TTL",
        "HL",
        "ECN",
        "TCPMSS",
        "CHECKSUM",
        "HMARK",
        # Conntrack / misc extensions
        "CT",
        "NOTRACK",
        "TPROXY",
        "SET",
        "TEE",
        "IDLETIMER",
        "LED",
        "RATEEST",
        "SYNPROXY",
        "CLUSTERIP",
    }
)

OTHER_GROUP = "OTHER"

# (prefix, group) checked in order; first match wins.
TOOL_PREFIXES: tuple[tuple[str, str], ...] = (
    ("KUBE-", "KUBE"),
    ("DOCKER", "DOCKER"),
    ("CNI-", "CNI"),
    ("cali-", "CALICO"),
    ("CILIUM_", "CILIUM"),
    ("FLANNEL", "FLANNEL"),
    ("WEAVE", "WEAVE"),
    ("ISTIO_", "ISTIO"),
    ("LIBVIRT_", "LIBVIRT"),
    ("f2b-", "FAIL2BAN"),
    ("ufw6-", "UFW"),
    ("ufw-", "UFW"),
    ("sshguard", "SSHGUARD"),
    ("crowdsec", "CROWDSEC"),
)

_LEADING_TOKEN = re.compile(r"^([A-Z][A-Z0-9]*)[-_]")


@dataclass(frozen=True)
class ChainStyle:
    """Presentation attributes of a chain node."""

    color: str
    icon: str
    description: str


CHAIN_STYLES: dict[str, ChainStyle] = {
    "PREROUTING": ChainStyle(
        "#f59e0b", "import", "Before routing decision (nat, mangle, raw)"
    ),
    "INPUT": ChainStyle("#10b981", "arrow-down", "Incoming traffic to local system"),
    "FORWARD": ChainStyle("#a855f7", "swap", "Traffic passing through (routing)"),
    "OUTPUT": ChainStyle("#3b82f6", "arrow-up", "Outgoing traffic from local system"),
    "POSTROUTING": ChainStyle(
        "#ec4899", "export", "After routing decision (nat, mangle)"
    ),
}

CUSTOM_CHAIN_STYLE = ChainStyle("#64748b", "node-index", "Custom chain")

TABLE_COLORS: dict[str, str] = {
    "filter": "#3b82f6",
    "nat": "#10b981",
    "mangle": "#a855f7",
    "raw": "#f59e0b",
    "security": "#64748b",
}

DEFAULT_TABLE_COLOR = "#64748b"


def is_builtin(chain: str) -> bool:
    return chain in BUILTIN_CHAINS


def is_terminal_target(target: str) -> bool:
    """Return True if ``target`` is a verdict or extension target."""
    return target.upper() in TERMINAL_TARGETS


def is_jump_target(target: str | None) -> bool:
    """Return True if ``target`` hands evaluation to another chain.

    Empty targets (rules that only count traffic) are not jumps.
    """
    if not target:
        return False
    return not is_terminal_target(target)


def chain_group(chain: str) -> str:
    """Derive the display group of a chain.

    Built-ins form their own group. Custom chains are grouped by a known
    orchestration-tool prefix, then by their leading upper-case token
    (``ZONE_lan`` -> ``ZONE``), and fall back to ``OTHER``.
    """
    if is_builtin(chain):
        return chain
    for prefix, group in TOOL_PREFIXES:
        if chain.startswith(prefix):
            return group
    match = _LEADING_TOKEN.match(chain)
    if match:
        return match.group(1)
    return OTHER_GROUP


def chain_style(chain: str) -> ChainStyle:
    return CHAIN_STYLES.get(chain, CUSTOM_CHAIN_STYLE)


def table_color(table: str) -> str:
    return TABLE_COLORS.get(table, DEFAULT_TABLE_COLOR)
