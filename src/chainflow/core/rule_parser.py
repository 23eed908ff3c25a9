"""Load rule records from files.

Supported sources:
    - JSON: a list of rule objects, or ``{"rules": [...]}``
    - YAML: the same two shapes
    - ``iptables -L -n -v [-x] [--line-numbers]`` listings, optionally several
      tables concatenated with ``# table: <name>`` markers or the echoed
      ``iptables -t <name> ...`` command in front of each
    - ``iptables-save [-c]`` dumps

Listings are parsed column-wise from their ``num pkts bytes target ...``
header, so output with or without line numbers, counters or the ``opt``
column is understood. Rules without a target (pure counting rules) keep an
empty target.
"""

from __future__ import annotations

import re
import shlex
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import orjson
import yaml
from loguru import logger
from pydantic import ValidationError

from .exceptions import RuleLoadError, RuleParseError
from .models import Rule

DEFAULT_TABLE = "filter"

JSON_SUFFIXES = {".json"}
YAML_SUFFIXES = {".yaml", ".yml"}

# Column layout of `iptables -L -n -v --line-numbers`
DEFAULT_COLUMNS = (
    "num",
    "pkts",
    "bytes",
    "target",
    "prot",
    "opt",
    "in",
    "out",
    "source",
    "destination",
)

_COUNTER = re.compile(r"^(\d+)([KMGTP]?)$")
_OPT = re.compile(r"^(--|-f|!f)$")
_CHAIN_HEADER = re.compile(r"^Chain\s+(\S+)")
_TABLE_MARKER = re.compile(r"^#\s*table:?\s*([\w-]+)\s*$", re.IGNORECASE)
_COMMAND_ECHO = re.compile(
    r"^(?:[#$]\s*)?(?:sudo\s+)?ip6?tables(?:-legacy|-nft)?\s"
    r".*?(?:-t|--table)\s+([\w-]+)"
)
_SAVE_COUNTERS = re.compile(r"^\[(\d+):(\d+)\]\s*")
_PORT_OPTION = {
    "sport": re.compile(r"spts?:(\S+)"),
    "dport": re.compile(r"dpts?:(\S+)"),
}

_SUFFIX_MULTIPLIER = {
    "": 1,
    "K": 10**3,
    "M": 10**6,
    "G": 10**9,
    "T": 10**12,
    "P": 10**15,
}


def parse_counter(token: str) -> int:
    """Parse a packet/byte counter, including iptables' K/M/G suffixes."""
    match = _COUNTER.match(token)
    if not match:
        raise ValueError(f"not a counter: {token!r}")
    return int(match.group(1)) * _SUFFIX_MULTIPLIER[match.group(2)]


def detect_format(text: str) -> str:
    """Return ``"listing"`` or ``"save"`` for raw iptables text."""
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("Chain "):
            return "listing"
        if stripped.startswith(("-A ", ":", "COMMIT")):
            return "save"
        if _SAVE_COUNTERS.match(stripped):
            return "save"
    return "listing"


# ── iptables -L ─────────────────────────────────────────────────────────


def _ports(options: str) -> dict[str, str]:
    ports = {}
    for name, pattern in _PORT_OPTION.items():
        match = pattern.search(options)
        if match:
            ports[name] = match.group(1)
    return ports


def _split_listing_row(
    tokens: list[str], columns: tuple[str, ...]
) -> tuple[dict[str, str], list[str]]:
    """Map row tokens onto header columns; the target column may be blank."""
    has_target = True
    if "opt" in columns:
        opt_index = columns.index("opt")
        if len(tokens) > opt_index and _OPT.match(tokens[opt_index]):
            has_target = True
        elif 0 < opt_index <= len(tokens) and _OPT.match(tokens[opt_index - 1]):
            has_target = False
    elif len(tokens) < len(columns):
        has_target = False

    present = [c for c in columns if has_target or c != "target"]
    if len(tokens) < len(present):
        raise ValueError(f"expected {len(present)} columns, got {len(tokens)}")

    values = dict(zip(present, tokens, strict=False))
    return values, tokens[len(present) :]


def parse_iptables_listing(text: str, table: str = DEFAULT_TABLE) -> list[Rule]:
    """Parse ``iptables -L -n -v`` output into rules.

    Args:
        text: Listing output, possibly several tables concatenated
        table: Table of the rules until a table marker says otherwise

    Returns:
        Rules in listing order

    Raises:
        RuleParseError: If a rule row does not match the column header
    """
    rules: list[Rule] = []
    columns = DEFAULT_COLUMNS
    current_table = table
    current_chain: str | None = None
    position = 0

    for lineno, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped:
            continue

        marker = _TABLE_MARKER.match(stripped) or _COMMAND_ECHO.match(stripped)
        if marker and not stripped.startswith("Chain "):
            current_table = marker.group(1)
            current_chain = None
            continue

        header = _CHAIN_HEADER.match(stripped)
        if header:
            current_chain = header.group(1)
            position = 0
            continue

        tokens = stripped.split()
        if "target" in tokens and "source" in tokens:
            columns = tuple(tokens)
            continue

        if current_chain is None:
            logger.debug(f"Line {lineno}: ignoring text outside a chain: {stripped!r}")
            continue

        try:
            values, rest = _split_listing_row(tokens, columns)
            packets = parse_counter(values["pkts"]) if "pkts" in values else 0
            byte_count = parse_counter(values["bytes"]) if "bytes" in values else 0
            position += 1
            line_number = int(values["num"]) if "num" in values else position
        except (ValueError, KeyError) as e:
            raise RuleParseError(
                f"Line {lineno}: malformed rule row in chain {current_chain}: {e}",
                {"line": lineno, "chain": current_chain, "text": stripped},
            ) from e

        options = " ".join(rest)
        rules.append(
            Rule(
                table=current_table,
                chain=current_chain,
                line_number=line_number,
                target=values.get("target", ""),
                protocol=values.get("prot", ""),
                source=values.get("source", ""),
                destination=values.get("destination", ""),
                packets=packets,
                bytes=byte_count,
                options=options,
                raw_rule=line,
                **_ports(options),
            )
        )

    return rules


# ── iptables-save ───────────────────────────────────────────────────────

_SAVE_FIELDS = {
    "-p": "protocol",
    "--protocol": "protocol",
    "-s": "source",
    "--source": "source",
    "--src": "source",
    "-d": "destination",
    "--destination": "destination",
    "--dst": "destination",
    "--sport": "sport",
    "--source-port": "sport",
    "--dport": "dport",
    "--destination-port": "dport",
}
_SAVE_TARGET_FLAGS = {"-j", "--jump", "-g", "--goto"}


def _parse_save_rule(line: str, table: str, positions: dict[str, int]) -> Rule:
    packets = byte_count = 0
    body = line
    counters = _SAVE_COUNTERS.match(body)
    if counters:
        packets, byte_count = int(counters.group(1)), int(counters.group(2))
        body = body[counters.end() :]

    tokens = shlex.split(body)
    fields: dict[str, str] = {}
    options: list[str] = []
    chain = target = ""
    negate = False
    i = 0
    while i < len(tokens):
        token = tokens[i]
        value = tokens[i + 1] if i + 1 < len(tokens) else None
        if token == "!":
            negate = True
            i += 1
            continue
        if token in ("-A", "--append") and value is not None:
            chain = value
        elif token in _SAVE_TARGET_FLAGS and value is not None:
            target = value
        elif token == "-c" and i + 2 < len(tokens):
            packets, byte_count = int(tokens[i + 1]), int(tokens[i + 2])
            i += 3
            continue
        elif token in _SAVE_FIELDS and value is not None:
            fields[_SAVE_FIELDS[token]] = f"!{value}" if negate else value
            if token.endswith("port"):
                options.append(f"{token} {value}")
        else:
            options.append(f"! {token}" if negate else token)
            negate = False
            i += 1
            continue
        negate = False
        i += 2

    if not chain:
        raise ValueError("rule without -A <chain>")

    positions[chain] = positions.get(chain, 0) + 1
    return Rule(
        table=table,
        chain=chain,
        line_number=positions[chain],
        target=target,
        protocol=fields.get("protocol", "all"),
        source=fields.get("source", ""),
        destination=fields.get("destination", ""),
        sport=fields.get("sport", ""),
        dport=fields.get("dport", ""),
        packets=packets,
        bytes=byte_count,
        options=" ".join(options),
        raw_rule=line,
    )


def parse_iptables_save(text: str) -> list[Rule]:
    """Parse an ``iptables-save`` dump into rules.

    Raises:
        RuleParseError: For rules outside a ``*table`` section or lines that
            cannot be tokenized
    """
    rules: list[Rule] = []
    table: str | None = None
    positions: dict[str, int] = {}

    for lineno, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if stripped.startswith("*"):
            table = stripped[1:].strip()
            positions = {}
            continue
        if stripped == "COMMIT" or stripped.startswith(":"):
            continue

        if table is None:
            raise RuleParseError(
                f"Line {lineno}: rule outside a *table section",
                {"line": lineno, "text": stripped},
            )
        try:
            rules.append(_parse_save_rule(stripped, table, positions))
        except ValueError as e:
            raise RuleParseError(
                f"Line {lineno}: {e}", {"line": lineno, "text": stripped}
            ) from e

    return rules


# ── Structured data / files ─────────────────────────────────────────────


def rules_from_data(data: Any) -> list[Rule]:
    """Validate decoded JSON/YAML into rules.

    Raises:
        RuleParseError: If the shape is wrong or a record fails validation
    """
    if isinstance(data, dict) and "rules" in data:
        data = data["rules"]
    if data is None:
        return []
    if not isinstance(data, list):
        raise RuleParseError(
            "Rule data must be a list of rules or an object with a 'rules' list",
            {"type": type(data).__name__},
        )

    rules = []
    for index, item in enumerate(data):
        try:
            rules.append(Rule.model_validate(item))
        except ValidationError as e:
            raise RuleParseError(
                f"Rule #{index} is invalid: {e.error_count()} validation error(s)",
                {"index": index, "errors": e.errors(include_url=False)},
            ) from e
    return rules


def parse_rules_text(text: str, table: str = DEFAULT_TABLE) -> list[Rule]:
    """Parse raw iptables text, detecting listing vs. save format."""
    if detect_format(text) == "save":
        return parse_iptables_save(text)
    return parse_iptables_listing(text, table=table)


def load_rules(path: Path, table: str = DEFAULT_TABLE) -> list[Rule]:
    """Load rules from a JSON, YAML or iptables text file.

    Args:
        path: Rule file
        table: Default table for listings without table markers

    Returns:
        Rules in file order

    Raises:
        RuleLoadError: If the file cannot be read
        RuleParseError: If its content is malformed
    """
    if not path.is_file():
        raise RuleLoadError(f"Rule file not found: {path}", {"path": str(path)})

    try:
        raw = path.read_bytes()
    except OSError as e:
        raise RuleLoadError(f"Cannot read {path}: {e}", {"path": str(path)}) from e

    suffix = path.suffix.lower()
    try:
        if suffix in JSON_SUFFIXES:
            rules = rules_from_data(orjson.loads(raw))
        elif suffix in YAML_SUFFIXES:
            rules = rules_from_data(yaml.safe_load(raw))
        else:
            rules = parse_rules_text(raw.decode("utf-8"), table=table)
    except orjson.JSONDecodeError as e:
        raise RuleParseError(f"Invalid JSON in {path}: {e}", {"path": str(path)}) from e
    except yaml.YAMLError as e:
        raise RuleParseError(f"Invalid YAML in {path}: {e}", {"path": str(path)}) from e
    except UnicodeDecodeError as e:
        raise RuleParseError(f"{path} is not UTF-8 text", {"path": str(path)}) from e
    except RuleParseError as e:
        e.context.setdefault("path", str(path))
        raise

    logger.info(f"Loaded {len(rules)} rules from {path}")
    return rules


def rules_to_data(rules: Iterable[Rule]) -> list[dict[str, Any]]:
    """Plain dicts for JSON/YAML output, inverse of ``rules_from_data``."""
    return [rule.model_dump(exclude_none=True) for rule in rules]
