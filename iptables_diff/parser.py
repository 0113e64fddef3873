"""iptables-save parser producing immutable snapshots."""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .model import Chain, Rule, Snapshot, Table

logger = logging.getLogger(__name__)

# [pkt:bytes] -A CHAIN <rest>; counters are validated separately so that a
# garbled counter is reported as such rather than as an unknown line.
_RULE_RE = re.compile(r"^\[(?P<pkt>[^:\]]*):(?P<bytes>[^\]]*)\] -A (?P<chain>[^ ]+)(?P<rest>.*)$")
_COUNTER_RE = re.compile(r"[0-9]+")
_TARGET_SEPARATOR = " -j "


class ParserError(RuntimeError):
    """Base class for errors raised while parsing iptables-save output."""

    def __init__(self, message: str, line_number: int = 0, line: str = ""):
        super().__init__(f"line {line_number}: {message}" if line_number else message)
        self.message = message
        self.line_number = line_number
        self.line = line


class DuplicateTableError(ParserError):
    pass


class DuplicateChainError(ParserError):
    pass


class NoCurrentTableError(ParserError):
    pass


class UnknownChainError(ParserError):
    pass


class MalformedLineError(ParserError):
    pass


class InvalidCounterError(ParserError):
    pass


def read_iptables_file(path: Path) -> Snapshot:
    """Load a file containing iptables-save contents."""
    return parse_iptables_save(Path(path).read_text(encoding="utf-8"))


def parse_iptables_save(text: str) -> Snapshot:
    """Parse ``iptables-save -c`` output into a :class:`Snapshot`.

    The first offending line aborts parsing with a :class:`ParserError`
    subclass; nothing built before the failure escapes.
    """
    tables: Dict[str, Dict[str, _ChainBuilder]] = {}
    current_table: Optional[str] = None

    for line_number, line in enumerate(text.split("\n"), start=1):
        if line.endswith("\r"):
            line = line[:-1]
        if not line or line.startswith("#"):
            continue
        if line.startswith("*"):
            name = line[1:]
            if not name:
                raise MalformedLineError("table header without a name", line_number, line)
            if name in tables:
                raise DuplicateTableError(f"table already exists: {name}", line_number, line)
            if current_table is not None:
                logger.debug("table %s opened before %s was committed", name, current_table)
            tables[name] = {}
            current_table = name
            continue
        if line.startswith(":"):
            chain = _parse_chain_def(line, line_number)
            if current_table is None:
                raise NoCurrentTableError(f"chain {chain.name} declared outside of a table", line_number, line)
            chains = tables[current_table]
            if chain.name in chains:
                raise DuplicateChainError(f"chain already exists: {chain.name}", line_number, line)
            chains[chain.name] = chain
            continue
        if line == "COMMIT":
            current_table = None
            continue

        chain_name, rule = _parse_rule(line, line_number)
        if current_table is None:
            raise NoCurrentTableError(f"rule for chain {chain_name} outside of a table", line_number, line)
        builder = tables[current_table].get(chain_name)
        if builder is None:
            raise UnknownChainError(
                f"chain {chain_name} is not declared in table {current_table}", line_number, line
            )
        builder.rules.append(rule)

    if current_table is not None:
        logger.debug("table %s was not terminated by COMMIT", current_table)

    snapshot = Snapshot(
        {
            table_name: Table(table_name, {name: b.build() for name, b in chains.items()})
            for table_name, chains in tables.items()
        }
    )
    logger.debug(
        "parsed %d table(s), %d chain(s), %d rule(s)",
        len(snapshot.tables),
        sum(len(t.chains) for t in snapshot.tables.values()),
        snapshot.rule_count(),
    )
    return snapshot


class _ChainBuilder:
    """Mutable scratch state for a chain while its rules are being read."""

    def __init__(self, name: str, policy_accept: bool):
        self.name = name
        self.policy_accept = policy_accept
        self.rules: List[Rule] = []

    def build(self) -> Chain:
        return Chain(self.name, self.policy_accept, tuple(self.rules))


def _parse_chain_def(line: str, line_number: int) -> _ChainBuilder:
    # Format: :CHAIN POLICY [packet:byte]
    tokens = line[1:].split(" ")
    if len(tokens) < 2 or not tokens[0]:
        raise MalformedLineError(f"invalid chain definition: {line}", line_number, line)
    name, policy = tokens[0], tokens[1]
    return _ChainBuilder(name, policy == "ACCEPT")


def _parse_rule(line: str, line_number: int) -> Tuple[str, Rule]:
    m = _RULE_RE.match(line)
    if m is None:
        raise MalformedLineError(f"invalid line: {line}", line_number, line)
    rest = m.group("rest")
    boundary = rest.rfind(_TARGET_SEPARATOR)
    if boundary < 0:
        raise MalformedLineError(f"invalid line: {line}", line_number, line)
    target = rest[boundary + len(_TARGET_SEPARATOR):]
    if not target:
        raise MalformedLineError(f"rule without a target: {line}", line_number, line)

    pkt_count = _parse_counter(m.group("pkt"), "packet", line_number, line)
    bytes_count = _parse_counter(m.group("bytes"), "byte", line_number, line)

    args = rest[:boundary]
    if args.startswith(" "):
        args = args[1:]
    if args.endswith(" "):
        args = args[:-1]
    return m.group("chain"), Rule(args, target, pkt_count, bytes_count)


def _parse_counter(token: str, kind: str, line_number: int, line: str) -> int:
    if not _COUNTER_RE.fullmatch(token):
        raise InvalidCounterError(f"cannot convert {kind} count {token!r}", line_number, line)
    return int(token)
