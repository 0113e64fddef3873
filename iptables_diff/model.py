"""Immutable snapshot model shared by the parser, differ, and serializer."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Tuple

_NIL_NAMESPACE = uuid.UUID(int=0)


def content_uid(*parts: str) -> uuid.UUID:
    """Deterministic UUIDv5 over the concatenated identity parts."""
    return uuid.uuid5(_NIL_NAMESPACE, "".join(parts))


def _freeze(mapping: Mapping) -> Mapping:
    if isinstance(mapping, MappingProxyType):
        return mapping
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class Rule:
    args: str
    target: str
    pkt_count: int = 0
    bytes_count: int = 0

    def identity(self) -> Tuple[str, str]:
        return self.args, self.target

    def uid(self, table: str, chain: str) -> uuid.UUID:
        return content_uid(table, chain, self.args, self.target)

    def with_counters(self, pkt_count: int, bytes_count: int) -> "Rule":
        return Rule(self.args, self.target, pkt_count, bytes_count)


@dataclass(frozen=True)
class Chain:
    name: str
    policy_accept: bool = False
    rules: Tuple[Rule, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "rules", tuple(self.rules))

    @property
    def is_empty(self) -> bool:
        return not self.rules

    def uid(self, table: str) -> uuid.UUID:
        return content_uid(table, self.name)

    def find_rule(self, args: str, target: str) -> Optional[Rule]:
        # First match wins; duplicates with the same args/target are not told apart.
        for rule in self.rules:
            if rule.args == args and rule.target == target:
                return rule
        return None


@dataclass(frozen=True)
class Table:
    name: str
    chains: Mapping[str, Chain] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "chains", _freeze(self.chains))

    @property
    def is_empty(self) -> bool:
        return not self.chains

    @property
    def uid(self) -> uuid.UUID:
        return content_uid(self.name)


@dataclass(frozen=True)
class Snapshot:
    tables: Mapping[str, Table] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tables", _freeze(self.tables))

    @property
    def is_empty(self) -> bool:
        return not self.tables

    def iter_rules(self) -> Iterator[Tuple[str, str, Rule]]:
        for table in self.tables.values():
            for chain in table.chains.values():
                for rule in chain.rules:
                    yield table.name, chain.name, rule

    def rule_count(self) -> int:
        return sum(1 for _ in self.iter_rules())

    def find_rule(self, table: str, chain: str, args: str, target: str) -> Optional[Rule]:
        tab = self.tables.get(table)
        if tab is None:
            return None
        ch = tab.chains.get(chain)
        if ch is None:
            return None
        return ch.find_rule(args, target)
