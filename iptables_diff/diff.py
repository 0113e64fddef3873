"""Counter deltas between two snapshots of the same rule set."""
from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, List, Optional

from .model import Chain, Rule, Snapshot, Table

logger = logging.getLogger(__name__)


class ResetPolicy(Enum):
    """What to do when a matched rule's packet counter went down."""

    ERROR = "error"
    SKIP = "skip"
    RESTART = "restart"


class DiffError(RuntimeError):
    pass


class CounterRegressionError(DiffError):
    """A rule's packet counter decreased, usually after a firewall reload."""

    def __init__(self, table: str, chain: str, older: Rule, newer: Rule):
        super().__init__(
            f"packet counter went backwards for {table}/{chain} "
            f"[{newer.args} -j {newer.target}]: {older.pkt_count} -> {newer.pkt_count}"
        )
        self.table = table
        self.chain = chain
        self.rule_args = newer.args
        self.target = newer.target
        self.older_pkt_count = older.pkt_count
        self.newer_pkt_count = newer.pkt_count


def diff_snapshots(
    older: Snapshot,
    newer: Snapshot,
    on_reset: ResetPolicy = ResetPolicy.ERROR,
) -> Snapshot:
    """Return the activity recorded in ``newer`` since ``older``.

    Rules are paired by ``(args, target)`` within the same table and chain,
    taking the first match. Unmatched rules, chains and tables of ``newer``
    are copied as-is; rules whose packet counter did not move are dropped,
    as are chains and tables left without rules.
    """
    tables: Dict[str, Table] = {}
    for table_name, table in newer.tables.items():
        baseline = older.tables.get(table_name)
        if baseline is None:
            copied = {name: chain for name, chain in table.chains.items() if not chain.is_empty}
            if copied:
                tables[table_name] = Table(table_name, copied)
            continue

        chains: Dict[str, Chain] = {}
        for chain_name, chain in table.chains.items():
            rules = _diff_chain(table_name, baseline.chains.get(chain_name), chain, on_reset)
            if rules:
                chains[chain_name] = Chain(chain_name, chain.policy_accept, tuple(rules))
        if chains:
            tables[table_name] = Table(table_name, chains)

    diff = Snapshot(tables)
    logger.debug("diff holds %d rule(s) in %d table(s)", diff.rule_count(), len(diff.tables))
    return diff


def _diff_chain(
    table_name: str,
    baseline: Optional[Chain],
    chain: Chain,
    on_reset: ResetPolicy,
) -> List[Rule]:
    if baseline is None:
        return list(chain.rules)

    rules: List[Rule] = []
    for rule in chain.rules:
        previous = baseline.find_rule(rule.args, rule.target)
        if previous is None:
            rules.append(rule)
            continue
        if previous.pkt_count == rule.pkt_count:
            continue
        if previous.pkt_count > rule.pkt_count:
            error = CounterRegressionError(table_name, chain.name, previous, rule)
            if on_reset is ResetPolicy.ERROR:
                raise error
            logger.warning("%s; %s", error, "skipping rule" if on_reset is ResetPolicy.SKIP else "counting from zero")
            if on_reset is ResetPolicy.RESTART:
                rules.append(rule)
            continue
        rules.append(
            rule.with_counters(
                rule.pkt_count - previous.pkt_count,
                rule.bytes_count - previous.bytes_count,
            )
        )
    return rules
