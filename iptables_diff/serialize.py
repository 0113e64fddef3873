"""JSON rendering of snapshots and diffs.

Shape::

    {"tables": {"nat": {"chains": {"PREROUTING": {"rules": [
        {"args": str, "target": str, "pktCount": int, "bytesCount": int}
    ]}}}}}

Tables and chains without rules are left out, so an empty snapshot renders
as ``{}``.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Optional

from .model import Chain, Rule, Snapshot, Table


def rule_to_dict(rule: Rule, uid: Optional[str] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    if uid is not None:
        payload["uid"] = uid
    payload.update(
        {
            "args": rule.args,
            "target": rule.target,
            "pktCount": rule.pkt_count,
            "bytesCount": rule.bytes_count,
        }
    )
    return payload


def _chain_to_dict(table: Table, chain: Chain, include_uid: bool) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    if include_uid:
        payload["uid"] = str(chain.uid(table.name))
    payload["rules"] = [
        rule_to_dict(rule, str(rule.uid(table.name, chain.name)) if include_uid else None)
        for rule in chain.rules
    ]
    return payload


def to_dict(snapshot: Snapshot, include_uid: bool = False) -> Dict[str, Any]:
    tables: Dict[str, Any] = {}
    for table in snapshot.tables.values():
        chains = {
            chain.name: _chain_to_dict(table, chain, include_uid)
            for chain in table.chains.values()
            if not chain.is_empty
        }
        if not chains:
            continue
        entry: Dict[str, Any] = {"uid": str(table.uid)} if include_uid else {}
        entry["chains"] = chains
        tables[table.name] = entry
    return {"tables": tables} if tables else {}


def serialize(snapshot: Snapshot, include_uid: bool = False, indent: Optional[int] = None) -> bytes:
    """Encode ``snapshot`` as UTF-8 JSON; names and rule text are escaped by the encoder."""
    payload = to_dict(snapshot, include_uid=include_uid)
    return json.dumps(payload, indent=indent, ensure_ascii=False).encode("utf-8")
