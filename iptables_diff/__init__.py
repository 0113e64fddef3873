"""iptables-save snapshot and counter diff public API surface."""

from .diff import CounterRegressionError, DiffError, ResetPolicy, diff_snapshots
from .model import Chain, Rule, Snapshot, Table
from .parser import (
    DuplicateChainError,
    DuplicateTableError,
    InvalidCounterError,
    MalformedLineError,
    NoCurrentTableError,
    ParserError,
    UnknownChainError,
    parse_iptables_save,
    read_iptables_file,
)
from .serialize import serialize, to_dict

__all__ = [
    "Chain",
    "CounterRegressionError",
    "DiffError",
    "DuplicateChainError",
    "DuplicateTableError",
    "InvalidCounterError",
    "MalformedLineError",
    "NoCurrentTableError",
    "ParserError",
    "ResetPolicy",
    "Rule",
    "Snapshot",
    "Table",
    "UnknownChainError",
    "diff_snapshots",
    "parse_iptables_save",
    "read_iptables_file",
    "serialize",
    "to_dict",
]
