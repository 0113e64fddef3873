"""Helpers shared by the command line tools."""
from __future__ import annotations

import logging
import shlex
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..dump import capture_dump, load_dump
from ..model import Snapshot
from ..parser import parse_iptables_save

DEFAULT_SAVE_COMMAND = "iptables-save -c"
LOG_LEVELS = ("ERROR", "WARNING", "INFO", "DEBUG")

err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    if level.upper() not in LOG_LEVELS:
        raise typer.BadParameter(f"expected one of {', '.join(LOG_LEVELS)}", param_hint="--log-level")
    handler = RichHandler(console=err_console, show_time=False, show_path=False)
    logging.basicConfig(level=level.upper(), format="%(message)s", handlers=[handler], force=True)


def load_snapshot(rules: Path | None, save_command: str) -> Snapshot:
    """Parse a dump file, or capture a live dump when no file is given."""
    if rules is None:
        text = capture_dump(shlex.split(save_command))
    else:
        text = load_dump(rules)
    return parse_iptables_save(text)


def rules_table(snapshot: Snapshot, title: str, counters_label: str = "") -> Table:
    table = Table(title=title)
    table.add_column("Table")
    table.add_column("Chain")
    table.add_column("Rule")
    table.add_column(f"Packets{counters_label}", justify="right")
    table.add_column(f"Bytes{counters_label}", justify="right")
    for table_name, chain_name, rule in snapshot.iter_rules():
        spec = f"{rule.args} -j {rule.target}" if rule.args else f"-j {rule.target}"
        table.add_row(
            escape(table_name),
            escape(chain_name),
            escape(spec),
            str(rule.pkt_count),
            str(rule.bytes_count),
        )
    return table


def report_error(exc: Exception) -> None:
    err_console.print(f"[red]{type(exc).__name__}: {escape(str(exc))}[/red]", highlight=False)
