"""CLI for showing rule activity between two iptables-save dumps."""
from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from ..diff import DiffError, ResetPolicy, diff_snapshots
from ..dump import DumpError
from ..parser import ParserError
from ..serialize import serialize
from .common import DEFAULT_SAVE_COMMAND, configure_logging, load_snapshot, report_error, rules_table

app = typer.Typer(help="Show packets/bytes matched by each rule since an earlier iptables-save dump")
console = Console()


@app.command()
def main(
    older: Path = typer.Argument(..., exists=True, readable=True, help="Baseline iptables-save -c output"),
    newer: Path | None = typer.Argument(
        None, exists=True, readable=True, help="Later iptables-save -c output (captured live when omitted)"
    ),
    save_command: str = typer.Option(
        DEFAULT_SAVE_COMMAND, envvar="IPTABLES_DIFF_SAVE_COMMAND", help="Command producing the dump"
    ),
    on_reset: ResetPolicy = typer.Option(
        ResetPolicy.ERROR, "--on-reset", help="Handling of counters that went backwards"
    ),
    json_output: bool = typer.Option(False, "--json", help="Emit JSON"),
    log_level: str = typer.Option("WARNING", envvar="IPTABLES_DIFF_LOG_LEVEL", help="Logging level"),
) -> None:
    configure_logging(log_level)
    try:
        baseline = load_snapshot(older, save_command)
        current = load_snapshot(newer, save_command)
        delta = diff_snapshots(baseline, current, on_reset=on_reset)
    except (ParserError, DiffError, DumpError) as exc:
        report_error(exc)
        raise typer.Exit(code=1)

    if json_output:
        typer.echo(serialize(delta, indent=2).decode("utf-8"))
    elif delta.is_empty:
        console.print("[green]No rule activity since the baseline[/green]")
    else:
        console.print(rules_table(delta, f"Activity since {escape(older.name)}", counters_label=" (+)"))
