"""CLI for printing a parsed iptables-save snapshot."""
from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from ..dump import DumpError
from ..parser import ParserError
from ..serialize import serialize
from .common import DEFAULT_SAVE_COMMAND, configure_logging, load_snapshot, report_error, rules_table

app = typer.Typer(help="Parse iptables-save output and show rules with their counters")
console = Console()


@app.command()
def main(
    rules: Path | None = typer.Argument(
        None, exists=True, readable=True, help="iptables-save -c output (captured live when omitted)"
    ),
    save_command: str = typer.Option(
        DEFAULT_SAVE_COMMAND, envvar="IPTABLES_DIFF_SAVE_COMMAND", help="Command producing the dump"
    ),
    json_output: bool = typer.Option(False, "--json", help="Emit JSON"),
    uid: bool = typer.Option(False, "--uid", help="Include content identifiers in JSON"),
    log_level: str = typer.Option("WARNING", envvar="IPTABLES_DIFF_LOG_LEVEL", help="Logging level"),
) -> None:
    configure_logging(log_level)
    try:
        snapshot = load_snapshot(rules, save_command)
    except (ParserError, DumpError) as exc:
        report_error(exc)
        raise typer.Exit(code=1)

    if json_output:
        typer.echo(serialize(snapshot, include_uid=uid, indent=2).decode("utf-8"))
        return
    if snapshot.is_empty:
        console.print("[yellow]No tables found[/yellow]")
        return
    for table in snapshot.tables.values():
        for chain in table.chains.values():
            policy = "ACCEPT" if chain.policy_accept else "not ACCEPT"
            console.print(f"{table.name}/{chain.name} policy={policy} rules={len(chain.rules)}", markup=False)
    console.print(rules_table(snapshot, "Rules"))
