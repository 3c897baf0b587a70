"""
CLI command for viewing and clearing wrap history.
"""

from __future__ import annotations

import json
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from mamwrap.config import get_config
from mamwrap.core.history import WrapHistory


def get_console(ctx: click.Context) -> Console:
    """Get the Rich console from context."""
    return ctx.obj.get("console", Console()) if ctx.obj else Console()


@click.command("history")
@click.option(
    "--limit", "-n",
    type=click.IntRange(min=1),
    default=None,
    help="Show at most this many runs.",
)
@click.option(
    "--clear",
    is_flag=True,
    help="Forget all recorded runs.",
)
@click.option(
    "--yes", "-y",
    is_flag=True,
    help="Skip confirmation prompt when clearing.",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def history_cmd(
    ctx: click.Context,
    limit: Optional[int],
    clear: bool,
    yes: bool,
    as_json: bool,
) -> None:
    """Show recent wrap runs.

    Examples:

        $ mamwrap history
        $ mamwrap history -n 3 --json
        $ mamwrap history --clear
    """
    console = get_console(ctx)
    config = ctx.obj.get("config") if ctx.obj else None
    history = WrapHistory((config or get_config()).history_file)

    if clear:
        if not yes and not click.confirm("Clear wrap history? This cannot be undone."):
            console.print("Cancelled.")
            return
        history.clear()
        console.print("[green]Wrap history cleared.[/green]")
        return

    entries = history.recent(limit)

    if as_json:
        click.echo(json.dumps([e.to_dict() for e in entries], indent=2))
        return

    if not entries:
        console.print("[dim]No wrap runs recorded yet.[/dim]")
        return

    table = Table(title="Recent Wraps")
    table.add_column("When", style="dim", no_wrap=True)
    table.add_column("Input", style="cyan")
    table.add_column("Output")
    table.add_column("Exit", justify="right")
    table.add_column("Result", justify="center")

    for entry in entries:
        result = (
            "[green]Success[/green]" if entry.status == "success"
            else "[red]Failed[/red]"
        )
        output = entry.output_path
        if not entry.output_exists():
            output += " [dim](missing)[/dim]"
        table.add_row(
            entry.created_at[:19].replace("T", " "),
            entry.input_path,
            output,
            str(entry.exit_code),
            result,
        )

    console.print(table)
    console.print(f"\n[dim]{len(entries)} run(s)[/dim]")
