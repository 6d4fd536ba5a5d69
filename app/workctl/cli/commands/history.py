"""History command for viewing past runs.

This module provides the `workctl history` command for viewing the
item outcomes and backups recorded by install and uninstall runs.
"""

import json
from collections.abc import Sequence
from datetime import datetime
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from workctl.cli.display import outcome_label
from workctl.core.state import StateStore
from workctl.models.action import OperationResult
from workctl.models.history import BackupRecord
from workctl.utils.formatting import console, format_size, print_info

app = typer.Typer(
    name="history",
    help="View recorded outcomes and backups.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def history(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            min=1,
            help="Maximum number of entries to show.",
        ),
    ] = 20,
    backups: Annotated[
        bool,
        typer.Option(
            "--backups",
            "-b",
            help="Show backup archives instead of item outcomes.",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show recorded outcomes, newest first.

    Every install and remove attempt is appended to the history with
    its outcome. Dry runs are not recorded.

    Examples:
        workctl history              # Show last 20 outcomes
        workctl history -n 100       # Show last 100 outcomes
        workctl history --backups    # List backup archives
        workctl history --json       # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    store = StateStore()

    if backups:
        records = store.backups(limit=limit)
        if not records:
            print_info("No backups recorded.")
        elif json_output:
            _print_json(records)
        else:
            _print_backups(records)
        return

    results = store.operations(limit=limit)
    if not results:
        print_info("No history entries found.")
    elif json_output:
        _print_json(results)
    else:
        _print_operations(results)


def _print_operations(results: list[OperationResult]) -> None:
    """Print item outcomes as a Rich table."""
    table = Table(
        title="Install History",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Timestamp", style="muted", no_wrap=True)
    table.add_column("Action", width=8)
    table.add_column("Backend", width=6)
    table.add_column("Item", no_wrap=True)
    table.add_column("Outcome", justify="center")
    table.add_column("Detail")

    for result in results:
        table.add_row(
            _format_timestamp(result.timestamp),
            result.direction.verb,
            result.item.backend.label,
            escape(result.item.identifier),
            outcome_label(result.outcome),
            f"[muted]{escape(result.detail)}[/muted]",
        )

    console.print(table)


def _print_backups(records: list[BackupRecord]) -> None:
    """Print backup archives as a Rich table."""
    table = Table(
        title="Backups",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Created", style="muted", no_wrap=True)
    table.add_column("Group", no_wrap=True)
    table.add_column("Size", justify="right")
    table.add_column("Archive")

    for record in records:
        table.add_row(
            _format_timestamp(record.created_at),
            record.group_name,
            format_size(record.size_bytes),
            escape(str(record.archive_path)),
        )

    console.print(table)


def _print_json(entries: Sequence[OperationResult | BackupRecord]) -> None:
    """Print entries as a JSON array for scripting."""
    console.print_json(json.dumps([entry.to_dict() for entry in entries]))


def _format_timestamp(timestamp: datetime) -> str:
    """Format a timestamp in local time (YYYY-MM-DD HH:MM)."""
    return timestamp.astimezone().strftime("%Y-%m-%d %H:%M")
