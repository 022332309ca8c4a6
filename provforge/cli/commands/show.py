"""``provforge show`` — display one record."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from provforge.cli.commands._common import record_table
from provforge.config import config
from provforge.core.sqlite_registry import SqliteRecordRegistry

console = Console()


def show_cmd(
    record_id: str = typer.Argument(..., help="Record id."),
    as_json: bool = typer.Option(False, "--json", help="Print the record as JSON."),
    registry_path: Path = typer.Option(config.registry_path, "--registry", "-r", help="Registry database."),
) -> None:
    """Show a live record."""
    registry = SqliteRecordRegistry(registry_path)
    record = registry.get(record_id)
    if record is None:
        state = registry.state_of(record_id)
        detail = f" ({state.value})" if state else ""
        console.print(f"[red]Record not found:[/red] {record_id}{detail}")
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(record.to_json())
        return
    console.print(record_table(record, owner=registry.owner_of(record_id)))
