"""``provforge list`` — list live records."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from provforge.cli.commands._common import display_ref
from provforge.config import config
from provforge.core.sqlite_registry import SqliteRecordRegistry

console = Console()


def list_cmd(
    owner: Optional[str] = typer.Option(None, "--owner", "-o", help="Only records owned by this principal."),
    registry_path: Path = typer.Option(config.registry_path, "--registry", "-r", help="Registry database."),
) -> None:
    """List live provenance records."""
    registry = SqliteRecordRegistry(registry_path)
    records = registry.list_records(owner=owner)
    if not records:
        console.print("[dim]No records.[/dim]")
        return

    table = Table(title="Provenance Records")
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Package")
    table.add_column("Version")
    table.add_column("Owner")
    table.add_column("Created (ms)", justify="right")
    table.add_column("Package ref")
    for record in records:
        table.add_row(
            record.id,
            record.content_package_name,
            record.manifest_version,
            registry.owner_of(record.id) or "",
            str(record.created_at),
            display_ref(record.package_storage_blob_ref),
        )
    console.print(table)
