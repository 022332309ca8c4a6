"""``provforge lineage`` — walk a record's parent chain."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.tree import Tree

from provforge.config import config
from provforge.core.sqlite_registry import SqliteRecordRegistry

console = Console()


def lineage_cmd(
    record_id: str = typer.Argument(..., help="Record id to start from."),
    registry_path: Path = typer.Option(config.registry_path, "--registry", "-r", help="Registry database."),
) -> None:
    """Show the manifest lineage of a record, newest first."""
    registry = SqliteRecordRegistry(registry_path)
    chain = registry.walk_lineage(record_id)
    if not chain:
        console.print(f"[red]Record not found:[/red] {record_id}")
        raise typer.Exit(code=1)

    tree = Tree(f"[bold]{chain[0].content_package_name}[/bold]")
    node = tree
    for record in chain:
        node = node.add(
            f"[cyan]{record.id}[/cyan]  v{record.manifest_version}  "
            f"created={record.created_at}"
        )
    dangling = chain[-1].parent_manifest_id
    if dangling is not None and registry.get(dangling) is None:
        node.add(f"[yellow]{dangling} (unresolved)[/yellow]")
    console.print(tree)
