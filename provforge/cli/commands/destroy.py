"""``provforge destroy`` — destroy a record owned by the sender."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from provforge.cli.commands._common import build_manager
from provforge.config import config

console = Console()


def destroy_cmd(
    record_id: str = typer.Argument(..., help="Record id."),
    sender: str = typer.Option(config.default_sender, "--sender", "-s", help="Calling principal."),
    registry_path: Path = typer.Option(config.registry_path, "--registry", "-r", help="Registry database."),
    audit_log: Path = typer.Option(config.audit_log_path, "--audit-log", help="Audit log (JSONL)."),
) -> None:
    """Destroy a record. Only its current owner may do so from the CLI."""
    manager, registry = build_manager(registry_path, audit_log)
    record = registry.get(record_id)
    if record is None:
        console.print(f"[red]Record not found:[/red] {record_id}")
        raise typer.Exit(code=1)

    owner = registry.owner_of(record_id)
    if owner != sender:
        console.print(
            f"[red]Refusing to destroy {record_id}:[/red] owned by {owner}, not {sender}"
        )
        raise typer.Exit(code=1)

    manager.delete(record)
    console.print(f"[green]Destroyed[/green] {record_id}")
