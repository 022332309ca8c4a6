"""``provforge mint`` — mint a provenance record and send it to the sender."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from provforge.cli.commands._common import build_manager, encode_ref, record_table
from provforge.config import config
from provforge.core.clock import SystemClock
from provforge.core.context import TxContext
from provforge.core.hasher import parse_digest
from provforge.core.manager import RecordValidationError

console = Console()


def mint_cmd(
    name: str = typer.Option(..., "--name", "-n", help="Content package name."),
    merkle_root: str = typer.Option(..., "--merkle-root", help="Merkle root (hex, 32 bytes)."),
    package_ref: str = typer.Option(..., "--package-ref", help="Package storage reference."),
    manifest_hash: str = typer.Option(..., "--manifest-hash", help="Manifest hash (hex, 32 bytes)."),
    manifest_ref: str = typer.Option(..., "--manifest-ref", help="Manifest storage reference."),
    manifest_version: str = typer.Option("1.0", "--manifest-version", help="Manifest version."),
    merkle_algo: int = typer.Option(61, "--merkle-algo", help="Merkle algorithm tag."),
    manifest_algo: int = typer.Option(61, "--manifest-algo", help="Manifest algorithm tag."),
    parent: Optional[str] = typer.Option(None, "--parent", help="Parent record id."),
    sender: str = typer.Option(config.default_sender, "--sender", "-s", help="Calling principal."),
    registry_path: Path = typer.Option(config.registry_path, "--registry", "-r", help="Registry database."),
    audit_log: Path = typer.Option(config.audit_log_path, "--audit-log", help="Audit log (JSONL)."),
) -> None:
    """Mint a provenance record and transfer it to the sender."""
    try:
        root_bytes = parse_digest(merkle_root)
        manifest_hash_bytes = parse_digest(manifest_hash)
    except ValueError as exc:
        console.print(f"[red]Invalid hex digest:[/red] {exc}")
        raise typer.Exit(code=2) from exc

    manager, registry = build_manager(registry_path, audit_log)
    try:
        record = manager.mint_and_send(
            name,
            merkle_algo,
            root_bytes,
            encode_ref(package_ref),
            manifest_version,
            manifest_algo,
            manifest_hash_bytes,
            encode_ref(manifest_ref),
            parent,
            SystemClock(),
            TxContext(sender=sender),
        )
    except RecordValidationError as exc:
        console.print(f"[red]{exc.code}:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    console.print(record_table(record, owner=registry.owner_of(record.id)))
    # Print the record id plainly for scripting
    console.print(record.id)
