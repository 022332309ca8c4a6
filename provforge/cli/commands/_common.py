"""Shared wiring and rendering for CLI commands."""

from __future__ import annotations

from pathlib import Path

from rich.table import Table

from provforge.core.event_bus import EventBus
from provforge.core.manager import ProvenanceManager
from provforge.core.sqlite_registry import SqliteRecordRegistry
from provforge.models.records import ProvenanceRecord
from provforge.sinks.jsonl_audit import JsonlAuditSink


def build_manager(
    registry_path: Path, audit_log_path: Path
) -> tuple[ProvenanceManager, SqliteRecordRegistry]:
    """Wire a manager to the SQLite registry and the JSONL audit log."""
    registry = SqliteRecordRegistry(registry_path)
    bus = EventBus()
    bus.subscribe(JsonlAuditSink(audit_log_path).accept)
    return ProvenanceManager(registry, bus), registry


def encode_ref(text: str) -> bytes:
    """Storage refs are given as text on the command line."""
    return text.encode("utf-8")


def display_ref(value: bytes) -> str:
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError:
        return f"0x{value.hex()}"


def record_table(record: ProvenanceRecord, owner: str | None = None) -> Table:
    """Render a record as a two-column Rich table."""
    table = Table(title=f"Provenance Record {record.id}", show_header=False)
    table.add_column("Field", style="bold cyan")
    table.add_column("Value")
    table.add_row("Package", record.content_package_name)
    if owner is not None:
        table.add_row("Owner", owner)
    table.add_row("Created (ms)", str(record.created_at))
    table.add_row("Merkle algo", str(record.merkle_integrity_algo))
    table.add_row("Merkle root", record.merkle_root.hex())
    table.add_row("Package ref", display_ref(record.package_storage_blob_ref))
    table.add_row("Manifest version", record.manifest_version)
    table.add_row("Manifest algo", str(record.manifest_integrity_algo))
    table.add_row("Manifest hash", record.manifest_hash.hex())
    table.add_row("Manifest ref", display_ref(record.manifest_storage_blob_ref))
    table.add_row("Parent", record.parent_manifest_id or "[dim]none[/dim]")
    return table
