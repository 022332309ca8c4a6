"""Shared test fixtures for Provforge."""

from __future__ import annotations

import itertools
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from provforge.core.clock import FixedClock
from provforge.core.context import TxContext
from provforge.core.event_bus import EventBus
from provforge.core.manager import ProvenanceManager
from provforge.core.registry import InMemoryRegistry
from provforge.core.sqlite_registry import SqliteRecordRegistry
from provforge.models.events import RecordMinted
from provforge.models.records import ProvenanceRecord

MERKLE_ROOT = bytes(range(32))
MANIFEST_HASH = bytes(range(32, 64))


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test databases and logs."""
    return tmp_path


@pytest.fixture
def registry() -> InMemoryRegistry:
    """Provide an in-memory registry with deterministic ids."""
    counter = itertools.count(1)
    return InMemoryRegistry(id_factory=lambda: f"0x{next(counter):032x}")


@pytest.fixture
def sqlite_registry(tmp_dir: Path) -> SqliteRecordRegistry:
    """Provide a fresh SQLite registry in a temp directory."""
    return SqliteRecordRegistry(tmp_dir / "registry.db")


@pytest.fixture
def published() -> list[RecordMinted]:
    """Collects every event delivered through the ``bus`` fixture."""
    return []


@pytest.fixture
def bus(published: list[RecordMinted]) -> EventBus:
    bus = EventBus()
    bus.subscribe(published.append)
    return bus


@pytest.fixture
def manager(registry: InMemoryRegistry, bus: EventBus) -> ProvenanceManager:
    """Provide a manager wired to the in-memory registry and event bus."""
    return ProvenanceManager(registry, bus)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(1000)


@pytest.fixture
def ctx() -> TxContext:
    return TxContext(sender="0xa11ce")


# ---------------------------------------------------------------------------
# Mint argument factory — shared across test modules
# ---------------------------------------------------------------------------


@pytest.fixture
def make_mint_args(
    clock: FixedClock, ctx: TxContext
) -> Callable[..., dict[str, Any]]:
    """Factory fixture: keyword arguments for ``mint`` with sensible defaults."""

    def _factory(**overrides: Any) -> dict[str, Any]:
        defaults: dict[str, Any] = {
            "package_name": "Test Package",
            "merkle_algo": 61,
            "merkle_root": MERKLE_ROOT,
            "package_blob_ref": b"package_blob_id",
            "manifest_version": "1.4",
            "manifest_algo": 61,
            "manifest_hash": MANIFEST_HASH,
            "manifest_blob_ref": b"manifest_blob_id",
            "parent_manifest_id": None,
            "clock": clock,
            "ctx": ctx,
        }
        defaults.update(overrides)
        return defaults

    return _factory


@pytest.fixture
def minted(
    manager: ProvenanceManager, make_mint_args: Callable[..., dict[str, Any]]
) -> ProvenanceRecord:
    """Convenience: a record minted with the default arguments."""
    return manager.mint(**make_mint_args())
