"""Identity allocation and object ownership for provenance records.

The manager only needs ``allocate`` and ``release``; ``transfer`` is used by
mint-and-send. Implementations must never issue an id twice, including ids
that have since been released.

``InMemoryRegistry`` is the lightweight backend used by tests and embedding
callers; ``provforge.core.sqlite_registry.SqliteRecordRegistry`` persists the
same contract to disk.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from provforge.models.records import ProvenanceRecord, RecordId, RecordState

logger = logging.getLogger(__name__)


class RegistryIntegrityError(RuntimeError):
    """Raised when the registry is asked to store an id it cannot accept."""


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class IdentityAllocator(Protocol):
    """Issues fresh record ids and takes them back on destruction."""

    def allocate(self) -> RecordId:
        """Return an id never issued before."""
        ...

    def release(self, record_id: RecordId) -> None:
        """Remove *record_id* from storage. Releasing twice is a no-op."""
        ...


@runtime_checkable
class ObjectStore(IdentityAllocator, Protocol):
    """An allocator that also persists records and tracks their owner."""

    def transfer(self, record: ProvenanceRecord, owner: str) -> None:
        """Store *record* (or move it) under *owner*."""
        ...


def new_record_id() -> RecordId:
    """Generate a candidate record id (``0x`` + 32 hex digits)."""
    return f"0x{uuid.uuid4().hex}"


def walk_lineage(
    lookup: Callable[[RecordId], ProvenanceRecord | None],
    record_id: RecordId,
) -> list[ProvenanceRecord]:
    """Follow ``parent_manifest_id`` links starting at *record_id*.

    Returns the chain newest-first. The walk stops at the first id that
    *lookup* cannot resolve (never minted, or destroyed) and at the first
    repeated id, so a dangling or cyclic chain yields a partial result
    instead of an error.
    """
    chain: list[ProvenanceRecord] = []
    seen: set[RecordId] = set()
    current: RecordId | None = record_id
    while current is not None:
        if current in seen:
            logger.warning("Lineage of %s contains a cycle at %s", record_id, current)
            break
        seen.add(current)
        record = lookup(current)
        if record is None:
            break
        chain.append(record)
        current = record.parent_manifest_id
    return chain


# ---------------------------------------------------------------------------
# In-memory backend
# ---------------------------------------------------------------------------


class InMemoryRegistry:
    """Process-local ``ObjectStore``.

    Parameters
    ----------
    id_factory:
        Produces candidate ids. Collisions with previously issued ids are
        skipped, so a deterministic factory is safe for tests.
    """

    def __init__(self, id_factory: Callable[[], RecordId] = new_record_id) -> None:
        self._id_factory = id_factory
        self._lock = threading.Lock()
        self._issued: dict[RecordId, RecordState] = {}
        self._records: dict[RecordId, ProvenanceRecord] = {}
        self._owners: dict[RecordId, str] = {}

    # ------------------------------------------------------------------
    # IdentityAllocator
    # ------------------------------------------------------------------

    def allocate(self) -> RecordId:
        with self._lock:
            candidate = self._id_factory()
            while candidate in self._issued:
                candidate = self._id_factory()
            self._issued[candidate] = RecordState.LIVE
        return candidate

    def release(self, record_id: RecordId) -> None:
        with self._lock:
            if self._issued.get(record_id) is RecordState.DESTROYED:
                logger.debug("Release of already destroyed id %s ignored", record_id)
                return
            self._issued[record_id] = RecordState.DESTROYED
            self._records.pop(record_id, None)
            self._owners.pop(record_id, None)
        logger.debug("Released record id %s", record_id)

    # ------------------------------------------------------------------
    # ObjectStore
    # ------------------------------------------------------------------

    def transfer(self, record: ProvenanceRecord, owner: str) -> None:
        with self._lock:
            state = self._issued.get(record.id)
            if state is None:
                raise RegistryIntegrityError(
                    f"Record id {record.id} was not allocated by this registry"
                )
            if state is RecordState.DESTROYED:
                raise RegistryIntegrityError(
                    f"Record id {record.id} has been destroyed"
                )
            self._records[record.id] = record
            self._owners[record.id] = owner
        logger.debug("Transferred %s to %s", record.id, owner)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def issued_count(self) -> int:
        """Number of ids ever allocated, live or destroyed."""
        return len(self._issued)

    def get(self, record_id: RecordId) -> ProvenanceRecord | None:
        return self._records.get(record_id)

    def exists(self, record_id: RecordId) -> bool:
        return record_id in self._records

    def owner_of(self, record_id: RecordId) -> str | None:
        return self._owners.get(record_id)

    def state_of(self, record_id: RecordId) -> RecordState | None:
        return self._issued.get(record_id)

    def list_records(self, owner: str | None = None) -> list[ProvenanceRecord]:
        return [
            record
            for record_id, record in self._records.items()
            if owner is None or self._owners.get(record_id) == owner
        ]

    def walk_lineage(self, record_id: RecordId) -> list[ProvenanceRecord]:
        return walk_lineage(self.get, record_id)
