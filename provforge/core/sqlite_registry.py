"""SQLite-backed record registry: durable ids, records and owners.

Design:
- ``object_ids`` holds every id ever allocated. Rows are never deleted;
  release flips the state to ``destroyed`` so an id cannot be reissued.
- ``records`` holds live records only, one row per record, one column per
  field. Release deletes the row.
- WAL journal mode for concurrent readers. One connection per call, closed
  when the call returns.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable
from contextlib import closing
from datetime import datetime, timezone
from pathlib import Path

from provforge.core.registry import RegistryIntegrityError, new_record_id, walk_lineage
from provforge.models.records import (
    ProvenanceRecord,
    RecordId,
    RecordState,
    _restore,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_CREATE_OBJECT_IDS = """
CREATE TABLE IF NOT EXISTS object_ids (
    record_id      TEXT PRIMARY KEY,
    state          TEXT NOT NULL,
    allocated_utc  TEXT NOT NULL,
    released_utc   TEXT
);
"""

_CREATE_RECORDS = """
CREATE TABLE IF NOT EXISTS records (
    record_id                  TEXT PRIMARY KEY REFERENCES object_ids(record_id),
    owner                      TEXT NOT NULL,
    content_package_name       TEXT NOT NULL,
    merkle_integrity_algo      INTEGER NOT NULL,
    merkle_root                BLOB NOT NULL,
    created_at                 TEXT NOT NULL,
    package_storage_blob_ref   BLOB NOT NULL,
    manifest_version           TEXT NOT NULL,
    manifest_integrity_algo    INTEGER NOT NULL,
    manifest_hash              BLOB NOT NULL,
    manifest_storage_blob_ref  BLOB NOT NULL,
    parent_manifest_id         TEXT
);
"""

_CREATE_IDX_OWNER = """
CREATE INDEX IF NOT EXISTS idx_records_owner ON records(owner);
"""

_RECORD_COLUMNS = (
    "record_id, content_package_name, merkle_integrity_algo, merkle_root, "
    "created_at, package_storage_blob_ref, manifest_version, "
    "manifest_integrity_algo, manifest_hash, manifest_storage_blob_ref, "
    "parent_manifest_id"
)


class SqliteRecordRegistry:
    """Durable ``ObjectStore`` backed by a SQLite file.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Created if it does not exist.
    id_factory:
        Produces candidate ids; ids already in ``object_ids`` are skipped.
    """

    def __init__(
        self,
        db_path: Path,
        id_factory: Callable[[], RecordId] = new_record_id,
    ) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._id_factory = id_factory
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    def _init_schema(self) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute(_CREATE_OBJECT_IDS)
            conn.execute(_CREATE_RECORDS)
            conn.execute(_CREATE_IDX_OWNER)
            conn.commit()

    @property
    def db_path(self) -> Path:
        return self._db_path

    # ------------------------------------------------------------------
    # IdentityAllocator
    # ------------------------------------------------------------------

    def allocate(self) -> RecordId:
        """Reserve and return a never-before-issued record id."""
        now = datetime.now(timezone.utc).isoformat()
        with closing(self._connect()) as conn, conn:
            while True:
                candidate = self._id_factory()
                try:
                    conn.execute(
                        "INSERT INTO object_ids (record_id, state, allocated_utc) "
                        "VALUES (?, ?, ?)",
                        (candidate, RecordState.LIVE.value, now),
                    )
                except sqlite3.IntegrityError:
                    continue
                conn.commit()
                return candidate

    def release(self, record_id: RecordId) -> None:
        """Delete the record row and tombstone its id."""
        now = datetime.now(timezone.utc).isoformat()
        with closing(self._connect()) as conn, conn:
            conn.execute("DELETE FROM records WHERE record_id = ?", (record_id,))
            updated = conn.execute(
                "UPDATE object_ids SET state = ?, released_utc = ? "
                "WHERE record_id = ? AND state = ?",
                (RecordState.DESTROYED.value, now, record_id, RecordState.LIVE.value),
            ).rowcount
            if not updated:
                # Never allocated here: tombstone it so it can't be issued later.
                conn.execute(
                    "INSERT OR IGNORE INTO object_ids "
                    "(record_id, state, allocated_utc, released_utc) VALUES (?, ?, ?, ?)",
                    (record_id, RecordState.DESTROYED.value, now, now),
                )
            conn.commit()
        logger.debug("Released record id %s", record_id)

    # ------------------------------------------------------------------
    # ObjectStore
    # ------------------------------------------------------------------

    def transfer(self, record: ProvenanceRecord, owner: str) -> None:
        """Persist *record* under *owner*, replacing any previous owner."""
        state = self.state_of(record.id)
        if state is None:
            raise RegistryIntegrityError(
                f"Record id {record.id} was not allocated by this registry"
            )
        if state is RecordState.DESTROYED:
            raise RegistryIntegrityError(f"Record id {record.id} has been destroyed")

        with closing(self._connect()) as conn, conn:
            updated = conn.execute(
                "UPDATE records SET owner = ? WHERE record_id = ?",
                (owner, record.id),
            ).rowcount
            if not updated:
                conn.execute(
                    f"INSERT INTO records (owner, {_RECORD_COLUMNS}) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (owner, *self._record_to_row(record)),
                )
            conn.commit()
        logger.info("Record %s now owned by %s", record.id, owner)

    # ------------------------------------------------------------------
    # Queries (read-only)
    # ------------------------------------------------------------------

    def get(self, record_id: RecordId) -> ProvenanceRecord | None:
        with closing(self._connect()) as conn, conn:
            row = conn.execute(
                f"SELECT {_RECORD_COLUMNS} FROM records WHERE record_id = ?",
                (record_id,),
            ).fetchone()
        return self._row_to_record(row) if row else None

    def exists(self, record_id: RecordId) -> bool:
        with closing(self._connect()) as conn, conn:
            row = conn.execute(
                "SELECT 1 FROM records WHERE record_id = ?", (record_id,)
            ).fetchone()
        return row is not None

    def owner_of(self, record_id: RecordId) -> str | None:
        with closing(self._connect()) as conn, conn:
            row = conn.execute(
                "SELECT owner FROM records WHERE record_id = ?", (record_id,)
            ).fetchone()
        return row[0] if row else None

    def state_of(self, record_id: RecordId) -> RecordState | None:
        with closing(self._connect()) as conn, conn:
            row = conn.execute(
                "SELECT state FROM object_ids WHERE record_id = ?", (record_id,)
            ).fetchone()
        return RecordState(row[0]) if row else None

    def list_records(self, owner: str | None = None) -> list[ProvenanceRecord]:
        query = f"SELECT {_RECORD_COLUMNS} FROM records"
        params: tuple[str, ...] = ()
        if owner is not None:
            query += " WHERE owner = ?"
            params = (owner,)
        query += " ORDER BY CAST(created_at AS INTEGER) ASC, record_id ASC"
        with closing(self._connect()) as conn, conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_record(row) for row in rows]

    def walk_lineage(self, record_id: RecordId) -> list[ProvenanceRecord]:
        return walk_lineage(self.get, record_id)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _record_to_row(record: ProvenanceRecord) -> tuple:
        # created_at is stored as text: SQLite INTEGER is signed 64-bit.
        return (
            record.id,
            record.content_package_name,
            record.merkle_integrity_algo,
            record.merkle_root,
            str(record.created_at),
            record.package_storage_blob_ref,
            record.manifest_version,
            record.manifest_integrity_algo,
            record.manifest_hash,
            record.manifest_storage_blob_ref,
            record.parent_manifest_id,
        )

    @staticmethod
    def _row_to_record(row: tuple) -> ProvenanceRecord:
        (
            record_id,
            content_package_name,
            merkle_integrity_algo,
            merkle_root,
            created_at,
            package_storage_blob_ref,
            manifest_version,
            manifest_integrity_algo,
            manifest_hash,
            manifest_storage_blob_ref,
            parent_manifest_id,
        ) = row
        return _restore(
            {
                "id": record_id,
                "content_package_name": content_package_name,
                "merkle_integrity_algo": merkle_integrity_algo,
                "merkle_root": bytes(merkle_root),
                "created_at": int(created_at),
                "package_storage_blob_ref": bytes(package_storage_blob_ref),
                "manifest": {
                    "manifest_version": manifest_version,
                    "manifest_integrity_algo": manifest_integrity_algo,
                    "manifest_hash": bytes(manifest_hash),
                    "manifest_storage_blob_ref": bytes(manifest_storage_blob_ref),
                    "parent_manifest_id": parent_manifest_id,
                },
            }
        )
