"""Provenance Record Manager: the only authority that mints and destroys records.

Minting protocol
----------------
1. Validate, first failure wins: non-empty package name, 32-byte Merkle
   root, 32-byte manifest hash. Nothing else happens on failure.
2. Read the clock once (``created_at``) and reject values outside the
   unsigned 64-bit millisecond range.
3. Allocate a fresh id.
4. Assemble the embedded manifest and the record.
5. Publish one ``RecordMinted`` event. Publication never fails the mint.
6. Return the record. The manager keeps no reference to it.

Destruction releases the id back to the allocator and emits no event.
"""

from __future__ import annotations

import logging

from provforge.core.clock import Clock
from provforge.core.context import PrincipalContext
from provforge.core.event_bus import EventSink, NullEventSink
from provforge.core.hasher import DIGEST_LENGTH
from provforge.core.registry import IdentityAllocator, ObjectStore
from provforge.models.events import RecordMinted
from provforge.models.records import (
    U64_MAX,
    EmbeddedManifest,
    ProvenanceRecord,
    RecordId,
    _assemble,
)

logger = logging.getLogger(__name__)


class RecordValidationError(ValueError):
    """Base class for mint input violations. ``code`` is stable."""

    code = "RecordValidation"


class EmptyPackageNameError(RecordValidationError):
    code = "EmptyPackageName"


class InvalidMerkleRootLengthError(RecordValidationError):
    code = "InvalidMerkleRootLength"


class InvalidManifestHashLengthError(RecordValidationError):
    code = "InvalidManifestHashLength"


class InvalidAlgorithmTagError(RecordValidationError):
    """An algorithm tag does not fit in an unsigned byte."""

    code = "InvalidAlgorithmTag"


class InvalidTimestampError(RecordValidationError):
    """The clock returned a value outside 0..2**64-1 milliseconds."""

    code = "InvalidTimestamp"


def validate_mint_inputs(
    package_name: str,
    merkle_root: bytes,
    manifest_hash: bytes,
    merkle_algo: int = 0,
    manifest_algo: int = 0,
) -> None:
    """Check mint inputs in the fixed order and raise on the first violation."""
    if len(package_name) == 0:
        raise EmptyPackageNameError("Package name must not be empty")
    if len(merkle_root) != DIGEST_LENGTH:
        raise InvalidMerkleRootLengthError(
            f"Merkle root must be {DIGEST_LENGTH} bytes, got {len(merkle_root)}"
        )
    if len(manifest_hash) != DIGEST_LENGTH:
        raise InvalidManifestHashLengthError(
            f"Manifest hash must be {DIGEST_LENGTH} bytes, got {len(manifest_hash)}"
        )
    # Tag values are opaque; only the u8 range is enforced.
    for label, tag in (("merkle", merkle_algo), ("manifest", manifest_algo)):
        if not 0 <= tag <= 255:
            raise InvalidAlgorithmTagError(
                f"{label} algorithm tag must be in 0..255, got {tag}"
            )


class ProvenanceManager:
    """Mints and destroys provenance records.

    Parameters
    ----------
    allocator:
        Issues and releases record ids. Must also implement ``transfer``
        for :meth:`mint_and_send`.
    events:
        Receives one ``RecordMinted`` per successful mint. Defaults to a
        sink that discards everything.
    """

    def __init__(
        self,
        allocator: IdentityAllocator,
        events: EventSink | None = None,
    ) -> None:
        self._allocator = allocator
        self._events = events or NullEventSink()

    # ------------------------------------------------------------------
    # Minting
    # ------------------------------------------------------------------

    def mint(
        self,
        package_name: str,
        merkle_algo: int,
        merkle_root: bytes,
        package_blob_ref: bytes,
        manifest_version: str,
        manifest_algo: int,
        manifest_hash: bytes,
        manifest_blob_ref: bytes,
        parent_manifest_id: RecordId | None,
        clock: Clock,
        ctx: PrincipalContext,
    ) -> ProvenanceRecord:
        """Validate inputs and mint a new record.

        Raises
        ------
        EmptyPackageNameError
            If *package_name* is empty.
        InvalidMerkleRootLengthError
            If *merkle_root* is not exactly 32 bytes.
        InvalidManifestHashLengthError
            If *manifest_hash* is not exactly 32 bytes.
        InvalidTimestampError
            If *clock* reads outside the unsigned 64-bit range. Checked
            before an id is allocated.
        """
        validate_mint_inputs(
            package_name, merkle_root, manifest_hash, merkle_algo, manifest_algo
        )

        created_at = clock.now_ms()
        if not 0 <= created_at <= U64_MAX:
            raise InvalidTimestampError(
                f"Clock returned {created_at}, outside 0..{U64_MAX} ms"
            )
        record_id = self._allocator.allocate()

        manifest = EmbeddedManifest(
            manifest_version=manifest_version,
            manifest_integrity_algo=manifest_algo,
            manifest_hash=bytes(manifest_hash),
            manifest_storage_blob_ref=bytes(manifest_blob_ref),
            parent_manifest_id=parent_manifest_id,
        )
        record = _assemble(
            record_id=record_id,
            content_package_name=package_name,
            merkle_integrity_algo=merkle_algo,
            merkle_root=bytes(merkle_root),
            created_at=created_at,
            package_storage_blob_ref=bytes(package_blob_ref),
            manifest=manifest,
        )

        self._publish(
            RecordMinted(
                record_id=record.id,
                minter=ctx.current_principal(),
                package_name=record.content_package_name,
                merkle_root=record.merkle_root,
                minted_at_ms=record.created_at,
            )
        )
        logger.debug("Minted %s (%s)", record.id, record.content_package_name)
        return record

    def mint_and_send(
        self,
        package_name: str,
        merkle_algo: int,
        merkle_root: bytes,
        package_blob_ref: bytes,
        manifest_version: str,
        manifest_algo: int,
        manifest_hash: bytes,
        manifest_blob_ref: bytes,
        parent_manifest_id: RecordId | None,
        clock: Clock,
        ctx: PrincipalContext,
    ) -> ProvenanceRecord:
        """Mint a record and hand it to the calling principal.

        Returns the record for convenience; ownership now lives in the
        allocator's object store.

        Raises
        ------
        TypeError
            If the allocator cannot ``transfer``. Checked before minting.
        """
        if not isinstance(self._allocator, ObjectStore):
            raise TypeError(
                f"{type(self._allocator).__name__} does not implement transfer; "
                "mint_and_send needs an ObjectStore"
            )
        store = self._allocator
        record = self.mint(
            package_name,
            merkle_algo,
            merkle_root,
            package_blob_ref,
            manifest_version,
            manifest_algo,
            manifest_hash,
            manifest_blob_ref,
            parent_manifest_id,
            clock,
            ctx,
        )
        store.transfer(record, ctx.current_principal())
        return record

    def _publish(self, event: RecordMinted) -> None:
        try:
            self._events.publish(event)
        except Exception:  # noqa: BLE001
            logger.exception("Publishing %s for %s failed", event.event_type, event.record_id)

    # ------------------------------------------------------------------
    # Destruction
    # ------------------------------------------------------------------

    def delete(self, record: ProvenanceRecord) -> None:
        """Destroy a record owned outright by the caller."""
        self._destroy(record)

    def destroy(self, record: ProvenanceRecord) -> None:
        """Destroy a record held by value inside a composing system."""
        self._destroy(record)

    def _destroy(self, record: ProvenanceRecord) -> None:
        self._allocator.release(record.id)
        logger.debug("Destroyed %s", record.id)
