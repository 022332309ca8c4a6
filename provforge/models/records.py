"""Provenance record models: immutable, single-authority construction.

A ``ProvenanceRecord`` binds a package name to a Merkle integrity commitment
and an embedded manifest reference. Records are frozen pydantic models, and
they only validate when the minting authority token is present in the
validation context. That token never leaves this package: the minting path
(``provforge.core.manager``) and the storage restore path are the only
callers of ``_assemble``, ``_restore`` and ``_from_json``.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    ValidationInfo,
    model_validator,
)

from provforge.core.hasher import DIGEST_LENGTH

RecordId = str

U64_MAX = 2**64 - 1

_MINT_AUTHORITY = object()


class RecordAuthorityError(RuntimeError):
    """Raised when a record is built or altered outside the minting path."""


class RecordState(str, Enum):
    """Lifecycle of a provenance record. DESTROYED is terminal."""

    LIVE = "live"
    DESTROYED = "destroyed"


def _hex_to_bytes(value: Any) -> Any:
    if isinstance(value, str):
        return bytes.fromhex(value)
    return value


# Raw bytes in python mode, lowercase hex in JSON mode.
HexBytes = Annotated[
    bytes,
    BeforeValidator(_hex_to_bytes),
    PlainSerializer(lambda value: value.hex(), return_type=str, when_used="json"),
]

Digest32 = Annotated[
    bytes,
    Field(min_length=DIGEST_LENGTH, max_length=DIGEST_LENGTH),
    BeforeValidator(_hex_to_bytes),
    PlainSerializer(lambda value: value.hex(), return_type=str, when_used="json"),
]

AlgorithmTag = Annotated[int, Field(ge=0, le=255)]


class EmbeddedManifest(BaseModel):
    """Reference to the external manifest document for a package.

    A plain value: copyable, no identity, no lifecycle outside the record
    that embeds it. ``parent_manifest_id`` is an opaque record id and is
    never looked up here.
    """

    model_config = ConfigDict(frozen=True)

    manifest_version: str
    manifest_integrity_algo: AlgorithmTag
    manifest_hash: Digest32
    manifest_storage_blob_ref: HexBytes
    parent_manifest_id: RecordId | None = None


class ProvenanceRecord(BaseModel):
    """An immutable provenance record for a content package.

    Every field is a read-only attribute. The convenience properties below
    project through the embedded manifest so callers never need to reach
    into it.
    """

    model_config = ConfigDict(frozen=True)

    id: RecordId
    content_package_name: str = Field(min_length=1)
    merkle_integrity_algo: AlgorithmTag
    merkle_root: Digest32
    created_at: int = Field(ge=0, le=U64_MAX)
    package_storage_blob_ref: HexBytes
    manifest: EmbeddedManifest

    @model_validator(mode="before")
    @classmethod
    def _require_authority(cls, data: Any, info: ValidationInfo) -> Any:
        context = info.context or {}
        if context.get("authority") is not _MINT_AUTHORITY:
            raise RecordAuthorityError(
                "ProvenanceRecord can only be created by minting "
                "(ProvenanceManager.mint) or restored from storage."
            )
        return data

    # ------------------------------------------------------------------
    # Construction guards
    # ------------------------------------------------------------------

    @classmethod
    def model_construct(cls, *args: Any, **kwargs: Any) -> ProvenanceRecord:
        raise RecordAuthorityError(
            "ProvenanceRecord does not support unvalidated construction."
        )

    def model_copy(
        self, *, update: dict[str, Any] | None = None, deep: bool = False
    ) -> ProvenanceRecord:
        if update:
            raise RecordAuthorityError(
                f"Record {self.id} is immutable; fields cannot be replaced."
            )
        return super().model_copy(deep=deep)

    # ------------------------------------------------------------------
    # Read-only projections
    # ------------------------------------------------------------------

    @property
    def manifest_version(self) -> str:
        return self.manifest.manifest_version

    @property
    def manifest_integrity_algo(self) -> int:
        return self.manifest.manifest_integrity_algo

    @property
    def manifest_hash(self) -> bytes:
        return self.manifest.manifest_hash

    @property
    def manifest_storage_blob_ref(self) -> bytes:
        return self.manifest.manifest_storage_blob_ref

    @property
    def parent_manifest_id(self) -> RecordId | None:
        return self.manifest.parent_manifest_id

    def manifest_snapshot(self) -> EmbeddedManifest:
        """Return an independent copy of the embedded manifest."""
        return self.manifest.model_copy()

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_json(self) -> str:
        """Serialize every field, bytes as hex, to a JSON string."""
        return self.model_dump_json()


def _assemble(
    *,
    record_id: RecordId,
    content_package_name: str,
    merkle_integrity_algo: int,
    merkle_root: bytes,
    created_at: int,
    package_storage_blob_ref: bytes,
    manifest: EmbeddedManifest,
) -> ProvenanceRecord:
    return ProvenanceRecord.model_validate(
        {
            "id": record_id,
            "content_package_name": content_package_name,
            "merkle_integrity_algo": merkle_integrity_algo,
            "merkle_root": merkle_root,
            "created_at": created_at,
            "package_storage_blob_ref": package_storage_blob_ref,
            "manifest": manifest,
        },
        context={"authority": _MINT_AUTHORITY},
    )


def _restore(data: dict[str, Any]) -> ProvenanceRecord:
    return ProvenanceRecord.model_validate(
        data, context={"authority": _MINT_AUTHORITY}
    )


def _from_json(raw: str | bytes) -> ProvenanceRecord:
    """Restore a record written by :meth:`ProvenanceRecord.to_json`.

    Field invariants are checked again on the way in. Storage backends
    only; there is no public restore path.
    """
    return ProvenanceRecord.model_validate_json(
        raw, context={"authority": _MINT_AUTHORITY}
    )
