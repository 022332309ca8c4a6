"""Provforge data models: all Pydantic v2, all frozen (immutable)."""

from provforge.models.events import RecordMinted
from provforge.models.records import (
    EmbeddedManifest,
    ProvenanceRecord,
    RecordAuthorityError,
    RecordId,
    RecordState,
)

__all__ = [
    # records
    "RecordId",
    "RecordState",
    "EmbeddedManifest",
    "ProvenanceRecord",
    "RecordAuthorityError",
    # events
    "RecordMinted",
]
