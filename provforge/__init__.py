"""Provforge: immutable provenance records for content packages.

A provenance record binds a package name to a Merkle integrity commitment
and an integrity-committed manifest reference, optionally linked to a parent
record. Records are minted and destroyed only through ``ProvenanceManager``.
"""

__version__ = "0.1.0"

from provforge.core.clock import FixedClock, SystemClock
from provforge.core.context import TxContext
from provforge.core.event_bus import EventBus
from provforge.core.manager import (
    EmptyPackageNameError,
    InvalidManifestHashLengthError,
    InvalidMerkleRootLengthError,
    ProvenanceManager,
    RecordValidationError,
)
from provforge.core.registry import InMemoryRegistry
from provforge.core.sqlite_registry import SqliteRecordRegistry
from provforge.models import EmbeddedManifest, ProvenanceRecord, RecordMinted

__all__ = [
    "ProvenanceManager",
    "ProvenanceRecord",
    "EmbeddedManifest",
    "RecordMinted",
    "RecordValidationError",
    "EmptyPackageNameError",
    "InvalidMerkleRootLengthError",
    "InvalidManifestHashLengthError",
    "InMemoryRegistry",
    "SqliteRecordRegistry",
    "EventBus",
    "SystemClock",
    "FixedClock",
    "TxContext",
    "__version__",
]
