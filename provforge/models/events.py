"""Audit events emitted by the minting path.

Only minting is audited. Destruction emits nothing, so the audit trail is
an append-only log of creations.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from provforge.models.records import Digest32, RecordId, U64_MAX


class RecordMinted(BaseModel):
    """Fact published once per successful mint."""

    model_config = ConfigDict(frozen=True)

    event_type: str = "record_minted"
    record_id: RecordId
    minter: str
    package_name: str
    merkle_root: Digest32
    minted_at_ms: int = Field(ge=0, le=U64_MAX)
