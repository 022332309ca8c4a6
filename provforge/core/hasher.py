"""Canonical hashing and digest helpers.

Canonical JSON is used for audit log lines so that the same event always
produces the same bytes. Digests travel as lowercase hex at every text
boundary (CLI, JSON, audit log).
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

DIGEST_LENGTH = 32


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes: sorted keys, compact separators, ASCII."""
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def sha256_digest(data: bytes) -> bytes:
    """Return the raw 32-byte SHA-256 digest of *data*."""
    return hashlib.sha256(data).digest()


def parse_digest(value: str) -> bytes:
    """Decode a hex digest, tolerating a ``0x`` or ``sha256:`` prefix.

    The length is not checked here; the minting path owns that rule.

    Raises
    ------
    ValueError
        If *value* is not valid hex.
    """
    text = value.strip()
    for prefix in ("0x", "sha256:"):
        text = text.removeprefix(prefix)
    return bytes.fromhex(text)
