"""JSON Lines audit sink: one canonical JSON object per minted record.

Each line is the event serialized with sorted keys and compact separators,
so identical events always produce identical lines.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from provforge.core.hasher import canonical_json_bytes
from provforge.models.events import RecordMinted

logger = logging.getLogger(__name__)


class JsonlAuditSink:
    """Appends audit events to a JSONL file.

    Parameters
    ----------
    path:
        The audit log file. Parent directories are created on demand.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def accept(self, event: RecordMinted) -> None:
        """Append *event* as a single line."""
        line = canonical_json_bytes(event.model_dump(mode="json"))
        with self._path.open("ab") as fh:
            fh.write(line + b"\n")
        logger.debug("JsonlAuditSink: wrote %s to %s", event.record_id, self._path)

    def publish(self, event: RecordMinted) -> None:
        self.accept(event)

    def read_events(self) -> list[dict[str, Any]]:
        """Read every logged event back as a dict."""
        if not self._path.exists():
            return []
        with self._path.open("r", encoding="utf-8") as fh:
            return [json.loads(line) for line in fh if line.strip()]
