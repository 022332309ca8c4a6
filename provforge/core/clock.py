"""Time sources for minting.

The manager reads ``now_ms()`` exactly once per mint and trusts the value.
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Anything with ``now_ms() -> int`` (milliseconds since the epoch)."""

    def now_ms(self) -> int:
        ...


class SystemClock:
    """Wall-clock time source."""

    def now_ms(self) -> int:
        return time.time_ns() // 1_000_000


class FixedClock:
    """Clock pinned to a settable timestamp, for tests and replays.

    Parameters
    ----------
    timestamp_ms:
        The value returned by :meth:`now_ms` until changed.
    """

    def __init__(self, timestamp_ms: int = 0) -> None:
        self.timestamp_ms = timestamp_ms
        self.reads = 0

    def now_ms(self) -> int:
        self.reads += 1
        return self.timestamp_ms

    def advance(self, delta_ms: int) -> None:
        self.timestamp_ms += delta_ms
