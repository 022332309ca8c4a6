"""Fire-and-forget audit event publication.

The minting path calls ``publish(event)`` and moves on. ``EventBus`` fans
each event out to every subscribed handler; a handler failure is logged and
never reaches the publisher or blocks the remaining handlers.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from provforge.models.events import RecordMinted

logger = logging.getLogger(__name__)

EventHandler = Callable[[RecordMinted], None]


@runtime_checkable
class EventSink(Protocol):
    """Anything that accepts published audit events."""

    def publish(self, event: RecordMinted) -> None:
        ...


class NullEventSink:
    """Discards every event."""

    def publish(self, event: RecordMinted) -> None:
        return None


class EventBus:
    """Fans published events out to subscribed handlers.

    Usage
    -----
    >>> bus = EventBus()
    >>> bus.subscribe(audit_sink.accept)
    >>> bus.publish(event)
    """

    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> None:
        """Register *handler*. Duplicate registration is ignored."""
        if handler not in self._handlers:
            self._handlers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        try:
            self._handlers.remove(handler)
        except ValueError:
            pass

    @property
    def handlers(self) -> list[EventHandler]:
        """Return a copy of the subscribed handler list."""
        return list(self._handlers)

    def publish(self, event: RecordMinted) -> None:
        """Deliver *event* to every handler, isolating handler failures."""
        if not self._handlers:
            logger.debug("No handlers subscribed; %s for %s dropped",
                         event.event_type, event.record_id)
            return

        failed = 0
        for handler in self._handlers:
            try:
                handler(event)
            except Exception:  # noqa: BLE001
                failed += 1
                logger.exception(
                    "Event handler %r failed for %s", handler, event.record_id
                )

        if failed:
            logger.warning(
                "Event %s for %s: %d/%d handlers failed",
                event.event_type,
                event.record_id,
                failed,
                len(self._handlers),
            )
