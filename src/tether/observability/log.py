"""Event log — the bounded store behind the stats endpoint.

Holds the most recent ``SyncEvent`` objects of every bound channel.  Older
events fall off the front once ``max_events`` is reached.

Thread Safety:
    One ``threading.Lock`` guards the buffer.  Handlers on different worker
    threads append concurrently; queries copy under the lock and filter
    outside it.

"""

import threading
from collections import Counter, deque
from typing import Any

from tether.observability.events import EditSkipped, SyncEvent


def _subject(event: SyncEvent) -> str:
    """Field an event is about: the server name, or the wire key for pushes."""
    return getattr(event, "field", None) or getattr(event, "key", "")


class EventLog:
    """Ring buffer of sync events.

    Args:
        max_events: Number of events kept before the oldest are discarded.

    """

    __slots__ = ("_events", "_lock", "_max_events")

    def __init__(self, max_events: int = 10_000) -> None:
        self._max_events = max_events
        self._events: deque[SyncEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append(self, event: SyncEvent) -> None:
        with self._lock:
            self._events.append(event)

    def _snapshot(self) -> list[SyncEvent]:
        with self._lock:
            return list(self._events)

    def query(
        self,
        *,
        event_type: type | None = None,
        channel: str | None = None,
        field: str | None = None,
        limit: int = 100,
    ) -> list[SyncEvent]:
        """Matching events, most recent first.

        *field* matches either the server field name or the wire key, so
        inbound and outbound events of one field can be pulled together.
        """
        results: list[SyncEvent] = []
        for event in reversed(self._snapshot()):
            if event_type is not None and not isinstance(event, event_type):
                continue
            if channel is not None and event.channel != channel:
                continue
            if field is not None and _subject(event) != field:
                continue
            results.append(event)
            if len(results) >= limit:
                break
        return results

    def recent(self, n: int = 20) -> list[SyncEvent]:
        """The *n* most recent events, oldest first."""
        return self._snapshot()[-n:]

    def clear(self) -> int:
        """Drop every event; returns how many were dropped."""
        with self._lock:
            count = len(self._events)
            self._events.clear()
            return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def stats(self) -> dict[str, Any]:
        """Summary served by ``/__tether/stats``."""
        events = self._snapshot()
        skipped = Counter(e.reason for e in events if isinstance(e, EditSkipped))
        return {
            "total": len(events),
            "max_events": self._max_events,
            "by_type": dict(Counter(type(e).__name__ for e in events)),
            "by_channel": dict(Counter(e.channel for e in events)),
            "skipped": dict(skipped),
        }
