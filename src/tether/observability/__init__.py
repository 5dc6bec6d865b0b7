"""Sync observability — a queryable record of what the sync layer did.

Events cover both directions:
- **Inbound**: edits received, skipped, coerced, applied
- **Outbound**: field values broadcast to a channel, and failed broadcasts

All events are frozen dataclasses with nanosecond timestamps, safe for
concurrent production from multiple worker threads.

Quick Start:
    >>> from tether.observability import StackCollector, EventLog
    >>> log = EventLog()
    >>> collector = StackCollector(log)
    >>> # Pass collector to tether.init(..., collector=collector)

"""

from tether.observability.collector import StackCollector
from tether.observability.events import (
    BroadcastFailed,
    CoercionFailed,
    EditApplied,
    EditReceived,
    EditSkipped,
    FieldBroadcast,
    SyncEvent,
    now_ns,
)
from tether.observability.log import EventLog

__all__ = [
    "BroadcastFailed",
    "CoercionFailed",
    "EditApplied",
    "EditReceived",
    "EditSkipped",
    "EventLog",
    "FieldBroadcast",
    "StackCollector",
    "SyncEvent",
    "now_ns",
]
