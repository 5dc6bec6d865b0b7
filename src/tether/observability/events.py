"""Event model for sync observability.

Defines the events recorded while inbound edits are handled and field
changes are pushed to browsers.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal


# ---------------------------------------------------------------------------
# Inbound events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class EditReceived:
    """A client edit message entered the sync handler.

    Attributes:
        channel: Channel the message arrived on.
        field: Field name as sent by the client (wire name).
        client_id: Originating client, if known.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    channel: str
    field: str
    client_id: str | None
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class EditSkipped:
    """A client edit was acknowledged without mutating the model.

    Attributes:
        channel: Channel the message arrived on.
        field: Field name as sent ("" when the message was malformed).
        reason: Why nothing was applied.
        detail: Human-readable detail (error message).
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    channel: str
    field: str
    reason: Literal["unchanged", "unknown_field", "malformed"]
    detail: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class CoercionFailed:
    """An inbound value could not be converted; the raw value was kept.

    Attributes:
        channel: Channel the message arrived on.
        field: Server-side field name.
        side: Which value of the message failed.
        declared: Name of the field's declared type.
        error: The coercion error message.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    channel: str
    field: str
    side: Literal["newval", "oldval"]
    declared: str
    error: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class EditApplied:
    """A client edit was broadcast and applied.

    Attributes:
        channel: Channel the message arrived on.
        field: Server-side field name.
        client_id: Originating client, if known.
        clients_notified: Clients reached by the handler's own broadcast.
        duration_ms: Time from receipt to acknowledgement.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    channel: str
    field: str
    client_id: str | None
    clients_notified: int
    duration_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Outbound events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FieldBroadcast:
    """A field value was pushed to the clients of a channel.

    Attributes:
        channel: Target channel.
        key: Wire name of the field.
        clients_notified: Number of clients the payload was queued for.
        excluded_client: Client left out of the broadcast, if any.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    channel: str
    key: str
    clients_notified: int
    excluded_client: str | None
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class BroadcastFailed:
    """A field value could not be pushed to a channel.

    Attributes:
        channel: Target channel.
        key: Wire name of the field.
        error: The serialization or transport error message.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    channel: str
    key: str
    error: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type SyncEvent = (
    EditReceived
    | EditSkipped
    | CoercionFailed
    | EditApplied
    | FieldBroadcast
    | BroadcastFailed
)


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
