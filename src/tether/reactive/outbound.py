"""Outbound push — a field value rendered and broadcast to a channel.

Wire format of every push::

    {"key": "<wire name>", "value": <rendered value>}

Used twice per inbound edit: once by the sync handler (excluding the
originating client) and once by the field listener that ``setup()``
installs (reaching every client).  See ``tether.reactive.handler``.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any

from tether._errors import TransportError
from tether.reactive.mapper import to_wire_name
from tether.reactive.render import jsonify, render_value

if TYPE_CHECKING:
    from tether._types import ChannelName, ClientID
    from tether.observability.collector import StackCollector
    from tether.reactive.transport import Transport


def payload_for(field: str, value: Any) -> str:
    """Serialized push payload for *field* holding *value*."""
    return jsonify({"key": to_wire_name(field), "value": render_value(value, field)})


def push(
    field: str,
    value: Any,
    *,
    channel: ChannelName,
    transport: Transport,
    except_client: ClientID | None = None,
    collector: StackCollector | None = None,
) -> int:
    """Broadcast *field* = *value* to *channel*.

    Returns:
        Number of clients the transport reports reaching (0 if it reports
        nothing).

    Raises:
        TransportError: If the value cannot be serialized or the transport's
            broadcast fails.

    """
    try:
        payload = payload_for(field, value)
        notified = transport.broadcast(channel, payload, except_client)
    except Exception as exc:
        print(f"  Broadcast error on {channel}/{field}: {exc}", file=sys.stderr)
        if collector is not None:
            collector.record_broadcast_failure(channel, to_wire_name(field), error=str(exc))
        msg = f"broadcast of {field!r} on channel {channel!r} failed: {exc}"
        raise TransportError(msg) from exc

    count = notified if isinstance(notified, int) else 0
    if collector is not None:
        collector.record_broadcast(
            channel,
            to_wire_name(field),
            clients_notified=count,
            excluded_client=except_client,
        )
    return count
