"""Bootstrap — attach the outbound push listener to every Reactive field.

After ``setup(model, channel, transport)`` any write to one of the model's
Reactive cells, whatever its cause, is broadcast to every client on the
channel.  Listeners are keyed by channel, so binding the same model to the
same channel twice is a no-op and binding it to a second channel adds a
second, independent listener.

A transport failure during such a push is logged and recorded as a
``BroadcastFailed`` event.  The write itself and every other channel's push
still go through.
"""

from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING, Any

from tether._errors import TransportError
from tether.config import DEFAULT_CHANNEL
from tether.reactive.model import reactive_fields
from tether.reactive.outbound import push

if TYPE_CHECKING:
    from tether._types import ChannelName, Listener
    from tether.observability.collector import StackCollector
    from tether.reactive.transport import Transport


def listener_key(channel: ChannelName) -> str:
    return f"tether:push:{channel}"


def _make_listener(
    name: str,
    channel: ChannelName,
    transport: Transport,
    collector: StackCollector | None,
) -> Listener:
    def _push(value: Any) -> None:
        # push() logs and records failures; they never stop the cell's other
        # listeners.
        with contextlib.suppress(TransportError):
            push(name, value, channel=channel, transport=transport, collector=collector)

    _push.__name__ = f"push_{name}"
    return _push


def setup[M](
    model: M,
    channel: ChannelName = DEFAULT_CHANNEL,
    transport: Transport | None = None,
    *,
    collector: StackCollector | None = None,
) -> M:
    """Wire *model*'s Reactive fields to broadcast on *channel*.

    Args:
        model: The model instance to bind.
        channel: Broadcast channel.
        transport: Transport to push through (defaults to a new SSE
            ``Broadcaster``, which reaches nobody until clients subscribe).
        collector: Optional event collector for broadcast events.

    Returns:
        The same model.

    """
    if transport is None:
        from tether.reactive.broadcaster import Broadcaster

        transport = Broadcaster()

    key = listener_key(channel)
    for spec in reactive_fields(model):
        cell = getattr(model, spec.name)
        if cell.has_listener(key):
            continue
        cell.on(_make_listener(spec.name, channel, transport, collector), key=key)
    return model


def teardown[M](model: M, channel: ChannelName = DEFAULT_CHANNEL) -> M:
    """Remove the push listeners ``setup()`` attached for *channel*."""
    key = listener_key(channel)
    for spec in reactive_fields(model):
        getattr(model, spec.name).off(key)
    return model
