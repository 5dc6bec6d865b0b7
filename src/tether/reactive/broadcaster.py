"""SSE broadcaster — the bundled publish/subscribe transport.

Manages SSE connections per channel and fans serialized payloads out to
them.  Each connected browser subscribes to one channel; a broadcast
enqueues the payload on every subscriber's queue except the excluded
client's.  The SSE route drains each queue through ``client_generator``.
"""

from __future__ import annotations

import asyncio
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from tether._types import ChannelName, ClientID


@dataclass(frozen=True, slots=True)
class SSEConnection:
    """A connected SSE client.

    Attributes:
        client_id: Unique identifier for this connection.
        channel: The channel this client is subscribed to.
        queue: asyncio.Queue[Any] of payloads waiting to be sent.
        loop: Event loop draining the queue, or None when the connection
            was created outside a running loop.

    """

    client_id: str
    channel: str
    queue: asyncio.Queue[Any] = field(default_factory=asyncio.Queue, compare=False, hash=False)
    loop: asyncio.AbstractEventLoop | None = field(default=None, compare=False, hash=False)


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


def _deliver(conn: SSEConnection, payload: Any) -> None:
    try:
        conn.queue.put_nowait(payload)
    except asyncio.QueueFull:
        pass  # Drop if client queue is full


class Broadcaster:
    """Manages SSE connections and broadcasts payloads per channel.

    Satisfies the ``Transport`` protocol.  ``broadcast`` never blocks: it
    uses ``put_nowait`` and drops the payload for any client whose bounded
    queue is full.

    Thread-safe: subscriber map protected by a lock; payloads cross threads
    through the owning loop of each connection.
    Per-worker: each server worker has its own Broadcaster instance.

    Args:
        queue_size: Bound for queues created by ``connect()`` (0 = unbounded).

    """

    def __init__(self, queue_size: int = 0) -> None:
        self._subscribers: dict[str, set[SSEConnection]] = defaultdict(set)
        self._lock = threading.Lock()
        self._queue_size = queue_size

    @property
    def subscriber_count(self) -> int:
        """Total number of active SSE connections across all channels."""
        with self._lock:
            return sum(len(conns) for conns in self._subscribers.values())

    def connect(self, channel: ChannelName, client_id: ClientID) -> SSEConnection:
        """Create and subscribe a connection for *client_id*.

        Called from the SSE route, so the connection remembers the running
        loop that will drain its queue.
        """
        conn = SSEConnection(
            client_id=client_id,
            channel=channel,
            queue=asyncio.Queue(maxsize=self._queue_size),
            loop=_running_loop(),
        )
        self.subscribe(channel, conn)
        return conn

    def subscribe(self, channel: ChannelName, conn: SSEConnection) -> None:
        """Register an SSE client on a channel."""
        with self._lock:
            self._subscribers[channel].add(conn)

    def unsubscribe(self, channel: ChannelName, conn: SSEConnection) -> None:
        """Remove an SSE client."""
        with self._lock:
            self._subscribers[channel].discard(conn)
            if not self._subscribers[channel]:
                del self._subscribers[channel]

    def get_subscribers(self, channel: ChannelName) -> frozenset[SSEConnection]:
        """Get all subscribers for a channel (snapshot, no lock held on return)."""
        with self._lock:
            return frozenset(self._subscribers.get(channel, set()))

    def get_channels(self) -> frozenset[str]:
        """Get all channels that have at least one subscriber."""
        with self._lock:
            return frozenset(self._subscribers.keys())

    def broadcast(
        self,
        channel: ChannelName,
        payload: str,
        except_client: ClientID | None = None,
    ) -> int:
        """Enqueue *payload* for every subscriber of *channel* but *except_client*.

        Safe to call from any thread.  A connection bound to another thread's
        loop gets the payload through ``call_soon_threadsafe``, which also
        wakes that loop; the full-queue check then happens on the loop.

        Returns:
            Number of clients the payload was queued (or scheduled) for.

        """
        current = _running_loop()
        count = 0
        for conn in self.get_subscribers(channel):
            if except_client is not None and conn.client_id == except_client:
                continue
            if conn.loop is None or conn.loop is current:
                try:
                    conn.queue.put_nowait(payload)
                except asyncio.QueueFull:
                    continue  # Drop if client queue is full
            else:
                try:
                    conn.loop.call_soon_threadsafe(_deliver, conn, payload)
                except RuntimeError:
                    continue  # Loop closed; the stream is gone
            count += 1
        return count

    async def client_generator(self, conn: SSEConnection) -> AsyncIterator[Any]:
        """Async generator that yields payloads from a connection's queue.

        Catches ``CancelledError`` (client disconnect / task cancellation)
        and ``GeneratorExit`` (generator cleanup) so a closed stream ends
        quietly.

        """
        try:
            while True:
                payload = await conn.queue.get()
                yield payload
        except (asyncio.CancelledError, GeneratorExit):
            return
