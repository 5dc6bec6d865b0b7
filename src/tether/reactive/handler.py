"""Sync channel handler — the inbound half of the sync protocol.

Each inbound edit message runs one pass through these steps:

    1. Parse ``{"payload": {"field", "newval", "oldval"}}``
    2. Raw equality short-circuit (no mutation, no broadcast)
    3. Resolve the field and its declared type (Reactive cells unwrapped)
    4. Coerce newval and oldval independently; a failure keeps the raw value
    5. Broadcast the new value to the channel, excluding the originator
    6. Apply via ``update()``
    7. Acknowledge with ``ACK``

Step 6 sets the Reactive cell, which re-enters the push listener installed
by ``setup()`` and broadcasts the value a second time to every client,
originator included.  Both broadcasts are kept.  The only loop-breaker is
step 2 on the *next* round-trip: a client echoing the value it already
holds sends ``newval == oldval``, or sends nothing at all because its
watcher saw no change.

Malformed messages and unknown fields are logged and acknowledged without
mutation.  Coercion failures are logged and degrade to the raw value.
Transport failures propagate as ``TransportError`` to the HTTP boundary.
"""

from __future__ import annotations

import json
import sys
import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from tether._errors import CoercionError, ProtocolError, UnknownFieldError
from tether.reactive.coerce import coerce
from tether.reactive.mapper import from_wire_name
from tether.reactive.model import declared_type, model_schema
from tether.reactive.outbound import push
from tether.reactive.update import update

if TYPE_CHECKING:
    from tether._types import ChannelName, ClientID
    from tether.observability.collector import StackCollector
    from tether.reactive.transport import Transport

ACK = "OK"


@dataclass(frozen=True, slots=True)
class EditMessage:
    """One client edit, as received.

    Attributes:
        field: Field name sent by the client (wire name).
        newval: Raw new value.
        oldval: Raw previous value.

    """

    field: str
    newval: Any
    oldval: Any

    @classmethod
    def parse(cls, message: Any) -> EditMessage:
        """Build an EditMessage from an envelope, a bare payload, or JSON text.

        Raises:
            ProtocolError: If the message is not a mapping with the three keys.

        """
        if isinstance(message, (str, bytes)):
            try:
                message = json.loads(message)
            except ValueError as exc:
                msg = f"edit message is not valid JSON: {exc}"
                raise ProtocolError(msg) from exc

        if not isinstance(message, Mapping):
            msg = f"edit message must be an object, got {type(message).__name__}"
            raise ProtocolError(msg)

        payload = message.get("payload", message)
        if not isinstance(payload, Mapping):
            msg = "edit payload must be an object"
            raise ProtocolError(msg)

        missing = [key for key in ("field", "newval", "oldval") if key not in payload]
        if missing:
            msg = f"edit payload missing {', '.join(missing)}"
            raise ProtocolError(msg)

        return cls(field=str(payload["field"]), newval=payload["newval"], oldval=payload["oldval"])


def raw_equal(a: Any, b: Any) -> bool:
    """Structural equality of two decoded wire values.

    JSON distinguishes ``5`` from ``5.0`` and ``true`` from ``1``; so does
    this comparison, unlike Python's ``==``.
    """
    if type(a) is not type(b):
        return False
    if isinstance(a, dict):
        return a.keys() == b.keys() and all(raw_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)):
        return len(a) == len(b) and all(raw_equal(x, y) for x, y in zip(a, b, strict=True))
    return a == b


class SyncChannelHandler:
    """Applies client edits to one model bound to one channel.

    Edits to the same field are serialized by a per-field lock held from
    coercion through ``update()``, so every client observes broadcasts for
    that field in the order the edits were applied.  Edits to different
    fields never wait on each other.

    Args:
        model: The bound model instance.
        channel: Channel the model is bound to.
        transport: Transport used for the exclusion broadcast.
        collector: Optional event collector.

    """

    def __init__(
        self,
        model: Any,
        *,
        channel: ChannelName,
        transport: Transport,
        collector: StackCollector | None = None,
    ) -> None:
        self._model = model
        self._channel = channel
        self._transport = transport
        self._collector = collector
        self._field_locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    @property
    def model(self) -> Any:
        return self._model

    @property
    def channel(self) -> str:
        return self._channel

    def _field_lock(self, name: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._field_locks.get(name)
            if lock is None:
                lock = self._field_locks[name] = threading.RLock()
            return lock

    def handle(self, message: Any, client: ClientID | None = None) -> str:
        """Process one inbound edit message and return the acknowledgement."""
        t0 = time.perf_counter()
        collector = self._collector

        try:
            edit = EditMessage.parse(message)
        except ProtocolError as exc:
            print(f"  Malformed edit on {self._channel}: {exc}", file=sys.stderr)
            if collector is not None:
                collector.record_skipped(self._channel, "", reason="malformed", detail=str(exc))
            return ACK

        if collector is not None:
            collector.record_received(self._channel, edit.field, client_id=client)

        if raw_equal(edit.newval, edit.oldval):
            if collector is not None:
                collector.record_skipped(self._channel, edit.field, reason="unchanged")
            return ACK

        try:
            name = from_wire_name(edit.field, (spec.name for spec in model_schema(self._model)))
        except UnknownFieldError as exc:
            print(f"  Unknown field on {self._channel}: {exc}", file=sys.stderr)
            if collector is not None:
                collector.record_skipped(
                    self._channel, edit.field, reason="unknown_field", detail=str(exc),
                )
            return ACK

        with self._field_lock(name):
            declared = declared_type(self._model, name)
            newval = self._coerce(name, "newval", edit.newval, declared)
            oldval = self._coerce(name, "oldval", edit.oldval, declared)

            notified = push(
                name,
                newval,
                channel=self._channel,
                transport=self._transport,
                except_client=client,
                collector=collector,
            )
            update(self._model, name, newval, oldval)

        if collector is not None:
            collector.record_applied(
                self._channel,
                name,
                client_id=client,
                clients_notified=notified,
                duration_ms=(time.perf_counter() - t0) * 1000,
            )
        return ACK

    def _coerce(
        self,
        name: str,
        side: Literal["newval", "oldval"],
        raw: Any,
        declared: type,
    ) -> Any:
        try:
            return coerce(raw, declared)
        except CoercionError as exc:
            print(f"  Coercion error: {self._channel}/{name} {side}: {exc}", file=sys.stderr)
            if self._collector is not None:
                self._collector.record_coercion_failure(
                    self._channel,
                    name,
                    side=side,
                    declared=declared.__name__,
                    error=str(exc),
                )
            return raw
