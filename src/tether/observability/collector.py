"""Stack collector — the recording front end of the event log.

Provides one method per sync event so call sites stay short and never
build event objects themselves.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.
    Safe for concurrent use from multiple worker threads.

"""

from __future__ import annotations

from tether.observability.events import (
    BroadcastFailed,
    CoercionFailed,
    EditApplied,
    EditReceived,
    EditSkipped,
    FieldBroadcast,
    now_ns,
)
from tether.observability.log import EventLog


class StackCollector:
    """Event collector for the sync layer.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    # ----- Inbound -----

    def record_received(self, channel: str, field: str, *, client_id: str | None = None) -> None:
        self._log.append(
            EditReceived(
                channel=channel,
                field=field,
                client_id=client_id,
                timestamp_ns=now_ns(),
            )
        )

    def record_skipped(
        self,
        channel: str,
        field: str,
        *,
        reason: str,
        detail: str = "",
    ) -> None:
        """Record an edit acknowledged without mutation."""
        self._log.append(
            EditSkipped(
                channel=channel,
                field=field,
                reason=reason,  # type: ignore[arg-type]
                detail=detail,
                timestamp_ns=now_ns(),
            )
        )

    def record_coercion_failure(
        self,
        channel: str,
        field: str,
        *,
        side: str,
        declared: str,
        error: str,
    ) -> None:
        """Record an inbound value that kept its raw form."""
        self._log.append(
            CoercionFailed(
                channel=channel,
                field=field,
                side=side,  # type: ignore[arg-type]
                declared=declared,
                error=error,
                timestamp_ns=now_ns(),
            )
        )

    def record_applied(
        self,
        channel: str,
        field: str,
        *,
        client_id: str | None = None,
        clients_notified: int = 0,
        duration_ms: float = 0.0,
    ) -> None:
        self._log.append(
            EditApplied(
                channel=channel,
                field=field,
                client_id=client_id,
                clients_notified=clients_notified,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    # ----- Outbound -----

    def record_broadcast(
        self,
        channel: str,
        key: str,
        *,
        clients_notified: int = 0,
        excluded_client: str | None = None,
    ) -> None:
        """Record a field value pushed to a channel."""
        self._log.append(
            FieldBroadcast(
                channel=channel,
                key=key,
                clients_notified=clients_notified,
                excluded_client=excluded_client,
                timestamp_ns=now_ns(),
            )
        )

    def record_broadcast_failure(self, channel: str, key: str, *, error: str) -> None:
        self._log.append(
            BroadcastFailed(
                channel=channel,
                key=key,
                error=error,
                timestamp_ns=now_ns(),
            )
        )
