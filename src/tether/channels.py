"""Channel router — exposes a bound model over Chirp routes.

Per channel:

    POST /<channel>/watchers       inbound edit messages, answers "OK"
    GET  /<channel>/events         SSE stream of field updates
    GET  /tether.js                glue script (default channel)
    GET  /js/<channel>/tether.js   glue script (any other channel)

plus one ``/__tether/stats`` JSON endpoint for the event log.
"""

from __future__ import annotations

import json
import sys
import uuid
from typing import TYPE_CHECKING, Any

from tether._errors import TransportError
from tether.reactive.glue import register_script_route, vue_integration

if TYPE_CHECKING:
    from chirp import App, Request

    from tether.config import TetherConfig
    from tether.observability.collector import StackCollector
    from tether.reactive.broadcaster import Broadcaster
    from tether.reactive.handler import SyncChannelHandler

STATS_ENDPOINT = "/__tether/stats"


class ChannelRouter:
    """Registers the sync endpoints of bound models on a Chirp app.

    Args:
        app: Chirp App to register routes on (must not yet be frozen).
        config: Configuration supplying paths and the script name.

    """

    def __init__(self, app: App, config: TetherConfig) -> None:
        self._app = app
        self._config = config
        self._stats_registered = False

    def register_watchers_endpoint(self, handler: SyncChannelHandler) -> str:
        """Register the inbound edit endpoint for ``handler.channel``.

        The originating client is identified by the ``client`` query
        parameter the glue script appends.  Returns the route path.

        """
        path = self._config.watchers_path(handler.channel)

        async def watchers_handler(request: Request) -> Any:
            client = request.query.get("client")
            try:
                message = await request.json()
            except ValueError:
                message = None
            try:
                return handler.handle(message, client)
            except TransportError as exc:
                from chirp.http.response import Response

                print(f"  {exc}", file=sys.stderr)
                return Response(body="ERROR", status=502, content_type="text/plain")

        watchers_handler.__name__ = f"tether_watchers_{handler.channel}"
        watchers_handler.__qualname__ = f"ChannelRouter.{watchers_handler.__name__}"

        self._app.route(path, methods=["POST"], name=f"tether:watchers:{handler.channel}")(
            watchers_handler
        )
        return path

    def register_events_endpoint(self, broadcaster: Broadcaster, channel: str) -> str:
        """Register the SSE endpoint clients of *channel* subscribe to.

        Each connection gets a fresh client id, announced as the first
        ``tether:hello`` event, then receives every payload broadcast on
        the channel as a ``tether:update`` event.

        """
        path = self._config.events_path(channel)

        async def events_handler(request: Request) -> Any:
            from chirp import EventStream, SSEEvent

            client_id = str(uuid.uuid4())
            conn = broadcaster.connect(channel, client_id)

            async def generate():  # type: ignore[return]
                try:
                    yield SSEEvent(data=client_id, event="tether:hello")
                    async for payload in broadcaster.client_generator(conn):
                        yield SSEEvent(data=payload, event="tether:update")
                finally:
                    broadcaster.unsubscribe(channel, conn)

            return EventStream(generate())

        events_handler.__name__ = f"tether_events_{channel}"
        events_handler.__qualname__ = f"ChannelRouter.{events_handler.__name__}"

        self._app.route(path, name=f"tether:events:{channel}")(events_handler)
        return path

    def register_script_endpoint(
        self,
        model: Any,
        channel: str,
        *,
        vue_app_name: str | None = None,
    ) -> str:
        """Register the glue script route, rendered from current model state."""
        path = "/" + self._config.script_endpoint(channel)
        config = self._config

        async def script_handler(request: Request) -> Any:
            from chirp.http.response import Response

            body = vue_integration(model, config, channel=channel, vue_app_name=vue_app_name)
            return Response(body=body, status=200, content_type="application/javascript")

        script_handler.__name__ = f"tether_script_{channel}"
        script_handler.__qualname__ = f"ChannelRouter.{script_handler.__name__}"

        self._app.route(path, name=f"tether:script:{channel}")(script_handler)
        register_script_route(path)
        return path

    def register_stats_endpoint(self, collector: StackCollector) -> None:
        """Register ``/__tether/stats`` once per app."""
        if self._stats_registered:
            return

        async def stats_handler(request: Request) -> Any:
            from chirp.http.response import Response

            payload = json.dumps({"event_log": collector.log.stats()}, indent=2)
            return Response(body=payload, status=200, content_type="application/json")

        stats_handler.__name__ = "tether_stats"
        stats_handler.__qualname__ = "ChannelRouter.tether_stats"

        self._app.route(STATS_ENDPOINT, name="tether:stats")(stats_handler)
        self._stats_registered = True
