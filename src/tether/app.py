"""Tether application binding — models onto a Chirp app.

``init()`` is the primary entry point: it wires a model's Reactive fields
to a channel and registers the channel's endpoints.  ``serve()`` builds a
Chirp app around a model factory and runs it.
"""

from __future__ import annotations

import importlib
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from tether._errors import ConfigError
from tether.channels import ChannelRouter
from tether.config import TetherConfig
from tether.config_loader import load_config
from tether.observability import EventLog, StackCollector
from tether.reactive.broadcaster import Broadcaster
from tether.reactive.handler import SyncChannelHandler
from tether.reactive.transport import Transport, resolve_transport
from tether.reactive.wiring import setup

if TYPE_CHECKING:
    from chirp import App


@dataclass(frozen=True, slots=True)
class Binding:
    """A model bound to a channel.

    Attributes:
        model: The bound model instance.
        channel: Channel name.
        transport: Transport pushes go through.
        handler: Inbound edit handler for this binding.
        routes: Route paths registered for the binding.

    """

    model: Any
    channel: str
    transport: Transport
    handler: SyncChannelHandler
    routes: tuple[str, ...]


# One router per app, so the stats endpoint is registered once.  The app is
# kept alongside its router so its id cannot be reused while registered.
_ROUTERS: dict[int, tuple[Any, ChannelRouter]] = {}


def _router_for(app: App, config: TetherConfig) -> ChannelRouter:
    entry = _ROUTERS.get(id(app))
    if entry is None or entry[0] is not app:
        entry = _ROUTERS[id(app)] = (app, ChannelRouter(app, config))
    return entry[1]


def bind(
    model: Any,
    *,
    app: App,
    config: TetherConfig | None = None,
    channel: str | None = None,
    transport: Transport | None = None,
    vue_app_name: str | None = None,
    collector: StackCollector | None = None,
) -> Binding:
    """Bind *model* to a channel on *app* and return the full binding.

    Registers the watchers endpoint, the glue script endpoint, the stats
    endpoint and, when the transport is the bundled SSE ``Broadcaster``,
    the events endpoint; then wires the model's Reactive fields.

    Raises:
        ConfigError: If the transport selector cannot be resolved.

    """
    config = config or TetherConfig()
    channel = channel or config.channel
    transport = transport if transport is not None else resolve_transport(config)
    collector = collector or StackCollector(EventLog(max_events=config.max_events))

    handler = SyncChannelHandler(model, channel=channel, transport=transport, collector=collector)
    router = _router_for(app, config)

    routes = [router.register_watchers_endpoint(handler)]
    if isinstance(transport, Broadcaster):
        routes.append(router.register_events_endpoint(transport, channel))
    routes.append(router.register_script_endpoint(model, channel, vue_app_name=vue_app_name))
    router.register_stats_endpoint(collector)

    setup(model, channel, transport, collector=collector)

    return Binding(
        model=model,
        channel=channel,
        transport=transport,
        handler=handler,
        routes=tuple(routes),
    )


def init[M](model: M, **kwargs: Any) -> M:
    """Bind *model* (see ``bind``) and return it."""
    bind(model, **kwargs)
    return model


def _load_factory(target: str) -> Callable[[], Any]:
    """Resolve ``module:attr`` to a zero-argument model factory."""
    module_part, _, attr = target.partition(":")
    if not module_part or not attr:
        msg = f"{target!r}: expected 'module:factory'"
        raise ConfigError(msg)
    if str(Path.cwd()) not in sys.path:
        sys.path.insert(0, str(Path.cwd()))
    try:
        module = importlib.import_module(module_part)
    except ImportError as exc:
        msg = f"{target!r}: cannot import {module_part}: {exc}"
        raise ConfigError(msg) from exc
    factory = getattr(module, attr, None)
    if not callable(factory):
        msg = f"{target!r}: {attr} not callable in {module_part}"
        raise ConfigError(msg)
    return factory


def serve(target: str, root: str | Path = ".", **kwargs: object) -> None:
    """Serve the model built by *target* (``module:factory``) over Chirp.

    Args:
        target: Import path of a zero-argument model factory.
        root: Directory holding an optional tether.yaml / tether.toml.
        **kwargs: Override TetherConfig fields.

    """
    from chirp import App, AppConfig

    config = load_config(Path(root), **kwargs)
    model = _load_factory(target)()

    app = App(config=AppConfig(debug=not config.prod, host=config.host, port=config.port))
    binding = bind(model, app=app, config=config)

    print(
        f"  tether: {type(model).__name__} on channel {binding.channel!r}\n"
        f"  http://{config.host}:{config.port}/{config.script_endpoint(binding.channel)}",
        file=sys.stderr,
    )
    app.run(host=config.host, port=config.port)
