"""Transport protocol and selector.

A transport is anything with a ``broadcast(channel, payload, except_client)``
method.  ``resolve_transport`` turns the ``TetherConfig.transport`` selector
into an instance: ``"sse"`` builds the bundled ``Broadcaster``; a
``module:attr`` path imports a transport factory (or instance).
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from tether._errors import ConfigError
from tether.reactive.broadcaster import Broadcaster

if TYPE_CHECKING:
    from tether._types import ChannelName, ClientID
    from tether.config import TetherConfig


@runtime_checkable
class Transport(Protocol):
    """Publish/subscribe collaborator consumed by the sync core."""

    def broadcast(
        self,
        channel: ChannelName,
        payload: str,
        except_client: ClientID | None = None,
    ) -> int | None: ...


def resolve_transport(config: TetherConfig) -> Transport:
    """Build the transport named by ``config.transport``.

    Raises:
        ConfigError: If the selector cannot be resolved to a transport.

    """
    selector = config.transport
    if selector == "sse":
        return Broadcaster(queue_size=config.queue_size)

    module_part, _, attr = selector.partition(":")
    if not module_part or not attr:
        msg = f"transport {selector!r}: expected 'sse' or 'module:attr'"
        raise ConfigError(msg)
    try:
        module = importlib.import_module(module_part)
    except ImportError as exc:
        msg = f"transport {selector!r}: cannot import {module_part}"
        raise ConfigError(msg) from exc
    target = getattr(module, attr, None)
    if target is None:
        msg = f"transport {selector!r}: {attr} not found in {module_part}"
        raise ConfigError(msg)
    # A class or factory is called; a ready-made instance is used as-is.
    transport = target
    if isinstance(target, type) or (callable(target) and not isinstance(target, Transport)):
        transport = target()
    if not isinstance(transport, Transport):
        msg = f"transport {selector!r}: {attr} has no broadcast()"
        raise ConfigError(msg)
    return transport
