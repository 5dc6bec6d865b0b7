"""Reactive layer — the bidirectional sync protocol.

Reactive fields notify listeners; ``setup()`` installs a listener that
pushes every change to the model's channel; ``SyncChannelHandler`` applies
browser edits and rebroadcasts them to everyone else.
"""

from tether.reactive.broadcaster import Broadcaster, SSEConnection
from tether.reactive.field import Reactive
from tether.reactive.handler import ACK, EditMessage, SyncChannelHandler
from tether.reactive.mapper import from_wire_name, rendering_mappings, to_wire_name
from tether.reactive.model import FieldSpec, ReactiveModel, model_schema
from tether.reactive.outbound import push
from tether.reactive.render import jsonify, render_model, render_value
from tether.reactive.transport import Transport
from tether.reactive.update import update
from tether.reactive.wiring import setup, teardown

__all__ = [
    "ACK",
    "Broadcaster",
    "EditMessage",
    "FieldSpec",
    "Reactive",
    "ReactiveModel",
    "SSEConnection",
    "SyncChannelHandler",
    "Transport",
    "from_wire_name",
    "jsonify",
    "model_schema",
    "push",
    "render_model",
    "render_value",
    "rendering_mappings",
    "setup",
    "teardown",
    "to_wire_name",
    "update",
]
