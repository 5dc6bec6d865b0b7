"""Shared type definitions for tether."""

from collections.abc import Callable
from typing import Any, Literal

# Broadcast domain name
type ChannelName = str

# Opaque per-connection identifier, used only for broadcast exclusion
type ClientID = str

# Field identifier as seen by the browser
type WireName = str

# Storage kind of a model field
type FieldKind = Literal["plain", "reactive"]

# Reactive field listener, called with the new value
type Listener = Callable[[Any], Any]
