"""Tether error hierarchy.

All tether-specific errors inherit from TetherError for easy catching.
"""


class TetherError(Exception):
    """Base error for all tether operations."""


class ConfigError(TetherError):
    """Invalid or missing configuration."""


class ReactiveError(TetherError):
    """Misuse of a reactive cell or model (e.g. duplicate listener key)."""


class CoercionError(TetherError):
    """An inbound value cannot be converted to the field's declared type."""


class UnknownFieldError(TetherError):
    """An inbound message references a field the model does not declare."""


class ProtocolError(TetherError):
    """An inbound message does not have the expected shape."""


class TransportError(TetherError):
    """The transport failed to broadcast a payload."""
