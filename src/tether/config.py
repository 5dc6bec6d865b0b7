"""Tether configuration.

TetherConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass

from tether._errors import ConfigError

DEFAULT_CHANNEL = "__tether__"


@dataclass(frozen=True, slots=True)
class TetherConfig:
    """Configuration for a Tether binding.

    Attributes:
        channel: Default broadcast channel for bound models.
        debounce_ms: Client-side debounce for edit batching.  Passed through
            to the generated watchers untouched.
        transport: Transport selector, ``"sse"`` for the bundled SSE
            broadcaster or a ``module:attr`` path to a transport factory.
        script_name: File name of the generated glue script.
        base_path: URL prefix the application is mounted under.
        host: Bind address for ``tether serve``.
        port: Bind port for ``tether serve``.
        prod: Production mode (minified Vue, manual watcher expressions).
        queue_size: Per-connection SSE queue bound (0 = unbounded).
        max_events: Size of the observability event log ring buffer.

    """

    channel: str = DEFAULT_CHANNEL
    debounce_ms: int = 300
    transport: str = "sse"
    script_name: str = "tether.js"
    base_path: str = "/"
    host: str = "127.0.0.1"
    port: int = 3000
    prod: bool = False
    queue_size: int = 0
    max_events: int = 10_000

    def __post_init__(self) -> None:
        if not self.channel:
            msg = "channel must be a non-empty string"
            raise ConfigError(msg)
        if self.debounce_ms < 0:
            msg = f"debounce_ms must be >= 0, got {self.debounce_ms}"
            raise ConfigError(msg)
        if self.queue_size < 0:
            msg = f"queue_size must be >= 0, got {self.queue_size}"
            raise ConfigError(msg)
        # Normalize base_path so endpoint helpers can concatenate blindly.
        if not self.base_path.endswith("/"):
            object.__setattr__(self, "base_path", self.base_path + "/")

    def is_default_channel(self, channel: str) -> bool:
        return channel == self.channel

    def script_endpoint(self, channel: str | None = None) -> str:
        """Route path (no leading slash) of the glue script for *channel*.

        The default channel serves ``tether.js`` at the root; any other
        channel gets its own ``js/<channel>/tether.js``.
        """
        channel = channel or self.channel
        if self.is_default_channel(channel):
            return self.script_name
        return f"js/{channel}/{self.script_name}"

    def watchers_path(self, channel: str | None = None) -> str:
        """Route path receiving inbound edit messages for *channel*."""
        return f"/{channel or self.channel}/watchers"

    def events_path(self, channel: str | None = None) -> str:
        """Route path of the SSE stream for *channel*."""
        return f"/{channel or self.channel}/events"
