"""Shared test fixtures for tether."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from tether.reactive.broadcaster import Broadcaster, SSEConnection
from tether.reactive.field import Reactive
from tether.reactive.glue import clear_deps
from tether.reactive.mapper import clear_rendering_mappings
from tether.reactive.model import ReactiveModel, clear_schema_cache
from tether.reactive.render import clear_components


@dataclass
class Dashboard(ReactiveModel):
    """A model mixing plain and Reactive fields of several types."""

    title: str = "Sales"
    threshold: Reactive[float] = field(default_factory=lambda: Reactive(0.5))
    count: Reactive[int] = field(default_factory=lambda: Reactive(3))
    label: Reactive[str] = field(default_factory=lambda: Reactive("north"))
    visible: bool = True


@pytest.fixture(autouse=True)
def _clean_registries() -> Any:
    """Process-wide registries start empty for every test."""
    clear_rendering_mappings()
    clear_components()
    clear_schema_cache()
    clear_deps()
    yield
    clear_rendering_mappings()
    clear_components()
    clear_schema_cache()
    clear_deps()


@pytest.fixture
def dashboard() -> Dashboard:
    return Dashboard()


@pytest.fixture
def broadcaster() -> Broadcaster:
    return Broadcaster()


@pytest.fixture
def clients(broadcaster: Broadcaster) -> dict[str, SSEConnection]:
    """Three clients A, B, C subscribed to the default test channel."""
    return {name: broadcaster.connect("main", name) for name in ("A", "B", "C")}


def drain(conn: SSEConnection) -> list[str]:
    """Pop every queued payload from a connection."""
    items: list[str] = []
    while not conn.queue.empty():
        items.append(conn.queue.get_nowait())
    return items


class RecordingTransport:
    """Transport that records every broadcast call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, str | None]] = []

    def broadcast(self, channel: str, payload: str, except_client: str | None = None) -> int:
        self.calls.append((channel, payload, except_client))
        return 1


class FailingTransport:
    """Transport whose broadcast always raises."""

    def broadcast(self, channel: str, payload: str, except_client: str | None = None) -> int:
        msg = "socket closed"
        raise ConnectionError(msg)


@dataclass
class RecordedRoute:
    path: str
    methods: list[str] | None
    name: str | None
    handler: Any = None


class FakeApp:
    """Stand-in for a Chirp App that records ``app.route(...)`` registrations."""

    def __init__(self) -> None:
        self.routes: list[RecordedRoute] = []

    def route(self, path: str, *, methods: list[str] | None = None, name: str | None = None) -> Any:
        route = RecordedRoute(path=path, methods=methods, name=name)
        self.routes.append(route)

        def decorator(handler: Any) -> Any:
            route.handler = handler
            return handler

        return decorator

    def get(self, path: str) -> RecordedRoute:
        for route in self.routes:
            if route.path == path:
                return route
        raise KeyError(path)


class FakeRequest:
    """Minimal request exposing ``query`` and an async ``json()``."""

    def __init__(self, body: Any, query: dict[str, str] | None = None) -> None:
        self._body = body
        self.query = query or {}

    async def json(self) -> Any:
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


@pytest.fixture
def fake_app() -> FakeApp:
    return FakeApp()
