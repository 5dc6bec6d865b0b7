"""Tests for tether.channels — route registration on a Chirp app."""

from __future__ import annotations

import json

import pytest

from tether.channels import STATS_ENDPOINT, ChannelRouter
from tether.config import TetherConfig
from tether.observability import StackCollector
from tether.reactive.broadcaster import Broadcaster, SSEConnection
from tether.reactive.glue import deps
from tether.reactive.handler import ACK, SyncChannelHandler

from tests.conftest import (
    Dashboard,
    FailingTransport,
    FakeApp,
    FakeRequest,
    RecordingTransport,
    drain,
)


@pytest.fixture
def router(fake_app: FakeApp) -> ChannelRouter:
    return ChannelRouter(fake_app, TetherConfig(channel="main"))


def _body(response: object) -> str:
    body = response.body  # type: ignore[attr-defined]
    return body.decode() if isinstance(body, bytes) else body


class TestWatchersEndpoint:
    """POST /<channel>/watchers — inbound edits."""

    def test_registration(self, router: ChannelRouter, fake_app: FakeApp, dashboard: Dashboard) -> None:
        handler = SyncChannelHandler(dashboard, channel="main", transport=RecordingTransport())
        assert router.register_watchers_endpoint(handler) == "/main/watchers"
        route = fake_app.get("/main/watchers")
        assert route.methods == ["POST"]
        assert route.name == "tether:watchers:main"
        assert route.handler.__name__ == "tether_watchers_main"

    @pytest.mark.asyncio
    async def test_applies_edit_and_excludes_client(
        self,
        router: ChannelRouter,
        fake_app: FakeApp,
        dashboard: Dashboard,
        broadcaster: Broadcaster,
        clients: dict[str, SSEConnection],
    ) -> None:
        handler = SyncChannelHandler(dashboard, channel="main", transport=broadcaster)
        router.register_watchers_endpoint(handler)
        request = FakeRequest(
            {"payload": {"field": "count", "newval": 9, "oldval": 3}},
            query={"client": "A"},
        )

        result = await fake_app.get("/main/watchers").handler(request)

        assert result == ACK
        assert dashboard.count.get() == 9
        assert drain(clients["A"]) == []
        assert json.loads(drain(clients["B"])[0]) == {"key": "count", "value": 9}

    @pytest.mark.asyncio
    async def test_invalid_json_body_acknowledged(
        self, router: ChannelRouter, fake_app: FakeApp, dashboard: Dashboard,
    ) -> None:
        handler = SyncChannelHandler(dashboard, channel="main", transport=RecordingTransport())
        router.register_watchers_endpoint(handler)
        result = await fake_app.get("/main/watchers").handler(FakeRequest(ValueError("bad json")))
        assert result == ACK
        assert dashboard.count.get() == 3

    @pytest.mark.asyncio
    async def test_transport_failure_is_502(
        self, router: ChannelRouter, fake_app: FakeApp, dashboard: Dashboard,
    ) -> None:
        pytest.importorskip("chirp")
        handler = SyncChannelHandler(dashboard, channel="main", transport=FailingTransport())
        router.register_watchers_endpoint(handler)
        request = FakeRequest({"payload": {"field": "count", "newval": 9, "oldval": 3}})
        response = await fake_app.get("/main/watchers").handler(request)
        assert response.status == 502


class TestEventsEndpoint:
    def test_registration(self, router: ChannelRouter, fake_app: FakeApp) -> None:
        assert router.register_events_endpoint(Broadcaster(), "main") == "/main/events"
        route = fake_app.get("/main/events")
        assert route.name == "tether:events:main"
        assert route.handler.__name__ == "tether_events_main"


class TestScriptEndpoint:
    def test_default_channel_at_root(
        self, router: ChannelRouter, fake_app: FakeApp, dashboard: Dashboard,
    ) -> None:
        assert router.register_script_endpoint(dashboard, "main") == "/tether.js"
        assert fake_app.get("/tether.js").name == "tether:script:main"

    def test_other_channel_namespaced(
        self, router: ChannelRouter, fake_app: FakeApp, dashboard: Dashboard,
    ) -> None:
        assert router.register_script_endpoint(dashboard, "sales") == "/js/sales/tether.js"

    def test_registration_enables_deps_tag(
        self, router: ChannelRouter, dashboard: Dashboard,
    ) -> None:
        router.register_script_endpoint(dashboard, "sales")
        assert 'src="/js/sales/tether.js"' in deps(TetherConfig(channel="main"), "sales")

    @pytest.mark.asyncio
    async def test_serves_current_state(
        self, router: ChannelRouter, fake_app: FakeApp, dashboard: Dashboard,
    ) -> None:
        pytest.importorskip("chirp")
        router.register_script_endpoint(dashboard, "main")
        dashboard.label.set("west")
        response = await fake_app.get("/tether.js").handler(FakeRequest(None))
        assert response.content_type.startswith("application/javascript")
        assert '"label": "west"' in _body(response)


class TestStatsEndpoint:
    def test_registered_once(self, router: ChannelRouter, fake_app: FakeApp) -> None:
        collector = StackCollector()
        router.register_stats_endpoint(collector)
        router.register_stats_endpoint(collector)
        assert [r.path for r in fake_app.routes].count(STATS_ENDPOINT) == 1

    @pytest.mark.asyncio
    async def test_reports_event_log(self, router: ChannelRouter, fake_app: FakeApp) -> None:
        pytest.importorskip("chirp")
        collector = StackCollector()
        collector.record_received("main", "count")
        router.register_stats_endpoint(collector)
        response = await fake_app.get(STATS_ENDPOINT).handler(FakeRequest(None))
        assert json.loads(_body(response))["event_log"]["total"] == 1
