"""Tests for tether.reactive.wiring — setup() and teardown()."""

from __future__ import annotations

import json

import pytest

from tether.observability import BroadcastFailed, FieldBroadcast, StackCollector
from tether.reactive.broadcaster import Broadcaster, SSEConnection
from tether.reactive.wiring import listener_key, setup, teardown

from tests.conftest import Dashboard, FailingTransport, RecordingTransport, drain


class TestSetup:
    """setup() — every Reactive write is pushed to the channel."""

    def test_returns_model(self, dashboard: Dashboard) -> None:
        assert setup(dashboard, "main", RecordingTransport()) is dashboard

    def test_listener_on_every_reactive_field(self, dashboard: Dashboard) -> None:
        setup(dashboard, "main", RecordingTransport())
        key = listener_key("main")
        for name in ("threshold", "count", "label"):
            assert getattr(dashboard, name).has_listener(key)

    def test_server_write_reaches_every_client(
        self,
        dashboard: Dashboard,
        broadcaster: Broadcaster,
        clients: dict[str, SSEConnection],
    ) -> None:
        setup(dashboard, "main", broadcaster)
        dashboard.label.value = "south"
        for conn in clients.values():
            assert [json.loads(p) for p in drain(conn)] == [{"key": "label", "value": "south"}]

    def test_no_exclusion_on_listener_push(self, dashboard: Dashboard) -> None:
        transport = RecordingTransport()
        setup(dashboard, "main", transport)
        dashboard.count.set(10)
        assert len(transport.calls) == 1
        channel, payload, excluded = transport.calls[0]
        assert (channel, excluded) == ("main", None)
        assert json.loads(payload) == {"key": "count", "value": 10}

    def test_plain_field_write_not_pushed(self, dashboard: Dashboard) -> None:
        transport = RecordingTransport()
        setup(dashboard, "main", transport)
        dashboard.title = "Costs"
        assert transport.calls == []

    def test_idempotent_per_channel(self, dashboard: Dashboard) -> None:
        transport = RecordingTransport()
        setup(dashboard, "main", transport)
        setup(dashboard, "main", transport)
        dashboard.count.set(4)
        assert len(transport.calls) == 1

    def test_second_channel_adds_listener(self, dashboard: Dashboard) -> None:
        transport = RecordingTransport()
        setup(dashboard, "main", transport)
        setup(dashboard, "other", transport)
        dashboard.count.set(4)
        assert sorted(call[0] for call in transport.calls) == ["main", "other"]

    def test_default_transport(self, dashboard: Dashboard) -> None:
        setup(dashboard)
        # Nobody is subscribed; the write still succeeds.
        dashboard.count.set(4)
        assert dashboard.count.get() == 4

    def test_user_listeners_untouched(self, dashboard: Dashboard) -> None:
        seen: list[object] = []
        dashboard.count.on(seen.append, key="mine")
        setup(dashboard, "main", RecordingTransport())
        dashboard.count.set(5)
        assert seen == [5]

    def test_records_broadcast_events(self, dashboard: Dashboard) -> None:
        collector = StackCollector()
        setup(dashboard, "main", RecordingTransport(), collector=collector)
        dashboard.threshold.set(0.7)
        events = collector.log.query(event_type=FieldBroadcast)
        assert [(e.channel, e.key, e.excluded_client) for e in events] == [
            ("main", "threshold", None),
        ]


class TestFailingChannel:
    """One broken transport never starves the other channels."""

    def test_other_channel_still_receives(
        self, dashboard: Dashboard, capsys: pytest.CaptureFixture[str],
    ) -> None:
        good = RecordingTransport()
        setup(dashboard, "bad", FailingTransport())
        setup(dashboard, "good", good)

        dashboard.count.value = 5

        assert dashboard.count.get() == 5
        assert [call[0] for call in good.calls] == ["good"]
        assert "Broadcast error on bad/count" in capsys.readouterr().err

    def test_failure_recorded(self, dashboard: Dashboard) -> None:
        collector = StackCollector()
        setup(dashboard, "bad", FailingTransport(), collector=collector)
        dashboard.label.set("south")
        failures = collector.log.query(event_type=BroadcastFailed)
        assert [(f.channel, f.key) for f in failures] == [("bad", "label")]
        assert "socket closed" in failures[0].error

    def test_user_listener_after_failing_push_runs(self, dashboard: Dashboard) -> None:
        setup(dashboard, "bad", FailingTransport())
        seen: list[object] = []
        dashboard.count.on(seen.append)
        dashboard.count.set(6)
        assert seen == [6]

class TestTeardown:
    def test_removes_channel_listener(self, dashboard: Dashboard) -> None:
        transport = RecordingTransport()
        setup(dashboard, "main", transport)
        teardown(dashboard, "main")
        dashboard.count.set(4)
        assert transport.calls == []

    def test_leaves_other_channels(self, dashboard: Dashboard) -> None:
        transport = RecordingTransport()
        setup(dashboard, "main", transport)
        setup(dashboard, "other", transport)
        teardown(dashboard, "main")
        dashboard.count.set(4)
        assert [call[0] for call in transport.calls] == ["other"]

    def test_teardown_without_setup(self, dashboard: Dashboard) -> None:
        assert teardown(dashboard, "main") is dashboard
