"""Tests for tether.reactive.update — the update engine."""

from __future__ import annotations

import pytest

from tether._errors import UnknownFieldError
from tether.reactive.update import update

from tests.conftest import Dashboard


class TestUpdate:
    """update — dispatch on storage kind, in place."""

    def test_reactive_field_set_and_notifies(self, dashboard: Dashboard) -> None:
        seen: list[float] = []
        dashboard.threshold.on(seen.append)

        update(dashboard, "threshold", 0.9, 0.5)

        assert dashboard.threshold.get() == 0.9
        assert seen == [0.9]

    def test_plain_field_assigned(self, dashboard: Dashboard) -> None:
        update(dashboard, "title", "Costs", "Sales")
        assert dashboard.title == "Costs"

    def test_returns_same_model(self, dashboard: Dashboard) -> None:
        assert update(dashboard, "visible", False, True) is dashboard

    def test_reactive_cell_identity_preserved(self, dashboard: Dashboard) -> None:
        cell = dashboard.count
        update(dashboard, "count", 10, 3)
        assert dashboard.count is cell

    def test_no_coercion(self, dashboard: Dashboard) -> None:
        update(dashboard, "count", "10", 3)
        assert dashboard.count.get() == "10"

    def test_unknown_field(self, dashboard: Dashboard) -> None:
        with pytest.raises(UnknownFieldError):
            update(dashboard, "missing", 1, 0)
