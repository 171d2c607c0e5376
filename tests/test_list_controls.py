"""Tests for debounced search, scroll pagination and single-flight guards."""

import pytest
from PySide6.QtTest import QTest

from rental_orders.ui.list_controls import (
    InFlightGuard,
    LoadMoreTrigger,
    SearchDebouncer,
    should_load_more,
)


@pytest.fixture
def debouncer(qapp):
    return SearchDebouncer(interval_ms=50)


@pytest.fixture
def fired(debouncer):
    searches = []
    debouncer.triggered.connect(searches.append)
    return searches


class TestSearchDebouncer:
    """Typing pauses drive the search."""

    def test_default_interval(self, qapp):
        assert SearchDebouncer().interval_ms == 500

    def test_nothing_fires_while_typing(self, debouncer, fired):
        debouncer.set_text("ra")
        assert debouncer.is_pending()
        assert fired == []

    def test_only_latest_text_fires(self, debouncer, fired):
        debouncer.set_text("r")
        debouncer.set_text("ra")
        debouncer.set_text("  rahul ")
        QTest.qWait(200)
        assert fired == ["rahul"]
        assert not debouncer.is_pending()

    def test_flush_fires_immediately(self, debouncer, fired):
        debouncer.set_text("inv")
        debouncer.flush()
        assert fired == ["inv"]
        QTest.qWait(100)
        assert fired == ["inv"]

    def test_flush_without_pending_text_is_noop(self, debouncer, fired):
        debouncer.flush()
        assert fired == []

    def test_cancel_drops_pending_search(self, debouncer, fired):
        debouncer.set_text("late")
        debouncer.cancel()
        QTest.qWait(100)
        assert fired == []


class TestShouldLoadMore:
    @pytest.mark.parametrize(
        "value,maximum,expected",
        [
            (0, 100, False),
            (79, 100, False),
            (80, 100, True),
            (100, 100, True),
            (0, 0, False),
        ],
    )
    def test_threshold(self, value, maximum, expected):
        assert should_load_more(value, maximum) is expected


class TestLoadMoreTrigger:
    def test_emits_near_end(self, qapp):
        trigger = LoadMoreTrigger()
        requests = []
        trigger.load_more_requested.connect(lambda: requests.append(True))
        assert trigger.check(10, 100) is False
        assert trigger.check(90, 100) is True
        assert requests == [True]

    def test_disabled_trigger_stays_quiet(self, qapp):
        trigger = LoadMoreTrigger(threshold=0.5)
        requests = []
        trigger.load_more_requested.connect(lambda: requests.append(True))
        trigger.set_enabled(False)
        assert trigger.check(99, 100) is False
        trigger.set_enabled(True)
        assert trigger.check(50, 100) is True
        assert requests == [True]


class TestInFlightGuard:
    """At most one request per key."""

    def test_second_begin_is_refused(self):
        guard = InFlightGuard()
        assert guard.begin(("rahul", 0))
        assert not guard.begin(("rahul", 0))
        assert guard.is_in_flight(("rahul", 0))

    def test_other_keys_are_independent(self):
        guard = InFlightGuard()
        guard.begin(("rahul", 0))
        assert guard.begin(("rahul", 20))

    def test_finish_releases_key(self):
        guard = InFlightGuard()
        guard.begin("load")
        guard.finish("load")
        assert not guard.is_in_flight("load")
        assert guard.begin("load")

    def test_reset(self):
        guard = InFlightGuard()
        guard.begin("a")
        guard.begin("b")
        guard.reset()
        assert not guard.is_in_flight("a")
        assert not guard.is_in_flight("b")
