"""Tests for the background order loads behind the orders screen."""

from pathlib import Path

from rental_orders.domain.models import OrderQuery
from rental_orders.ui.list_controls import InFlightGuard
from rental_orders.ui.screens.orders_screen import OrdersLoadFailure, OrdersLoadTask


def run_task(db_path: Path, cursor: int, query_key=(None, "rahul")):
    task = OrdersLoadTask(
        db_path=db_path,
        request_id=3,
        query_key=query_key,
        query=OrderQuery(search="rahul"),
        cursor=cursor,
    )
    failures = []
    task.signals.failed.connect(failures.append)
    task.run()
    return failures


class TestOrdersLoadTask:
    """Failed loads report which request failed."""

    def test_failure_carries_query_key_and_cursor(self, qapp, tmp_path):
        failures = run_task(tmp_path / "missing" / "orders.db", cursor=20)
        assert len(failures) == 1
        failure = failures[0]
        assert isinstance(failure, OrdersLoadFailure)
        assert failure.request_id == 3
        assert failure.query_key == (None, "rahul")
        assert failure.cursor == 20
        assert failure.guard_key == ((None, "rahul"), 20)
        assert failure.message

    def test_failure_releases_only_its_own_request(self, qapp, tmp_path):
        """Other pages and queries stay in flight after one load fails."""
        guard = InFlightGuard()
        failed_key = ((None, "rahul"), 20)
        guard.begin(failed_key)
        guard.begin(((None, "rahul"), 0))
        guard.begin(((None, "asha"), 0))

        (failure,) = run_task(tmp_path / "missing" / "orders.db", cursor=20)
        guard.finish(failure.guard_key)

        assert not guard.is_in_flight(failed_key)
        assert guard.is_in_flight(((None, "rahul"), 0))
        assert guard.is_in_flight(((None, "asha"), 0))
