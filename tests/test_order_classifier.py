"""Tests for order category classification."""

from datetime import datetime

import pytest
from dateutil import tz

from rental_orders.domain.models import (
    Customer,
    Order,
    OrderCategory,
    OrderItem,
    OrderStatus,
    ReturnStatus,
)
from rental_orders.services.order_classifier import (
    available_actions,
    classify_order,
    count_by_category,
    filter_orders,
)

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=tz.UTC)
PAST_END = "2024-06-14T12:00:00Z"
FUTURE_END = "2024-06-20T12:00:00Z"


def make_item(return_status=None, item_id=None) -> OrderItem:
    return OrderItem(
        id=item_id,
        photo_url="photos/chair.jpg",
        product_name="Chair",
        quantity=2,
        price_per_day=50.0,
        return_status=return_status,
    )


def make_order(
    status: OrderStatus,
    end_datetime=FUTURE_END,
    end_date="2024-06-20",
    items=None,
    late_fee=None,
    invoice_number="INV-1",
    customer=None,
) -> Order:
    return Order(
        id=1,
        branch_id=1,
        staff_id=1,
        customer_id=1,
        invoice_number=invoice_number,
        start_date="2024-06-10",
        end_date=end_date,
        status=status,
        subtotal=100.0,
        tax_amount=0.0,
        total_amount=100.0,
        start_datetime="2024-06-10T12:00:00Z",
        end_datetime=end_datetime,
        late_fee=late_fee,
        customer=customer,
        items=items if items is not None else [make_item()],
    )


MIXED_ITEMS = [
    make_item(ReturnStatus.RETURNED, 1),
    make_item(ReturnStatus.NOT_YET_RETURNED, 2),
]


class TestFixedStatuses:
    """Statuses whose category ignores dates and items."""

    @pytest.mark.parametrize("end", [PAST_END, FUTURE_END, "2001-01-01T00:00:00Z"])
    def test_scheduled_stays_scheduled(self, end):
        """Scheduled orders are never late, however old the end date."""
        order = make_order(OrderStatus.SCHEDULED, end_datetime=end)
        assert classify_order(order, NOW) == OrderCategory.SCHEDULED

    def test_scheduled_with_mixed_returns_is_scheduled(self):
        order = make_order(OrderStatus.SCHEDULED, items=MIXED_ITEMS)
        assert classify_order(order, NOW) == OrderCategory.SCHEDULED

    @pytest.mark.parametrize(
        "status,expected",
        [
            (OrderStatus.CANCELLED, OrderCategory.CANCELLED),
            (OrderStatus.FLAGGED, OrderCategory.FLAGGED),
            (OrderStatus.COMPLETED, OrderCategory.RETURNED),
            (OrderStatus.COMPLETED_WITH_ISSUES, OrderCategory.RETURNED),
            (OrderStatus.PARTIALLY_RETURNED, OrderCategory.PARTIALLY_RETURNED),
        ],
    )
    @pytest.mark.parametrize("end", [PAST_END, FUTURE_END])
    @pytest.mark.parametrize("mixed", [True, False])
    def test_terminal_statuses_ignore_dates_and_items(
        self, status, expected, end, mixed
    ):
        items = MIXED_ITEMS if mixed else [make_item()]
        order = make_order(status, end_datetime=end, items=items)
        assert classify_order(order, NOW) == expected


class TestActiveOrders:
    """Date and item driven categories."""

    def test_past_end_is_late(self):
        order = make_order(OrderStatus.ACTIVE, end_datetime=PAST_END)
        assert classify_order(order, NOW) == OrderCategory.LATE

    def test_future_end_is_ongoing(self):
        order = make_order(OrderStatus.ACTIVE, end_datetime=FUTURE_END)
        assert classify_order(order, NOW) == OrderCategory.ONGOING

    def test_mixed_returns_beat_future_end(self):
        """Mixed return state wins even before the end date."""
        order = make_order(OrderStatus.ACTIVE, items=MIXED_ITEMS)
        assert classify_order(order, NOW) == OrderCategory.PARTIALLY_RETURNED

    def test_mixed_returns_beat_past_end(self):
        order = make_order(
            OrderStatus.ACTIVE, end_datetime=PAST_END, items=MIXED_ITEMS
        )
        assert classify_order(order, NOW) == OrderCategory.PARTIALLY_RETURNED

    def test_missing_items_are_not_pending(self):
        """A returned item next to a missing one is not a partial return."""
        items = [
            make_item(ReturnStatus.RETURNED, 1),
            make_item(ReturnStatus.MISSING, 2),
        ]
        order = make_order(OrderStatus.ACTIVE, end_datetime=PAST_END, items=items)
        assert classify_order(order, NOW) == OrderCategory.LATE

    def test_unparseable_end_is_ongoing(self):
        order = make_order(
            OrderStatus.ACTIVE, end_datetime="not-a-date", end_date="also-bad"
        )
        assert classify_order(order, NOW) == OrderCategory.ONGOING

    def test_end_date_used_when_datetime_missing(self):
        order = make_order(OrderStatus.ACTIVE, end_datetime=None, end_date="2024-06-14")
        assert classify_order(order, NOW) == OrderCategory.LATE

    def test_end_without_offset_is_utc(self):
        """An end one hour before now in UTC fields is already late."""
        order = make_order(OrderStatus.ACTIVE, end_datetime="2024-06-15T11:00:00")
        assert classify_order(order, NOW) == OrderCategory.LATE

    def test_end_equal_to_now_is_not_late(self):
        order = make_order(OrderStatus.ACTIVE, end_datetime="2024-06-15T12:00:00Z")
        assert classify_order(order, NOW) == OrderCategory.ONGOING

    def test_naive_now_is_read_as_local(self):
        now = NOW.astimezone(tz.tzlocal()).replace(tzinfo=None)
        order = make_order(OrderStatus.ACTIVE, end_datetime=PAST_END)
        assert classify_order(order, now) == OrderCategory.LATE


class TestFilteringAndCounts:
    """Category tabs, search and stats."""

    @pytest.fixture
    def orders(self):
        alice = Customer(id=1, name="Alice Fernandes", phone="+91 90000 11111")
        bob = Customer(
            id=2, name="Bob Mathew", phone="+91 90000 22222", customer_number="C-77"
        )
        return [
            make_order(OrderStatus.SCHEDULED, invoice_number="INV-100", customer=alice),
            make_order(
                OrderStatus.ACTIVE,
                end_datetime=PAST_END,
                invoice_number="INV-101",
                customer=bob,
            ),
            make_order(OrderStatus.ACTIVE, invoice_number="INV-102", customer=alice),
            make_order(OrderStatus.CANCELLED, invoice_number="INV-103", customer=bob),
        ]

    def test_filter_by_category(self, orders):
        late = filter_orders(orders, OrderCategory.LATE, None, NOW)
        assert [order.invoice_number for order in late] == ["INV-101"]

    def test_no_category_keeps_all(self, orders):
        assert len(filter_orders(orders, None, None, NOW)) == 4

    def test_search_is_case_insensitive(self, orders):
        found = filter_orders(orders, None, "alice", NOW)
        assert [order.invoice_number for order in found] == ["INV-100", "INV-102"]

    def test_search_matches_phone_invoice_and_customer_number(self, orders):
        assert len(filter_orders(orders, None, "22222", NOW)) == 2
        assert len(filter_orders(orders, None, "inv-103", NOW)) == 1
        assert len(filter_orders(orders, None, "c-77", NOW)) == 2

    def test_search_and_category_combine(self, orders):
        found = filter_orders(orders, OrderCategory.ONGOING, "alice", NOW)
        assert [order.invoice_number for order in found] == ["INV-102"]

    def test_count_by_category(self, orders):
        stats = count_by_category(orders, NOW)
        assert stats.scheduled == 1
        assert stats.late == 1
        assert stats.ongoing == 1
        assert stats.cancelled == 1
        assert stats.returned == 0
        assert stats.total == 4
        assert stats.count_for(OrderCategory.LATE) == 1


class TestAvailableActions:
    """Which detail actions are enabled."""

    def test_scheduled_order(self):
        actions = available_actions(make_order(OrderStatus.SCHEDULED), NOW)
        assert actions.can_start
        assert actions.can_edit
        assert actions.can_cancel
        assert not actions.can_mark_returned
        assert not actions.can_flag

    def test_late_order(self):
        order = make_order(OrderStatus.ACTIVE, end_datetime=PAST_END)
        actions = available_actions(order, NOW)
        assert not actions.can_start
        assert actions.can_mark_returned
        assert actions.can_flag
        assert actions.can_set_late_fee

    def test_ongoing_order_without_fee(self):
        actions = available_actions(make_order(OrderStatus.ACTIVE), NOW)
        assert actions.can_mark_returned
        assert not actions.can_flag
        assert not actions.can_set_late_fee

    def test_flagged_order_with_fee(self):
        order = make_order(OrderStatus.FLAGGED, end_datetime=PAST_END, late_fee=100.0)
        actions = available_actions(order, NOW)
        assert not actions.can_set_late_fee
        assert not actions.can_mark_returned
        assert not actions.can_cancel

    def test_completed_order_with_fee_allows_fee_edit(self):
        order = make_order(
            OrderStatus.COMPLETED,
            items=[make_item(ReturnStatus.RETURNED, 1)],
            late_fee=50.0,
        )
        actions = available_actions(order, NOW)
        assert actions.can_set_late_fee
        assert not actions.can_mark_returned
        assert not actions.can_edit
