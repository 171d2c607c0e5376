"""Order category classification.

An order's display category is derived on demand from its persisted status,
its end timestamp and the return state of its items. Nothing here touches
the database or the clock: callers pass the evaluation instant explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from rental_orders.domain.models import (
    Order,
    OrderCategory,
    OrderStats,
    OrderStatus,
)
from rental_orders.services.timestamps import to_local, try_parse_timestamp

RETURNED_STATUSES = frozenset(
    {OrderStatus.COMPLETED, OrderStatus.COMPLETED_WITH_ISSUES}
)

# Statuses that never become late, even with an end date in the past.
NEVER_LATE_STATUSES = frozenset(
    {
        OrderStatus.COMPLETED,
        OrderStatus.COMPLETED_WITH_ISSUES,
        OrderStatus.FLAGGED,
        OrderStatus.CANCELLED,
        OrderStatus.PARTIALLY_RETURNED,
    }
)

EDITABLE_STATUSES = frozenset({OrderStatus.SCHEDULED, OrderStatus.ACTIVE})

RETURN_BLOCKED_STATUSES = frozenset(
    {
        OrderStatus.SCHEDULED,
        OrderStatus.COMPLETED,
        OrderStatus.COMPLETED_WITH_ISSUES,
        OrderStatus.CANCELLED,
        OrderStatus.FLAGGED,
    }
)


@dataclass(frozen=True)
class OrderActions:
    """Actions the order detail view may offer for one order."""

    can_start: bool
    can_mark_returned: bool
    can_edit: bool
    can_cancel: bool
    can_flag: bool
    can_set_late_fee: bool


def end_timestamp(order: Order) -> Optional[datetime]:
    return try_parse_timestamp(order.end_datetime or order.end_date)


def has_mixed_returns(order: Order) -> bool:
    if not order.items:
        return False
    has_returned = any(item.is_returned for item in order.items)
    has_pending = any(item.is_pending for item in order.items)
    return has_returned and has_pending


def classify_order(order: Order, now: datetime) -> OrderCategory:
    """Return the display category of ``order`` evaluated at ``now``."""
    status = order.status
    if status == OrderStatus.CANCELLED:
        return OrderCategory.CANCELLED
    if status == OrderStatus.FLAGGED:
        return OrderCategory.FLAGGED
    if status == OrderStatus.PARTIALLY_RETURNED:
        return OrderCategory.PARTIALLY_RETURNED
    if status in RETURNED_STATUSES:
        return OrderCategory.RETURNED
    # Scheduled orders stay scheduled until explicitly started.
    if status == OrderStatus.SCHEDULED:
        return OrderCategory.SCHEDULED

    if has_mixed_returns(order):
        return OrderCategory.PARTIALLY_RETURNED

    end = end_timestamp(order)
    if end is None:
        return OrderCategory.ONGOING

    if end < to_local(now) and status not in NEVER_LATE_STATUSES:
        return OrderCategory.LATE
    return OrderCategory.ONGOING


def matches_search(order: Order, search: Optional[str]) -> bool:
    query = (search or "").strip().lower()
    if not query:
        return True
    customer = order.customer
    haystack = [
        order.invoice_number or "",
        customer.name if customer else "",
        (customer.phone or "") if customer else "",
        (customer.customer_number or "") if customer else "",
    ]
    return any(query in value.lower() for value in haystack)


def filter_orders(
    orders: Iterable[Order],
    category: Optional[OrderCategory],
    search: Optional[str],
    now: datetime,
) -> list[Order]:
    """Keep orders in ``category`` (None keeps all) that match ``search``."""
    result: list[Order] = []
    for order in orders:
        if category is not None and classify_order(order, now) != category:
            continue
        if not matches_search(order, search):
            continue
        result.append(order)
    return result


def count_by_category(orders: Iterable[Order], now: datetime) -> OrderStats:
    counts = {category: 0 for category in OrderCategory}
    for order in orders:
        counts[classify_order(order, now)] += 1
    return OrderStats(**{category.value: count for category, count in counts.items()})


def available_actions(order: Order, now: datetime) -> OrderActions:
    category = classify_order(order, now)
    status = order.status
    has_late_fee = bool(order.late_fee and order.late_fee > 0)
    return OrderActions(
        can_start=status == OrderStatus.SCHEDULED,
        can_mark_returned=(
            status not in RETURN_BLOCKED_STATUSES and order.has_pending_items
        ),
        can_edit=status in EDITABLE_STATUSES,
        can_cancel=status in EDITABLE_STATUSES,
        can_flag=category == OrderCategory.LATE,
        can_set_late_fee=(
            status != OrderStatus.FLAGGED
            and (category == OrderCategory.LATE or has_late_fee)
        ),
    )
