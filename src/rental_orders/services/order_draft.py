"""In-progress order draft and its pre-submission validation."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from rental_orders.domain.models import Customer, Order, OrderItem, UserProfile
from rental_orders.logging_config import get_logger
from rental_orders.services.pricing import (
    OrderTotals,
    TaxSettings,
    compute_totals,
    days_between,
    line_total,
    order_subtotal,
)
from rental_orders.services.timestamps import local_now, parse_timestamp


class DraftIssue(str, Enum):
    CUSTOMER_REQUIRED = "customer_required"
    END_DATE_REQUIRED = "end_date_required"
    ITEMS_REQUIRED = "items_required"
    INVOICE_REQUIRED = "invoice_required"
    USER_INCOMPLETE = "user_incomplete"
    INVALID_ITEMS = "invalid_items"

    @property
    def message(self) -> str:
        return ISSUE_MESSAGES[self]


ISSUE_MESSAGES = {
    DraftIssue.CUSTOMER_REQUIRED: "Please select a customer.",
    DraftIssue.END_DATE_REQUIRED: "Please select an end date.",
    DraftIssue.ITEMS_REQUIRED: "Please add at least one item.",
    DraftIssue.INVOICE_REQUIRED: "Please enter an invoice number.",
    DraftIssue.USER_INCOMPLETE: "User information missing.",
    DraftIssue.INVALID_ITEMS: (
        "Please check all items have valid photo, quantity, and price."
    ),
}


def _item_key(item: OrderItem) -> str:
    if item.id is not None:
        return f"id_{item.id}"
    return (
        f"key_{item.photo_url}_{item.product_name or ''}_{item.quantity}"
        f"_{item.price_per_day}"
    )


def is_valid_item(item: OrderItem) -> bool:
    return bool(item.photo_url) and item.quantity > 0 and item.price_per_day >= 0


def _default_period() -> tuple[datetime, datetime]:
    start = local_now().replace(microsecond=0)
    return start, start + timedelta(days=1)


@dataclass
class OrderDraft:
    """Order being assembled before submission.

    Items always carry the day count of the current period: changing either
    date reprices every item.
    """

    customer: Optional[Customer] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    invoice_number: str = ""
    security_deposit: Optional[float] = None
    items: list[OrderItem] = field(default_factory=list)
    # Set when the draft edits an existing order.
    order_id: Optional[int] = None

    def __post_init__(self) -> None:
        self._logger = get_logger(self.__class__.__name__)
        if self.start is None and self.end is None:
            self.start, self.end = _default_period()
        self._reprice()

    @property
    def is_editing(self) -> bool:
        return self.order_id is not None

    @property
    def days(self) -> int:
        if self.start is None or self.end is None:
            return 0
        return days_between(self.start, self.end)

    @property
    def subtotal(self) -> float:
        return order_subtotal(self.items)

    def totals(self, settings: TaxSettings) -> OrderTotals:
        return compute_totals(self.items, max(self.days, 1), settings)

    def set_customer(self, customer: Optional[Customer]) -> None:
        self.customer = customer

    def set_start(self, start: datetime) -> None:
        self.start = start
        self._reprice()

    def set_end(self, end: Optional[datetime]) -> None:
        self.end = end
        self._reprice()

    def set_invoice_number(self, invoice_number: str) -> None:
        self.invoice_number = invoice_number

    def set_security_deposit(self, amount: Optional[float]) -> None:
        self.security_deposit = amount

    def add_item(self, item: OrderItem) -> bool:
        """Add ``item`` at the top of the list; duplicates are rejected."""
        key = _item_key(item)
        if any(_item_key(existing) == key for existing in self.items):
            self._logger.warning("Duplicate draft item ignored: %s", key)
            return False
        self.items.insert(0, self._priced(item))
        return True

    def remove_item(self, index: int) -> None:
        if 0 <= index < len(self.items):
            del self.items[index]

    def load_order(self, order: Order) -> None:
        """Replace the draft with the data of an existing order."""
        self.clear()
        self.order_id = order.id
        self.customer = order.customer
        self.start = parse_timestamp(order.start_datetime or order.start_date)
        self.end = parse_timestamp(order.end_datetime or order.end_date)
        self.invoice_number = order.invoice_number
        self.security_deposit = order.security_deposit
        seen: set[str] = set()
        for item in order.items:
            key = _item_key(item)
            if key in seen:
                self._logger.warning("Duplicate order item skipped: %s", key)
                continue
            seen.add(key)
            self.items.append(self._priced(item))

    def clear(self) -> None:
        self.order_id = None
        self.customer = None
        self.start, self.end = _default_period()
        self.invoice_number = ""
        self.security_deposit = None
        self.items = []

    def _priced(self, item: OrderItem) -> OrderItem:
        days = max(self.days, 1)
        return replace(
            item,
            days=days,
            line_total=line_total(item.quantity, item.price_per_day, days),
        )

    def _reprice(self) -> None:
        self.items = [self._priced(item) for item in self.items]


def validate_draft(
    draft: OrderDraft, user: Optional[UserProfile]
) -> list[DraftIssue]:
    """Return every reason ``draft`` cannot be submitted, in a fixed order."""
    issues: list[DraftIssue] = []
    if draft.customer is None or draft.customer.id is None:
        issues.append(DraftIssue.CUSTOMER_REQUIRED)
    if draft.end is None:
        issues.append(DraftIssue.END_DATE_REQUIRED)
    if not draft.items:
        issues.append(DraftIssue.ITEMS_REQUIRED)
    if not draft.invoice_number.strip():
        issues.append(DraftIssue.INVOICE_REQUIRED)
    if user is None or user.id is None or user.branch_id is None:
        issues.append(DraftIssue.USER_INCOMPLETE)
    if any(not is_valid_item(item) for item in draft.items):
        issues.append(DraftIssue.INVALID_ITEMS)
    return issues
