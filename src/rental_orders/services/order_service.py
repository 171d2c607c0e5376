"""Order operations backed by the local SQLite store."""

from __future__ import annotations

import sqlite3
from dataclasses import replace
from datetime import datetime
from typing import Iterable, Optional

from dateutil import tz

from rental_orders.config import INVOICE_PREFIX
from rental_orders.domain.models import (
    Customer,
    DateRange,
    Order,
    OrderItem,
    OrderPage,
    OrderQuery,
    OrderStats,
    OrderStatus,
    UserProfile,
)
from rental_orders.logging_config import get_logger
from rental_orders.repositories import order_repo
from rental_orders.services.errors import (
    DraftValidationError,
    NotFoundError,
    ValidationError,
)
from rental_orders.services.order_classifier import (
    EDITABLE_STATUSES,
    available_actions,
    count_by_category,
)
from rental_orders.services.order_draft import OrderDraft, is_valid_item, validate_draft
from rental_orders.services.pricing import (
    TaxSettings,
    apply_late_fee,
    compute_totals,
    days_between,
    reprice_items,
)
from rental_orders.services.timestamps import local_now, to_local


def _utc_iso(value: datetime) -> str:
    return to_local(value).astimezone(tz.UTC).isoformat(timespec="seconds")


def initial_status(start: datetime, now: datetime) -> OrderStatus:
    """Orders starting on a later calendar day are scheduled, others active."""
    if to_local(start).date() > to_local(now).date():
        return OrderStatus.SCHEDULED
    return OrderStatus.ACTIVE


def _validate_order_input(
    invoice_number: str,
    start: datetime,
    end: datetime,
    items: list[OrderItem],
    security_deposit: Optional[float],
) -> None:
    if not invoice_number:
        raise ValidationError("Invoice number is required.")
    if not items:
        raise ValidationError("An order needs at least one item.")
    if any(not is_valid_item(item) for item in items):
        raise ValidationError(
            "Every item needs a photo, a positive quantity and a price."
        )
    if to_local(end) < to_local(start):
        raise ValidationError("End date must not be before the start date.")
    if security_deposit is not None and security_deposit < 0:
        raise ValidationError("Security deposit cannot be negative.")


def _late_fee_change(
    order: Order, late_fee: Optional[float]
) -> tuple[Optional[float], float]:
    """Return the fee to store and the total carrying it.

    ``None`` keeps the fee already on the order.
    """
    if late_fee is not None and late_fee < 0:
        raise ValidationError("Late fee cannot be negative.")
    new_fee = order.late_fee if late_fee is None else late_fee
    total = apply_late_fee(order.total_amount, order.late_fee, new_fee or 0.0)
    return new_fee, total


class OrderService:
    """Create, list and transition rental orders."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._logger = get_logger(self.__class__.__name__)

    def fetch_orders(
        self, query: OrderQuery, cursor: Optional[int] = None
    ) -> OrderPage:
        """Return one page of orders; ``cursor`` is the offset of the page."""
        offset = max(cursor or 0, 0)
        limit = max(query.limit, 1)
        orders = order_repo.list_orders(
            query,
            offset=offset,
            limit=limit + 1,
            connection=self._connection,
        )
        if len(orders) > limit:
            return OrderPage(orders=orders[:limit], next_cursor=offset + limit)
        return OrderPage(orders=orders, next_cursor=None)

    def fetch_order_stats(
        self,
        branch_id: Optional[int] = None,
        date_range: Optional[DateRange] = None,
        now: Optional[datetime] = None,
    ) -> OrderStats:
        orders = order_repo.list_orders(
            OrderQuery(branch_id=branch_id, date_range=date_range),
            connection=self._connection,
        )
        return count_by_category(orders, now or local_now())

    def get_order(self, order_id: int) -> Order:
        order = order_repo.get_order_with_items(
            order_id, connection=self._connection
        )
        if order is None:
            raise NotFoundError(f"Order {order_id} not found.")
        return order

    def create_order(
        self,
        *,
        branch_id: int,
        staff_id: int,
        customer_id: int,
        invoice_number: str,
        start: datetime,
        end: datetime,
        items: Iterable[OrderItem],
        tax_settings: TaxSettings,
        security_deposit: Optional[float] = None,
        customer: Optional[Customer] = None,
        now: Optional[datetime] = None,
    ) -> Order:
        """Persist a new order with totals computed from ``items``."""
        invoice_number = invoice_number.strip()
        item_list = list(items)
        _validate_order_input(invoice_number, start, end, item_list, security_deposit)

        days = days_between(to_local(start), to_local(end))
        totals = compute_totals(item_list, days, tax_settings)
        order = Order(
            id=None,
            branch_id=branch_id,
            staff_id=staff_id,
            customer_id=customer_id,
            invoice_number=invoice_number,
            start_date=to_local(start).date().isoformat(),
            end_date=to_local(end).date().isoformat(),
            status=initial_status(start, now or local_now()),
            subtotal=totals.subtotal,
            tax_amount=totals.tax_amount,
            total_amount=totals.grand_total,
            start_datetime=_utc_iso(start),
            end_datetime=_utc_iso(end),
            security_deposit=security_deposit,
            customer=customer,
        )
        created = order_repo.create_order(
            order,
            reprice_items(item_list, days),
            connection=self._connection,
        )
        self._logger.info(
            "Created order id=%s invoice=%s status=%s total=%.2f",
            created.id,
            created.invoice_number,
            created.status.value,
            created.total_amount,
        )
        return created

    def update_order(
        self,
        order_id: int,
        *,
        customer_id: int,
        invoice_number: str,
        start: datetime,
        end: datetime,
        items: Iterable[OrderItem],
        tax_settings: TaxSettings,
        security_deposit: Optional[float] = None,
    ) -> Order:
        """Rewrite a scheduled or active order and replace its items.

        Totals are recomputed from ``items``; a late fee already on the order
        stays in the total. Status is unchanged.
        """
        order = self.get_order(order_id)
        if order.status not in EDITABLE_STATUSES:
            raise ValidationError("Only scheduled or active orders can be edited.")
        invoice_number = invoice_number.strip()
        item_list = list(items)
        _validate_order_input(invoice_number, start, end, item_list, security_deposit)

        days = days_between(to_local(start), to_local(end))
        totals = compute_totals(item_list, days, tax_settings)
        updated = replace(
            order,
            customer_id=customer_id,
            invoice_number=invoice_number,
            start_date=to_local(start).date().isoformat(),
            end_date=to_local(end).date().isoformat(),
            subtotal=totals.subtotal,
            tax_amount=totals.tax_amount,
            total_amount=totals.grand_total + (order.late_fee or 0.0),
            start_datetime=_utc_iso(start),
            end_datetime=_utc_iso(end),
            security_deposit=security_deposit,
            items=[],
        )
        order_repo.update_order(
            updated,
            reprice_items(item_list, days),
            connection=self._connection,
        )
        self._logger.info(
            "Updated order id=%s invoice=%s total=%.2f",
            order_id,
            invoice_number,
            updated.total_amount,
        )
        return self.get_order(order_id)

    def submit_draft(
        self,
        draft: OrderDraft,
        user: Optional[UserProfile],
        tax_settings: TaxSettings,
        now: Optional[datetime] = None,
    ) -> Order:
        """Validate and persist ``draft``, clearing it only once it is saved.

        A draft loaded from an existing order updates that order instead of
        creating a new one.
        """
        issues = validate_draft(draft, user)
        if issues:
            raise DraftValidationError(issues)
        customer = draft.customer
        current = now or local_now()
        if draft.order_id is not None:
            order = self.update_order(
                draft.order_id,
                customer_id=int(customer.id),
                invoice_number=draft.invoice_number,
                start=draft.start or current,
                end=draft.end,
                items=draft.items,
                tax_settings=tax_settings,
                security_deposit=draft.security_deposit,
            )
            draft.clear()
            return order
        order = self.create_order(
            branch_id=int(user.branch_id),
            staff_id=int(user.id),
            customer_id=int(customer.id),
            invoice_number=draft.invoice_number,
            start=draft.start or current,
            end=draft.end,
            items=draft.items,
            tax_settings=tax_settings,
            security_deposit=draft.security_deposit,
            customer=customer,
            now=current,
        )
        draft.clear()
        return order

    def update_order_status(
        self,
        order_id: int,
        status: OrderStatus,
        late_fee: Optional[float] = None,
    ) -> Order:
        """Set a new status; a given late fee replaces the previous one in the total.

        ``late_fee=None`` keeps the fee currently on the order.
        """
        order = self.get_order(order_id)
        new_fee, total = _late_fee_change(order, late_fee)
        order_repo.set_status(
            order_id,
            status,
            total_amount=total,
            late_fee=new_fee,
            connection=self._connection,
        )
        self._logger.info(
            "Order id=%s status %s -> %s late_fee=%s",
            order_id,
            order.status.value,
            status.value,
            new_fee,
        )
        return self.get_order(order_id)

    def start_rental(self, order_id: int) -> Order:
        order = self.get_order(order_id)
        if order.status != OrderStatus.SCHEDULED:
            raise ValidationError("Only scheduled orders can be started.")
        return self.update_order_status(order_id, OrderStatus.ACTIVE)

    def cancel_order(self, order_id: int) -> Order:
        order = self.get_order(order_id)
        if order.status not in EDITABLE_STATUSES:
            raise ValidationError("Only scheduled or active orders can be cancelled.")
        return self.update_order_status(order_id, OrderStatus.CANCELLED)

    def flag_order(
        self,
        order_id: int,
        late_fee: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> Order:
        order = self.get_order(order_id)
        if not available_actions(order, now or local_now()).can_flag:
            raise ValidationError("Only late orders can be flagged.")
        return self.update_order_status(order_id, OrderStatus.FLAGGED, late_fee)

    def mark_returned(
        self,
        order_id: int,
        late_fee: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> Order:
        """Mark every pending item returned and complete the order atomically."""
        current = now or local_now()
        order = self.get_order(order_id)
        if not available_actions(order, current).can_mark_returned:
            raise ValidationError("This order has no items waiting to be returned.")
        new_fee, total = _late_fee_change(order, late_fee)
        has_missing = any(item.is_missing for item in order.items)
        status = (
            OrderStatus.COMPLETED_WITH_ISSUES if has_missing else OrderStatus.COMPLETED
        )
        order_repo.mark_order_returned(
            order_id,
            [item for item in order.items if item.is_pending],
            status,
            returned_at=_utc_iso(current),
            total_amount=total,
            late_fee=new_fee,
            connection=self._connection,
        )
        self._logger.info(
            "Order id=%s returned with status %s late_fee=%s",
            order_id,
            status.value,
            new_fee,
        )
        return self.get_order(order_id)

    def generate_invoice_number(self, now: Optional[datetime] = None) -> str:
        """Suggest the next ``ORD-YYYYMMDD-NNNN`` number for the given day."""
        day = to_local(now or local_now()).strftime("%Y%m%d")
        prefix = f"{INVOICE_PREFIX}-{day}-"
        sequence = (
            order_repo.count_invoices_with_prefix(prefix, connection=self._connection)
            + 1
        )
        return f"{prefix}{sequence:04d}"
