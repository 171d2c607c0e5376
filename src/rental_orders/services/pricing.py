"""Rental duration and pricing calculations."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Iterable, Optional

from dateutil import parser

from rental_orders.config import DEFAULT_TAX_RATE
from rental_orders.domain.models import OrderItem, UserProfile


def _to_date(value: str | date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parser.isoparse(str(value).strip()).date()


def days_between(start: str | date | datetime, end: str | date | datetime) -> int:
    """Return the billable day count between two instants.

    Only calendar dates count: same day and next day are both one day,
    and the result is never below one.
    """
    delta = (_to_date(end) - _to_date(start)).days
    return max(1, delta)


def line_total(quantity: int, price_per_day: float, days: int) -> float:
    return quantity * price_per_day * days


def order_subtotal(items: Iterable[OrderItem]) -> float:
    return sum((item.line_total for item in items), 0.0)


def reprice_items(items: Iterable[OrderItem], days: int) -> list[OrderItem]:
    """Return copies of ``items`` with days and line totals recomputed."""
    return [
        replace(
            item,
            days=days,
            line_total=line_total(item.quantity, item.price_per_day, days),
        )
        for item in items
    ]


@dataclass(frozen=True)
class TaxSettings:
    enabled: bool = False
    rate: float = DEFAULT_TAX_RATE
    included: bool = False

    @classmethod
    def from_profile(cls, profile: Optional[UserProfile]) -> "TaxSettings":
        if profile is None:
            return cls()
        if profile.tax_enabled is not None:
            enabled = profile.tax_enabled
        else:
            enabled = bool(profile.tax_rate and profile.tax_rate > 0) or bool(
                profile.tax_number
            )
        rate = profile.tax_rate if profile.tax_rate is not None else DEFAULT_TAX_RATE
        return cls(enabled=enabled, rate=rate, included=bool(profile.tax_included))


def tax_amount(subtotal: float, settings: TaxSettings) -> float:
    if not settings.enabled:
        return 0.0
    rate = settings.rate / 100
    if settings.included:
        return subtotal * (rate / (1 + rate))
    return subtotal * rate


def grand_total(subtotal: float, settings: TaxSettings) -> float:
    if settings.enabled and settings.included:
        return subtotal
    return subtotal + tax_amount(subtotal, settings)


def apply_late_fee(
    total: float, previous_late_fee: Optional[float], late_fee: float
) -> float:
    """Swap the late fee carried by ``total`` for a new one."""
    return total - (previous_late_fee or 0.0) + late_fee


@dataclass(frozen=True)
class OrderTotals:
    days: int
    subtotal: float
    tax_amount: float
    grand_total: float


def compute_totals(
    items: Iterable[OrderItem], days: int, settings: TaxSettings
) -> OrderTotals:
    repriced = reprice_items(items, days)
    subtotal = order_subtotal(repriced)
    return OrderTotals(
        days=days,
        subtotal=subtotal,
        tax_amount=tax_amount(subtotal, settings),
        grand_total=grand_total(subtotal, settings),
    )
