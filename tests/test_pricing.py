"""Tests for day counts, line totals and tax."""

from datetime import date, datetime, timedelta

import pytest

from rental_orders.domain.models import OrderItem, UserProfile
from rental_orders.services.pricing import (
    TaxSettings,
    apply_late_fee,
    compute_totals,
    days_between,
    grand_total,
    line_total,
    order_subtotal,
    reprice_items,
    tax_amount,
)


def _item(quantity: int, price: float) -> OrderItem:
    return OrderItem(
        photo_url="photos/item.jpg",
        product_name="Item",
        quantity=quantity,
        price_per_day=price,
    )


class TestDaysBetween:
    """Calendar day counting with a minimum of one."""

    @pytest.mark.parametrize(
        "day", [date(2024, 1, 1), date(2024, 2, 29), date(2024, 12, 31)]
    )
    def test_same_day_is_one(self, day):
        assert days_between(day, day) == 1

    def test_next_day_is_one(self):
        day = date(2024, 3, 10)
        assert days_between(day, day + timedelta(days=1)) == 1

    def test_two_days_apart_is_two(self):
        day = date(2024, 3, 10)
        assert days_between(day, day + timedelta(days=2)) == 2

    def test_time_of_day_is_ignored(self):
        """Only the calendar dates matter, not the hours."""
        start = datetime(2024, 3, 10, 23, 30)
        end = datetime(2024, 3, 12, 0, 15)
        assert days_between(start, end) == 2

    def test_accepts_iso_strings(self):
        assert days_between("2024-03-10", "2024-03-15T09:00:00Z") == 5

    def test_end_before_start_clamps_to_one(self):
        assert days_between(date(2024, 3, 10), date(2024, 3, 5)) == 1


class TestLineTotals:
    """Per-item and order-level sums."""

    @pytest.mark.parametrize(
        "quantity,price,days",
        [(1, 100.0, 1), (3, 49.5, 2), (10, 0.0, 7), (2, 12.25, 30)],
    )
    def test_line_total_is_product(self, quantity, price, days):
        assert line_total(quantity, price, days) == quantity * price * days

    def test_subtotal_sums_line_totals(self):
        items = reprice_items([_item(2, 100.0), _item(1, 50.0)], 3)
        assert order_subtotal(items) == 750.0

    def test_reprice_returns_copies(self):
        """Original items keep their values."""
        original = _item(2, 100.0)
        repriced = reprice_items([original], 4)
        assert repriced[0].days == 4
        assert repriced[0].line_total == 800.0
        assert original.days == 1
        assert original.line_total == 0.0


class TestTax:
    """Exclusive and inclusive tax modes."""

    def test_disabled_tax_is_zero(self):
        settings = TaxSettings(enabled=False, rate=18.0)
        assert tax_amount(1000.0, settings) == 0.0
        assert grand_total(1000.0, settings) == 1000.0

    def test_exclusive_tax_is_added(self):
        settings = TaxSettings(enabled=True, rate=5.0, included=False)
        assert tax_amount(1000.0, settings) == pytest.approx(50.0)
        assert grand_total(1000.0, settings) == pytest.approx(1050.0)

    def test_inclusive_tax_is_extracted(self):
        """Inclusive prices already contain the tax portion."""
        settings = TaxSettings(enabled=True, rate=5.0, included=True)
        assert tax_amount(1050.0, settings) == pytest.approx(50.0)
        assert grand_total(1050.0, settings) == pytest.approx(1050.0)

    def test_late_fee_replaces_previous(self):
        assert apply_late_fee(1100.0, 100.0, 250.0) == 1250.0
        assert apply_late_fee(1000.0, None, 0.0) == 1000.0

    def test_compute_totals(self):
        settings = TaxSettings(enabled=True, rate=10.0)
        totals = compute_totals([_item(2, 100.0)], 3, settings)
        assert totals.days == 3
        assert totals.subtotal == 600.0
        assert totals.tax_amount == pytest.approx(60.0)
        assert totals.grand_total == pytest.approx(660.0)


class TestTaxSettingsFromProfile:
    """Inference of tax settings from a user profile."""

    def _profile(self, **kwargs) -> UserProfile:
        return UserProfile(id=1, username="u", full_name="User", **kwargs)

    def test_none_profile_uses_defaults(self):
        settings = TaxSettings.from_profile(None)
        assert settings.enabled is False
        assert settings.rate == 5.0

    def test_positive_rate_enables_tax(self):
        settings = TaxSettings.from_profile(self._profile(tax_rate=18.0))
        assert settings.enabled is True
        assert settings.rate == 18.0

    def test_tax_number_enables_tax_with_default_rate(self):
        settings = TaxSettings.from_profile(self._profile(tax_number="29ABCDE1234F1Z5"))
        assert settings.enabled is True
        assert settings.rate == 5.0

    def test_explicit_flag_wins(self):
        settings = TaxSettings.from_profile(
            self._profile(tax_enabled=False, tax_rate=18.0, tax_included=True)
        )
        assert settings.enabled is False
        assert settings.included is True
