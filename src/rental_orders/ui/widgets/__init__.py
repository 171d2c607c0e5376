"""Reusable UI widgets."""

from rental_orders.ui.widgets.cards import KpiCard

__all__ = ["KpiCard"]
