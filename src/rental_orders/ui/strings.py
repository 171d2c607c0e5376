"""Centralized UI strings for consistent communication."""

from __future__ import annotations

from rental_orders.domain.models import OrderCategory, OrderStatus
from rental_orders.version import __app_name__

APP_NAME = __app_name__

TITLE_WARNING = "Attention"
TITLE_ERROR = "Error"
TITLE_SUCCESS = "Success"
TITLE_CONFIRMATION = "Confirm"

TERM_ORDER = "Order"
TERM_ORDER_PLURAL = "Orders"
LABEL_ALL = "All"

CATEGORY_LABELS = {
    OrderCategory.SCHEDULED: "Scheduled",
    OrderCategory.ONGOING: "Ongoing",
    OrderCategory.LATE: "Late",
    OrderCategory.RETURNED: "Returned",
    OrderCategory.PARTIALLY_RETURNED: "Partially returned",
    OrderCategory.CANCELLED: "Cancelled",
    OrderCategory.FLAGGED: "Flagged",
}

STATUS_LABELS = {
    OrderStatus.SCHEDULED: "Scheduled",
    OrderStatus.ACTIVE: "Active",
    OrderStatus.COMPLETED: "Completed",
    OrderStatus.COMPLETED_WITH_ISSUES: "Completed with issues",
    OrderStatus.CANCELLED: "Cancelled",
    OrderStatus.FLAGGED: "Flagged",
    OrderStatus.PARTIALLY_RETURNED: "Partially returned",
}


def category_label(category: OrderCategory) -> str:
    return CATEGORY_LABELS.get(category, category.value)


def status_label(status: OrderStatus) -> str:
    return STATUS_LABELS.get(status, status.value)
