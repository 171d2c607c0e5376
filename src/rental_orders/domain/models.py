"""Domain dataclasses and enums."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class OrderStatus(str, Enum):
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"
    COMPLETED_WITH_ISSUES = "completed_with_issues"
    CANCELLED = "cancelled"
    FLAGGED = "flagged"
    PARTIALLY_RETURNED = "partially_returned"


class OrderCategory(str, Enum):
    """Display category derived from status, dates and item returns."""

    SCHEDULED = "scheduled"
    ONGOING = "ongoing"
    LATE = "late"
    RETURNED = "returned"
    PARTIALLY_RETURNED = "partially_returned"
    CANCELLED = "cancelled"
    FLAGGED = "flagged"


class ReturnStatus(str, Enum):
    NOT_YET_RETURNED = "not_yet_returned"
    RETURNED = "returned"
    MISSING = "missing"


class UserRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    BRANCH_ADMIN = "branch_admin"
    STAFF = "staff"


@dataclass(slots=True)
class Branch:
    id: Optional[int]
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None


@dataclass(slots=True)
class Customer:
    id: Optional[int]
    name: str
    phone: Optional[str]
    customer_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(slots=True)
class UserProfile:
    id: Optional[int]
    username: str
    full_name: str
    role: UserRole = UserRole.STAFF
    phone: Optional[str] = None
    branch_id: Optional[int] = None
    tax_number: Optional[str] = None
    tax_enabled: Optional[bool] = None
    tax_rate: Optional[float] = None
    tax_included: Optional[bool] = None
    company_name: Optional[str] = None
    company_address: Optional[str] = None

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN


@dataclass(slots=True)
class OrderItem:
    photo_url: str
    product_name: Optional[str]
    quantity: int
    price_per_day: float
    days: int = 1
    line_total: float = 0.0
    id: Optional[int] = None
    order_id: Optional[int] = None
    return_status: Optional[ReturnStatus] = None
    actual_return_date: Optional[str] = None
    returned_quantity: Optional[int] = None
    damage_fee: Optional[float] = None
    missing_note: Optional[str] = None

    @property
    def is_returned(self) -> bool:
        return self.return_status == ReturnStatus.RETURNED

    @property
    def is_missing(self) -> bool:
        return self.return_status == ReturnStatus.MISSING

    @property
    def is_pending(self) -> bool:
        return (
            self.return_status is None
            or self.return_status == ReturnStatus.NOT_YET_RETURNED
        )


@dataclass(slots=True)
class Order:
    id: Optional[int]
    branch_id: int
    staff_id: int
    customer_id: int
    invoice_number: str
    start_date: str
    end_date: str
    status: OrderStatus
    subtotal: float
    tax_amount: float
    total_amount: float
    start_datetime: Optional[str] = None
    end_datetime: Optional[str] = None
    late_fee: Optional[float] = None
    security_deposit: Optional[float] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    customer: Optional[Customer] = None
    items: list[OrderItem] = field(default_factory=list)

    @property
    def has_pending_items(self) -> bool:
        return any(item.is_pending for item in self.items)


@dataclass(frozen=True)
class OrderStats:
    scheduled: int = 0
    ongoing: int = 0
    late: int = 0
    returned: int = 0
    partially_returned: int = 0
    cancelled: int = 0
    flagged: int = 0

    @property
    def total(self) -> int:
        return (
            self.scheduled
            + self.ongoing
            + self.late
            + self.returned
            + self.partially_returned
            + self.cancelled
            + self.flagged
        )

    def count_for(self, category: OrderCategory) -> int:
        return int(getattr(self, category.value))


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar date range."""

    start: date
    end: date


@dataclass(frozen=True)
class OrderQuery:
    branch_id: Optional[int] = None
    status: Optional[OrderStatus] = None
    date_range: Optional[DateRange] = None
    search: Optional[str] = None
    limit: int = 20


@dataclass(frozen=True)
class OrderPage:
    orders: list[Order]
    next_cursor: Optional[int]

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None
