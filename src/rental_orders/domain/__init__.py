"""Domain models for RentalOrders."""

from rental_orders.domain.models import (
    Branch,
    Customer,
    DateRange,
    Order,
    OrderCategory,
    OrderItem,
    OrderPage,
    OrderQuery,
    OrderStats,
    OrderStatus,
    ReturnStatus,
    UserProfile,
    UserRole,
)

__all__ = [
    "Branch",
    "Customer",
    "DateRange",
    "Order",
    "OrderCategory",
    "OrderItem",
    "OrderPage",
    "OrderQuery",
    "OrderStats",
    "OrderStatus",
    "ReturnStatus",
    "UserProfile",
    "UserRole",
]
