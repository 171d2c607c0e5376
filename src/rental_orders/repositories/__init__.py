"""Repositories for data access."""

from rental_orders.repositories import order_repo
from rental_orders.repositories.customer_repo import CustomerRepo
from rental_orders.repositories.mappers import (
    branch_from_row,
    customer_from_row,
    order_from_row,
    order_item_from_row,
    order_item_to_record,
    order_to_record,
    profile_from_row,
    profile_to_record,
)
from rental_orders.repositories.profile_repo import ProfileRepo

__all__ = [
    "branch_from_row",
    "CustomerRepo",
    "customer_from_row",
    "order_from_row",
    "order_item_from_row",
    "order_item_to_record",
    "order_repo",
    "order_to_record",
    "ProfileRepo",
    "profile_from_row",
    "profile_to_record",
]
