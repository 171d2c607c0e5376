"""SQLite row mappers for domain models."""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, Optional

from rental_orders.domain.models import (
    Branch,
    Customer,
    Order,
    OrderItem,
    OrderStatus,
    ReturnStatus,
    UserProfile,
    UserRole,
)


def _row_value(row: sqlite3.Row, key: str) -> Any:
    return row[key] if key in row.keys() else None


def _optional_bool(value: Any) -> Optional[bool]:
    return None if value is None else bool(value)


def _optional_int(value: Optional[bool]) -> Optional[int]:
    return None if value is None else int(value)


def branch_from_row(row: sqlite3.Row) -> Branch:
    return Branch(
        id=_row_value(row, "id"),
        name=row["name"],
        address=_row_value(row, "address"),
        phone=_row_value(row, "phone"),
    )


def customer_from_row(row: sqlite3.Row) -> Customer:
    return Customer(
        id=_row_value(row, "id"),
        name=row["name"],
        phone=_row_value(row, "phone"),
        customer_number=_row_value(row, "customer_number"),
        notes=_row_value(row, "notes"),
        created_at=_row_value(row, "created_at"),
        updated_at=_row_value(row, "updated_at"),
    )


def profile_from_row(row: sqlite3.Row) -> UserProfile:
    raw_role = _row_value(row, "role") or UserRole.STAFF.value
    try:
        role = UserRole(raw_role)
    except ValueError:
        role = UserRole.STAFF
    return UserProfile(
        id=_row_value(row, "id"),
        username=row["username"],
        full_name=row["full_name"],
        role=role,
        phone=_row_value(row, "phone"),
        branch_id=_row_value(row, "branch_id"),
        tax_number=_row_value(row, "tax_number"),
        tax_enabled=_optional_bool(_row_value(row, "tax_enabled")),
        tax_rate=_row_value(row, "tax_rate"),
        tax_included=_optional_bool(_row_value(row, "tax_included")),
        company_name=_row_value(row, "company_name"),
        company_address=_row_value(row, "company_address"),
    )


def profile_to_record(profile: UserProfile) -> Dict[str, Any]:
    return {
        "id": profile.id,
        "username": profile.username,
        "full_name": profile.full_name,
        "role": profile.role.value,
        "phone": profile.phone,
        "branch_id": profile.branch_id,
        "tax_number": profile.tax_number,
        "tax_enabled": _optional_int(profile.tax_enabled),
        "tax_rate": profile.tax_rate,
        "tax_included": _optional_int(profile.tax_included),
        "company_name": profile.company_name,
        "company_address": profile.company_address,
    }


def order_from_row(row: sqlite3.Row) -> Order:
    return Order(
        id=_row_value(row, "id"),
        branch_id=row["branch_id"],
        staff_id=row["staff_id"],
        customer_id=row["customer_id"],
        invoice_number=row["invoice_number"],
        start_date=row["start_date"],
        end_date=row["end_date"],
        status=OrderStatus(row["status"]),
        subtotal=float(row["subtotal"] or 0),
        tax_amount=float(row["tax_amount"] or 0),
        total_amount=float(row["total_amount"] or 0),
        start_datetime=_row_value(row, "start_datetime"),
        end_datetime=_row_value(row, "end_datetime"),
        late_fee=_row_value(row, "late_fee"),
        security_deposit=_row_value(row, "security_deposit"),
        created_at=_row_value(row, "created_at"),
        updated_at=_row_value(row, "updated_at"),
    )


def order_to_record(order: Order) -> Dict[str, Any]:
    return {
        "id": order.id,
        "branch_id": order.branch_id,
        "staff_id": order.staff_id,
        "customer_id": order.customer_id,
        "invoice_number": order.invoice_number,
        "start_date": order.start_date,
        "end_date": order.end_date,
        "start_datetime": order.start_datetime,
        "end_datetime": order.end_datetime,
        "status": order.status.value,
        "subtotal": order.subtotal,
        "tax_amount": order.tax_amount,
        "total_amount": order.total_amount,
        "late_fee": order.late_fee,
        "security_deposit": order.security_deposit,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }


def order_item_from_row(row: sqlite3.Row) -> OrderItem:
    raw_return = _row_value(row, "return_status")
    return OrderItem(
        id=_row_value(row, "id"),
        order_id=row["order_id"],
        photo_url=row["photo_url"],
        product_name=_row_value(row, "product_name"),
        quantity=int(row["quantity"]),
        price_per_day=float(row["price_per_day"]),
        days=int(_row_value(row, "days") or 1),
        line_total=float(_row_value(row, "line_total") or 0),
        return_status=ReturnStatus(raw_return) if raw_return else None,
        actual_return_date=_row_value(row, "actual_return_date"),
        returned_quantity=_row_value(row, "returned_quantity"),
        damage_fee=_row_value(row, "damage_fee"),
        missing_note=_row_value(row, "missing_note"),
    )


def order_item_to_record(item: OrderItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "order_id": item.order_id,
        "photo_url": item.photo_url,
        "product_name": item.product_name,
        "quantity": item.quantity,
        "price_per_day": item.price_per_day,
        "days": item.days,
        "line_total": item.line_total,
        "return_status": item.return_status.value if item.return_status else None,
        "actual_return_date": item.actual_return_date,
        "returned_quantity": item.returned_quantity,
        "damage_fee": item.damage_fee,
        "missing_note": item.missing_note,
    }
