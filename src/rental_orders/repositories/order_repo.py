"""Repository helpers for order persistence."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Iterable, Iterator, Optional

from rental_orders.db.connection import get_connection, transaction
from rental_orders.domain.models import (
    Customer,
    Order,
    OrderItem,
    OrderQuery,
    OrderStatus,
    ReturnStatus,
)
from rental_orders.logging_config import get_logger
from rental_orders.paths import get_db_path
from rental_orders.repositories.mappers import (
    order_from_row,
    order_item_from_row,
    order_item_to_record,
    order_to_record,
)


def _now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


def _coerce_status(status: str | OrderStatus) -> OrderStatus:
    if isinstance(status, OrderStatus):
        return status
    return OrderStatus(status)


@contextmanager
def _optional_connection(
    connection: Optional[sqlite3.Connection],
) -> Iterator[sqlite3.Connection]:
    if connection is not None:
        connection.row_factory = sqlite3.Row
        yield connection
        return
    new_connection = get_connection(get_db_path())
    try:
        yield new_connection
    finally:
        new_connection.close()


def _insert(conn: sqlite3.Connection, table: str, record: dict[str, object]) -> int:
    columns = ", ".join(record)
    placeholders = ", ".join(["?"] * len(record))
    cursor = conn.execute(
        f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
        tuple(record.values()),
    )
    return int(cursor.lastrowid)


def _customer_from_joined(row: sqlite3.Row) -> Optional[Customer]:
    if row["customer_name"] is None:
        return None
    return Customer(
        id=row["customer_id"],
        name=row["customer_name"],
        phone=row["customer_phone"],
        customer_number=row["customer_number"],
    )


def _load_items(
    conn: sqlite3.Connection, order_ids: list[int]
) -> dict[int, list[OrderItem]]:
    grouped: dict[int, list[OrderItem]] = {order_id: [] for order_id in order_ids}
    if not order_ids:
        return grouped
    placeholders = ", ".join(["?"] * len(order_ids))
    rows = conn.execute(
        f"""
        SELECT * FROM order_items
        WHERE order_id IN ({placeholders})
        ORDER BY order_id, id
        """,
        order_ids,
    ).fetchall()
    for row in rows:
        item = order_item_from_row(row)
        grouped.setdefault(int(row["order_id"]), []).append(item)
    return grouped


ORDER_SELECT = """
    SELECT
        o.*,
        c.name AS customer_name,
        c.phone AS customer_phone,
        c.customer_number AS customer_number
    FROM orders o
    LEFT JOIN customers c ON c.id = o.customer_id
"""


def create_order(
    order: Order,
    items: Iterable[OrderItem],
    *,
    connection: Optional[sqlite3.Connection] = None,
) -> Order:
    """Insert an order and its items in a single transaction."""
    logger = get_logger("order_repo")
    created_at = order.created_at or _now_iso()
    record = order_to_record(order)
    record.pop("id")
    record["created_at"] = created_at
    record["updated_at"] = created_at
    stored_items: list[OrderItem] = []
    try:
        with _optional_connection(connection) as conn:
            with transaction(conn):
                order_id = _insert(conn, "orders", record)
                for item in items:
                    item_record = order_item_to_record(item)
                    item_record.pop("id")
                    item_record["order_id"] = order_id
                    item_id = _insert(conn, "order_items", item_record)
                    stored_items.append(
                        order_item_from_record(item_record, item_id)
                    )
    except Exception:
        logger.exception("Failed to create order invoice=%s", order.invoice_number)
        raise

    return Order(
        id=order_id,
        branch_id=order.branch_id,
        staff_id=order.staff_id,
        customer_id=order.customer_id,
        invoice_number=order.invoice_number,
        start_date=order.start_date,
        end_date=order.end_date,
        status=order.status,
        subtotal=order.subtotal,
        tax_amount=order.tax_amount,
        total_amount=order.total_amount,
        start_datetime=order.start_datetime,
        end_datetime=order.end_datetime,
        late_fee=order.late_fee,
        security_deposit=order.security_deposit,
        created_at=created_at,
        updated_at=created_at,
        customer=order.customer,
        items=stored_items,
    )


def order_item_from_record(record: dict[str, object], item_id: int) -> OrderItem:
    raw_return = record.get("return_status")
    return OrderItem(
        id=item_id,
        order_id=record["order_id"],
        photo_url=str(record["photo_url"]),
        product_name=record.get("product_name"),
        quantity=int(record["quantity"]),
        price_per_day=float(record["price_per_day"]),
        days=int(record.get("days") or 1),
        line_total=float(record.get("line_total") or 0),
        return_status=ReturnStatus(raw_return) if raw_return else None,
    )


def get_order_with_items(
    order_id: int,
    *,
    connection: Optional[sqlite3.Connection] = None,
) -> Optional[Order]:
    """Fetch an order with its customer and items."""
    logger = get_logger("order_repo")
    try:
        with _optional_connection(connection) as conn:
            row = conn.execute(
                f"{ORDER_SELECT} WHERE o.id = ?",
                (order_id,),
            ).fetchone()
            if not row:
                return None
            items = _load_items(conn, [order_id])
    except Exception:
        logger.exception("Failed to fetch order id=%s", order_id)
        raise
    order = order_from_row(row)
    order.customer = _customer_from_joined(row)
    order.items = items.get(order_id, [])
    return order


def list_orders(
    query: OrderQuery,
    *,
    offset: int = 0,
    limit: Optional[int] = None,
    connection: Optional[sqlite3.Connection] = None,
) -> list[Order]:
    """List orders newest first, with optional branch, status, date and search filters.

    The date range applies to the order start date, both ends inclusive.
    ``limit=None`` returns every matching order.
    """
    logger = get_logger("order_repo")
    clauses: list[str] = []
    params: list[object] = []
    if query.branch_id is not None:
        clauses.append("o.branch_id = ?")
        params.append(query.branch_id)
    if query.status:
        clauses.append("o.status = ?")
        params.append(_coerce_status(query.status).value)
    if query.date_range is not None:
        clauses.append("o.start_date >= ? AND o.start_date <= ?")
        params.extend(
            [query.date_range.start.isoformat(), query.date_range.end.isoformat()]
        )
    search = (query.search or "").strip()
    if search:
        clauses.append(
            "(o.invoice_number LIKE ? OR c.name LIKE ? "
            "OR c.phone LIKE ? OR c.customer_number LIKE ?)"
        )
        params.extend([f"%{search}%"] * 4)
    where_clause = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    sql = f"""
        {ORDER_SELECT}
        {where_clause}
        ORDER BY o.created_at DESC, o.id DESC
    """
    if limit is not None:
        sql += " LIMIT ? OFFSET ?"
        params.extend([limit, offset])
    try:
        with _optional_connection(connection) as conn:
            rows = conn.execute(sql, params).fetchall()
            items = _load_items(conn, [int(row["id"]) for row in rows])
    except Exception:
        logger.exception("Failed to list orders")
        raise
    orders: list[Order] = []
    for row in rows:
        order = order_from_row(row)
        order.customer = _customer_from_joined(row)
        order.items = items.get(int(row["id"]), [])
        orders.append(order)
    return orders


def _write_status(
    conn: sqlite3.Connection,
    order_id: int,
    status: OrderStatus,
    total_amount: Optional[float],
    late_fee: Optional[float],
) -> int:
    assignments = ["status = ?", "updated_at = ?"]
    params: list[object] = [status.value, _now_iso()]
    if total_amount is not None:
        assignments.append("total_amount = ?")
        params.append(total_amount)
    if late_fee is not None:
        assignments.append("late_fee = ?")
        params.append(late_fee)
    params.append(order_id)
    cursor = conn.execute(
        f"UPDATE orders SET {', '.join(assignments)} WHERE id = ?",
        params,
    )
    return cursor.rowcount


def _write_item_return(
    conn: sqlite3.Connection,
    item_id: int,
    return_status: ReturnStatus,
    returned_quantity: Optional[int],
    actual_return_date: Optional[str],
    damage_fee: Optional[float],
    missing_note: Optional[str],
) -> int:
    cursor = conn.execute(
        """
        UPDATE order_items
        SET return_status = ?,
            returned_quantity = ?,
            actual_return_date = ?,
            damage_fee = ?,
            missing_note = ?
        WHERE id = ?
        """,
        (
            return_status.value,
            returned_quantity,
            actual_return_date,
            damage_fee,
            missing_note,
            item_id,
        ),
    )
    return cursor.rowcount


def set_status(
    order_id: int,
    status: str | OrderStatus,
    *,
    total_amount: Optional[float] = None,
    late_fee: Optional[float] = None,
    connection: Optional[sqlite3.Connection] = None,
) -> bool:
    """Update order status, and the total and late fee when given."""
    logger = get_logger("order_repo")
    order_status = _coerce_status(status)
    try:
        with _optional_connection(connection) as conn:
            with transaction(conn):
                updated = _write_status(
                    conn, order_id, order_status, total_amount, late_fee
                )
    except Exception:
        logger.exception("Failed to update order status id=%s", order_id)
        raise
    return updated > 0


def set_item_return_status(
    item_id: int,
    return_status: ReturnStatus,
    *,
    returned_quantity: Optional[int] = None,
    actual_return_date: Optional[str] = None,
    damage_fee: Optional[float] = None,
    missing_note: Optional[str] = None,
    connection: Optional[sqlite3.Connection] = None,
) -> bool:
    """Record the return outcome of a single order item."""
    logger = get_logger("order_repo")
    try:
        with _optional_connection(connection) as conn:
            with transaction(conn):
                updated = _write_item_return(
                    conn,
                    item_id,
                    return_status,
                    returned_quantity,
                    actual_return_date,
                    damage_fee,
                    missing_note,
                )
    except Exception:
        logger.exception("Failed to update return status item id=%s", item_id)
        raise
    return updated > 0


def mark_order_returned(
    order_id: int,
    items: Iterable[OrderItem],
    status: str | OrderStatus,
    *,
    returned_at: str,
    total_amount: Optional[float] = None,
    late_fee: Optional[float] = None,
    connection: Optional[sqlite3.Connection] = None,
) -> bool:
    """Mark ``items`` returned in full and set the order status, all or nothing."""
    logger = get_logger("order_repo")
    order_status = _coerce_status(status)
    try:
        with _optional_connection(connection) as conn:
            with transaction(conn):
                for item in items:
                    if item.id is None:
                        continue
                    _write_item_return(
                        conn,
                        item.id,
                        ReturnStatus.RETURNED,
                        item.quantity,
                        returned_at,
                        item.damage_fee,
                        item.missing_note,
                    )
                updated = _write_status(
                    conn, order_id, order_status, total_amount, late_fee
                )
    except Exception:
        logger.exception("Failed to mark order returned id=%s", order_id)
        raise
    return updated > 0


def update_order(
    order: Order,
    items: Iterable[OrderItem],
    *,
    connection: Optional[sqlite3.Connection] = None,
) -> bool:
    """Rewrite an order's details and replace its items in one transaction.

    Status, late fee, branch and staff are left untouched.
    """
    logger = get_logger("order_repo")
    if order.id is None:
        raise ValueError("Order id is required for updates.")
    try:
        with _optional_connection(connection) as conn:
            with transaction(conn):
                cursor = conn.execute(
                    """
                    UPDATE orders
                    SET customer_id = ?,
                        invoice_number = ?,
                        start_date = ?,
                        end_date = ?,
                        start_datetime = ?,
                        end_datetime = ?,
                        subtotal = ?,
                        tax_amount = ?,
                        total_amount = ?,
                        security_deposit = ?,
                        updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        order.customer_id,
                        order.invoice_number,
                        order.start_date,
                        order.end_date,
                        order.start_datetime,
                        order.end_datetime,
                        order.subtotal,
                        order.tax_amount,
                        order.total_amount,
                        order.security_deposit,
                        _now_iso(),
                        order.id,
                    ),
                )
                conn.execute("DELETE FROM order_items WHERE order_id = ?", (order.id,))
                for item in items:
                    item_record = order_item_to_record(item)
                    item_record.pop("id")
                    item_record["order_id"] = order.id
                    _insert(conn, "order_items", item_record)
    except Exception:
        logger.exception("Failed to update order id=%s", order.id)
        raise
    return cursor.rowcount > 0


def count_invoices_with_prefix(
    prefix: str,
    *,
    connection: Optional[sqlite3.Connection] = None,
) -> int:
    logger = get_logger("order_repo")
    try:
        with _optional_connection(connection) as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS total FROM orders WHERE invoice_number LIKE ?",
                (f"{prefix}%",),
            ).fetchone()
    except Exception:
        logger.exception("Failed to count invoices prefix=%s", prefix)
        raise
    return int(row["total"] or 0) if row else 0
