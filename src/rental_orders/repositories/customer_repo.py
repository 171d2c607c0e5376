"""Repository for customer persistence."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import List, Optional

from rental_orders.db.connection import transaction
from rental_orders.domain.models import Customer
from rental_orders.logging_config import get_logger
from rental_orders.repositories.mappers import customer_from_row


def _now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


class CustomerRepo:
    """Create, look up and search customers."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._logger = get_logger(self.__class__.__name__)

    def create(
        self,
        name: str,
        phone: Optional[str],
        customer_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Customer:
        created_at = _now_iso()
        try:
            with transaction(self._connection):
                cursor = self._connection.execute(
                    """
                    INSERT INTO customers (
                        name,
                        phone,
                        customer_number,
                        notes,
                        created_at,
                        updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (name, phone, customer_number, notes, created_at, created_at),
                )
        except Exception:
            self._logger.exception("Failed to create customer")
            raise

        return Customer(
            id=cursor.lastrowid,
            name=name,
            phone=phone,
            customer_number=customer_number,
            notes=notes,
            created_at=created_at,
            updated_at=created_at,
        )

    def list_all(self) -> List[Customer]:
        try:
            rows = self._connection.execute(
                "SELECT * FROM customers ORDER BY name"
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to list customers")
            raise
        return [customer_from_row(row) for row in rows]

    def search(self, term: str) -> List[Customer]:
        """Match ``term`` against name, phone and customer number."""
        term = term.strip()
        if not term:
            return self.list_all()
        pattern = f"%{term}%"
        try:
            rows = self._connection.execute(
                """
                SELECT * FROM customers
                WHERE name LIKE ?
                   OR phone LIKE ?
                   OR customer_number LIKE ?
                ORDER BY name
                """,
                (pattern, pattern, pattern),
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to search customers term=%s", term)
            raise
        return [customer_from_row(row) for row in rows]

    def get_by_id(self, customer_id: int) -> Optional[Customer]:
        try:
            row = self._connection.execute(
                "SELECT * FROM customers WHERE id = ?",
                (customer_id,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to get customer id=%s", customer_id)
            raise
        return customer_from_row(row) if row else None
