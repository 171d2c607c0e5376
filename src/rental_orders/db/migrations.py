"""Database migrations for SQLite schema versioning."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from rental_orders.db.connection import transaction
from rental_orders.logging_config import get_logger


@dataclass(frozen=True)
class Migration:
    version: int
    script: str


MIGRATIONS: list[Migration] = [
    Migration(
        version=1,
        script="""
        CREATE TABLE IF NOT EXISTS branches (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE,
            address TEXT,
            phone TEXT
        );

        CREATE TABLE IF NOT EXISTS profiles (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT NOT NULL UNIQUE,
            full_name TEXT NOT NULL,
            phone TEXT,
            role TEXT NOT NULL DEFAULT 'staff'
                CHECK (role IN ('super_admin', 'branch_admin', 'staff')),
            branch_id INTEGER,
            tax_number TEXT,
            tax_enabled INTEGER,
            tax_rate REAL CHECK (tax_rate IS NULL OR tax_rate >= 0),
            tax_included INTEGER,
            company_name TEXT,
            company_address TEXT,
            FOREIGN KEY (branch_id) REFERENCES branches(id)
        );

        CREATE TABLE IF NOT EXISTS customers (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            phone TEXT,
            customer_number TEXT,
            notes TEXT,
            created_at TEXT,
            updated_at TEXT
        );

        CREATE TABLE IF NOT EXISTS orders (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            branch_id INTEGER NOT NULL,
            staff_id INTEGER NOT NULL,
            customer_id INTEGER NOT NULL,
            invoice_number TEXT NOT NULL CHECK (length(trim(invoice_number)) > 0),
            start_date TEXT NOT NULL,
            end_date TEXT NOT NULL,
            start_datetime TEXT,
            end_datetime TEXT,
            status TEXT NOT NULL CHECK (status IN (
                'scheduled',
                'active',
                'completed',
                'completed_with_issues',
                'cancelled',
                'flagged',
                'partially_returned'
            )),
            subtotal REAL NOT NULL DEFAULT 0 CHECK (subtotal >= 0),
            tax_amount REAL NOT NULL DEFAULT 0 CHECK (tax_amount >= 0),
            total_amount REAL NOT NULL DEFAULT 0 CHECK (total_amount >= 0),
            late_fee REAL,
            created_at TEXT,
            updated_at TEXT,
            FOREIGN KEY (branch_id) REFERENCES branches(id),
            FOREIGN KEY (staff_id) REFERENCES profiles(id),
            FOREIGN KEY (customer_id) REFERENCES customers(id),
            CHECK (end_date >= start_date)
        );

        CREATE TABLE IF NOT EXISTS order_items (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            order_id INTEGER NOT NULL,
            photo_url TEXT NOT NULL CHECK (length(photo_url) > 0),
            product_name TEXT,
            quantity INTEGER NOT NULL CHECK (quantity > 0),
            price_per_day REAL NOT NULL CHECK (price_per_day >= 0),
            days INTEGER NOT NULL DEFAULT 1 CHECK (days >= 1),
            line_total REAL NOT NULL DEFAULT 0,
            return_status TEXT CHECK (return_status IS NULL OR return_status IN (
                'not_yet_returned',
                'returned',
                'missing'
            )),
            actual_return_date TEXT,
            returned_quantity INTEGER,
            damage_fee REAL,
            missing_note TEXT,
            FOREIGN KEY (order_id) REFERENCES orders(id) ON DELETE CASCADE
        );

        CREATE INDEX IF NOT EXISTS idx_orders_branch_id
            ON orders(branch_id);
        CREATE INDEX IF NOT EXISTS idx_orders_status
            ON orders(status);
        CREATE INDEX IF NOT EXISTS idx_orders_start_date
            ON orders(start_date);
        CREATE INDEX IF NOT EXISTS idx_orders_created_at
            ON orders(created_at);
        CREATE INDEX IF NOT EXISTS idx_order_items_order_id
            ON order_items(order_id);
        """,
    ),
    Migration(
        version=2,
        script="""
        ALTER TABLE orders ADD COLUMN security_deposit REAL;
        """,
    ),
]


def _fetch_schema_version(connection: sqlite3.Connection) -> int:
    connection.execute(
        """
        CREATE TABLE IF NOT EXISTS app_meta (
            schema_version INTEGER NOT NULL
        );
        """
    )
    row = connection.execute(
        "SELECT schema_version FROM app_meta LIMIT 1"
    ).fetchone()
    if row is None:
        connection.execute("INSERT INTO app_meta (schema_version) VALUES (0)")
        return 0
    return int(row[0])


def apply_migrations(connection: sqlite3.Connection) -> None:
    """Apply pending database migrations."""
    logger = get_logger(__name__)
    with transaction(connection):
        current_version = _fetch_schema_version(connection)

    for migration in MIGRATIONS:
        if migration.version <= current_version:
            continue
        logger.info("Applying schema migration v%s", migration.version)
        with transaction(connection):
            connection.executescript(migration.script)
            connection.execute(
                "UPDATE app_meta SET schema_version = ?",
                (migration.version,),
            )
        current_version = migration.version
