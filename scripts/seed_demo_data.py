"""Seed demo data into the RentalOrders SQLite database."""

from __future__ import annotations

import argparse
import random
import sqlite3
import sys
from datetime import datetime, timedelta
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from rental_orders.db.connection import get_connection  # noqa: E402
from rental_orders.db.migrations import apply_migrations  # noqa: E402
from rental_orders.domain.models import (  # noqa: E402
    Customer,
    OrderItem,
    ReturnStatus,
    UserProfile,
    UserRole,
)
from rental_orders.logging_config import configure_logging  # noqa: E402
from rental_orders.paths import get_db_path  # noqa: E402
from rental_orders.repositories import CustomerRepo, ProfileRepo, order_repo  # noqa: E402
from rental_orders.services.order_classifier import available_actions  # noqa: E402
from rental_orders.services.order_service import OrderService  # noqa: E402
from rental_orders.services.pricing import TaxSettings  # noqa: E402
from rental_orders.services.timestamps import local_now  # noqa: E402

SEED_TAG = "Seed Demo"
DEFAULT_SEED = 42

PRODUCTS = [
    ("Canopy tent 3x3", 450.0),
    ("Folding chair", 25.0),
    ("Round table", 120.0),
    ("Speaker set", 800.0),
    ("LED light bar", 150.0),
    ("Generator 5kVA", 1500.0),
    ("Projector", 600.0),
]

FIRST_NAMES = ["Aarav", "Diya", "Ishaan", "Kavya", "Meera", "Rohan", "Sara", "Vikram"]
LAST_NAMES = ["Sharma", "Patel", "Iyer", "Khan", "Singh", "Reddy", "Das"]


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed demo data for RentalOrders")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Remove the current database and recreate it before seeding.",
    )
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED)
    parser.add_argument("--orders", type=int, default=80)
    return parser.parse_args()


def _seed_exists(connection: sqlite3.Connection) -> bool:
    row = connection.execute(
        "SELECT COUNT(*) AS total FROM customers WHERE name LIKE ?",
        (f"{SEED_TAG}%",),
    ).fetchone()
    return bool(row and row["total"])


def _random_phone(rng: random.Random) -> str:
    return f"+91 9{rng.randint(1000, 9999)} {rng.randint(10000, 99999)}"


def _build_customers(
    repo: CustomerRepo, rng: random.Random, count: int
) -> list[Customer]:
    customers = []
    for index in range(1, count + 1):
        name = f"{SEED_TAG} {rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"
        customers.append(
            repo.create(
                name=name,
                phone=_random_phone(rng),
                customer_number=f"C-{index:04d}",
            )
        )
    return customers


def _build_items(rng: random.Random) -> list[OrderItem]:
    picks = rng.sample(PRODUCTS, k=rng.randint(1, 3))
    return [
        OrderItem(
            photo_url=f"photos/{name.lower().replace(' ', '_')}.jpg",
            product_name=name,
            quantity=rng.randint(1, 6),
            price_per_day=price,
        )
        for name, price in picks
    ]


def _apply_lifecycle(
    service: OrderService,
    connection: sqlite3.Connection,
    rng: random.Random,
    order_id: int,
    now: datetime,
) -> None:
    order = service.get_order(order_id)
    roll = rng.random()
    if roll < 0.1:
        service.cancel_order(order_id)
    elif roll < 0.4 and available_actions(order, now).can_mark_returned:
        service.mark_returned(order_id, now=now)
    elif roll < 0.5 and len(order.items) > 1 and order.items[0].id is not None:
        order_repo.set_item_return_status(
            order.items[0].id,
            ReturnStatus.RETURNED,
            returned_quantity=order.items[0].quantity,
            actual_return_date=now.isoformat(timespec="seconds"),
            connection=connection,
        )
    elif roll < 0.6 and available_actions(order, now).can_flag:
        service.flag_order(order_id, late_fee=rng.choice([100.0, 250.0]), now=now)


def main() -> None:
    args = _parse_args()
    configure_logging()
    rng = random.Random(args.seed)

    db_path = get_db_path()
    if args.reset and db_path.exists():
        db_path.unlink()
        print(f"Database removed: {db_path}")

    print(f"Using database: {db_path}")
    connection = get_connection(db_path)
    try:
        apply_migrations(connection)
        if _seed_exists(connection) and not args.reset:
            print("Seed data already present. Use --reset to recreate the database.")
            return

        profiles = ProfileRepo(connection)
        branches = [
            profiles.create_branch(f"{SEED_TAG} Central", "MG Road"),
            profiles.create_branch(f"{SEED_TAG} North", "Ring Road"),
        ]
        admin = profiles.create(
            UserProfile(
                id=None,
                username="seed_admin",
                full_name=f"{SEED_TAG} Admin",
                role=UserRole.SUPER_ADMIN,
                branch_id=branches[0].id,
                tax_number="29ABCDE1234F1Z5",
                tax_enabled=True,
                tax_rate=18.0,
                tax_included=False,
            )
        )
        staff = [
            profiles.create(
                UserProfile(
                    id=None,
                    username=f"seed_staff_{index}",
                    full_name=f"{SEED_TAG} Staff {index}",
                    role=UserRole.STAFF,
                    branch_id=branch.id,
                )
            )
            for index, branch in enumerate(branches, start=1)
        ]

        customers = _build_customers(CustomerRepo(connection), rng, 25)
        service = OrderService(connection)
        tax_settings = TaxSettings.from_profile(admin)
        now = local_now()

        for index in range(args.orders):
            user = rng.choice(staff)
            customer = rng.choice(customers)
            start = now + timedelta(days=rng.randint(-30, 10), hours=rng.randint(0, 8))
            end = start + timedelta(days=rng.randint(1, 7))
            order = service.create_order(
                branch_id=int(user.branch_id or 0),
                staff_id=int(user.id or 0),
                customer_id=int(customer.id or 0),
                invoice_number=f"SEED-{index + 1:04d}",
                start=start,
                end=end,
                items=_build_items(rng),
                tax_settings=tax_settings,
                security_deposit=rng.choice([None, 500.0, 1000.0]),
                customer=customer,
                now=now,
            )
            if order.id is not None:
                _apply_lifecycle(service, connection, rng, order.id, now)
    finally:
        connection.close()

    print(f"Seeded {args.orders} orders.")


if __name__ == "__main__":
    main()
