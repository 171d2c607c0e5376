"""Smoke test for the core order flows."""

from __future__ import annotations

import tempfile
from datetime import timedelta
from pathlib import Path
import sys

ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR / "src"))

from rental_orders.db.connection import get_connection  # noqa: E402
from rental_orders.db.migrations import apply_migrations  # noqa: E402
from rental_orders.domain.models import OrderItem, OrderQuery  # noqa: E402
from rental_orders.repositories import CustomerRepo  # noqa: E402
from rental_orders.services.order_draft import OrderDraft  # noqa: E402
from rental_orders.services.order_service import OrderService  # noqa: E402
from rental_orders.services.session_service import SessionService  # noqa: E402
from rental_orders.services.timestamps import local_now  # noqa: E402
from rental_orders.utils.pdf_generator import generate_invoice_pdf  # noqa: E402


def main() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = Path(temp_dir)
        connection = get_connection(temp_path / "smoke_test.db")
        try:
            apply_migrations(connection)
            session_service = SessionService(connection)
            order_service = OrderService(connection)
            user = session_service.ensure_default_user()
            customer = CustomerRepo(connection).create(
                name="Smoke Customer",
                phone="+91 90000 11111",
                customer_number="C-001",
            )

            now = local_now()
            draft = OrderDraft(start=now, end=now + timedelta(days=2))
            draft.set_customer(customer)
            draft.set_invoice_number(order_service.generate_invoice_number(now))
            draft.add_item(
                OrderItem(
                    photo_url="photos/tent.jpg",
                    product_name="Tent",
                    quantity=2,
                    price_per_day=150.0,
                )
            )
            order = order_service.submit_draft(
                draft, user, session_service.tax_settings_for(user), now
            )
            assert order.id is not None

            page = order_service.fetch_orders(OrderQuery(search="Smoke"))
            assert page.orders, "Created order should be listed."
            order_service.fetch_order_stats(now=now)

            returned = order_service.mark_returned(order.id, now=now)
            assert returned.customer is not None
            generate_invoice_pdf(returned, returned.customer, temp_path / "invoice.pdf")
        finally:
            connection.close()

    print("OK")


if __name__ == "__main__":
    main()
