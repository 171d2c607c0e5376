"""Application configuration."""

from __future__ import annotations

from dataclasses import dataclass

from rental_orders.version import __app_name__, __company__

APP_NAME = __app_name__
APP_DATA_DIRNAME = "RentalOrders"
DB_FILENAME = "rental_orders.db"
LOGS_DIRNAME = "logs"
LOG_FILENAME = "app.log"
LOG_MAX_BYTES = 1_000_000
LOG_BACKUP_COUNT = 3
INVOICES_DIRNAME = "invoices"
CONFIG_FILENAME = "config.json"

SEARCH_DEBOUNCE_MS = 500
ORDERS_PAGE_SIZE = 20
LOAD_MORE_THRESHOLD = 0.8

DEFAULT_TAX_RATE = 5.0
INVOICE_PREFIX = "ORD"
CURRENCY_SYMBOL = "₹"


@dataclass(frozen=True)
class InvoiceIssuerInfo:
    """Issuer information printed on invoices."""

    name: str
    phone: str
    tax_number: str
    address: str


INVOICE_ISSUER = InvoiceIssuerInfo(
    name="Rental Desk",
    phone="+91 90000 00000",
    tax_number="",
    address="Main Road, Shop 12",
)


@dataclass(frozen=True)
class AppConfig:
    """Static configuration values for RentalOrders."""

    app_name: str = APP_NAME
    organization_name: str = __company__
    organization_domain: str = "rentaldesk.local"
