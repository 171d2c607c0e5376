"""Service container for the UI layer."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path

from rental_orders.repositories import CustomerRepo
from rental_orders.services.order_service import OrderService
from rental_orders.services.session_service import SessionService
from rental_orders.ui.app_state import AppState
from rental_orders.ui.data_bus import DataEventBus
from rental_orders.utils.theme import ThemeManager


@dataclass(frozen=True)
class AppServices:
    """Shared repositories and services for dependency injection."""

    connection: sqlite3.Connection
    db_path: Path
    data_bus: DataEventBus
    customer_repo: CustomerRepo
    order_service: OrderService
    session_service: SessionService
    app_state: AppState
    theme_manager: ThemeManager
