"""Application entry point."""

from __future__ import annotations

import sys

from PySide6 import QtWidgets

from rental_orders.config import AppConfig
from rental_orders.db.connection import get_connection
from rental_orders.db.migrations import apply_migrations
from rental_orders.logging_config import configure_logging, get_logger
from rental_orders.paths import (
    get_app_data_dir,
    get_config_path,
    get_db_path,
    get_invoices_dir,
    get_logs_dir,
)
from rental_orders.repositories import CustomerRepo
from rental_orders.services.errors import NotFoundError
from rental_orders.services.order_service import OrderService
from rental_orders.services.session_service import SessionService
from rental_orders.ui.app_services import AppServices
from rental_orders.ui.app_state import AppState
from rental_orders.ui.data_bus import DataEventBus
from rental_orders.ui.main_window import MainWindow
from rental_orders.utils.config_store import load_current_user_id, save_current_user_id
from rental_orders.utils.theme import ThemeManager


def _restore_session(app_state: AppState, session_service: SessionService) -> None:
    logger = get_logger(__name__)
    config_path = get_config_path()
    user_id = load_current_user_id(config_path)
    if user_id is not None:
        try:
            app_state.sign_in(user_id)
            return
        except NotFoundError:
            logger.warning("Saved user id=%s no longer exists.", user_id)
    user = session_service.ensure_default_user()
    app_state.set_user(user)
    save_current_user_id(config_path, user.id)


def main() -> int:
    """Start the RentalOrders application."""
    configure_logging()
    get_app_data_dir()
    get_logs_dir()
    get_invoices_dir()
    db_path = get_db_path()
    connection = get_connection(db_path)
    apply_migrations(connection)

    config = AppConfig()
    logger = get_logger(__name__)
    logger.info("Starting %s", config.app_name)

    app = QtWidgets.QApplication(sys.argv)
    app.setApplicationName(config.app_name)
    app.setOrganizationName(config.organization_name)
    app.setOrganizationDomain(config.organization_domain)
    theme_manager = ThemeManager(app, get_config_path())

    order_service = OrderService(connection)
    session_service = SessionService(connection)
    app_state = AppState(session_service, order_service)
    _restore_session(app_state, session_service)

    services = AppServices(
        connection=connection,
        db_path=db_path,
        data_bus=DataEventBus(),
        customer_repo=CustomerRepo(connection),
        order_service=order_service,
        session_service=session_service,
        app_state=app_state,
        theme_manager=theme_manager,
    )

    window = MainWindow(services)
    app.aboutToQuit.connect(connection.close)
    window.show()

    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
