"""Main window for the RentalOrders application."""

from __future__ import annotations

import sqlite3
from typing import Optional

from PySide6 import QtCore, QtGui, QtWidgets

from rental_orders.domain.models import UserProfile
from rental_orders.paths import get_config_path
from rental_orders.services.errors import ServiceError
from rental_orders.ui.app_services import AppServices
from rental_orders.ui.screens import NewOrderScreen, OrdersScreen
from rental_orders.ui.screens.base_screen import show_error
from rental_orders.ui.strings import APP_NAME
from rental_orders.utils.config_store import save_current_user_id
from rental_orders.utils.theme import THEME_CHOICES
from rental_orders.version import __version__


class MainWindow(QtWidgets.QMainWindow):
    """Primary window with navigation and stacked screens."""

    ORDER_FORM_INDEX = 1

    def __init__(self, services: AppServices) -> None:
        super().__init__()
        self._services = services
        self._stack = QtWidgets.QStackedWidget()
        self._theme_manager = services.theme_manager
        self._user_label = QtWidgets.QLabel()
        self.setWindowTitle(f"{APP_NAME} - v{__version__}")
        self.resize(1100, 720)
        self._nav_buttons: list[QtWidgets.QPushButton] = []
        self._build_ui()
        services.app_state.session_changed.connect(self._on_session_changed)
        services.app_state.order_loaded.connect(self._on_order_loaded)
        self._on_session_changed(services.app_state.user)

    def _build_ui(self) -> None:
        central = QtWidgets.QWidget(self)
        main_layout = QtWidgets.QHBoxLayout(central)
        main_layout.setContentsMargins(0, 0, 0, 0)

        sidebar = QtWidgets.QFrame()
        sidebar.setObjectName("sidebar")
        sidebar.setFixedWidth(220)
        sidebar_layout = QtWidgets.QVBoxLayout(sidebar)
        sidebar_layout.setContentsMargins(16, 16, 16, 16)
        sidebar_layout.setSpacing(12)

        title = QtWidgets.QLabel(APP_NAME)
        title.setStyleSheet("font-size: 18px; font-weight: 600;")
        sidebar_layout.addWidget(title)

        button_group = QtWidgets.QButtonGroup(self)
        button_group.setExclusive(True)
        screens = [
            ("Orders", OrdersScreen(self._services)),
            ("New order", NewOrderScreen(self._services)),
        ]
        for index, (label, screen) in enumerate(screens):
            button = QtWidgets.QPushButton(label)
            button.setCheckable(True)
            button.setProperty("nav", True)
            button.setMinimumHeight(48)
            button.clicked.connect(
                lambda _checked, idx=index: self._stack.setCurrentIndex(idx)
            )
            button_group.addButton(button)
            self._nav_buttons.append(button)
            sidebar_layout.addWidget(button)
            self._stack.addWidget(screen)

        sidebar_layout.addStretch()
        self._user_label.setWordWrap(True)
        sidebar_layout.addWidget(self._user_label)

        main_layout.addWidget(sidebar)
        main_layout.addWidget(self._stack)
        self.setCentralWidget(central)
        self.setStyleSheet(
            """
            QPushButton[nav="true"] {
                font-size: 16px;
                padding: 10px;
                text-align: left;
                border-radius: 8px;
            }
            """
        )
        self._build_menu()
        button_group.buttons()[0].setChecked(True)
        self._stack.setCurrentIndex(0)
        self._stack.currentChanged.connect(self._on_screen_changed)

    def _show_screen(self, index: int) -> None:
        self._nav_buttons[index].setChecked(True)
        self._stack.setCurrentIndex(index)

    def _on_order_loaded(self, _order_id: int) -> None:
        self._show_screen(self.ORDER_FORM_INDEX)

    def _on_screen_changed(self, index: int) -> None:
        screen = self._stack.widget(index)
        refresh = getattr(screen, "refresh", None)
        if callable(refresh):
            refresh()

    def _build_menu(self) -> None:
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("File")
        switch_action = file_menu.addAction("Switch user...")
        switch_action.triggered.connect(self._on_switch_user)
        file_menu.addSeparator()
        exit_action = file_menu.addAction("Exit")
        exit_action.triggered.connect(self.close)

        view_menu = menu_bar.addMenu("View")
        theme_menu = view_menu.addMenu("Theme")
        theme_group = QtGui.QActionGroup(self)
        theme_group.setExclusive(True)
        for choice in THEME_CHOICES:
            action = theme_menu.addAction(choice.title())
            action.setCheckable(True)
            action.setData(choice)
            action.setChecked(choice == self._theme_manager.theme_choice)
            theme_group.addAction(action)
        theme_group.triggered.connect(
            lambda action: self._theme_manager.set_theme(action.data())
        )

        help_menu = menu_bar.addMenu("Help")
        about_action = help_menu.addAction("About")
        about_action.triggered.connect(self._show_about)

    def _on_session_changed(self, user: Optional[UserProfile]) -> None:
        if user is None:
            self._user_label.setText("Not signed in")
            return
        self._user_label.setText(
            f"{user.full_name}\n{user.role.value.replace('_', ' ').title()}"
        )

    def _on_switch_user(self) -> None:
        session_service = self._services.session_service
        try:
            users = session_service.list_users()
        except sqlite3.Error as exc:
            show_error(self, str(exc))
            return
        if not users:
            return
        labels = [f"{user.full_name} ({user.username})" for user in users]
        current = self._services.app_state.user
        current_index = next(
            (i for i, user in enumerate(users) if current and user.id == current.id), 0
        )
        label, ok = QtWidgets.QInputDialog.getItem(
            self, "Switch user", "User", labels, current_index, False
        )
        if not ok:
            return
        user = users[labels.index(label)]
        if user.id is None:
            return
        try:
            self._services.app_state.sign_in(user.id)
        except ServiceError as exc:
            show_error(self, str(exc))
            return
        save_current_user_id(get_config_path(), user.id)

    def _show_about(self) -> None:
        message = QtWidgets.QMessageBox(self)
        message.setWindowTitle("About")
        message.setIcon(QtWidgets.QMessageBox.Information)
        message.setText(f"{APP_NAME}\nVersion {__version__}")
        message.setStandardButtons(QtWidgets.QMessageBox.Ok)
        message.setTextInteractionFlags(QtCore.Qt.TextSelectableByMouse)
        message.exec()
