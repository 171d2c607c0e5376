"""Base class for screens that can refresh their data."""

from __future__ import annotations

from PySide6 import QtGui, QtWidgets

from rental_orders.ui.app_services import AppServices
from rental_orders.ui.strings import TITLE_ERROR, TITLE_SUCCESS, TITLE_WARNING


class BaseScreen(QtWidgets.QWidget):
    """Base screen with refresh hooks and data change handling."""

    def __init__(self, services: AppServices) -> None:
        super().__init__()
        self._services = services
        self._needs_refresh = False
        self._services.data_bus.data_changed.connect(self._on_data_changed)

    def refresh(self) -> None:
        """Reload data for this screen."""

    def _on_data_changed(self) -> None:
        if self.isVisible():
            self.refresh()
        else:
            self._needs_refresh = True

    def showEvent(self, event: QtGui.QShowEvent) -> None:
        super().showEvent(event)
        if self._needs_refresh:
            self._needs_refresh = False
            self.refresh()


def show_warning(parent: QtWidgets.QWidget, message: str) -> None:
    QtWidgets.QMessageBox.warning(parent, TITLE_WARNING, message)


def show_error(parent: QtWidgets.QWidget, message: str) -> None:
    QtWidgets.QMessageBox.critical(parent, TITLE_ERROR, message)


def show_success(parent: QtWidgets.QWidget, message: str) -> None:
    QtWidgets.QMessageBox.information(parent, TITLE_SUCCESS, message)
