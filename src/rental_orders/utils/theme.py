"""Light and dark theme handling for RentalOrders."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from PySide6 import QtCore, QtGui, QtWidgets

from rental_orders.logging_config import get_logger
from rental_orders.utils.config_store import load_config_data, save_config_data

ThemeChoice = Literal["light", "dark", "system"]
THEME_CHOICES: tuple[ThemeChoice, ...] = ("light", "dark", "system")


@dataclass(frozen=True)
class ThemeSettings:
    """Persisted theme settings."""

    theme: ThemeChoice = "system"


class ThemeManager(QtCore.QObject):
    """Applies the configured theme and announces changes."""

    theme_changed = QtCore.Signal(str)

    def __init__(self, app: QtWidgets.QApplication, config_path: Path) -> None:
        super().__init__()
        self._app = app
        self._config_path = config_path
        self._settings = load_theme_settings(config_path)
        self._resolved_theme = resolve_theme_choice(self._settings.theme)
        self._logger = get_logger(self.__class__.__name__)
        self._apply_theme()

    @property
    def theme_choice(self) -> ThemeChoice:
        return self._settings.theme

    def set_theme(self, choice: ThemeChoice) -> None:
        if choice not in THEME_CHOICES:
            choice = "system"
        self._settings = ThemeSettings(theme=choice)
        try:
            save_theme_settings(self._config_path, self._settings)
        except OSError:
            self._logger.warning("Could not save the theme preference.")
        self._apply_theme()
        self.theme_changed.emit(self._resolved_theme)

    def is_dark(self) -> bool:
        return self._resolved_theme == "dark"

    def _apply_theme(self) -> None:
        self._resolved_theme = resolve_theme_choice(self._settings.theme)
        apply_theme(self._app, self._resolved_theme)
        self._logger.info(
            "Theme applied: %s (configured: %s)",
            self._resolved_theme,
            self._settings.theme,
        )


def load_theme_settings(config_path: Path) -> ThemeSettings:
    data = load_config_data(config_path)
    theme = data.get("theme", "system")
    if theme not in THEME_CHOICES:
        theme = "system"
    return ThemeSettings(theme=theme)


def save_theme_settings(config_path: Path, settings: ThemeSettings) -> None:
    payload = load_config_data(config_path)
    payload["theme"] = settings.theme
    save_config_data(config_path, payload)


def resolve_theme_choice(choice: ThemeChoice) -> str:
    """Resolve ``system`` to the platform color scheme."""
    if choice in ("light", "dark"):
        return choice
    hints = QtGui.QGuiApplication.styleHints()
    if hints is not None and hints.colorScheme() == QtCore.Qt.ColorScheme.Dark:
        return "dark"
    return "light"


def apply_theme(app: QtWidgets.QApplication, theme_name: str) -> None:
    app.setStyle("Fusion")
    if theme_name == "dark":
        app.setPalette(_build_dark_palette())
        app.setStyleSheet(_DARK_STYLESHEET)
    else:
        app.setPalette(app.style().standardPalette())
        app.setStyleSheet("")


def _build_dark_palette() -> QtGui.QPalette:
    palette = QtGui.QPalette()
    roles = {
        QtGui.QPalette.Window: (32, 34, 40),
        QtGui.QPalette.WindowText: (240, 240, 240),
        QtGui.QPalette.Base: (24, 26, 31),
        QtGui.QPalette.AlternateBase: (32, 34, 40),
        QtGui.QPalette.Text: (240, 240, 240),
        QtGui.QPalette.Button: (45, 48, 58),
        QtGui.QPalette.ButtonText: (240, 240, 240),
        QtGui.QPalette.Highlight: (45, 108, 223),
        QtGui.QPalette.HighlightedText: (255, 255, 255),
        QtGui.QPalette.PlaceholderText: (143, 152, 170),
    }
    for role, rgb in roles.items():
        palette.setColor(role, QtGui.QColor(*rgb))
    for role in (
        QtGui.QPalette.Text,
        QtGui.QPalette.ButtonText,
        QtGui.QPalette.WindowText,
    ):
        palette.setColor(QtGui.QPalette.Disabled, role, QtGui.QColor(143, 152, 170))
    return palette


_DARK_STYLESHEET = """
QHeaderView::section {
    background-color: #2b2f36;
    color: #f1f1f1;
    padding: 6px 8px;
    border: 1px solid #3a3f48;
}
QFrame#sidebar {
    background-color: #1f232b;
}
QPushButton[nav="true"]:checked {
    background-color: #2d6cdf;
    color: #ffffff;
}
QFrame[card="true"] {
    background-color: #262a32;
    border: 1px solid #3a3f48;
}
QLineEdit, QSpinBox, QDoubleSpinBox, QDateTimeEdit {
    border: 1px solid #4c566a;
    border-radius: 6px;
    padding: 6px;
}
"""
