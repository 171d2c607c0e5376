"""Card widgets with theme-aware styling."""

from __future__ import annotations

from PySide6 import QtCore, QtGui, QtWidgets

from rental_orders.utils.theme import ThemeManager

_DARK_STYLESHEET = """
QFrame#KpiCard {
    background: #2b2f36;
    border: 1px solid #3a3f48;
    border-radius: 12px;
}
QFrame#KpiCard[selected="true"] {
    border: 2px solid #7aa2f7;
}
QLabel#KpiTitle {
    color: rgba(255, 255, 255, 0.82);
    font-weight: 600;
    font-size: 13px;
}
QLabel#KpiValue {
    color: #ffffff;
    font-size: 22px;
    font-weight: 700;
}
"""

_LIGHT_STYLESHEET = """
QFrame#KpiCard {
    background: #ffffff;
    border: 1px solid rgba(0, 0, 0, 0.10);
    border-radius: 12px;
}
QFrame#KpiCard[selected="true"] {
    border: 2px solid #2d6cdf;
}
QLabel#KpiTitle {
    color: rgba(0, 0, 0, 0.70);
    font-weight: 600;
    font-size: 13px;
}
QLabel#KpiValue {
    color: rgba(0, 0, 0, 0.92);
    font-size: 22px;
    font-weight: 700;
}
"""


class KpiCard(QtWidgets.QFrame):
    """Clickable summary card with a title and a count."""

    clicked = QtCore.Signal()

    def __init__(
        self,
        theme_manager: ThemeManager,
        title: str,
        value: str,
        parent: QtWidgets.QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._theme_manager = theme_manager
        self.setObjectName("KpiCard")
        self.setCursor(QtCore.Qt.PointingHandCursor)

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(16, 12, 16, 12)
        layout.setSpacing(6)

        self._title_label = QtWidgets.QLabel(title)
        self._title_label.setObjectName("KpiTitle")
        self._value_label = QtWidgets.QLabel(value)
        self._value_label.setObjectName("KpiValue")

        layout.addWidget(self._title_label)
        layout.addWidget(self._value_label)

        self._theme_manager.theme_changed.connect(self.apply_theme)
        self.apply_theme()

    def set_value(self, value: str) -> None:
        self._value_label.setText(value)

    def set_selected(self, selected: bool) -> None:
        self.setProperty("selected", selected)
        self.style().unpolish(self)
        self.style().polish(self)

    def mouseReleaseEvent(self, event: QtGui.QMouseEvent) -> None:
        super().mouseReleaseEvent(event)
        if event.button() == QtCore.Qt.LeftButton:
            self.clicked.emit()

    def apply_theme(self) -> None:
        if self._theme_manager.is_dark():
            self.setStyleSheet(_DARK_STYLESHEET)
        else:
            self.setStyleSheet(_LIGHT_STYLESHEET)
