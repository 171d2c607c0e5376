"""Event-driven helpers for searchable, paginated order lists."""

from __future__ import annotations

from typing import Hashable, Optional

from PySide6 import QtCore, QtWidgets

from rental_orders.config import LOAD_MORE_THRESHOLD, SEARCH_DEBOUNCE_MS


class SearchDebouncer(QtCore.QObject):
    """Emit ``triggered`` once typing pauses for ``interval_ms``.

    Every new text restarts the timer, so a superseded search never fires.
    """

    triggered = QtCore.Signal(str)

    def __init__(
        self,
        interval_ms: int = SEARCH_DEBOUNCE_MS,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._pending_text = ""
        self._timer = QtCore.QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._emit_pending)

    @property
    def interval_ms(self) -> int:
        return self._timer.interval()

    def set_text(self, text: str) -> None:
        self._pending_text = text
        self._timer.start()

    def is_pending(self) -> bool:
        return self._timer.isActive()

    def cancel(self) -> None:
        self._timer.stop()

    def flush(self) -> None:
        """Fire a pending search immediately."""
        if self._timer.isActive():
            self._timer.stop()
            self._emit_pending()

    def _emit_pending(self) -> None:
        self.triggered.emit(self._pending_text.strip())


def should_load_more(
    value: int, maximum: int, threshold: float = LOAD_MORE_THRESHOLD
) -> bool:
    """True once the scroll position passes ``threshold`` of the range."""
    if maximum <= 0:
        return False
    return value >= maximum * threshold


class LoadMoreTrigger(QtCore.QObject):
    """Watch a scroll bar and ask for the next page near the end."""

    load_more_requested = QtCore.Signal()

    def __init__(
        self,
        threshold: float = LOAD_MORE_THRESHOLD,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._threshold = threshold
        self._enabled = True

    def attach(self, scroll_bar: QtWidgets.QScrollBar) -> None:
        scroll_bar.valueChanged.connect(
            lambda value: self.check(value, scroll_bar.maximum())
        )

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def check(self, value: int, maximum: int) -> bool:
        if not self._enabled or not should_load_more(value, maximum, self._threshold):
            return False
        self.load_more_requested.emit()
        return True


class InFlightGuard:
    """Single-flight guard: at most one request per key at a time."""

    def __init__(self) -> None:
        self._in_flight: set[Hashable] = set()

    def begin(self, key: Hashable) -> bool:
        if key in self._in_flight:
            return False
        self._in_flight.add(key)
        return True

    def finish(self, key: Hashable) -> None:
        self._in_flight.discard(key)

    def is_in_flight(self, key: Hashable) -> bool:
        return key in self._in_flight

    def reset(self) -> None:
        self._in_flight.clear()
