"""Screen listing orders by category with search and incremental loading."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from PySide6 import QtCore, QtWidgets

from rental_orders.config import ORDERS_PAGE_SIZE
from rental_orders.db.connection import get_connection
from rental_orders.domain.models import (
    Order,
    OrderCategory,
    OrderPage,
    OrderQuery,
    OrderStats,
)
from rental_orders.logging_config import get_logger
from rental_orders.services.order_classifier import classify_order, filter_orders
from rental_orders.services.order_service import OrderService
from rental_orders.services.timestamps import local_now
from rental_orders.ui.app_services import AppServices
from rental_orders.ui.list_controls import InFlightGuard, LoadMoreTrigger, SearchDebouncer
from rental_orders.ui.screens.base_screen import BaseScreen, show_error
from rental_orders.ui.screens.order_details_dialog import OrderDetailsDialog
from rental_orders.ui.strings import LABEL_ALL, category_label
from rental_orders.ui.widgets import KpiCard
from rental_orders.utils.pdf_generator import format_currency, format_timestamp

QueryKey = Tuple[Optional[int], str]


@dataclass
class OrdersLoadResult:
    request_id: int
    query_key: QueryKey
    cursor: int
    page: OrderPage
    stats: Optional[OrderStats]

    @property
    def guard_key(self) -> Tuple[QueryKey, int]:
        return (self.query_key, self.cursor)


@dataclass
class OrdersLoadFailure:
    request_id: int
    query_key: QueryKey
    cursor: int
    message: str

    @property
    def guard_key(self) -> Tuple[QueryKey, int]:
        return (self.query_key, self.cursor)


class OrdersLoadSignals(QtCore.QObject):
    completed = QtCore.Signal(object)
    failed = QtCore.Signal(object)


class OrdersLoadTask(QtCore.QRunnable):
    """Fetch one page of orders, plus the stats when loading the first page."""

    def __init__(
        self,
        *,
        db_path: Path,
        request_id: int,
        query_key: QueryKey,
        query: OrderQuery,
        cursor: int,
    ) -> None:
        super().__init__()
        self.db_path = db_path
        self.request_id = request_id
        self.query_key = query_key
        self.query = query
        self.cursor = cursor
        self.signals = OrdersLoadSignals()

    def run(self) -> None:
        logger = get_logger("OrdersScreen")
        connection = None
        try:
            connection = get_connection(self.db_path)
            service = OrderService(connection)
            page = service.fetch_orders(self.query, self.cursor)
            stats = None
            if self.cursor == 0:
                stats = service.fetch_order_stats(branch_id=self.query.branch_id)
            self.signals.completed.emit(
                OrdersLoadResult(
                    request_id=self.request_id,
                    query_key=self.query_key,
                    cursor=self.cursor,
                    page=page,
                    stats=stats,
                )
            )
        except Exception as exc:
            logger.exception("Failed to load orders.")
            self.signals.failed.emit(
                OrdersLoadFailure(
                    request_id=self.request_id,
                    query_key=self.query_key,
                    cursor=self.cursor,
                    message=str(exc),
                )
            )
        finally:
            if connection is not None:
                connection.close()


class OrdersScreen(BaseScreen):
    """Orders grouped by category tabs, with counts per category."""

    TABLE_HEADERS = ["Invoice", "Customer", "Phone", "Start", "End", "Category", "Total"]

    def __init__(self, services: AppServices) -> None:
        super().__init__(services)
        self._logger = get_logger("OrdersScreen")
        self._thread_pool = QtCore.QThreadPool.globalInstance()
        self._orders: List[Order] = []
        self._visible_orders: List[Order] = []
        self._category: Optional[OrderCategory] = None
        self._search = ""
        self._next_cursor: Optional[int] = 0
        self._load_sequence = 0
        self._stale_before = 0
        self._guard = InFlightGuard()
        self._debouncer = SearchDebouncer(parent=self)
        self._debouncer.triggered.connect(self._on_search_triggered)
        self._load_more = LoadMoreTrigger(parent=self)
        self._load_more.load_more_requested.connect(self._load_next_page)
        self._cards: dict[Optional[OrderCategory], KpiCard] = {}
        self._build_ui()
        self._services.app_state.session_changed.connect(lambda _user: self.refresh())
        self.refresh()

    def _build_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)

        title = QtWidgets.QLabel("Orders")
        title.setStyleSheet("font-size: 24px; font-weight: 600;")
        layout.addWidget(title)

        cards_layout = QtWidgets.QGridLayout()
        categories: list[Optional[OrderCategory]] = [None, *OrderCategory]
        for index, category in enumerate(categories):
            label = LABEL_ALL if category is None else category_label(category)
            card = KpiCard(self._services.theme_manager, label, "0")
            card.clicked.connect(lambda cat=category: self._select_category(cat))
            self._cards[category] = card
            cards_layout.addWidget(card, index // 4, index % 4)
        layout.addLayout(cards_layout)

        self._search_input = QtWidgets.QLineEdit()
        self._search_input.setPlaceholderText(
            "Search invoice, customer name, phone or customer number"
        )
        self._search_input.setClearButtonEnabled(True)
        self._search_input.textChanged.connect(self._debouncer.set_text)
        self._search_input.returnPressed.connect(self._debouncer.flush)
        layout.addWidget(self._search_input)

        self._table = QtWidgets.QTableWidget(0, len(self.TABLE_HEADERS))
        self._table.setHorizontalHeaderLabels(self.TABLE_HEADERS)
        self._table.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self._table.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        self._table.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self._table.setAlternatingRowColors(True)
        self._table.verticalHeader().setVisible(False)
        self._table.horizontalHeader().setSectionResizeMode(
            1, QtWidgets.QHeaderView.Stretch
        )
        self._table.cellDoubleClicked.connect(self._on_row_activated)
        self._load_more.attach(self._table.verticalScrollBar())
        layout.addWidget(self._table)

        footer = QtWidgets.QHBoxLayout()
        self._status_label = QtWidgets.QLabel()
        self._status_label.setStyleSheet("color: #666;")
        footer.addWidget(self._status_label)
        footer.addStretch()
        self._more_button = QtWidgets.QPushButton("Load more")
        self._more_button.clicked.connect(self._load_next_page)
        self._more_button.setVisible(False)
        footer.addWidget(self._more_button)
        layout.addLayout(footer)
        self._update_card_selection()

    def refresh(self) -> None:
        self._reset_and_load()

    def _query_key(self) -> QueryKey:
        return (self._services.app_state.branch_scope, self._search)

    def _on_search_triggered(self, text: str) -> None:
        if text == self._search:
            return
        self._search = text
        self._reset_and_load()

    def _select_category(self, category: Optional[OrderCategory]) -> None:
        self._category = category
        self._update_card_selection()
        self._render_table()

    def _update_card_selection(self) -> None:
        for category, card in self._cards.items():
            card.set_selected(category == self._category)

    def _reset_and_load(self) -> None:
        # Results of requests issued before this point are discarded.
        self._stale_before = self._load_sequence
        self._orders = []
        self._next_cursor = 0
        self._guard.reset()
        self._render_table()
        self._load_page(0)

    def _load_next_page(self) -> None:
        if self._next_cursor is None or self._next_cursor == 0:
            return
        self._load_page(self._next_cursor)

    def _load_page(self, cursor: int) -> None:
        if self._services.app_state.user is None:
            self._status_label.setText("Sign in to see orders.")
            return
        query_key = self._query_key()
        if not self._guard.begin((query_key, cursor)):
            return
        self._load_sequence += 1
        query = OrderQuery(
            branch_id=query_key[0],
            search=self._search or None,
            limit=ORDERS_PAGE_SIZE,
        )
        task = OrdersLoadTask(
            db_path=self._services.db_path,
            request_id=self._load_sequence,
            query_key=query_key,
            query=query,
            cursor=cursor,
        )
        task.signals.completed.connect(self._on_load_completed)
        task.signals.failed.connect(self._on_load_failed)
        self._status_label.setText("Loading orders...")
        self._thread_pool.start(task)

    def _on_load_completed(self, result: OrdersLoadResult) -> None:
        self._guard.finish(result.guard_key)
        if (
            result.request_id <= self._stale_before
            or result.query_key != self._query_key()
        ):
            return
        if result.cursor == 0:
            self._orders = list(result.page.orders)
        else:
            known = {order.id for order in self._orders}
            self._orders.extend(
                order for order in result.page.orders if order.id not in known
            )
        self._next_cursor = result.page.next_cursor
        if result.stats is not None:
            self._render_stats(result.stats)
        self._render_table()

    def _on_load_failed(self, failure: OrdersLoadFailure) -> None:
        self._guard.finish(failure.guard_key)
        self._status_label.setText("")
        if (
            failure.request_id <= self._stale_before
            or failure.query_key != self._query_key()
        ):
            return
        self._logger.warning("Order load request %s failed", failure.request_id)
        show_error(self, failure.message)

    def _render_stats(self, stats: OrderStats) -> None:
        for category, card in self._cards.items():
            count = stats.total if category is None else stats.count_for(category)
            card.set_value(str(count))

    def _render_table(self) -> None:
        now = local_now()
        self._visible_orders = filter_orders(self._orders, self._category, None, now)
        self._table.setRowCount(len(self._visible_orders))
        for row, order in enumerate(self._visible_orders):
            customer = order.customer
            values = [
                order.invoice_number,
                customer.name if customer else "-",
                (customer.phone if customer else None) or "-",
                format_timestamp(order.start_datetime or order.start_date),
                format_timestamp(order.end_datetime or order.end_date),
                category_label(classify_order(order, now)),
                format_currency(order.total_amount),
            ]
            for column, value in enumerate(values):
                cell = QtWidgets.QTableWidgetItem(value)
                cell.setData(QtCore.Qt.UserRole, order.id)
                self._table.setItem(row, column, cell)
        more = " (scroll for more)" if self._next_cursor else ""
        self._more_button.setVisible(bool(self._next_cursor))
        self._status_label.setText(
            f"Showing {len(self._visible_orders)} of {len(self._orders)} loaded orders{more}"
        )

    def _on_row_activated(self, row: int, _column: int) -> None:
        if not 0 <= row < len(self._visible_orders):
            return
        order_id = self._visible_orders[row].id
        if order_id is None:
            return
        dialog = OrderDetailsDialog(self._services, order_id, self)
        dialog.exec()
