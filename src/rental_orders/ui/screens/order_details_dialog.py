"""Dialog showing one order with its lifecycle actions."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Callable, Optional

from PySide6 import QtCore, QtWidgets

from rental_orders.domain.models import Order
from rental_orders.logging_config import get_logger
from rental_orders.paths import get_invoices_dir
from rental_orders.services.errors import ServiceError
from rental_orders.services.order_classifier import available_actions, classify_order
from rental_orders.services.timestamps import local_now
from rental_orders.ui.app_services import AppServices
from rental_orders.ui.screens.base_screen import show_error, show_success
from rental_orders.ui.strings import TITLE_CONFIRMATION, category_label, status_label
from rental_orders.utils.pdf_generator import (
    format_currency,
    format_timestamp,
    generate_invoice_pdf,
)


class OrderDetailsDialog(QtWidgets.QDialog):
    """Order summary with start, return, cancel, flag and late fee actions."""

    def __init__(
        self,
        services: AppServices,
        order_id: int,
        parent: Optional[QtWidgets.QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._services = services
        self._order_id = order_id
        self._order: Optional[Order] = None
        self._busy = False
        self._logger = get_logger(self.__class__.__name__)
        self.setWindowTitle("Order details")
        self.resize(720, 560)
        self._build_ui()
        self._reload()

    def _build_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)

        self._header_label = QtWidgets.QLabel()
        self._header_label.setStyleSheet("font-size: 18px; font-weight: 600;")
        self._summary_label = QtWidgets.QLabel()
        self._summary_label.setTextFormat(QtCore.Qt.RichText)
        self._summary_label.setWordWrap(True)
        layout.addWidget(self._header_label)
        layout.addWidget(self._summary_label)

        self._items_table = QtWidgets.QTableWidget(0, 6)
        self._items_table.setHorizontalHeaderLabels(
            ["Item", "Qty", "Price/day", "Days", "Total", "Return"]
        )
        self._items_table.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self._items_table.horizontalHeader().setSectionResizeMode(
            0, QtWidgets.QHeaderView.Stretch
        )
        self._items_table.verticalHeader().setVisible(False)
        layout.addWidget(self._items_table)

        self._totals_label = QtWidgets.QLabel()
        self._totals_label.setTextFormat(QtCore.Qt.RichText)
        layout.addWidget(self._totals_label)

        late_fee_row = QtWidgets.QHBoxLayout()
        late_fee_row.addWidget(QtWidgets.QLabel("Late fee"))
        self._late_fee_input = QtWidgets.QDoubleSpinBox()
        self._late_fee_input.setRange(0, 1_000_000)
        self._late_fee_input.setDecimals(2)
        late_fee_row.addWidget(self._late_fee_input)
        self._late_fee_button = QtWidgets.QPushButton("Apply late fee")
        self._late_fee_button.clicked.connect(self._on_apply_late_fee)
        late_fee_row.addWidget(self._late_fee_button)
        late_fee_row.addStretch()
        layout.addLayout(late_fee_row)

        actions = QtWidgets.QHBoxLayout()
        self._start_button = QtWidgets.QPushButton("Start rental")
        self._start_button.clicked.connect(self._on_start)
        self._return_button = QtWidgets.QPushButton("Mark returned")
        self._return_button.clicked.connect(self._on_mark_returned)
        self._flag_button = QtWidgets.QPushButton("Flag")
        self._flag_button.clicked.connect(self._on_flag)
        self._edit_button = QtWidgets.QPushButton("Edit")
        self._edit_button.clicked.connect(self._on_edit)
        self._cancel_button = QtWidgets.QPushButton("Cancel order")
        self._cancel_button.clicked.connect(self._on_cancel)
        self._invoice_button = QtWidgets.QPushButton("Export invoice")
        self._invoice_button.clicked.connect(self._on_export_invoice)
        close_button = QtWidgets.QPushButton("Close")
        close_button.clicked.connect(self.accept)
        for button in (
            self._start_button,
            self._return_button,
            self._flag_button,
            self._edit_button,
            self._cancel_button,
            self._invoice_button,
        ):
            actions.addWidget(button)
        actions.addStretch()
        actions.addWidget(close_button)
        layout.addLayout(actions)

    def _reload(self) -> None:
        try:
            self._order = self._services.order_service.get_order(self._order_id)
        except (ServiceError, sqlite3.Error) as exc:
            self._logger.exception("Failed to load order id=%s", self._order_id)
            show_error(self, str(exc))
            self._order = None
        self._render()

    def _render(self) -> None:
        order = self._order
        if order is None:
            self._header_label.setText("Order unavailable")
            self._set_actions_enabled(False)
            return
        now = local_now()
        category = classify_order(order, now)
        customer = order.customer
        self._header_label.setText(
            f"{order.invoice_number} - {category_label(category)}"
        )
        self._summary_label.setText(
            "<br/>".join(
                [
                    f"<b>Customer:</b> {customer.name if customer else '-'}",
                    f"<b>Phone:</b> {(customer.phone if customer else None) or '-'}",
                    f"<b>Start:</b> "
                    f"{format_timestamp(order.start_datetime or order.start_date)}",
                    f"<b>End:</b> "
                    f"{format_timestamp(order.end_datetime or order.end_date)}",
                    f"<b>Status:</b> {status_label(order.status)}",
                ]
            )
        )

        self._items_table.setRowCount(len(order.items))
        for row, item in enumerate(order.items):
            return_text = (
                item.return_status.value.replace("_", " ")
                if item.return_status
                else "pending"
            )
            values = [
                item.product_name or "Item",
                str(item.quantity),
                format_currency(item.price_per_day),
                str(item.days),
                format_currency(item.line_total),
                return_text,
            ]
            for column, value in enumerate(values):
                self._items_table.setItem(row, column, QtWidgets.QTableWidgetItem(value))

        totals = [
            f"Subtotal: {format_currency(order.subtotal)}",
            f"Tax: {format_currency(order.tax_amount)}",
        ]
        if order.late_fee:
            totals.append(f"Late fee: {format_currency(order.late_fee)}")
        totals.append(f"<b>Total: {format_currency(order.total_amount)}</b>")
        if order.security_deposit:
            totals.append(f"Deposit: {format_currency(order.security_deposit)}")
        self._totals_label.setText(" &nbsp; ".join(totals))
        self._late_fee_input.setValue(order.late_fee or 0.0)
        self._set_actions_enabled(True)

    def _set_actions_enabled(self, enabled: bool) -> None:
        order = self._order
        if order is None or not enabled or self._busy:
            for button in (
                self._start_button,
                self._return_button,
                self._flag_button,
                self._edit_button,
                self._cancel_button,
                self._late_fee_button,
                self._invoice_button,
            ):
                button.setEnabled(False)
            self._late_fee_input.setEnabled(False)
            return
        actions = available_actions(order, local_now())
        self._start_button.setEnabled(actions.can_start)
        self._return_button.setEnabled(actions.can_mark_returned)
        self._flag_button.setEnabled(actions.can_flag)
        self._edit_button.setEnabled(actions.can_edit)
        self._cancel_button.setEnabled(actions.can_cancel)
        self._late_fee_button.setEnabled(actions.can_set_late_fee)
        self._late_fee_input.setEnabled(actions.can_set_late_fee)
        self._invoice_button.setEnabled(order.customer is not None)

    def _run_action(self, action: Callable[[], Order], success_message: str) -> None:
        if self._busy:
            return
        self._busy = True
        self._set_actions_enabled(False)
        try:
            self._order = action()
        except (ServiceError, sqlite3.Error) as exc:
            self._logger.exception("Order action failed id=%s", self._order_id)
            show_error(self, str(exc))
        else:
            self._services.data_bus.data_changed.emit()
            show_success(self, success_message)
        finally:
            self._busy = False
            self._render()

    def _confirm(self, message: str) -> bool:
        response = QtWidgets.QMessageBox.question(
            self,
            TITLE_CONFIRMATION,
            message,
            QtWidgets.QMessageBox.Yes | QtWidgets.QMessageBox.No,
        )
        return response == QtWidgets.QMessageBox.Yes

    def _on_start(self) -> None:
        service = self._services.order_service
        self._run_action(
            lambda: service.start_rental(self._order_id), "Rental started."
        )

    def _on_mark_returned(self) -> None:
        if not self._confirm("Mark every pending item as returned?"):
            return
        service = self._services.order_service
        late_fee = self._late_fee_input.value() if self._late_fee_input.isEnabled() else None
        self._run_action(
            lambda: service.mark_returned(self._order_id, late_fee),
            "Order marked as returned.",
        )

    def _on_flag(self) -> None:
        if not self._confirm("Flag this late order?"):
            return
        service = self._services.order_service
        self._run_action(
            lambda: service.flag_order(self._order_id, self._late_fee_input.value()),
            "Order flagged.",
        )

    def _on_edit(self) -> None:
        order = self._order
        if order is None or self._busy:
            return
        app_state = self._services.app_state
        if app_state.draft.items and not self._confirm(
            "Discard the order currently being entered and edit this one?"
        ):
            return
        app_state.load_order(order)
        self.accept()

    def _on_cancel(self) -> None:
        if not self._confirm("Cancel this order?"):
            return
        service = self._services.order_service
        self._run_action(
            lambda: service.cancel_order(self._order_id), "Order cancelled."
        )

    def _on_apply_late_fee(self) -> None:
        order = self._order
        if order is None:
            return
        service = self._services.order_service
        self._run_action(
            lambda: service.update_order_status(
                self._order_id, order.status, self._late_fee_input.value()
            ),
            "Late fee updated.",
        )

    def _on_export_invoice(self) -> None:
        order = self._order
        if order is None or order.customer is None:
            return
        default_path = get_invoices_dir() / f"{order.invoice_number}.pdf"
        file_name, _ = QtWidgets.QFileDialog.getSaveFileName(
            self, "Save invoice", str(default_path), "PDF (*.pdf)"
        )
        if not file_name:
            return
        try:
            output = generate_invoice_pdf(order, order.customer, Path(file_name))
        except OSError as exc:
            self._logger.exception("Failed to write invoice for order id=%s", order.id)
            show_error(self, str(exc))
            return
        show_success(self, f"Invoice saved to {output}")
