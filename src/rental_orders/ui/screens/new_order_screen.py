"""Screen for creating a new rental order."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import List, Optional

from PySide6 import QtCore, QtWidgets

from rental_orders.domain.models import Customer, OrderItem
from rental_orders.logging_config import get_logger
from rental_orders.services.errors import DraftValidationError, ServiceError
from rental_orders.ui.app_services import AppServices
from rental_orders.ui.screens.base_screen import (
    BaseScreen,
    show_error,
    show_success,
    show_warning,
)
from rental_orders.utils.pdf_generator import format_currency


def _to_qdatetime(value: datetime) -> QtCore.QDateTime:
    return QtCore.QDateTime.fromSecsSinceEpoch(int(value.timestamp()))


def _from_qdatetime(value: QtCore.QDateTime) -> datetime:
    return datetime.fromtimestamp(value.toSecsSinceEpoch()).astimezone()


class CustomerDialog(QtWidgets.QDialog):
    """Quick entry of a new customer."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("New customer")
        layout = QtWidgets.QFormLayout(self)
        self.name_input = QtWidgets.QLineEdit()
        self.phone_input = QtWidgets.QLineEdit()
        self.number_input = QtWidgets.QLineEdit()
        layout.addRow("Name", self.name_input)
        layout.addRow("Phone", self.phone_input)
        layout.addRow("Customer no.", self.number_input)
        buttons = QtWidgets.QDialogButtonBox(
            QtWidgets.QDialogButtonBox.Ok | QtWidgets.QDialogButtonBox.Cancel
        )
        buttons.accepted.connect(self._on_accept)
        buttons.rejected.connect(self.reject)
        layout.addRow(buttons)

    def _on_accept(self) -> None:
        if not self.name_input.text().strip():
            show_warning(self, "Please enter the customer name.")
            return
        self.accept()

    def get_data(self) -> dict[str, Optional[str]]:
        return {
            "name": self.name_input.text().strip(),
            "phone": self.phone_input.text().strip() or None,
            "customer_number": self.number_input.text().strip() or None,
        }


class NewOrderScreen(BaseScreen):
    """Order entry form bound to the shared order draft."""

    def __init__(self, services: AppServices) -> None:
        super().__init__(services)
        self._state = services.app_state
        self._customers: List[Customer] = []
        self._submitting = False
        self._logger = get_logger(self.__class__.__name__)
        self._build_ui()
        self._state.draft_changed.connect(self._sync_from_draft)
        self._load_customers()
        self._sync_from_draft()

    def refresh(self) -> None:
        self._load_customers()

    def _build_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)

        self._title_label = QtWidgets.QLabel("New order")
        self._title_label.setStyleSheet("font-size: 24px; font-weight: 600;")
        layout.addWidget(self._title_label)

        order_group = QtWidgets.QGroupBox("Order")
        form = QtWidgets.QFormLayout(order_group)

        customer_row = QtWidgets.QHBoxLayout()
        self.customer_combo = QtWidgets.QComboBox()
        self.customer_combo.setEditable(True)
        self.customer_combo.setInsertPolicy(QtWidgets.QComboBox.NoInsert)
        self.customer_combo.currentIndexChanged.connect(self._on_customer_changed)
        new_customer_button = QtWidgets.QPushButton("New customer")
        new_customer_button.clicked.connect(self._on_new_customer)
        customer_row.addWidget(self.customer_combo, 1)
        customer_row.addWidget(new_customer_button)
        form.addRow("Customer", customer_row)

        self.start_input = QtWidgets.QDateTimeEdit()
        self.start_input.setCalendarPopup(True)
        self.start_input.dateTimeChanged.connect(self._on_start_changed)
        self.end_input = QtWidgets.QDateTimeEdit()
        self.end_input.setCalendarPopup(True)
        self.end_input.dateTimeChanged.connect(self._on_end_changed)
        form.addRow("Start", self.start_input)
        form.addRow("End", self.end_input)

        invoice_row = QtWidgets.QHBoxLayout()
        self.invoice_input = QtWidgets.QLineEdit()
        self.invoice_input.textEdited.connect(self._state.set_invoice_number)
        suggest_button = QtWidgets.QPushButton("Suggest")
        suggest_button.clicked.connect(self._on_suggest_invoice)
        invoice_row.addWidget(self.invoice_input, 1)
        invoice_row.addWidget(suggest_button)
        form.addRow("Invoice no.", invoice_row)

        self.deposit_input = QtWidgets.QDoubleSpinBox()
        self.deposit_input.setRange(0, 1_000_000)
        self.deposit_input.setDecimals(2)
        self.deposit_input.valueChanged.connect(
            lambda value: self._state.set_security_deposit(value or None)
        )
        form.addRow("Security deposit", self.deposit_input)
        layout.addWidget(order_group)

        item_group = QtWidgets.QGroupBox("Add item")
        item_layout = QtWidgets.QGridLayout(item_group)
        self.photo_input = QtWidgets.QLineEdit()
        self.photo_input.setPlaceholderText("Photo path or URL")
        browse_button = QtWidgets.QPushButton("Browse")
        browse_button.clicked.connect(self._on_browse_photo)
        self.product_input = QtWidgets.QLineEdit()
        self.product_input.setPlaceholderText("Product name (optional)")
        self.qty_input = QtWidgets.QSpinBox()
        self.qty_input.setRange(1, 10_000)
        self.price_input = QtWidgets.QDoubleSpinBox()
        self.price_input.setRange(0, 1_000_000)
        self.price_input.setDecimals(2)
        add_button = QtWidgets.QPushButton("Add item")
        add_button.clicked.connect(self._on_add_item)
        item_layout.addWidget(QtWidgets.QLabel("Photo"), 0, 0)
        item_layout.addWidget(self.photo_input, 0, 1)
        item_layout.addWidget(browse_button, 0, 2)
        item_layout.addWidget(QtWidgets.QLabel("Product"), 1, 0)
        item_layout.addWidget(self.product_input, 1, 1, 1, 2)
        item_layout.addWidget(QtWidgets.QLabel("Quantity"), 2, 0)
        item_layout.addWidget(self.qty_input, 2, 1)
        item_layout.addWidget(QtWidgets.QLabel("Price/day"), 3, 0)
        item_layout.addWidget(self.price_input, 3, 1)
        item_layout.addWidget(add_button, 3, 2)
        layout.addWidget(item_group)

        self.items_table = QtWidgets.QTableWidget(0, 6)
        self.items_table.setHorizontalHeaderLabels(
            ["Item", "Qty", "Price/day", "Days", "Total", ""]
        )
        self.items_table.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.items_table.verticalHeader().setVisible(False)
        self.items_table.horizontalHeader().setSectionResizeMode(
            0, QtWidgets.QHeaderView.Stretch
        )
        layout.addWidget(self.items_table)

        footer = QtWidgets.QHBoxLayout()
        self.totals_label = QtWidgets.QLabel()
        self.totals_label.setTextFormat(QtCore.Qt.RichText)
        footer.addWidget(self.totals_label, 1)
        clear_button = QtWidgets.QPushButton("Clear")
        clear_button.clicked.connect(self._state.clear_draft)
        self.submit_button = QtWidgets.QPushButton("Create order")
        self.submit_button.setMinimumHeight(40)
        self.submit_button.clicked.connect(self._on_submit)
        footer.addWidget(clear_button)
        footer.addWidget(self.submit_button)
        layout.addLayout(footer)

    def _load_customers(self) -> None:
        try:
            customers = self._services.customer_repo.list_all()
        except sqlite3.Error:
            self._logger.exception("Failed to load customers")
            show_error(self, "Could not load customers.")
            return
        self._customers = customers
        selected = self._state.draft.customer
        self.customer_combo.blockSignals(True)
        self.customer_combo.clear()
        self.customer_combo.addItem("Select a customer", None)
        for customer in customers:
            label = customer.name
            if customer.phone:
                label = f"{label} ({customer.phone})"
            self.customer_combo.addItem(label, customer.id)
        if selected is not None:
            index = self.customer_combo.findData(selected.id)
            self.customer_combo.setCurrentIndex(max(index, 0))
        self.customer_combo.blockSignals(False)

    def _selected_customer(self) -> Optional[Customer]:
        customer_id = self.customer_combo.currentData()
        for customer in self._customers:
            if customer.id == customer_id:
                return customer
        return None

    def _on_customer_changed(self) -> None:
        self._state.set_customer(self._selected_customer())

    def _on_new_customer(self) -> None:
        dialog = CustomerDialog(self)
        if dialog.exec() != QtWidgets.QDialog.Accepted:
            return
        data = dialog.get_data()
        try:
            customer = self._services.customer_repo.create(
                name=data["name"] or "",
                phone=data["phone"],
                customer_number=data["customer_number"],
            )
        except sqlite3.Error as exc:
            self._logger.exception("Failed to create customer")
            show_error(self, str(exc))
            return
        self._state.set_customer(customer)
        self._services.data_bus.data_changed.emit()
        self._load_customers()

    def _on_start_changed(self, value: QtCore.QDateTime) -> None:
        self._state.set_start(_from_qdatetime(value))

    def _on_end_changed(self, value: QtCore.QDateTime) -> None:
        self._state.set_end(_from_qdatetime(value))

    def _on_suggest_invoice(self) -> None:
        try:
            number = self._services.order_service.generate_invoice_number()
        except sqlite3.Error as exc:
            self._logger.exception("Failed to suggest invoice number")
            show_error(self, str(exc))
            return
        self._state.set_invoice_number(number)

    def _on_browse_photo(self) -> None:
        file_name, _ = QtWidgets.QFileDialog.getOpenFileName(
            self, "Select photo", "", "Images (*.png *.jpg *.jpeg *.webp)"
        )
        if file_name:
            self.photo_input.setText(file_name)

    def _on_add_item(self) -> None:
        photo = self.photo_input.text().strip()
        if not photo:
            show_warning(self, "Please add a photo for the item.")
            return
        item = OrderItem(
            photo_url=photo,
            product_name=self.product_input.text().strip() or None,
            quantity=int(self.qty_input.value()),
            price_per_day=float(self.price_input.value()),
        )
        if not self._state.add_item(item):
            show_warning(self, "This item is already in the order.")
            return
        self.photo_input.clear()
        self.product_input.clear()
        self.qty_input.setValue(1)
        self.price_input.setValue(0.0)

    def _sync_from_draft(self) -> None:
        draft = self._state.draft
        for widget in (
            self.start_input,
            self.end_input,
            self.invoice_input,
            self.deposit_input,
            self.customer_combo,
        ):
            widget.blockSignals(True)
        if draft.start is not None:
            self.start_input.setDateTime(_to_qdatetime(draft.start))
        if draft.end is not None:
            self.end_input.setDateTime(_to_qdatetime(draft.end))
        if self.invoice_input.text() != draft.invoice_number:
            self.invoice_input.setText(draft.invoice_number)
        self.deposit_input.setValue(draft.security_deposit or 0.0)
        customer_id = draft.customer.id if draft.customer else None
        index = self.customer_combo.findData(customer_id)
        self.customer_combo.setCurrentIndex(max(index, 0))
        for widget in (
            self.start_input,
            self.end_input,
            self.invoice_input,
            self.deposit_input,
            self.customer_combo,
        ):
            widget.blockSignals(False)
        if draft.is_editing:
            self._title_label.setText(f"Edit order {draft.invoice_number}")
        else:
            self._title_label.setText("New order")
        self.submit_button.setText(self._submit_text())
        self._render_items()
        self._render_totals()

    def _submit_text(self) -> str:
        return "Save changes" if self._state.draft.is_editing else "Create order"

    def _render_items(self) -> None:
        items = self._state.draft.items
        self.items_table.setRowCount(len(items))
        for row, item in enumerate(items):
            values = [
                item.product_name or item.photo_url,
                str(item.quantity),
                format_currency(item.price_per_day),
                str(item.days),
                format_currency(item.line_total),
            ]
            for column, value in enumerate(values):
                self.items_table.setItem(row, column, QtWidgets.QTableWidgetItem(value))
            remove_button = QtWidgets.QPushButton("Remove")
            remove_button.clicked.connect(
                lambda _checked=False, idx=row: self._state.remove_item(idx)
            )
            self.items_table.setCellWidget(row, 5, remove_button)

    def _render_totals(self) -> None:
        totals = self._state.totals()
        settings = self._state.tax_settings
        tax_text = format_currency(totals.tax_amount)
        if settings.enabled and settings.included:
            tax_text = f"{tax_text} (included)"
        parts = [
            f"Days: {totals.days}",
            f"Subtotal: {format_currency(totals.subtotal)}",
        ]
        if settings.enabled:
            parts.append(f"Tax {settings.rate:g}%: {tax_text}")
        parts.append(f"<b>Total: {format_currency(totals.grand_total)}</b>")
        self.totals_label.setText(" &nbsp; ".join(parts))

    def _on_submit(self) -> None:
        if self._submitting:
            return
        issues = self._state.validation_issues()
        if issues:
            show_warning(self, "\n".join(issue.message for issue in issues))
            return
        editing = self._state.draft.is_editing
        self._submitting = True
        self.submit_button.setEnabled(False)
        self.submit_button.setText("Saving...")
        try:
            order = self._state.submit_draft()
        except DraftValidationError as exc:
            show_warning(self, "\n".join(issue.message for issue in exc.issues))
        except (ServiceError, sqlite3.Error) as exc:
            self._logger.exception("Failed to save order")
            show_error(self, str(exc))
        else:
            self._services.data_bus.data_changed.emit()
            verb = "updated" if editing else "created"
            show_success(self, f"Order {order.invoice_number} {verb}.")
        finally:
            self._submitting = False
            self.submit_button.setEnabled(True)
            self.submit_button.setText(self._submit_text())
