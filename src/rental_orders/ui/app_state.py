"""Observable application state shared by the screens."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from PySide6 import QtCore

from rental_orders.domain.models import Customer, Order, OrderItem, UserProfile
from rental_orders.logging_config import get_logger
from rental_orders.services.order_draft import DraftIssue, OrderDraft, validate_draft
from rental_orders.services.order_service import OrderService
from rental_orders.services.pricing import OrderTotals, TaxSettings
from rental_orders.services.session_service import SessionService


class AppState(QtCore.QObject):
    """Single owner of the session user, its tax settings and the order draft.

    Derived values such as totals and validation issues are computed when
    read, never stored.
    """

    session_changed = QtCore.Signal(object)
    draft_changed = QtCore.Signal()
    order_loaded = QtCore.Signal(int)

    def __init__(
        self,
        session_service: SessionService,
        order_service: OrderService,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._session_service = session_service
        self._order_service = order_service
        self._user: Optional[UserProfile] = None
        self._tax_settings = TaxSettings()
        self._draft = OrderDraft()
        self._logger = get_logger(self.__class__.__name__)

    @property
    def user(self) -> Optional[UserProfile]:
        return self._user

    @property
    def tax_settings(self) -> TaxSettings:
        return self._tax_settings

    @property
    def branch_scope(self) -> Optional[int]:
        return self._session_service.branch_scope(self._user)

    @property
    def draft(self) -> OrderDraft:
        return self._draft

    def sign_in(self, user_id: int) -> UserProfile:
        user = self._session_service.load_user(user_id)
        self.set_user(user)
        return user

    def set_user(self, user: Optional[UserProfile]) -> None:
        self._user = user
        self._tax_settings = self._session_service.tax_settings_for(user)
        self.session_changed.emit(user)
        self.draft_changed.emit()

    def totals(self) -> OrderTotals:
        return self._draft.totals(self._tax_settings)

    def validation_issues(self) -> list[DraftIssue]:
        return validate_draft(self._draft, self._user)

    def set_customer(self, customer: Optional[Customer]) -> None:
        self._draft.set_customer(customer)
        self.draft_changed.emit()

    def set_start(self, start: datetime) -> None:
        self._draft.set_start(start)
        self.draft_changed.emit()

    def set_end(self, end: Optional[datetime]) -> None:
        self._draft.set_end(end)
        self.draft_changed.emit()

    def set_invoice_number(self, invoice_number: str) -> None:
        self._draft.set_invoice_number(invoice_number)
        self.draft_changed.emit()

    def set_security_deposit(self, amount: Optional[float]) -> None:
        self._draft.set_security_deposit(amount)
        self.draft_changed.emit()

    def add_item(self, item: OrderItem) -> bool:
        added = self._draft.add_item(item)
        if added:
            self.draft_changed.emit()
        return added

    def remove_item(self, index: int) -> None:
        self._draft.remove_item(index)
        self.draft_changed.emit()

    def load_order(self, order: Order) -> None:
        """Start editing ``order`` in the draft."""
        self._draft.load_order(order)
        self._logger.info("Editing order id=%s", order.id)
        self.draft_changed.emit()
        if order.id is not None:
            self.order_loaded.emit(order.id)

    def clear_draft(self) -> None:
        self._draft.clear()
        self.draft_changed.emit()

    def submit_draft(self, now: Optional[datetime] = None) -> Order:
        """Submit the draft; it is cleared only when the order is saved."""
        order = self._order_service.submit_draft(
            self._draft, self._user, self._tax_settings, now
        )
        self._logger.info("Draft saved as order id=%s", order.id)
        self.draft_changed.emit()
        return order
