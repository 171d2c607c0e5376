"""Tests for the shared application state."""

from datetime import datetime, timedelta

import pytest
from dateutil import tz

from rental_orders.domain.models import OrderItem, UserProfile, UserRole
from rental_orders.services.errors import DraftValidationError
from rental_orders.services.order_draft import DraftIssue
from rental_orders.ui.app_state import AppState

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=tz.UTC)


def make_item(photo="photos/lehenga.jpg"):
    return OrderItem(
        photo_url=photo, product_name="Lehenga", quantity=2, price_per_day=100.0
    )


@pytest.fixture
def state(qapp, session_service, order_service):
    return AppState(session_service, order_service)


@pytest.fixture
def events(state):
    recorded = []
    state.draft_changed.connect(lambda: recorded.append("draft"))
    state.session_changed.connect(lambda user: recorded.append(user))
    return recorded


class TestSession:
    def test_sign_in_sets_user_and_scope(self, state, staff_user, branch, events):
        state.sign_in(staff_user.id)
        assert state.user.id == staff_user.id
        assert state.branch_scope == branch.id
        assert events[-1] == "draft"
        assert events[0].id == staff_user.id

    def test_tax_settings_follow_super_admin(
        self, state, profile_repo, branch, staff_user
    ):
        profile_repo.create(
            UserProfile(
                id=None,
                username="owner",
                full_name="Owner",
                role=UserRole.SUPER_ADMIN,
                branch_id=branch.id,
                tax_enabled=True,
                tax_rate=10.0,
            )
        )
        state.set_user(staff_user)
        state.set_start(NOW)
        state.set_end(NOW + timedelta(days=3))
        state.add_item(make_item())
        totals = state.totals()
        assert totals.grand_total == pytest.approx(660.0)

    def test_signed_out_user_has_no_scope(self, state):
        state.set_user(None)
        assert state.branch_scope is None


class TestDraftMutations:
    """Every draft change is announced."""

    def test_mutators_emit(self, state, customer, events):
        state.set_customer(customer)
        state.set_invoice_number("INV-1")
        state.set_security_deposit(100.0)
        state.add_item(make_item())
        state.remove_item(0)
        assert events == ["draft"] * 5

    def test_duplicate_item_does_not_emit(self, state, events):
        assert state.add_item(make_item())
        assert not state.add_item(make_item())
        assert events == ["draft"]

    def test_validation_issues_are_derived(self, state, customer, staff_user):
        state.set_user(staff_user)
        state.set_customer(customer)
        state.set_invoice_number("INV-1")
        assert state.validation_issues() == [DraftIssue.ITEMS_REQUIRED]
        state.add_item(make_item())
        assert state.validation_issues() == []


class TestSubmit:
    def test_submit_clears_draft(self, state, customer, staff_user, events):
        state.set_user(staff_user)
        state.set_customer(customer)
        state.set_invoice_number("INV-1")
        state.add_item(make_item())
        order = state.submit_draft(now=NOW)
        assert order.id is not None
        assert state.draft.items == []
        assert events[-1] == "draft"

    def test_failed_submit_keeps_draft(self, state, customer):
        state.set_customer(customer)
        state.add_item(make_item())
        with pytest.raises(DraftValidationError):
            state.submit_draft(now=NOW)
        assert len(state.draft.items) == 1
        assert state.draft.customer is customer


class TestEditing:
    """Loading an existing order into the draft."""

    def test_load_order_announces_edit(
        self, state, order_service, customer, staff_user
    ):
        state.set_user(staff_user)
        state.set_customer(customer)
        state.set_invoice_number("INV-1")
        state.add_item(make_item())
        created = state.submit_draft(now=NOW)
        loaded = []
        state.order_loaded.connect(loaded.append)

        state.load_order(order_service.get_order(created.id))

        assert loaded == [created.id]
        assert state.draft.order_id == created.id
        assert state.draft.invoice_number == "INV-1"

    def test_clear_draft_stops_editing(
        self, state, order_service, customer, staff_user
    ):
        state.set_user(staff_user)
        state.set_customer(customer)
        state.set_invoice_number("INV-1")
        state.add_item(make_item())
        created = state.submit_draft(now=NOW)
        state.load_order(order_service.get_order(created.id))
        state.clear_draft()
        assert not state.draft.is_editing
