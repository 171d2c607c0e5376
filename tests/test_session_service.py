"""Tests for session user resolution and tax settings."""

import pytest

from rental_orders.domain.models import UserProfile, UserRole
from rental_orders.services.errors import NotFoundError
from rental_orders.services.pricing import TaxSettings
from rental_orders.services.session_service import SessionService


@pytest.fixture
def super_admin(profile_repo, branch):
    return profile_repo.create(
        UserProfile(
            id=None,
            username="owner",
            full_name="Shop Owner",
            role=UserRole.SUPER_ADMIN,
            branch_id=branch.id,
            tax_enabled=True,
            tax_rate=18.0,
            tax_included=True,
        )
    )


class TestLoadUser:
    def test_loads_profile(self, session_service, staff_user):
        loaded = session_service.load_user(staff_user.id)
        assert loaded.username == "priya"
        assert loaded.role == UserRole.STAFF

    def test_unknown_user(self, session_service):
        with pytest.raises(NotFoundError):
            session_service.load_user(404)


class TestTaxSettings:
    """Which profile's tax configuration applies."""

    def test_no_user_gets_defaults(self, session_service):
        assert session_service.tax_settings_for(None) == TaxSettings()

    def test_staff_uses_super_admin_profile(
        self, session_service, staff_user, super_admin
    ):
        settings = session_service.tax_settings_for(staff_user)
        assert settings == TaxSettings(enabled=True, rate=18.0, included=True)

    def test_staff_without_admin_uses_own_profile(self, session_service, staff_user):
        assert session_service.tax_settings_for(staff_user).enabled is False

    def test_super_admin_uses_own_profile(self, session_service, super_admin):
        assert session_service.tax_settings_for(super_admin).rate == 18.0


class TestBranchScope:
    def test_staff_is_scoped_to_branch(self, staff_user, branch):
        assert SessionService.branch_scope(staff_user) == branch.id

    def test_super_admin_sees_everything(self, super_admin):
        assert SessionService.branch_scope(super_admin) is None

    def test_no_user(self):
        assert SessionService.branch_scope(None) is None


class TestDefaultUser:
    def test_creates_admin_once(self, session_service):
        admin = session_service.ensure_default_user()
        assert admin.role == UserRole.SUPER_ADMIN
        assert admin.branch_id is not None
        again = session_service.ensure_default_user()
        assert again.id == admin.id
        assert len(session_service.list_users()) == 1

    def test_returns_existing_profile(self, session_service, staff_user):
        assert session_service.ensure_default_user().id == staff_user.id
