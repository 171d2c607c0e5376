"""Current user resolution and tax configuration lookup."""

from __future__ import annotations

import sqlite3
from typing import Optional

from rental_orders.domain.models import UserProfile, UserRole
from rental_orders.logging_config import get_logger
from rental_orders.repositories.profile_repo import ProfileRepo
from rental_orders.services.errors import NotFoundError
from rental_orders.services.pricing import TaxSettings


class SessionService:
    """Expose the signed-in staff member, their branch scope and tax settings."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._profiles = ProfileRepo(connection)
        self._logger = get_logger(self.__class__.__name__)

    def load_user(self, user_id: int) -> UserProfile:
        profile = self._profiles.get_by_id(user_id)
        if profile is None:
            raise NotFoundError(f"User {user_id} not found.")
        self._logger.info(
            "Loaded user id=%s role=%s branch=%s",
            profile.id,
            profile.role.value,
            profile.branch_id,
        )
        return profile

    def tax_settings_for(self, user: Optional[UserProfile]) -> TaxSettings:
        """Tax settings that apply to orders created by ``user``.

        Staff and branch admins bill with the super admin's tax profile when
        one exists; otherwise their own profile is used.
        """
        if user is None:
            return TaxSettings()
        if user.is_super_admin:
            return TaxSettings.from_profile(user)
        admin = self._profiles.find_super_admin()
        return TaxSettings.from_profile(admin if admin is not None else user)

    def ensure_default_user(self) -> UserProfile:
        """Return the first profile, creating a branch and super admin if none exist."""
        profiles = self._profiles.list_all()
        if profiles:
            return profiles[0]
        branch = self._profiles.create_branch("Main Branch")
        admin = self._profiles.create(
            UserProfile(
                id=None,
                username="admin",
                full_name="Administrator",
                role=UserRole.SUPER_ADMIN,
                branch_id=branch.id,
            )
        )
        self._logger.info("Created default branch id=%s and admin profile", branch.id)
        return admin

    def list_users(self) -> list[UserProfile]:
        return self._profiles.list_all()

    @staticmethod
    def branch_scope(user: Optional[UserProfile]) -> Optional[int]:
        """Branch filter for order queries; None means every branch."""
        if user is None or user.is_super_admin:
            return None
        return user.branch_id
