"""Repository for user profiles and branches."""

from __future__ import annotations

import sqlite3
from typing import List, Optional

from rental_orders.db.connection import transaction
from rental_orders.domain.models import Branch, UserProfile, UserRole
from rental_orders.logging_config import get_logger
from rental_orders.repositories.mappers import (
    branch_from_row,
    profile_from_row,
    profile_to_record,
)


class ProfileRepo:
    """Persistence for session users and the branches they belong to."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._logger = get_logger(self.__class__.__name__)

    def create_branch(
        self,
        name: str,
        address: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> Branch:
        try:
            with transaction(self._connection):
                cursor = self._connection.execute(
                    "INSERT INTO branches (name, address, phone) VALUES (?, ?, ?)",
                    (name, address, phone),
                )
        except Exception:
            self._logger.exception("Failed to create branch name=%s", name)
            raise
        return Branch(id=cursor.lastrowid, name=name, address=address, phone=phone)

    def list_branches(self) -> List[Branch]:
        try:
            rows = self._connection.execute(
                "SELECT * FROM branches ORDER BY name"
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to list branches")
            raise
        return [branch_from_row(row) for row in rows]

    def get_branch(self, branch_id: int) -> Optional[Branch]:
        try:
            row = self._connection.execute(
                "SELECT * FROM branches WHERE id = ?",
                (branch_id,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to get branch id=%s", branch_id)
            raise
        return branch_from_row(row) if row else None

    def create(self, profile: UserProfile) -> UserProfile:
        record = profile_to_record(profile)
        record.pop("id")
        columns = ", ".join(record)
        placeholders = ", ".join(["?"] * len(record))
        try:
            with transaction(self._connection):
                cursor = self._connection.execute(
                    f"INSERT INTO profiles ({columns}) VALUES ({placeholders})",
                    tuple(record.values()),
                )
        except Exception:
            self._logger.exception(
                "Failed to create profile username=%s", profile.username
            )
            raise
        created = self.get_by_id(int(cursor.lastrowid))
        if created is None:
            raise RuntimeError("Profile vanished right after insert.")
        return created

    def get_by_id(self, user_id: int) -> Optional[UserProfile]:
        try:
            row = self._connection.execute(
                "SELECT * FROM profiles WHERE id = ?",
                (user_id,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to get profile id=%s", user_id)
            raise
        return profile_from_row(row) if row else None

    def list_all(self) -> List[UserProfile]:
        try:
            rows = self._connection.execute(
                "SELECT * FROM profiles ORDER BY full_name"
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to list profiles")
            raise
        return [profile_from_row(row) for row in rows]

    def find_super_admin(self) -> Optional[UserProfile]:
        try:
            row = self._connection.execute(
                "SELECT * FROM profiles WHERE role = ? ORDER BY id LIMIT 1",
                (UserRole.SUPER_ADMIN.value,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to look up super admin profile")
            raise
        return profile_from_row(row) if row else None
