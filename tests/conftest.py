"""Shared pytest fixtures."""

from __future__ import annotations

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6 import QtCore

from rental_orders.db.connection import get_connection
from rental_orders.db.migrations import apply_migrations
from rental_orders.domain.models import UserProfile, UserRole
from rental_orders.repositories import CustomerRepo, ProfileRepo
from rental_orders.services.order_service import OrderService
from rental_orders.services.session_service import SessionService


@pytest.fixture(scope="session")
def qapp():
    """Core application instance so timers and signals can run."""
    app = QtCore.QCoreApplication.instance()
    if app is None:
        app = QtCore.QCoreApplication([])
    return app


@pytest.fixture
def connection():
    """In-memory database with every migration applied."""
    conn = get_connection(":memory:")
    apply_migrations(conn)
    yield conn
    conn.close()


@pytest.fixture
def profile_repo(connection):
    return ProfileRepo(connection)


@pytest.fixture
def branch(profile_repo):
    return profile_repo.create_branch("Central", "MG Road", "+91 80000 00000")


@pytest.fixture
def other_branch(profile_repo):
    return profile_repo.create_branch("North")


@pytest.fixture
def staff_user(profile_repo, branch):
    return profile_repo.create(
        UserProfile(
            id=None,
            username="priya",
            full_name="Priya Nair",
            role=UserRole.STAFF,
            branch_id=branch.id,
        )
    )


@pytest.fixture
def customer(connection):
    return CustomerRepo(connection).create(
        name="Rahul Verma",
        phone="+91 98765 43210",
        customer_number="C-0042",
    )


@pytest.fixture
def order_service(connection):
    return OrderService(connection)


@pytest.fixture
def session_service(connection):
    return SessionService(connection)
