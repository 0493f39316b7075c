# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across the unit tests:
- Identities and sessions for both roles
- Notification service with an in-app channel
- Event router and connection manager over fake transports
"""

import pytest

from src.infrastructure.notifications import NotificationService
from src.infrastructure.realtime.connection import ConnectionManager
from src.infrastructure.realtime.router import EventRouter
from src.infrastructure.realtime.session import Identity, Role, Session
from tests.fakes import TransportFactory


# =============================================================================
# Identity Fixtures
# =============================================================================


@pytest.fixture
def admin_identity() -> Identity:
    return Identity(user_id="1", display_name="Admin User", role=Role.ADMIN, email="admin@example.com")


@pytest.fixture
def student_identity() -> Identity:
    return Identity(
        user_id="2",
        display_name="Alice Smith",
        role=Role.STUDENT,
        domain="Computer Science",
        email="alice@example.com",
    )


@pytest.fixture
def other_student_identity() -> Identity:
    return Identity(user_id="3", display_name="Bob Johnson", role=Role.STUDENT, domain="Physics")


@pytest.fixture
def admin_session(admin_identity: Identity) -> Session:
    return Session(identity=admin_identity, token="admin-token")


@pytest.fixture
def student_session(student_identity: Identity) -> Session:
    return Session(identity=student_identity, token="student-token")


# =============================================================================
# Real-time Fixtures
# =============================================================================


@pytest.fixture
def notifier() -> NotificationService:
    return NotificationService()


@pytest.fixture
def router(notifier: NotificationService) -> EventRouter:
    return EventRouter(notifier=notifier)


@pytest.fixture
def transports() -> TransportFactory:
    return TransportFactory()


@pytest.fixture
def connection(
    transports: TransportFactory,
    router: EventRouter,
    notifier: NotificationService,
) -> ConnectionManager:
    return ConnectionManager(transports, router, notifier)


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
