# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across unit and integration tests:
- A mocked async database session
- Factories for stored user records
"""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.config import clear_settings_cache
from src.infrastructure.database.models import (
    AccessTokenEntity,
    DirectorEntity,
    GroupEntity,
    GuardianEntity,
    RoleEntity,
    StudentEntity,
    TeacherEntity,
    UserEntity,
)
from src.models.academic import EnrollmentState


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Reload settings from the environment for every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Database Fixtures
# =============================================================================


def make_result(value: Any) -> MagicMock:
    """Build an execute() result whose scalar_one_or_none returns value."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


@pytest.fixture
def db_result():
    """Provide the execute() result builder."""
    return make_result


@pytest.fixture
def mock_db():
    """Create mock database session.

    Records passed to ``add`` receive sequential ids on ``flush``, the way
    the database assigns them.
    """
    db = AsyncMock()
    db.added = []
    db.add = MagicMock(side_effect=db.added.append)
    db.delete = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.execute = AsyncMock()

    async def flush() -> None:
        for index, record in enumerate(db.added, start=100):
            if record.id is None:
                record.id = index

    db.flush = AsyncMock(side_effect=flush)
    return db


# =============================================================================
# Record Factories
# =============================================================================


@pytest.fixture
def make_token():
    """Factory for stored access tokens."""

    def _make(
        username: str = "mperezg",
        secret: str = "Ab3!xY9z",
        role_name: str = "acudiente",
        token_id: int = 1,
    ) -> AccessTokenEntity:
        return AccessTokenEntity(
            id=token_id,
            username=username,
            secret=secret,
            role_id=7,
            role=RoleEntity(id=7, name=role_name),
        )

    return _make


@pytest.fixture
def make_student():
    """Factory for stored students."""

    def _make(
        student_id: int,
        state: EnrollmentState = EnrollmentState.PENDING,
    ) -> StudentEntity:
        return StudentEntity(
            id=student_id,
            nuip=f"10{student_id:08d}",
            first_name="Lucía",
            first_surname="Pérez",
            age=9,
            state=state,
        )

    return _make


@pytest.fixture
def guardian_record(make_token) -> GuardianEntity:
    """Guardian as loaded by the default fetch path, without students."""
    return GuardianEntity(
        id=10,
        first_name="María José",
        first_surname="Pérez",
        second_surname="Gómez",
        email="mjperez@example.com",
        phone="3001234567",
        access_token_id=1,
        access_token=make_token(),
    )


@pytest.fixture
def director_record(make_token) -> DirectorEntity:
    """Director, a flat user variant."""
    return DirectorEntity(
        id=20,
        first_name="Carlos",
        first_surname="Rojas",
        email="crojas@example.com",
        access_token_id=2,
        access_token=make_token(username="crojas", role_name="directivo", token_id=2),
    )


@pytest.fixture
def teacher_with_groups(make_token) -> TeacherEntity:
    """Teacher as returned by the eager group query."""
    return TeacherEntity(
        id=30,
        first_name="Andrés",
        first_surname="Muñoz",
        access_token_id=3,
        access_token=make_token(username="amunoz", role_name="profesor", token_id=3),
        groups=[
            GroupEntity(id=1, name="5A", grade_name="Quinto"),
            GroupEntity(id=2, name="5B", grade_name="Quinto"),
        ],
    )


@pytest.fixture
def unknown_kind_record(make_token) -> UserEntity:
    """User stored without a concrete variant."""
    return UserEntity(
        id=40,
        first_name="Sin",
        first_surname="Tipo",
        access_token_id=4,
        access_token=make_token(username="stipo", token_id=4),
    )


# =============================================================================
# API Fixtures
# =============================================================================


@pytest.fixture
def app(mock_db):
    """Create the application with the database session replaced by mock_db.

    The lifespan is not run, so no connection pool is opened. Credential
    notifications are disabled.
    """
    from src.api.app import create_app
    from src.api.dependencies import get_credential_notifier, get_db

    async def _get_db():
        yield mock_db

    app = create_app()
    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_credential_notifier] = lambda: None
    return app


@pytest.fixture
def client(app):
    """Create test client."""
    from fastapi.testclient import TestClient

    return TestClient(app)
