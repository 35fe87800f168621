# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for authentication and health endpoints."""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from src.infrastructure.database.models import GuardianEntity


pytestmark = pytest.mark.integration


class TestAuthAPIRouting:
    """Tests for auth API routing."""

    def test_routes_registered(self, app):
        """Test that auth and health routes are registered."""
        routes = [route.path for route in app.routes]

        assert "/api/v1/auth/login" in routes
        assert "/api/v1/auth/attempts" in routes
        assert "/health" in routes
        assert "/ready" in routes


class TestLogin:
    """Tests for POST /api/v1/auth/login."""

    def test_login_success(self, client, mock_db, db_result, make_token, director_record):
        """Test valid credentials return the user without its secret."""
        mock_db.execute.side_effect = [
            db_result(make_token(username="crojas", role_name="directivo", token_id=2)),
            db_result(director_record),
        ]

        response = client.post("/api/v1/auth/login", json={"username": "crojas", "password": "Ab3!xY9z"})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful"
        assert body["user"]["id"] == 20
        assert body["user"]["user_kind"] == "directivo"
        assert body["user"]["username"] == "crojas"
        assert body["user"]["role"] == "directivo"
        assert "Ab3!xY9z" not in response.text

    def test_guardian_login_includes_students(
        self, client, mock_db, db_result, make_token, guardian_record, make_student
    ):
        """Test a guardian logs in with the students of the eager fetch."""
        loaded = GuardianEntity(
            id=10,
            first_name="María José",
            first_surname="Pérez",
            students=[make_student(1), make_student(2)],
        )
        mock_db.execute.side_effect = [
            db_result(make_token()),
            db_result(guardian_record),
            db_result(loaded),
        ]

        response = client.post("/api/v1/auth/login", json={"username": "mperezg", "password": "Ab3!xY9z"})

        assert response.status_code == 200
        students = response.json()["user"]["students"]
        assert [s["state"] for s in students] == ["pendiente", "pendiente"]

    def test_invalid_credentials(self, client, mock_db, db_result, make_token):
        """Test a wrong secret is 401 with the remaining attempts."""
        mock_db.execute.side_effect = [db_result(make_token())]

        response = client.post("/api/v1/auth/login", json={"username": "mperezg", "password": "wrong"})

        assert response.status_code == 401
        assert response.json()["detail"] == {"message": "Invalid credentials", "remaining_attempts": 2}

    def test_lockout_after_three_failures(self, client, mock_db, db_result):
        """Test the fourth attempt is rejected without touching storage."""
        mock_db.execute.side_effect = [db_result(None)] * 3

        statuses = [
            client.post("/api/v1/auth/login", json={"username": f"u{i}", "password": "x"}).status_code
            for i in range(4)
        ]

        assert statuses == [401, 401, 401, 423]
        assert mock_db.execute.await_count == 3

        attempts = client.get("/api/v1/auth/attempts").json()
        assert attempts == {
            "failed_attempts": 3,
            "remaining_attempts": 0,
            "max_attempts": 3,
            "locked": True,
        }

    def test_lockout_is_per_application(self, app):
        """Test a fresh application starts with a fresh counter."""
        from src.api.app import create_app

        app.state.login_attempts.record_failure()

        assert create_app().state.login_attempts.failed == 0

    def test_configured_maximum(self, monkeypatch):
        """Test the maximum comes from AUTH_MAX_LOGIN_ATTEMPTS."""
        from src.api.app import create_app

        monkeypatch.setenv("AUTH_MAX_LOGIN_ATTEMPTS", "5")

        assert create_app().state.login_attempts.max_attempts == 5

    def test_storage_unavailable(self, client, mock_db):
        """Test storage failures are 503 and do not count as attempts."""
        mock_db.execute.side_effect = OperationalError("SELECT", {}, Exception("connection refused"))

        response = client.post("/api/v1/auth/login", json={"username": "mperezg", "password": "x"})

        assert response.status_code == 503
        assert client.get("/api/v1/auth/attempts").json()["failed_attempts"] == 0

    def test_empty_username_rejected(self, client, mock_db):
        """Test request validation runs before authentication."""
        response = client.post("/api/v1/auth/login", json={"username": "", "password": "x"})

        assert response.status_code == 422
        mock_db.execute.assert_not_awaited()


class TestHealth:
    """Tests for health endpoints."""

    @patch("src.api.routes.health.check_database_connection", new_callable=AsyncMock)
    def test_ready(self, mock_check, client):
        """Test readiness when the database answers."""
        mock_check.return_value = True

        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json() == {"ready": True}

    @patch("src.api.routes.health.check_database_connection", new_callable=AsyncMock)
    def test_not_ready(self, mock_check, client):
        """Test 503 while the database is down."""
        mock_check.return_value = False

        response = client.get("/ready")

        assert response.status_code == 503

    @patch("src.api.routes.health.check_database_connection", new_callable=AsyncMock)
    def test_health_degraded(self, mock_check, client):
        """Test health reports a degraded database."""
        mock_check.return_value = False

        body = client.get("/health").json()

        assert body["status"] == "degraded"
        assert body["database"] == "unhealthy"
