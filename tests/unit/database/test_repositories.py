# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tests for the repositories and the role seed."""

from unittest.mock import MagicMock

import pytest

from src.infrastructure.database.models import RoleEntity
from src.infrastructure.database.repositories import (
    AccessTokenRepository,
    GenericRepository,
    GuardianRepository,
    RoleRepository,
    UnknownUserKindError,
    UserRepository,
)
from src.infrastructure.database.seeds import seed_roles


def _sql(mock_db) -> str:
    """Render the last executed statement."""
    return str(mock_db.execute.await_args.args[0].compile())


class TestGenericRepository:
    """Tests for GenericRepository."""

    def test_requires_model(self, mock_db) -> None:
        """Test a repository without model is rejected."""
        with pytest.raises(TypeError):
            GenericRepository(mock_db)

    @pytest.mark.asyncio
    async def test_unknown_field(self, mock_db) -> None:
        """Test filtering on a missing attribute fails before querying."""
        repo = GenericRepository(mock_db, RoleEntity)

        with pytest.raises(AttributeError, match="nickname"):
            await repo.find_by("nickname", "x")

        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_persist_flushes(self, mock_db) -> None:
        """Test persist stages the record and assigns its id."""
        repo = GenericRepository(mock_db, RoleEntity)
        role = RoleEntity(name="profesor")

        stored = await repo.persist(role)

        assert stored is role
        assert role.id == 100
        mock_db.flush.assert_awaited_once()
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_exists_by(self, mock_db, db_result) -> None:
        """Test existence checks select a single id."""
        mock_db.execute.return_value = db_result(3)
        repo = GenericRepository(mock_db, RoleEntity)

        assert await repo.exists(3) is True
        assert "LIMIT" in _sql(mock_db)


class TestUserRepositories:
    """Tests for user, token and role lookups."""

    @pytest.mark.asyncio
    async def test_role_lookup_is_case_insensitive(self, mock_db, db_result) -> None:
        """Test the role name is compared in lower case."""
        mock_db.execute.return_value = db_result(RoleEntity(id=1, name="acudiente"))

        role = await RoleRepository(mock_db).find_by_name(" Acudiente ")

        assert role.name == "acudiente"
        assert "lower(roles.name)" in _sql(mock_db)
        compiled = mock_db.execute.await_args.args[0].compile()
        assert "acudiente" in compiled.params.values()

    @pytest.mark.asyncio
    async def test_empty_role_name(self, mock_db) -> None:
        """Test an empty name finds nothing without querying."""
        assert await RoleRepository(mock_db).find_by_name("") is None
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [None, "", "   "])
    async def test_blank_contacts_never_match(self, mock_db, value) -> None:
        """Test blank email and phone are not looked up."""
        repo = UserRepository(mock_db)

        assert await repo.exists_by_email(value) is False
        assert await repo.exists_by_phone(value) is False
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_existing_email(self, mock_db, db_result) -> None:
        """Test a stored email is found."""
        mock_db.execute.return_value = db_result(10)

        assert await UserRepository(mock_db).exists_by_email("mjperez@example.com") is True
        assert "users.email" in _sql(mock_db)

    @pytest.mark.asyncio
    async def test_find_by_username(self, mock_db, db_result, make_token) -> None:
        """Test token lookup by username."""
        token = make_token()
        mock_db.execute.return_value = db_result(token)

        assert await AccessTokenRepository(mock_db).find_by_username("mperezg") is token
        assert "access_tokens.username" in _sql(mock_db)

    @pytest.mark.asyncio
    async def test_unmapped_tag_is_unknown_kind(self, mock_db) -> None:
        """Test the loader failure on an unmapped tag becomes UnknownUserKindError."""
        mock_db.execute.side_effect = AssertionError("No such polymorphic_identity 'estudiante' is defined")
        users = UserRepository(mock_db)

        with pytest.raises(UnknownUserKindError, match="estudiante"):
            await users.find_by_id(41)
        with pytest.raises(UnknownUserKindError):
            await users.find_by_token_id(5)

    @pytest.mark.asyncio
    async def test_other_assertion_errors_propagate(self, mock_db) -> None:
        """Test unrelated assertion errors are not reported as an unknown kind."""
        mock_db.execute.side_effect = AssertionError("unexpected state")

        with pytest.raises(AssertionError, match="unexpected state"):
            await UserRepository(mock_db).find_by_id(41)


class TestGuardianRepository:
    """Tests for guardian queries."""

    @pytest.mark.asyncio
    async def test_pending_students_excludes_current(self, mock_db, db_result) -> None:
        """Test the student being processed is left out of the check."""
        mock_db.execute.return_value = db_result(None)

        assert await GuardianRepository(mock_db).has_pending_students(10, exclude_student_id=4) is False
        assert "students.id !=" in _sql(mock_db)

    @pytest.mark.asyncio
    async def test_pending_students_without_exclusion(self, mock_db, db_result) -> None:
        """Test the plain check does not filter by student id."""
        mock_db.execute.return_value = db_result(7)

        assert await GuardianRepository(mock_db).has_pending_students(10) is True
        assert "students.id !=" not in _sql(mock_db)

    @pytest.mark.asyncio
    async def test_approved_students(self, mock_db, db_result) -> None:
        """Test the approved check filters on state."""
        mock_db.execute.return_value = db_result(None)

        assert await GuardianRepository(mock_db).has_approved_students(10) is False
        assert "students.state" in _sql(mock_db)

    @pytest.mark.asyncio
    async def test_has_access_token(self, mock_db, db_result) -> None:
        """Test a guardian with a linked token."""
        mock_db.execute.return_value = db_result(1)

        assert await GuardianRepository(mock_db).has_access_token(10) is True


class TestSeedRoles:
    """Tests for seed_roles."""

    @pytest.mark.asyncio
    async def test_inserts_missing_roles_only(self, mock_db) -> None:
        """Test existing names, in any case, are not inserted again."""
        result = MagicMock()
        result.scalars.return_value.all.return_value = ["Profesor", "acudiente"]
        mock_db.execute.return_value = result
        mock_db.add_all = MagicMock()

        created = await seed_roles(mock_db)

        assert sorted(role.name for role in created) == ["administrador", "directivo"]
        mock_db.add_all.assert_called_once_with(created)
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_second_run_inserts_nothing(self, mock_db) -> None:
        """Test the seed is idempotent."""
        result = MagicMock()
        result.scalars.return_value.all.return_value = ["profesor", "directivo", "administrador", "acudiente"]
        mock_db.execute.return_value = result
        mock_db.add_all = MagicMock()

        assert await seed_roles(mock_db) == []
