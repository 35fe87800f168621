# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Repositories for users, access tokens and roles.

``AccessTokenRepository`` and ``UserRepository`` together form the
credential lookup used by authentication: token by username, then user by
token id. The guardian and teacher repositories add the eager queries that
load related collections, which the default fetch path never loads.

A users row whose ``user_kind`` has no mapped class cannot be loaded by the
ORM. ``UserRepository`` reports it as ``UnknownUserKindError`` so callers can
treat it like any other unknown kind.
"""

from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.orm import selectinload

from src.infrastructure.database.models import (
    AccessTokenEntity,
    GuardianEntity,
    RoleEntity,
    StudentEntity,
    TeacherEntity,
    UserEntity,
)
from src.infrastructure.database.repositories.base import GenericRepository
from src.models.academic import EnrollmentState


class AccessTokenRepository(GenericRepository[AccessTokenEntity]):
    """Access token lookups."""

    model = AccessTokenEntity

    async def find_by_username(self, username: str) -> AccessTokenEntity | None:
        stmt = select(AccessTokenEntity).where(AccessTokenEntity.username == username)
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none()

    async def exists_username(self, username: str) -> bool:
        if not username:
            return False
        return await self.exists_by("username", username)


class UnknownUserKindError(Exception):
    """Raised when a stored user carries a discriminator with no mapped class."""


class UserRepository(GenericRepository[UserEntity]):
    """User lookups across every variant."""

    model = UserEntity

    async def find_by_id(self, record_id: Any) -> UserEntity | None:
        """Fetch a user by primary key, loaded as its variant class.

        Raises:
            UnknownUserKindError: If the row's ``user_kind`` is not mapped.
        """
        return await self._load_one(select(UserEntity).where(UserEntity.id == record_id))

    async def find_by_token_id(self, token_id: int) -> UserEntity | None:
        """Fetch the user owning an access token.

        Raises:
            UnknownUserKindError: If the row's ``user_kind`` is not mapped.
        """
        return await self._load_one(select(UserEntity).where(UserEntity.access_token_id == token_id))

    async def exists_by_email(self, email: str | None) -> bool:
        """Check for a user with this email. Empty values never match."""
        if not email or not email.strip():
            return False
        return await self.exists_by("email", email.strip())

    async def exists_by_phone(self, phone: str | None) -> bool:
        """Check for a user with this phone. Empty values never match."""
        if not phone or not phone.strip():
            return False
        return await self.exists_by("phone", phone.strip())

    async def _load_one(self, stmt: Select) -> UserEntity | None:
        try:
            result = await self._db.execute(stmt)
            return result.scalar_one_or_none()
        except AssertionError as e:
            # The ORM loader signals an unmapped polymorphic identity this way
            if "polymorphic_identity" not in str(e):
                raise
            raise UnknownUserKindError(str(e)) from e


class RoleRepository(GenericRepository[RoleEntity]):
    """Role lookups. Roles are reference data and are never written here."""

    model = RoleEntity

    async def find_by_name(self, name: str) -> RoleEntity | None:
        """Fetch a role by case-insensitive name."""
        if not name:
            return None
        stmt = select(RoleEntity).where(func.lower(RoleEntity.name) == name.strip().lower())
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none()


class GuardianRepository(GenericRepository[GuardianEntity]):
    """Guardian queries, including the eager student fetch."""

    model = GuardianEntity

    async def find_with_students(self, guardian_id: int) -> GuardianEntity | None:
        """Fetch a guardian with its students loaded in the same read.

        ``populate_existing`` refreshes an instance already present in the
        identity map, which was loaded without its students.
        """
        stmt = (
            select(GuardianEntity)
            .options(selectinload(GuardianEntity.students))
            .where(GuardianEntity.id == guardian_id)
            .execution_options(populate_existing=True)
        )
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none()

    async def has_approved_students(self, guardian_id: int) -> bool:
        stmt = (
            select(StudentEntity.id)
            .where(
                StudentEntity.guardian_id == guardian_id,
                StudentEntity.state == EnrollmentState.APPROVED,
            )
            .limit(1)
        )
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def has_pending_students(
        self,
        guardian_id: int,
        exclude_student_id: int | None = None,
    ) -> bool:
        """Check for pending students of a guardian.

        Args:
            guardian_id: Guardian to inspect.
            exclude_student_id: Student left out of the check, typically the
                one currently being processed.
        """
        stmt = select(StudentEntity.id).where(
            StudentEntity.guardian_id == guardian_id,
            StudentEntity.state == EnrollmentState.PENDING,
        )
        if exclude_student_id is not None:
            stmt = stmt.where(StudentEntity.id != exclude_student_id)
        result = await self._db.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def has_access_token(self, guardian_id: int) -> bool:
        stmt = select(GuardianEntity.access_token_id).where(GuardianEntity.id == guardian_id)
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none() is not None


class TeacherRepository(GenericRepository[TeacherEntity]):
    """Teacher queries, including the eager group fetch."""

    model = TeacherEntity

    async def find_with_groups(self, teacher_id: int) -> TeacherEntity | None:
        """Fetch a teacher with the groups they direct."""
        stmt = (
            select(TeacherEntity)
            .options(selectinload(TeacherEntity.groups))
            .where(TeacherEntity.id == teacher_id)
            .execution_options(populate_existing=True)
        )
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none()
