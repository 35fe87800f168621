# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Conversion between stored user records and domain users.

Dispatch goes through a registry keyed by ``UserKind``. Each entry is a
``MappingStrategy`` naming the domain class, the ORM class and, for
variants with related collections, a ``RelatedDataResolver`` that re-fetches
the record with its collection loaded eagerly.

Guardians resolve their students and teachers resolve their groups.
Directors and administrators are flat. New variants plug in with
``UserMapper.register`` without touching the dispatch code.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models import (
    AccessTokenEntity,
    AdministratorEntity,
    DirectorEntity,
    GroupEntity,
    GuardianEntity,
    RoleEntity,
    StudentEntity,
    TeacherEntity,
    UserEntity,
)
from src.infrastructure.database.repositories import GuardianRepository, TeacherRepository
from src.models.academic import Group, Student
from src.models.user import (
    AccessToken,
    Administrator,
    Director,
    Guardian,
    Role,
    Teacher,
    User,
    UserKind,
)

logger = logging.getLogger(__name__)

_SHARED_FIELDS = (
    "id",
    "first_name",
    "second_name",
    "first_surname",
    "second_surname",
    "age",
    "email",
    "phone",
)


class UserMappingError(Exception):
    """Raised when a user cannot be converted to a stored record."""


# =============================================================================
# Related data resolution
# =============================================================================


class RelatedDataResolver(ABC):
    """Loads the related collection of one user variant."""

    @abstractmethod
    async def load(self, db: AsyncSession, record: UserEntity) -> UserEntity | None:
        """Re-fetch the record with its related collection loaded."""

    @abstractmethod
    def related_fields(self, record: UserEntity | None) -> dict[str, Any]:
        """Build domain keyword arguments from a loaded record.

        ``record`` is None when the eager re-fetch found nothing, in which
        case the collection is empty.
        """


class GuardianStudentsResolver(RelatedDataResolver):
    async def load(self, db: AsyncSession, record: UserEntity) -> UserEntity | None:
        return await GuardianRepository(db).find_with_students(record.id)

    def related_fields(self, record: UserEntity | None) -> dict[str, Any]:
        if record is None:
            return {"students": []}
        return {"students": [UserMapper.student_to_domain(s) for s in record.students]}


class TeacherGroupsResolver(RelatedDataResolver):
    async def load(self, db: AsyncSession, record: UserEntity) -> UserEntity | None:
        return await TeacherRepository(db).find_with_groups(record.id)

    def related_fields(self, record: UserEntity | None) -> dict[str, Any]:
        if record is None:
            return {"groups": []}
        return {"groups": [UserMapper.group_to_domain(g) for g in record.groups]}


@dataclass(frozen=True)
class MappingStrategy:
    """How one user variant maps between domain and storage."""

    domain_cls: type[User]
    record_cls: type[UserEntity]
    resolver: RelatedDataResolver | None = None


def default_strategies() -> dict[UserKind, MappingStrategy]:
    """Strategies of the four built-in user variants."""
    return {
        UserKind.TEACHER: MappingStrategy(Teacher, TeacherEntity, TeacherGroupsResolver()),
        UserKind.DIRECTOR: MappingStrategy(Director, DirectorEntity),
        UserKind.ADMINISTRATOR: MappingStrategy(Administrator, AdministratorEntity),
        UserKind.GUARDIAN: MappingStrategy(Guardian, GuardianEntity, GuardianStudentsResolver()),
    }


# =============================================================================
# Mapper
# =============================================================================


class UserMapper:
    """Entity to domain mapper for users, tokens, roles and students."""

    def __init__(
        self,
        db: AsyncSession,
        strategies: dict[UserKind, MappingStrategy] | None = None,
    ) -> None:
        """Initialize the mapper.

        Args:
            db: Async database session, used by the related data resolvers.
            strategies: Strategy registry. Defaults to the built-in variants.
        """
        self._db = db
        self._strategies = dict(strategies) if strategies is not None else default_strategies()

    def register(self, kind: UserKind, strategy: MappingStrategy) -> None:
        """Register or replace the strategy of a user kind."""
        self._strategies[kind] = strategy

    def strategy_for(self, kind: UserKind | None) -> MappingStrategy | None:
        if kind is None:
            return None
        return self._strategies.get(kind)

    async def to_domain(self, record: UserEntity) -> User | None:
        """Map a stored user to its domain variant.

        Args:
            record: Stored user, as loaded by the default fetch path.

        Returns:
            The domain user, or None when the stored kind is unknown.
        """
        kind = self._kind_of(record)
        strategy = self.strategy_for(kind)
        if strategy is None or not isinstance(record, strategy.record_cls):
            logger.warning(
                "Unknown user kind: id=%s, user_kind=%s, record=%s",
                record.id,
                record.user_kind,
                type(record).__name__,
            )
            return None

        fields = self.shared_fields(record)
        if strategy.resolver is not None:
            loaded = await strategy.resolver.load(self._db, record)
            if loaded is None:
                logger.warning(
                    "Eager fetch returned nothing for user %s, mapping without related data",
                    record.id,
                )
            fields.update(strategy.resolver.related_fields(loaded))

        return strategy.domain_cls(**fields)

    def to_record(self, user: User, token_record: AccessTokenEntity | None) -> UserEntity:
        """Build the stored record of a domain user.

        Args:
            user: Domain user of a concrete variant.
            token_record: Access token to link, usually just flushed.

        Raises:
            UserMappingError: If the user's variant has no registered strategy.
        """
        strategy = self.strategy_for(user.kind)
        if strategy is None:
            raise UserMappingError(f"No mapping registered for {type(user).__name__}")

        return strategy.record_cls(
            first_name=_clean(user.first_name),
            second_name=_clean(user.second_name),
            first_surname=_clean(user.first_surname),
            second_surname=_clean(user.second_surname),
            age=user.age,
            email=_clean(user.email),
            phone=_clean(user.phone),
            access_token=token_record,
        )

    # =========================================================================
    # Related entity mapping
    # =========================================================================

    @staticmethod
    def role_to_domain(record: RoleEntity | None) -> Role | None:
        if record is None:
            return None
        return Role(id=record.id, name=record.name)

    @staticmethod
    def token_to_domain(record: AccessTokenEntity | None) -> AccessToken | None:
        if record is None:
            return None
        return AccessToken(
            id=record.id,
            username=record.username,
            secret=record.secret,
            role=UserMapper.role_to_domain(record.role),
        )

    @staticmethod
    def student_to_domain(record: StudentEntity) -> Student:
        return Student.model_validate(record)

    @staticmethod
    def group_to_domain(record: GroupEntity) -> Group:
        return Group.model_validate(record)

    def shared_fields(self, record: UserEntity) -> dict[str, Any]:
        """Domain keyword arguments of the attributes every variant has."""
        fields = {name: getattr(record, name) for name in _SHARED_FIELDS}
        fields["access_token"] = self.token_to_domain(record.access_token)
        return fields

    @staticmethod
    def _kind_of(record: UserEntity) -> UserKind | None:
        try:
            return UserKind(record.user_kind)
        except ValueError:
            return None


def _clean(value: str | None) -> str | None:
    """Strip a string and turn blanks into None."""
    if value is None:
        return None
    value = value.strip()
    return value or None
