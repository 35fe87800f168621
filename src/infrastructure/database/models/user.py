# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User, access token and role tables.

Users are stored with joined-table inheritance: the ``users`` table holds the
shared attributes and a ``user_kind`` discriminator, and one table per
variant (teachers, directors, administrators, guardians) holds the
variant's primary key.

The ``user_kind`` discriminator is limited by a CHECK constraint to the four
variant tags and the base tag, so every stored row maps to a known class.

Uniqueness of usernames, emails and phone numbers is enforced here, by the
database. Application level duplicate checks only give an earlier, friendlier
rejection.

Related collections (a guardian's students, a teacher's groups) use
``lazy="raise"``: they are never part of the default fetch path and must be
loaded explicitly through an eager query.
"""

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin
from src.models.user import UserKind

if TYPE_CHECKING:
    from src.infrastructure.database.models.academic import GroupEntity, StudentEntity

# Discriminator of rows that carry no concrete variant
BASE_USER_KIND = "usuario"

# Every discriminator value the users table accepts
USER_KIND_TAGS: tuple[str, ...] = (*(kind.value for kind in UserKind), BASE_USER_KIND)


class RoleEntity(Base):
    """Named permission class. Reference data, never written by the services."""

    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<RoleEntity id={self.id} name={self.name!r}>"


class AccessTokenEntity(TimestampMixin, Base):
    """Login credentials of a user: username, secret and role."""

    __tablename__ = "access_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    secret: Mapped[str] = mapped_column(String(255), nullable=False)
    role_id: Mapped[int] = mapped_column(ForeignKey("roles.id"), nullable=False)

    role: Mapped[RoleEntity] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<AccessTokenEntity id={self.id} username={self.username!r}>"


class UserEntity(TimestampMixin, Base):
    """Shared attributes of every user variant."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_kind: Mapped[str] = mapped_column(String(20), nullable=False)
    first_name: Mapped[str] = mapped_column(String(60), nullable=False)
    second_name: Mapped[str | None] = mapped_column(String(60))
    first_surname: Mapped[str] = mapped_column(String(60), nullable=False)
    second_surname: Mapped[str | None] = mapped_column(String(60))
    age: Mapped[int | None] = mapped_column(Integer)
    email: Mapped[str | None] = mapped_column(String(120), unique=True)
    phone: Mapped[str | None] = mapped_column(String(20), unique=True)
    access_token_id: Mapped[int | None] = mapped_column(
        ForeignKey("access_tokens.id"),
        unique=True,
    )

    access_token: Mapped[AccessTokenEntity | None] = relationship(lazy="joined")

    __table_args__ = (
        CheckConstraint(
            "user_kind IN (" + ", ".join(f"'{tag}'" for tag in USER_KIND_TAGS) + ")",
            name="user_kind",
        ),
    )

    __mapper_args__ = {
        "polymorphic_on": "user_kind",
        "polymorphic_identity": BASE_USER_KIND,
        "with_polymorphic": "*",
    }

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id} kind={self.user_kind!r}>"


class TeacherEntity(UserEntity):
    """Teacher. Directs zero or more groups."""

    __tablename__ = "teachers"

    id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    groups: Mapped[list["GroupEntity"]] = relationship(
        back_populates="director",
        lazy="raise",
    )

    __mapper_args__ = {"polymorphic_identity": UserKind.TEACHER.value}


class DirectorEntity(UserEntity):
    """School director."""

    __tablename__ = "directors"

    id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    __mapper_args__ = {"polymorphic_identity": UserKind.DIRECTOR.value}


class AdministratorEntity(UserEntity):
    """System administrator."""

    __tablename__ = "administrators"

    id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    __mapper_args__ = {"polymorphic_identity": UserKind.ADMINISTRATOR.value}


class GuardianEntity(UserEntity):
    """Guardian of one or more students."""

    __tablename__ = "guardians"

    id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    students: Mapped[list["StudentEntity"]] = relationship(
        back_populates="guardian",
        lazy="raise",
    )

    __mapper_args__ = {"polymorphic_identity": UserKind.GUARDIAN.value}
