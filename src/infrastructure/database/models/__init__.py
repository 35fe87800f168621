# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models.

Importing this package registers every table on ``Base.metadata``.
"""

from src.infrastructure.database.models.academic import GroupEntity, StudentEntity
from src.infrastructure.database.models.base import Base, TimestampMixin
from src.infrastructure.database.models.user import (
    BASE_USER_KIND,
    USER_KIND_TAGS,
    AccessTokenEntity,
    AdministratorEntity,
    DirectorEntity,
    GuardianEntity,
    RoleEntity,
    TeacherEntity,
    UserEntity,
)

__all__ = [
    "BASE_USER_KIND",
    "USER_KIND_TAGS",
    "AccessTokenEntity",
    "AdministratorEntity",
    "Base",
    "DirectorEntity",
    "GroupEntity",
    "GuardianEntity",
    "RoleEntity",
    "StudentEntity",
    "TeacherEntity",
    "TimestampMixin",
    "UserEntity",
]
