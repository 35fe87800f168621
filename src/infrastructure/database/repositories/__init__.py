# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Repositories used by the domain services."""

from src.infrastructure.database.repositories.base import GenericRepository
from src.infrastructure.database.repositories.user import (
    AccessTokenRepository,
    GuardianRepository,
    RoleRepository,
    TeacherRepository,
    UnknownUserKindError,
    UserRepository,
)

__all__ = [
    "AccessTokenRepository",
    "GenericRepository",
    "GuardianRepository",
    "RoleRepository",
    "TeacherRepository",
    "UnknownUserKindError",
    "UserRepository",
]
