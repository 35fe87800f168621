# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User domain package.

This package provides user management functionality:
- UserManagementService: Provisioning and lookups
- UserMapper: Stored record to domain user conversion
- Credential helpers: Username derivation and secret generation
- Exceptions: User-related error types

Example:
    >>> from src.domains.user import UserManagementService
    >>> service = UserManagementService(db)
    >>> result = await service.create_user(candidate, "profesor")
"""

from src.domains.user.credentials import (
    SECRET_ALPHABET,
    generate_secret,
    generate_username,
    normalize_username,
)
from src.domains.user.mapper import (
    GuardianStudentsResolver,
    MappingStrategy,
    RelatedDataResolver,
    TeacherGroupsResolver,
    UserMapper,
    UserMappingError,
)
from src.domains.user.service import (
    ProvisioningValidationError,
    RoleNotFoundError,
    UnauthenticatedCallerError,
    UserManagementService,
    UserServiceError,
)

__all__ = [
    "SECRET_ALPHABET",
    "generate_secret",
    "generate_username",
    "normalize_username",
    "GuardianStudentsResolver",
    "MappingStrategy",
    "RelatedDataResolver",
    "TeacherGroupsResolver",
    "UserMapper",
    "UserMappingError",
    "ProvisioningValidationError",
    "RoleNotFoundError",
    "UnauthenticatedCallerError",
    "UserManagementService",
    "UserServiceError",
]
