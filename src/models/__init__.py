# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain models, independent of the persistence layer."""

from src.models.academic import EnrollmentState, Group, Student
from src.models.common import ErrorCode, OperationResult
from src.models.user import (
    USER_CLASSES,
    AccessToken,
    Administrator,
    Director,
    Guardian,
    Role,
    Teacher,
    User,
    UserKind,
)

__all__ = [
    "USER_CLASSES",
    "AccessToken",
    "Administrator",
    "Director",
    "EnrollmentState",
    "ErrorCode",
    "Group",
    "Guardian",
    "OperationResult",
    "Role",
    "Student",
    "Teacher",
    "User",
    "UserKind",
]
