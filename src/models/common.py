# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Common result types shared by the domain services."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorCode(str, Enum):
    """Failure categories surfaced by service operations."""

    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    MAPPING = "mapping"
    STORAGE = "storage"


class OperationResult(BaseModel):
    """Outcome of a service operation.

    A successful result carries the affected user and, for provisioning, the
    generated username. A failed result carries a human readable message and
    an error code. Internal storage errors are never part of the message.

    Attributes:
        success: Whether the operation completed.
        message: Human readable outcome.
        error_code: Failure category, None on success.
        user: Domain user affected by the operation.
        username: Username generated during provisioning.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool
    message: str
    error_code: ErrorCode | None = None
    user: Any | None = None
    username: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, user: Any | None = None, username: str | None = None) -> "OperationResult":
        """Build a successful result."""
        return cls(success=True, message=message, user=user, username=username)

    @classmethod
    def fail(cls, error_code: ErrorCode, message: str, **details: Any) -> "OperationResult":
        """Build a failed result."""
        return cls(success=False, message=message, error_code=error_code, details=details)
