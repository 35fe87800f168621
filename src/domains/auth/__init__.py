# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication domain services.

Exports:
    AuthenticationService: Username and secret login with lockout.
    LoginAttemptCounter: Thread-safe consecutive failure counter.
    AuthenticationError: Base of the authentication exceptions.
    LoginLockedError: Raised while the lockout is active.
    AuthenticationStorageError: Raised when the credential lookup fails.
"""

from src.domains.auth.lockout import DEFAULT_MAX_ATTEMPTS, LoginAttemptCounter
from src.domains.auth.service import (
    AuthenticationError,
    AuthenticationService,
    AuthenticationStorageError,
    LoginLockedError,
)

__all__ = [
    "DEFAULT_MAX_ATTEMPTS",
    "AuthenticationError",
    "AuthenticationService",
    "AuthenticationStorageError",
    "LoginAttemptCounter",
    "LoginLockedError",
]
