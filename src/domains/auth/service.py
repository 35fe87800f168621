# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication service for username and secret logins.

This module provides the AuthenticationService that:
- Looks up the access token by username
- Compares the presented credential with the stored secret
- Resolves the token owner to its concrete user type
- Enforces the consecutive failure lockout

Authentication writes nothing to storage. The only state it changes is the
in-memory ``LoginAttemptCounter``.

Example:
    >>> service = AuthenticationService(db_session)
    >>> user = await service.authenticate("mperezg", "Xy7!ab3Q")
    >>> if user is None:
    ...     print(service.get_remaining_attempts())
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.auth.lockout import DEFAULT_MAX_ATTEMPTS, LoginAttemptCounter
from src.domains.user.mapper import UserMapper
from src.infrastructure.database.repositories import (
    AccessTokenRepository,
    UnknownUserKindError,
    UserRepository,
)
from src.models.user import User

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Base exception for authentication errors."""

    pass


class LoginLockedError(AuthenticationError):
    """Raised when the failed attempt maximum has been reached."""

    def __init__(self, max_attempts: int) -> None:
        super().__init__("Login temporarily disabled after too many failed attempts")
        self.max_attempts = max_attempts


class AuthenticationStorageError(AuthenticationError):
    """Raised when the credential lookup fails at the storage level."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.original_error = original_error


class AuthenticationService:
    """Verifies credentials and resolves the authenticated user.

    The failure counter belongs to the service unless one is passed in.
    Passing the same counter to several services (one per request, for
    example) makes them share a single lockout.

    Attributes:
        _db: Database session for queries.
        _counter: Failed attempt counter.
        _mapper: Stored user to domain user mapper.
    """

    def __init__(
        self,
        db: AsyncSession,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        counter: LoginAttemptCounter | None = None,
    ) -> None:
        """Initialize the authentication service.

        Args:
            db: Async database session.
            max_attempts: Failure maximum of a service-owned counter.
                Ignored when ``counter`` is given.
            counter: Shared counter to use instead of a new one.
        """
        self._db = db
        self._counter = counter if counter is not None else LoginAttemptCounter(max_attempts)
        self._tokens = AccessTokenRepository(db)
        self._users = UserRepository(db)
        self._mapper = UserMapper(db)

    @property
    def counter(self) -> LoginAttemptCounter:
        return self._counter

    async def authenticate(self, username: str, credential: str) -> User | None:
        """Authenticate a username and credential pair.

        Args:
            username: Login username.
            credential: Secret presented by the caller.

        Returns:
            The concrete domain user, or None when there is no match.

        Raises:
            LoginLockedError: If the failure maximum has been reached.
                Storage is not queried in that case.
            AuthenticationStorageError: If a storage query fails. This does
                not count as a failed attempt.
        """
        if self._counter.is_locked():
            logger.warning("Login attempt rejected: lockout active")
            raise LoginLockedError(self._counter.max_attempts)

        try:
            token = await self._tokens.find_by_username(username)
            if token is None:
                return self._fail(username, "unknown username")

            if not self._mapper.token_to_domain(token).verify_credentials(credential):
                return self._fail(username, "wrong credential")

            try:
                record = await self._users.find_by_token_id(token.id)
            except UnknownUserKindError as e:
                logger.error("User linked to token of %s cannot be loaded: %s", username, str(e))
                return self._fail(username, "unknown user kind")
            if record is None:
                return self._fail(username, "no user linked to token")

            user = await self._mapper.to_domain(record)
        except SQLAlchemyError as e:
            logger.error("Credential lookup failed for %s: %s", username, str(e))
            raise AuthenticationStorageError("Credential lookup failed", e) from e

        if user is None:
            logger.error(
                "User %s linked to token of %s has unknown kind %r",
                record.id,
                username,
                record.user_kind,
            )
            return self._fail(username, "unknown user kind")

        self._counter.reset()
        logger.info("User authenticated: username=%s, user_id=%s", username, user.id)
        return user

    def get_failed_attempts(self) -> int:
        """Return the current number of consecutive failures."""
        return self._counter.failed

    def get_remaining_attempts(self) -> int:
        """Return how many failures are left before the lockout."""
        return self._counter.remaining

    def _fail(self, username: str, reason: str) -> None:
        failed = self._counter.record_failure()
        logger.info(
            "Login failed for %s: %s (%d/%d)",
            username,
            reason,
            failed,
            self._counter.max_attempts,
        )
        return None
