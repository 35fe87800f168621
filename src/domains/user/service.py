# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User management service: provisioning and lookups.

This module provides the UserManagementService that handles:
- Atomic creation of a user with its access token and role binding
- Credential notification after a successful creation
- Lookup of a user by id, mapped to its concrete type

Provisioning runs as one transaction. Duplicate checks on email, phone and
username reject early with a readable reason; the unique constraints of the
database remain the actual guarantee, and a constraint violation at flush
or commit time is reported as the same validation failure.

Example:
    >>> service = UserManagementService(db_session, notifier=CredentialNotifier())
    >>> result = await service.create_user(Guardian(first_name="Ana", first_surname="Ruiz"), "acudiente")
    >>> result.username
    'aruiz'
"""

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.user.credentials import DEFAULT_SECRET_LENGTH, generate_secret, generate_username
from src.domains.user.mapper import UserMapper, UserMappingError
from src.infrastructure.database.models import AccessTokenEntity
from src.infrastructure.database.repositories import (
    AccessTokenRepository,
    RoleRepository,
    UnknownUserKindError,
    UserRepository,
)
from src.infrastructure.notifications.channels.base import DeliveryStatus
from src.infrastructure.notifications.credentials import CredentialNotifier
from src.models.common import ErrorCode, OperationResult
from src.models.user import User

logger = logging.getLogger(__name__)

USER_CREATED_MESSAGE = "User created successfully"
USER_FOUND_MESSAGE = "User found"
USER_NOT_FOUND_MESSAGE = "User not found"
MAPPING_FAILED_MESSAGE = "Could not map the stored user to a known user type"
DUPLICATE_MESSAGE = "A user with the same username, email or phone already exists"


class UserServiceError(Exception):
    """Base exception for user service errors."""

    pass


class UnauthenticatedCallerError(UserServiceError):
    """Raised when an operation requires an identified caller."""

    pass


class ProvisioningValidationError(UserServiceError):
    """Raised when a candidate user cannot be provisioned.

    Attributes:
        field: Offending candidate field, if any.
        conflict: Whether the value clashes with an existing user.
    """

    def __init__(self, message: str, field: str | None = None, conflict: bool = False) -> None:
        super().__init__(message)
        self.field = field
        self.conflict = conflict


class RoleNotFoundError(UserServiceError):
    """Raised when the requested role does not exist."""

    pass


class UserManagementService:
    """Service for provisioning and looking up users.

    Attributes:
        _db: Async database session.
        _mapper: Stored user to domain user mapper.
        _notifier: Credential notifier, None to disable notifications.
        _secret_length: Length of generated temporary secrets.
    """

    def __init__(
        self,
        db: AsyncSession,
        notifier: CredentialNotifier | None = None,
        secret_length: int = DEFAULT_SECRET_LENGTH,
    ) -> None:
        """Initialize the user management service.

        Args:
            db: Async database session.
            notifier: Sends credentials to new users after commit.
            secret_length: Length of generated temporary secrets.
        """
        self._db = db
        self._notifier = notifier
        self._secret_length = secret_length
        self._mapper = UserMapper(db)
        self._roles = RoleRepository(db)
        self._users = UserRepository(db)
        self._tokens = AccessTokenRepository(db)

    @property
    def mapper(self) -> UserMapper:
        return self._mapper

    # =========================================================================
    # Provisioning
    # =========================================================================

    async def create_user(self, candidate: User, role_name: str) -> OperationResult:
        """Create a user together with its access token.

        The role lookup, duplicate checks, token insert and user insert run
        in one transaction. Any failure rolls the transaction back, so no
        token without user (or user without token) is ever committed.

        Args:
            candidate: Domain user of a concrete variant, without id.
            role_name: Name of an existing role, matched case-insensitively.

        Returns:
            OperationResult carrying the provisioned user and its username,
            or the failure reason.
        """
        if candidate is None:
            return OperationResult.fail(ErrorCode.VALIDATION, "A candidate user is required")

        try:
            user, username, secret = await self._provision(candidate, role_name)
            await self._db.commit()

        except RoleNotFoundError as e:
            await self._db.rollback()
            logger.info("Provisioning rejected: %s", str(e))
            return OperationResult.fail(ErrorCode.NOT_FOUND, str(e), role_name=role_name)

        except ProvisioningValidationError as e:
            await self._db.rollback()
            logger.info("Provisioning rejected: %s", str(e))
            return OperationResult.fail(
                ErrorCode.VALIDATION,
                str(e),
                field=e.field,
                conflict=e.conflict,
            )

        except UserMappingError as e:
            await self._db.rollback()
            logger.warning("Provisioning rejected: %s", str(e))
            return OperationResult.fail(ErrorCode.MAPPING, str(e))

        except IntegrityError as e:
            await self._db.rollback()
            logger.warning("Provisioning hit a unique constraint: %s", str(e.orig))
            return OperationResult.fail(ErrorCode.VALIDATION, DUPLICATE_MESSAGE, conflict=True)

        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error("Provisioning failed at the storage level: %s", str(e), exc_info=True)
            return OperationResult.fail(ErrorCode.STORAGE, "The user could not be created")

        except Exception:
            await self._db.rollback()
            raise

        logger.info(
            "User provisioned: id=%s, kind=%s, username=%s",
            user.id,
            candidate.kind.value,
            username,
        )

        await self._notify(candidate, username, secret)

        return OperationResult.ok(USER_CREATED_MESSAGE, user=user, username=username)

    async def _provision(self, candidate: User, role_name: str) -> tuple[User, str, str]:
        """Run the transactional steps of provisioning without committing."""
        # 1. Role
        role = await self._roles.find_by_name(role_name)
        if role is None:
            raise RoleNotFoundError(f"Role '{role_name}' does not exist")

        # 2-3. Email and phone
        if await self._users.exists_by_email(candidate.email):
            raise ProvisioningValidationError(
                f"A user with email '{candidate.email}' already exists",
                field="email",
                conflict=True,
            )
        if await self._users.exists_by_phone(candidate.phone):
            raise ProvisioningValidationError(
                f"A user with phone '{candidate.phone}' already exists",
                field="phone",
                conflict=True,
            )

        # 4. Username
        try:
            username = generate_username(
                candidate.first_name,
                candidate.first_surname,
                second_name=candidate.second_name,
                second_surname=candidate.second_surname,
            )
        except ValueError as e:
            raise ProvisioningValidationError(str(e)) from e

        if await self._tokens.exists_username(username):
            raise ProvisioningValidationError(
                f"Username '{username}' is already taken",
                field="username",
                conflict=True,
            )

        # 5-6. Token
        secret = generate_secret(self._secret_length)
        token_record = await self._tokens.persist(
            AccessTokenEntity(username=username, secret=secret, role=role)
        )

        # 7. User
        user_record = await self._users.persist(self._mapper.to_record(candidate, token_record))

        # Returned values are the stored, cleaned ones
        user = candidate.model_copy(update=self._mapper.shared_fields(user_record))
        return user, username, secret

    async def _notify(self, candidate: User, username: str, secret: str) -> None:
        """Send the credentials. Failures are logged and never propagated."""
        email = (candidate.email or "").strip()
        if not email or self._notifier is None:
            return

        try:
            result = await self._notifier.send_credentials(
                email,
                username,
                secret,
                candidate.full_name(),
            )
        except Exception as e:
            logger.error("Credential notification for %s raised: %s", username, str(e), exc_info=True)
            return

        if result.status != DeliveryStatus.SENT:
            logger.warning(
                "Credential notification for %s not sent: status=%s, reason=%s",
                username,
                result.status.value,
                result.error_message,
            )

    # =========================================================================
    # Lookups
    # =========================================================================

    async def get_user(self, user_id: Any) -> OperationResult:
        """Fetch a user by id and map it to its concrete type.

        Args:
            user_id: User primary key.

        Returns:
            OperationResult with the user, or a NOT_FOUND, MAPPING, STORAGE
            or VALIDATION failure.
        """
        if user_id is None:
            return OperationResult.fail(ErrorCode.VALIDATION, "A user id is required")

        try:
            record = await self._users.find_by_id(user_id)
            if record is None:
                return OperationResult.fail(ErrorCode.NOT_FOUND, USER_NOT_FOUND_MESSAGE)

            user = await self._mapper.to_domain(record)
        except UnknownUserKindError as e:
            logger.error("User %s cannot be loaded: %s", user_id, str(e))
            return OperationResult.fail(ErrorCode.MAPPING, MAPPING_FAILED_MESSAGE)
        except SQLAlchemyError as e:
            logger.error("User lookup failed for id=%s: %s", user_id, str(e), exc_info=True)
            return OperationResult.fail(ErrorCode.STORAGE, "The user could not be loaded")

        if user is None:
            logger.error("User %s has unknown kind %r", user_id, record.user_kind)
            return OperationResult.fail(ErrorCode.MAPPING, MAPPING_FAILED_MESSAGE)

        return OperationResult.ok(USER_FOUND_MESSAGE, user=user)

    async def get_my_information(self, caller: User | None) -> OperationResult:
        """Fetch the caller's own user.

        Raises:
            UnauthenticatedCallerError: If the caller is missing or has no id.
        """
        if caller is None or caller.id is None:
            raise UnauthenticatedCallerError("An authenticated caller is required")
        return await self.get_user(caller.id)
