# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get database sessions
- Get the application-wide login attempt counter
- Get service instances

Example:
    @router.get("/users/{user_id}")
    async def get_user(
        user_id: int,
        service: UserManagementService = Depends(get_user_management_service),
    ):
        ...
"""

import logging
from typing import Annotated, AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import get_settings
from src.domains.auth import AuthenticationService, LoginAttemptCounter
from src.domains.user import UserManagementService
from src.infrastructure.database.connection import (
    DatabaseError,
    close_database,
    get_session,
    init_database,
)
from src.infrastructure.notifications import CredentialNotifier

logger = logging.getLogger(__name__)


async def init_db() -> None:
    """Initialize the database connection pool."""
    await init_database(get_settings())


async def close_db() -> None:
    """Close the database connection pool."""
    await close_database()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for the request.

    Yields:
        AsyncSession, committed or rolled back when the request ends.

    Raises:
        HTTPException: If the database is not available.
    """
    try:
        async with get_session() as session:
            yield session
    except DatabaseError as e:
        logger.error("Database session failed: %s", str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        ) from e


def get_login_counter(request: Request) -> LoginAttemptCounter:
    """Get the application-wide failed login counter."""
    return request.app.state.login_attempts


def get_credential_notifier(request: Request) -> CredentialNotifier | None:
    """Get the credential notifier, None when notifications are disabled."""
    return getattr(request.app.state, "credential_notifier", None)


# =========================================================================
# Service Dependencies
# =========================================================================


def get_authentication_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    counter: Annotated[LoginAttemptCounter, Depends(get_login_counter)],
) -> AuthenticationService:
    """Get an authentication service bound to the shared counter."""
    return AuthenticationService(db, counter=counter)


def get_user_management_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    notifier: Annotated[CredentialNotifier | None, Depends(get_credential_notifier)],
) -> UserManagementService:
    """Get a user management service for the request."""
    return UserManagementService(
        db,
        notifier=notifier,
        secret_length=get_settings().auth.secret_length,
    )


AuthServiceDep = Annotated[AuthenticationService, Depends(get_authentication_service)]
UserServiceDep = Annotated[UserManagementService, Depends(get_user_management_service)]
