# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication API endpoints.

This module provides endpoints for username and secret logins:
- POST /login - Verify credentials and return the user
- GET /attempts - Failed login counter state

No session or token is issued: a successful login only returns the
authenticated user.

Example:
    POST /api/v1/auth/login
    {
        "username": "mperezg",
        "password": "Xy7!ab3Q"
    }
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.dependencies import AuthServiceDep, get_login_counter
from src.domains.auth import AuthenticationStorageError, LoginAttemptCounter, LoginLockedError
from src.models.auth import LoginAttemptsResponse, LoginRequest, LoginResponse
from src.models.user import UserResponse
from src.utils.logging import bind_context, clear_context

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Login",
    description="""
    Verify a username and password.

    Every failed attempt counts toward a lockout shared by all users of this
    application. Once the maximum is reached, login answers 423 until the
    service is restarted.
    """,
)
async def login(
    data: LoginRequest,
    service: AuthServiceDep,
) -> LoginResponse:
    """Authenticate a user.

    Args:
        data: Login request.
        service: Authentication service.

    Returns:
        LoginResponse with the authenticated user.

    Raises:
        HTTPException: 401 on invalid credentials, 423 when locked out,
            503 when storage is unavailable.
    """
    bind_context(username=data.username)
    try:
        user = await service.authenticate(data.username, data.password)
    except LoginLockedError as e:
        raise HTTPException(
            status_code=status.HTTP_423_LOCKED,
            detail=str(e),
        ) from e
    except AuthenticationStorageError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication temporarily unavailable",
        ) from e
    finally:
        clear_context()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "message": "Invalid credentials",
                "remaining_attempts": service.get_remaining_attempts(),
            },
        )

    return LoginResponse(user=UserResponse.from_domain(user))


@router.get(
    "/attempts",
    response_model=LoginAttemptsResponse,
    summary="Failed login attempts",
)
async def get_attempts(
    counter: Annotated[LoginAttemptCounter, Depends(get_login_counter)],
) -> LoginAttemptsResponse:
    """Return the failed login counter state."""
    return LoginAttemptsResponse(
        failed_attempts=counter.failed,
        remaining_attempts=counter.remaining,
        max_attempts=counter.max_attempts,
        locked=counter.is_locked(),
    )
