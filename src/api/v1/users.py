# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User management API endpoints.

This module provides endpoints for user management:
- POST / - Provision a user with its access token
- GET /{user_id} - Get user details

Example:
    POST /api/v1/users
    {
        "user_kind": "acudiente",
        "role_name": "acudiente",
        "first_name": "María José",
        "first_surname": "Pérez",
        "second_surname": "Gómez",
        "email": "mjperez@example.com"
    }
"""

import logging

from fastapi import APIRouter, HTTPException, status

from src.api.dependencies import UserServiceDep
from src.models.common import ErrorCode, OperationResult
from src.models.user import UserCreatedResponse, UserCreateRequest, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _raise_for_failure(result: OperationResult) -> None:
    """Translate a failed result into an HTTP error."""
    if result.error_code == ErrorCode.NOT_FOUND:
        code = status.HTTP_404_NOT_FOUND
    elif result.error_code == ErrorCode.VALIDATION:
        if result.details.get("conflict"):
            code = status.HTTP_409_CONFLICT
        else:
            code = status.HTTP_422_UNPROCESSABLE_ENTITY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR

    raise HTTPException(
        status_code=code,
        detail={"message": result.message, "error_code": result.error_code.value},
    )


@router.post(
    "",
    response_model=UserCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
    description="Create a user, its access token and its role binding in one transaction.",
)
async def create_user(
    data: UserCreateRequest,
    service: UserServiceDep,
) -> UserCreatedResponse:
    """Provision a new user.

    Args:
        data: User creation request.
        service: User management service.

    Returns:
        The created user and its username.

    Raises:
        HTTPException: 404 if the role does not exist, 409 on a duplicate,
            422 on invalid data, 500 on storage or mapping errors.
    """
    result = await service.create_user(data.to_domain(), data.role_name)
    if not result.success:
        _raise_for_failure(result)

    user = result.user
    temporary_secret = None
    if not (user.email or "").strip() and user.access_token is not None:
        temporary_secret = user.access_token.secret

    return UserCreatedResponse(
        message=result.message,
        username=result.username,
        user=UserResponse.from_domain(user),
        temporary_secret=temporary_secret,
    )


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get user",
)
async def get_user(
    user_id: int,
    service: UserServiceDep,
) -> UserResponse:
    """Get a user mapped to its concrete type.

    Raises:
        HTTPException: 404 if not found, 500 if the stored user has an
            unknown type or storage fails.
    """
    result = await service.get_user(user_id)
    if not result.success:
        _raise_for_failure(result)

    return UserResponse.from_domain(result.user)
