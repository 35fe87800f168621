# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication API schemas."""

from pydantic import BaseModel, Field

from src.models.user import UserResponse


class LoginRequest(BaseModel):
    """Username and secret login."""

    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=255)


class LoginResponse(BaseModel):
    """Successful login."""

    message: str = "Login successful"
    user: UserResponse


class LoginAttemptsResponse(BaseModel):
    """State of the failed login counter."""

    failed_attempts: int
    remaining_attempts: int
    max_attempts: int
    locked: bool
