# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User domain models.

Domain users are plain pydantic models, independent of the ORM. Each
concrete variant carries its ``UserKind`` as a class variable, which is the
key used by the mapper to pick a mapping strategy. The base ``User`` class
has no kind and cannot be provisioned.
"""

import secrets
from enum import Enum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from src.models.academic import Group, Student


class UserKind(str, Enum):
    """Concrete user variants.

    Values are the discriminator tags stored in ``users.user_kind``.
    """

    TEACHER = "profesor"
    DIRECTOR = "directivo"
    ADMINISTRATOR = "administrador"
    GUARDIAN = "acudiente"


class Role(BaseModel):
    """Named permission class."""

    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    name: str


class AccessToken(BaseModel):
    """Credential-bearing record of a user."""

    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    username: str
    secret: str = Field(repr=False)
    role: Role | None = None

    def verify_credentials(self, credential: str) -> bool:
        """Compare a presented credential with the stored secret.

        Secrets are stored as plaintext, so this is an exact comparison.
        """
        if credential is None:
            return False
        return secrets.compare_digest(self.secret.encode("utf-8"), credential.encode("utf-8"))


class User(BaseModel):
    """Attributes shared by every user variant."""

    model_config = ConfigDict(from_attributes=True)

    kind: ClassVar[UserKind | None] = None

    id: int | None = None
    first_name: str | None = None
    second_name: str | None = None
    first_surname: str | None = None
    second_surname: str | None = None
    age: int | None = None
    email: str | None = None
    phone: str | None = None
    access_token: AccessToken | None = None

    def full_name(self) -> str:
        """Return the non-empty name parts joined by spaces."""
        parts = [self.first_name, self.second_name, self.first_surname, self.second_surname]
        return " ".join(p.strip() for p in parts if p and p.strip())


class Teacher(User):
    """Teacher and the groups they direct."""

    kind: ClassVar[UserKind | None] = UserKind.TEACHER

    groups: list[Group] = Field(default_factory=list)


class Director(User):
    """School director."""

    kind: ClassVar[UserKind | None] = UserKind.DIRECTOR


class Administrator(User):
    """System administrator."""

    kind: ClassVar[UserKind | None] = UserKind.ADMINISTRATOR


class Guardian(User):
    """Guardian and the students they registered."""

    kind: ClassVar[UserKind | None] = UserKind.GUARDIAN

    students: list[Student] = Field(default_factory=list)


USER_CLASSES: dict[UserKind, type[User]] = {
    UserKind.TEACHER: Teacher,
    UserKind.DIRECTOR: Director,
    UserKind.ADMINISTRATOR: Administrator,
    UserKind.GUARDIAN: Guardian,
}


# =============================================================================
# API schemas
# =============================================================================


class UserCreateRequest(BaseModel):
    """Request body for provisioning a user."""

    user_kind: UserKind = Field(description="Concrete user type")
    role_name: str = Field(min_length=1, max_length=50, description="Existing role name")
    first_name: str = Field(min_length=1, max_length=60)
    second_name: str | None = Field(None, max_length=60)
    first_surname: str = Field(min_length=1, max_length=60)
    second_surname: str | None = Field(None, max_length=60)
    age: int | None = Field(None, ge=0, le=130)
    email: str | None = Field(None, max_length=120)
    phone: str | None = Field(None, max_length=20)

    def to_domain(self) -> User:
        """Build the candidate domain user of the requested kind."""
        user_cls = USER_CLASSES[self.user_kind]
        return user_cls(**self.model_dump(exclude={"user_kind", "role_name"}))


class UserResponse(BaseModel):
    """User as returned by the API. Secrets are never included."""

    id: int | None
    user_kind: UserKind | None
    first_name: str | None
    second_name: str | None = None
    first_surname: str | None
    second_surname: str | None = None
    age: int | None = None
    email: str | None = None
    phone: str | None = None
    username: str | None = None
    role: str | None = None
    students: list[Student] | None = None
    groups: list[Group] | None = None

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        token = user.access_token
        return cls(
            id=user.id,
            user_kind=user.kind,
            first_name=user.first_name,
            second_name=user.second_name,
            first_surname=user.first_surname,
            second_surname=user.second_surname,
            age=user.age,
            email=user.email,
            phone=user.phone,
            username=token.username if token else None,
            role=token.role.name if token and token.role else None,
            students=getattr(user, "students", None),
            groups=getattr(user, "groups", None),
        )


class UserCreatedResponse(BaseModel):
    """Response of a successful provisioning.

    ``temporary_secret`` is only returned when the user has no email, since
    the credentials cannot be delivered any other way.
    """

    message: str
    username: str
    user: UserResponse
    temporary_secret: str | None = None
