# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic entities related to users: students and groups."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class EnrollmentState(str, Enum):
    """Enrollment state of a student registered by a guardian."""

    PENDING = "pendiente"
    APPROVED = "aprobada"
    REJECTED = "rechazada"


class Student(BaseModel):
    """Student related to a guardian."""

    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    nuip: str
    first_name: str
    second_name: str | None = None
    first_surname: str
    second_surname: str | None = None
    age: int | None = None
    state: EnrollmentState = EnrollmentState.PENDING


class Group(BaseModel):
    """Class group directed by a teacher."""

    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    name: str
    grade_name: str | None = None
