# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student and group tables.

These exist as related entities of guardians and teachers. Academic rules
(grading, enrollment workflow) live outside this backend.
"""

from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin
from src.models.academic import EnrollmentState

if TYPE_CHECKING:
    from src.infrastructure.database.models.user import GuardianEntity, TeacherEntity


class StudentEntity(TimestampMixin, Base):
    """Student registered by a guardian."""

    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nuip: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(60), nullable=False)
    second_name: Mapped[str | None] = mapped_column(String(60))
    first_surname: Mapped[str] = mapped_column(String(60), nullable=False)
    second_surname: Mapped[str | None] = mapped_column(String(60))
    age: Mapped[int | None] = mapped_column(Integer)
    state: Mapped[EnrollmentState] = mapped_column(
        Enum(EnrollmentState, name="enrollment_state", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=EnrollmentState.PENDING,
    )
    guardian_id: Mapped[int | None] = mapped_column(
        ForeignKey("guardians.id", ondelete="SET NULL"),
        index=True,
    )

    guardian: Mapped["GuardianEntity | None"] = relationship(back_populates="students")

    def __repr__(self) -> str:
        return f"<StudentEntity id={self.id} nuip={self.nuip!r} state={self.state}>"


class GroupEntity(TimestampMixin, Base):
    """Class group directed by a teacher."""

    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    grade_name: Mapped[str | None] = mapped_column(String(50))
    director_id: Mapped[int | None] = mapped_column(
        ForeignKey("teachers.id", ondelete="SET NULL"),
        index=True,
    )

    director: Mapped["TeacherEntity | None"] = relationship(back_populates="groups")

    def __repr__(self) -> str:
        return f"<GroupEntity id={self.id} name={self.name!r}>"
