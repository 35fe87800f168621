# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Generic repository over an async SQLAlchemy session.

The repository is a thin storage gateway: it issues queries and stages
changes on the session it was given. It never commits on its own.
Transaction control stays with the caller, which may use the ``begin``,
``commit`` and ``rollback`` shortcuts or the session directly.

Storage errors (``SQLAlchemyError``) propagate unchanged so the calling
service can decide how to surface them.
"""

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction

from src.infrastructure.database.models.base import Base

RecordT = TypeVar("RecordT", bound=Base)


class GenericRepository(Generic[RecordT]):
    """CRUD operations for one ORM model.

    Subclasses set ``model``. It can also be passed explicitly::

        roles = GenericRepository(db, RoleEntity)
        role = await roles.find_by_id(1)
    """

    model: type[RecordT]

    def __init__(self, db: AsyncSession, model: type[RecordT] | None = None) -> None:
        """Initialize the repository.

        Args:
            db: Async database session.
            model: ORM model class, when the subclass does not set one.
        """
        self._db = db
        if model is not None:
            self.model = model
        if getattr(self, "model", None) is None:
            raise TypeError(f"{type(self).__name__} requires a model class")

    # =========================================================================
    # Reads
    # =========================================================================

    async def find_by_id(self, record_id: Any) -> RecordT | None:
        """Fetch a record by primary key, or None if absent."""
        stmt = select(self.model).where(self.model.id == record_id)
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self, offset: int = 0, limit: int | None = None) -> Sequence[RecordT]:
        """List records ordered by primary key."""
        stmt = select(self.model).order_by(self.model.id).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._db.execute(stmt)
        return result.scalars().all()

    async def count(self) -> int:
        """Count every record of the model."""
        stmt = select(func.count()).select_from(self.model)
        result = await self._db.execute(stmt)
        return result.scalar() or 0

    async def find_by(self, field: str, value: Any) -> Sequence[RecordT]:
        """List records whose ``field`` equals ``value``."""
        stmt = select(self.model).where(self._column(field) == value)
        result = await self._db.execute(stmt)
        return result.scalars().all()

    async def find_one_by(self, field: str, value: Any) -> RecordT | None:
        """Fetch the single record whose ``field`` equals ``value``."""
        stmt = select(self.model).where(self._column(field) == value)
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none()

    async def exists(self, record_id: Any) -> bool:
        """Check whether a record with this primary key exists."""
        return await self.exists_by("id", record_id)

    async def exists_by(self, field: str, value: Any) -> bool:
        """Check whether any record has ``field`` equal to ``value``."""
        stmt = select(self.model.id).where(self._column(field) == value).limit(1)
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none() is not None

    # =========================================================================
    # Writes
    # =========================================================================

    async def persist(self, record: RecordT) -> RecordT:
        """Stage a new record and flush it so its id is assigned."""
        self._db.add(record)
        await self._db.flush()
        return record

    async def merge(self, record: RecordT) -> RecordT:
        """Merge a detached record into the session."""
        merged = await self._db.merge(record)
        await self._db.flush()
        return merged

    async def remove(self, record: RecordT) -> None:
        """Delete a record."""
        await self._db.delete(record)
        await self._db.flush()

    # =========================================================================
    # Transaction control
    # =========================================================================

    def begin(self) -> AsyncSessionTransaction:
        """Begin a transaction on the underlying session."""
        return self._db.begin()

    async def commit(self) -> None:
        await self._db.commit()

    async def rollback(self) -> None:
        await self._db.rollback()

    def _column(self, field: str) -> Any:
        if field not in self.model.__mapper__.all_orm_descriptors:
            raise AttributeError(f"{self.model.__name__} has no attribute '{field}'")
        return getattr(self.model, field)
