# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Reference role seed data.

Roles are pre-existing reference data: the services only look them up by
name and never create them. This module inserts the roles expected by the
provisioning flow.
"""

import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models import RoleEntity
from src.models.user import UserKind
from src.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_ROLE_NAMES: tuple[str, ...] = tuple(kind.value for kind in UserKind)


async def seed_roles(
    session: AsyncSession,
    role_names: tuple[str, ...] = DEFAULT_ROLE_NAMES,
) -> list[RoleEntity]:
    """Insert the reference roles that are not present yet.

    The operation is idempotent: running it twice leaves one row per name.

    Args:
        session: Database session.
        role_names: Role names to ensure.

    Returns:
        List of newly created roles.
    """
    result = await session.execute(select(RoleEntity.name))
    existing = {name.lower() for name in result.scalars().all()}

    roles = [RoleEntity(name=name) for name in role_names if name.lower() not in existing]
    session.add_all(roles)
    await session.commit()

    logger.info("roles_seeded", created=len(roles), existing=len(existing))
    return roles


if __name__ == "__main__":
    from src.core.config import get_settings
    from src.infrastructure.database.connection import (
        close_database,
        create_schema,
        get_sessionmaker,
        init_database,
    )
    from src.utils.logging import setup_logging

    async def main():
        settings = get_settings()
        setup_logging(settings)
        await init_database(settings)
        try:
            await create_schema()
            async with get_sessionmaker()() as session:
                await seed_roles(session)
        finally:
            await close_database()

    asyncio.run(main())
