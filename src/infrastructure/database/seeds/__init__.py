# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database seed package.

Run ``python -m src.infrastructure.database.seeds.roles`` to create the
schema and insert the reference roles.
"""

from src.infrastructure.database.seeds.roles import DEFAULT_ROLE_NAMES, seed_roles

__all__ = ["DEFAULT_ROLE_NAMES", "seed_roles"]
