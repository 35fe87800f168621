"""Gestión Académica Backend.

School administration backend: user authentication with login lockout,
and atomic provisioning of users together with their access token and role.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
