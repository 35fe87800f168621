# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer.

This package contains domain services that encapsulate business logic.

Domains:
    auth: Credential verification with the failed login lockout.
    user: User provisioning, lookups and record to domain mapping.
"""
