# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Core package for the school administration backend.

This package contains shared, cross-domain building blocks:
- config: Application configuration and settings
"""
