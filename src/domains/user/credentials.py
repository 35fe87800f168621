# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Username derivation and temporary secret generation.

These helpers are pure apart from the randomness of ``generate_secret``.

Example:
    >>> generate_username("María José", "Pérez", second_surname="Gómez")
    'mperezg'
"""

import re
import secrets
import string

SECRET_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits + "!@#$"
DEFAULT_SECRET_LENGTH = 8

_DIACRITICS = str.maketrans(
    {
        "á": "a",
        "é": "e",
        "í": "i",
        "ó": "o",
        "ú": "u",
        "ü": "u",
        "ñ": "n",
    }
)
_NOT_ALLOWED = re.compile(r"[^a-z0-9]")


def normalize_username(raw: str) -> str:
    """Lowercase, strip Spanish diacritics and drop anything outside [a-z0-9]."""
    return _NOT_ALLOWED.sub("", raw.lower().translate(_DIACRITICS))


def _initial(value: str | None) -> str:
    value = (value or "").strip()
    return value[0] if value else ""


def generate_username(
    first_name: str | None,
    first_surname: str | None,
    second_name: str | None = None,
    second_surname: str | None = None,
) -> str:
    """Derive a username from the name fields.

    The username is the initial of the first name, the initial of the second
    name if any, the full first surname and the initial of the second
    surname if any, normalized with ``normalize_username``.

    Args:
        first_name: First given name. Required.
        first_surname: First family name. Required.
        second_name: Second given name.
        second_surname: Second family name.

    Returns:
        The normalized username.

    Raises:
        ValueError: If a required name is missing or nothing usable remains
            after normalization.
    """
    if not first_name or not first_name.strip():
        raise ValueError("First name is required to generate a username")
    if not first_surname or not first_surname.strip():
        raise ValueError("First surname is required to generate a username")

    raw = (
        _initial(first_name)
        + _initial(second_name)
        + first_surname.strip()
        + _initial(second_surname)
    )
    username = normalize_username(raw)
    if not username:
        raise ValueError("Name fields produce an empty username")
    return username


def generate_secret(length: int = DEFAULT_SECRET_LENGTH) -> str:
    """Generate a random secret from ``SECRET_ALPHABET``.

    Raises:
        ValueError: If length is not positive.
    """
    if length < 1:
        raise ValueError("Secret length must be positive")
    return "".join(secrets.choice(SECRET_ALPHABET) for _ in range(length))
