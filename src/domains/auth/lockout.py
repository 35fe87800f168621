# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Consecutive failed login counter.

A single counter gates every login attempt made through the services that
share it. It is not per user: after ``max_attempts`` consecutive failures
across any usernames, login is disabled until a successful login resets it.
Since the counter can only reach the maximum through failures, and a
locked counter refuses every attempt, in practice it stays locked until the
process restarts.

The counter lives in memory and is guarded by a lock, so concurrent
requests served by different threads never lose an increment.
"""

import threading

DEFAULT_MAX_ATTEMPTS = 3


class LoginAttemptCounter:
    """Thread-safe failed login counter with a fixed maximum."""

    def __init__(self, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._max_attempts = max_attempts
        self._failed = 0
        self._lock = threading.Lock()

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def failed(self) -> int:
        with self._lock:
            return self._failed

    @property
    def remaining(self) -> int:
        with self._lock:
            return max(self._max_attempts - self._failed, 0)

    def is_locked(self) -> bool:
        """Check whether the maximum has been reached."""
        with self._lock:
            return self._failed >= self._max_attempts

    def record_failure(self) -> int:
        """Count one failed attempt and return the new total."""
        with self._lock:
            self._failed += 1
            return self._failed

    def reset(self) -> None:
        with self._lock:
            self._failed = 0

    def __repr__(self) -> str:
        return f"<LoginAttemptCounter failed={self.failed} max={self._max_attempts}>"
