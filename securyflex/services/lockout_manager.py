"""
Lockout Manager.

Escalates sustained login failures into a hard, long-duration account
lock that is independent of the rolling rate limiter::

    Clean --(5 failures)--> Locked --(24 h elapsed | successful login)--> Clean

Expiry is pull-based: ``is_locked_out`` clears an expired lock as a side
effect of the check.  No background sweep exists.
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta
from typing import Optional

from securyflex.models.auth_models import LockoutState
from securyflex.utils.general import Clock, utc_now


class LockoutManager:
    """Per-identifier failure counters and lock stamps.

    Parameters
    ----------
    max_failed_logins:
        Failures that trigger a lock (default 5).
    lockout_duration:
        How long a lock holds before lazy expiry (default 24 h).
    clock:
        Source of the current instant.
    """

    def __init__(
        self,
        max_failed_logins: int = 5,
        lockout_duration: timedelta = timedelta(hours=24),
        clock: Clock = utc_now,
    ) -> None:
        self._max_failed_logins: int = max_failed_logins
        self._lockout_duration: timedelta = lockout_duration
        self._clock: Clock = clock
        self._failed_counts: dict[str, int] = {}
        self._locked_at: dict[str, datetime] = {}
        self._lock: threading.Lock = threading.Lock()

    @property
    def max_failed_logins(self) -> int:
        return self._max_failed_logins

    @staticmethod
    def _key(identifier: str) -> str:
        return identifier.strip().lower()

    def record_failed_login(self, identifier: str) -> bool:
        """Count a failure; returns ``True`` if this call engaged the lock."""
        key = self._key(identifier)
        with self._lock:
            count = self._failed_counts.get(key, 0) + 1
            self._failed_counts[key] = count
            if count >= self._max_failed_logins and key not in self._locked_at:
                self._locked_at[key] = self._clock()
                return True
            return False

    def is_locked_out(self, identifier: str) -> bool:
        key = self._key(identifier)
        with self._lock:
            locked_at: Optional[datetime] = self._locked_at.get(key)
            if locked_at is None:
                return False
            if self._clock() - locked_at >= self._lockout_duration:
                self._locked_at.pop(key, None)
                self._failed_counts.pop(key, None)
                return False
            return True

    def reset_on_success(self, identifier: str) -> None:
        key = self._key(identifier)
        with self._lock:
            self._failed_counts.pop(key, None)
            self._locked_at.pop(key, None)

    def failed_count(self, identifier: str) -> int:
        with self._lock:
            return self._failed_counts.get(self._key(identifier), 0)

    def state(self, identifier: str) -> LockoutState:
        """Snapshot of the stored state (does not apply lazy expiry)."""
        key = self._key(identifier)
        with self._lock:
            return LockoutState(
                identifier=key,
                failed_count=self._failed_counts.get(key, 0),
                locked_at=self._locked_at.get(key),
            )
