"""
Attempt Tracker.

Rolling-window rate limiting per identifier (lowercased e-mail) for
login and registration attempts, with progressive backoff for the
"try again in N minutes" hint.

Expiry is pull-based: entries older than the policy window are pruned
whenever an identifier is read.  There is no background sweeper, so a
stale record only disappears the next time its identifier is queried.
State lives for the process lifetime only.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from securyflex.config import AppConfig
from securyflex.models.auth_models import AttemptRecord
from securyflex.models.enums import AttemptKind
from securyflex.utils.general import Clock, utc_now, whole_minutes


@dataclass(frozen=True)
class AttemptPolicy:
    """Window, threshold and backoff bases for one ``AttemptKind``.

    ``backoff_minutes`` holds the base lock duration for fewer than 3,
    at least 3, and at least 5 recorded attempts.
    """

    window: timedelta
    max_attempts: int
    backoff_minutes: tuple[int, int, int]

    def base_minutes(self, attempt_count: int) -> int:
        if attempt_count >= 5:
            return self.backoff_minutes[2]
        if attempt_count >= 3:
            return self.backoff_minutes[1]
        return self.backoff_minutes[0]


DEFAULT_POLICIES: dict[AttemptKind, AttemptPolicy] = {
    AttemptKind.LOGIN: AttemptPolicy(
        window=timedelta(minutes=15),
        max_attempts=3,
        backoff_minutes=(15, 60, 120),
    ),
    AttemptKind.REGISTRATION: AttemptPolicy(
        window=timedelta(hours=1),
        max_attempts=3,
        backoff_minutes=(60, 120, 240),
    ),
}


def policies_from_config(config: AppConfig) -> dict[AttemptKind, AttemptPolicy]:
    """Build the policy table from configured windows and thresholds."""
    return {
        AttemptKind.LOGIN: AttemptPolicy(
            window=timedelta(minutes=config.LOGIN_WINDOW_MINUTES),
            max_attempts=config.LOGIN_MAX_ATTEMPTS,
            backoff_minutes=DEFAULT_POLICIES[AttemptKind.LOGIN].backoff_minutes,
        ),
        AttemptKind.REGISTRATION: AttemptPolicy(
            window=timedelta(minutes=config.REGISTRATION_WINDOW_MINUTES),
            max_attempts=config.REGISTRATION_MAX_ATTEMPTS,
            backoff_minutes=DEFAULT_POLICIES[AttemptKind.REGISTRATION].backoff_minutes,
        ),
    }


class AttemptTracker:
    """In-memory attempt counters keyed by ``(kind, identifier)``.

    Parameters
    ----------
    policies:
        Policy per attempt kind; defaults to 15 min / 3 attempts for
        login and 1 h / 3 attempts for registration.
    clock:
        Source of the current instant.
    """

    def __init__(
        self,
        policies: Optional[dict[AttemptKind, AttemptPolicy]] = None,
        clock: Clock = utc_now,
    ) -> None:
        self._policies: dict[AttemptKind, AttemptPolicy] = dict(policies or DEFAULT_POLICIES)
        self._clock: Clock = clock
        self._attempts: dict[tuple[AttemptKind, str], list[datetime]] = {}
        self._lock: threading.Lock = threading.Lock()

    @staticmethod
    def _key(identifier: str, kind: AttemptKind) -> tuple[AttemptKind, str]:
        return (kind, identifier.strip().lower())

    def policy(self, kind: AttemptKind) -> AttemptPolicy:
        return self._policies[kind]

    def _prune(self, key: tuple[AttemptKind, str]) -> list[datetime]:
        """Drop entries older than the window.  Caller holds ``self._lock``."""
        kind = key[0]
        attempts = self._attempts.get(key)
        if not attempts:
            return []
        cutoff = self._clock() - self._policies[kind].window
        kept = [ts for ts in attempts if ts >= cutoff]
        if kept:
            self._attempts[key] = kept
        else:
            self._attempts.pop(key, None)
        return kept

    def record_attempt(self, identifier: str, kind: AttemptKind = AttemptKind.LOGIN) -> None:
        key = self._key(identifier, kind)
        with self._lock:
            self._attempts.setdefault(key, []).append(self._clock())

    def attempt_count(self, identifier: str, kind: AttemptKind = AttemptKind.LOGIN) -> int:
        with self._lock:
            return len(self._prune(self._key(identifier, kind)))

    def is_rate_limited(self, identifier: str, kind: AttemptKind = AttemptKind.LOGIN) -> bool:
        """``True`` when the windowed count has reached the threshold."""
        key = self._key(identifier, kind)
        with self._lock:
            return len(self._prune(key)) >= self._policies[kind].max_attempts

    def remaining_lock_minutes(
        self,
        identifier: str,
        kind: AttemptKind = AttemptKind.LOGIN,
    ) -> int:
        """Progressive backoff: ``max(0, base - minutes since oldest attempt)``.

        Returns ``0`` when no attempts remain inside the window.
        """
        key = self._key(identifier, kind)
        with self._lock:
            attempts = self._prune(key)
            if not attempts:
                return 0
            base = self._policies[kind].base_minutes(len(attempts))
            elapsed = whole_minutes(attempts[0], self._clock())
            return max(0, base - elapsed)

    def reset(self, identifier: str, kind: Optional[AttemptKind] = None) -> None:
        """Forget attempts for *identifier* (one kind, or all kinds)."""
        kinds = [kind] if kind is not None else list(self._policies)
        with self._lock:
            for each in kinds:
                self._attempts.pop(self._key(identifier, each), None)

    def snapshot(self, identifier: str, kind: AttemptKind = AttemptKind.LOGIN) -> AttemptRecord:
        key = self._key(identifier, kind)
        with self._lock:
            return AttemptRecord(identifier=key[1], timestamps=list(self._prune(key)))
