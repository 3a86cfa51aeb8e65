"""
Authentication & Session State.

Provides an injectable ``SessionManager`` that holds the authenticated
user (``UserIdentity``) and enforces how long a session stays valid
without re-authentication.

Two independent clocks are checked on every validity query:

- **idle timeout** (default 30 min) since the last recorded activity,
- **absolute timeout** (default 8 h) since the session started.

Both are evaluated lazily (pull-based TTL); no background timer exists.

Usage::

    from securyflex.auth import SessionManager

    sessions = SessionManager()
    sessions.initialize_session("uid-123")
    if sessions.is_session_valid("uid-123"):
        sessions.update_last_activity("uid-123")
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta
from typing import Optional

from securyflex.models.auth_models import SessionRecord
from securyflex.models.user import UserIdentity
from securyflex.utils.general import Clock, utc_now


class SessionManager:
    """Injectable holder for session records and the current user.

    Each instance maintains its own state, eliminating the need for
    module-level globals.  Pass a single ``SessionManager`` through the
    composition root so every component shares the same session.

    Parameters
    ----------
    idle_timeout:
        Inactivity span after which a session is invalid.
    absolute_timeout:
        Span from session start after which a session is invalid.
    clock:
        Source of the current instant.
    """

    def __init__(
        self,
        idle_timeout: timedelta = timedelta(minutes=30),
        absolute_timeout: timedelta = timedelta(hours=8),
        clock: Clock = utc_now,
    ) -> None:
        self._lock: threading.RLock = threading.RLock()
        self._idle_timeout: timedelta = idle_timeout
        self._absolute_timeout: timedelta = absolute_timeout
        self._clock: Clock = clock
        self._started_at: dict[str, datetime] = {}
        self._last_activity: dict[str, datetime] = {}
        self._current_user: Optional[UserIdentity] = None

    # ------------------------------------------------------------------
    # Session records
    # ------------------------------------------------------------------

    def initialize_session(self, user_id: str) -> SessionRecord:
        """Start (or restart) the session for *user_id* at the current instant."""
        with self._lock:
            now = self._clock()
            self._started_at[user_id] = now
            self._last_activity[user_id] = now
            return SessionRecord(user_id=user_id, started_at=now, last_activity_at=now)

    def update_last_activity(self, user_id: str) -> None:
        """Bump the idle clock; no-op when *user_id* has no session."""
        with self._lock:
            if user_id in self._started_at:
                self._last_activity[user_id] = self._clock()

    def is_session_valid(self, user_id: str) -> bool:
        """``False`` for unknown sessions and for sessions past either
        timeout.  Expired sessions are removed as a side effect."""
        with self._lock:
            started_at = self._started_at.get(user_id)
            last_activity = self._last_activity.get(user_id)
            if started_at is None or last_activity is None:
                return False

            now = self._clock()
            if now - started_at >= self._absolute_timeout:
                self.invalidate_session(user_id)
                return False
            if now - last_activity >= self._idle_timeout:
                self.invalidate_session(user_id)
                return False
            return True

    def invalidate_session(self, user_id: str) -> None:
        with self._lock:
            self._started_at.pop(user_id, None)
            self._last_activity.pop(user_id, None)

    def get_session(self, user_id: str) -> Optional[SessionRecord]:
        """Return the stored record without applying timeouts."""
        with self._lock:
            started_at = self._started_at.get(user_id)
            if started_at is None:
                return None
            return SessionRecord(
                user_id=user_id,
                started_at=started_at,
                last_activity_at=self._last_activity[user_id],
            )

    # ------------------------------------------------------------------
    # Current user
    # ------------------------------------------------------------------

    def set_current_user(self, user: UserIdentity) -> None:
        """Record *user* as the authenticated session user."""
        with self._lock:
            self._current_user = user

    def get_current_user(self) -> UserIdentity:
        """Return the authenticated user.

        Raises:
            RuntimeError: If no user is currently authenticated.
        """
        with self._lock:
            if self._current_user is None:
                raise RuntimeError(
                    "No user is currently authenticated. Login required."
                )
            return self._current_user

    @property
    def current_user(self) -> Optional[UserIdentity]:
        with self._lock:
            return self._current_user

    def clear(self) -> None:
        """Drop the current user and invalidate their session record."""
        with self._lock:
            if self._current_user is not None:
                self.invalidate_session(self._current_user.user_id)
            self._current_user = None

    @property
    def is_authenticated(self) -> bool:
        """``True`` when a user is currently logged in."""
        with self._lock:
            return self._current_user is not None
