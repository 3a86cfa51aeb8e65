"""General Utility Functions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

__all__ = ["Clock", "utc_now", "whole_minutes", "mask_email"]


# ---------------------------------------------------------------------------
# Time helpers
# ---------------------------------------------------------------------------

Clock = Callable[[], datetime]
"""Zero-argument callable returning the current timezone-aware instant.

Every stateful component (attempt tracker, lockout manager, session
manager, cooldown maps) receives one via ``__init__`` so that tests can
substitute a controllable clock.
"""


def utc_now() -> datetime:
    """Return the current instant as a timezone-aware UTC ``datetime``."""
    return datetime.now(tz=timezone.utc)


def whole_minutes(start: datetime, end: datetime) -> int:
    """Return the number of *completed* minutes between *start* and *end*.

    Truncates toward zero, so 14 min 59 s yields ``14``.  Negative
    spans (clock skew) are reported as ``0``.
    """
    seconds = (end - start).total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // 60)


# ---------------------------------------------------------------------------
# Logging helpers
# ---------------------------------------------------------------------------


def mask_email(email: str) -> str:
    """Return *email* with the local part reduced to its first character.

    ``jan.jansen@securyflex.nl`` becomes ``j***@securyflex.nl``.  Used in
    log lines so that the audit trail identifies the account without
    spelling out the full address.
    """
    local, sep, domain = email.partition("@")
    if not sep:
        return "***"
    head = local[:1] or "*"
    return f"{head}***@{domain}"
