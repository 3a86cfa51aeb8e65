"""
Structured Security Audit Logging.

Every security-relevant state change in the auth core (login, failed
login, lockout, logout, session expiry, registration) is emitted as a
structured JSON object through the injected ``StructuredLogger``.

Events are validated by ``AuditEvent`` before they are serialised, so
a malformed payload fails at the point of origin.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field

from securyflex.logger import StructuredLogger
from securyflex.utils.general import utc_now

__all__ = ["AuditEvent", "log_audit_event"]

# Flat scalar values only; nested structures belong in a dedicated model.
DetailValue = Union[str, int, float, bool, None]


class AuditEvent(BaseModel):
    """Schema-validated representation of a single security audit entry."""

    timestamp: str
    action: str
    subject: str
    user_id: Optional[str] = None
    details: dict[str, DetailValue] = Field(default_factory=dict)


def log_audit_event(
    logger: StructuredLogger,
    action: str,
    subject: str,
    user_id: Optional[str] = None,
    details: Optional[dict[str, DetailValue]] = None,
    timestamp: Optional[datetime] = None,
) -> AuditEvent:
    """Log a structured JSON audit event and return the validated model.

    Args:
        logger: The logger instance to write to.
        action: What happened (e.g. ``"LOGIN"``, ``"ACCOUNT_LOCKED"``).
        subject: The (masked) account identifier the event concerns.
        user_id: Provider user id when known.
        details: Optional additional context (counts, remaining minutes).
        timestamp: Event time; defaults to the current UTC instant.
    """
    event = AuditEvent(
        timestamp=(timestamp or utc_now()).isoformat(),
        action=action,
        subject=subject,
        user_id=user_id,
        details=details or {},
    )
    logger.info(
        "AUDIT: %s",
        json.dumps(event.model_dump(), default=str),
        extra={"event": action},
    )
    return event
