"""Shared utility functions for the SecuryFlex authentication core.

This package provides convenience re-exports so that consumers can import
directly from ``securyflex.utils`` (e.g. ``from securyflex.utils import
utc_now``) while full absolute imports (e.g. ``from
securyflex.utils.general import utc_now``) remain supported.
"""

from securyflex.utils.audit import AuditEvent, log_audit_event
from securyflex.utils.general import Clock, mask_email, utc_now, whole_minutes

__all__ = [
    "AuditEvent",
    "Clock",
    "log_audit_event",
    "mask_email",
    "utc_now",
    "whole_minutes",
]
