"""
Shared Enumerations for the SecuryFlex Auth Models.

All string enumerations for type-safe field constraints.
StrEnum values compare equal to their string equivalents,
so profile documents that store ``"guard"`` keep working.
"""

from __future__ import annotations
from enum import StrEnum


class UserType(StrEnum):
    """Account roles on the platform."""

    GUARD = "guard"
    COMPANY = "company"
    ADMIN = "admin"


class AttemptKind(StrEnum):
    """Operations that the attempt tracker rate-limits independently."""

    LOGIN = "login"
    REGISTRATION = "registration"


class Environment(StrEnum):
    """Deployment environment; demo mode is refused in ``PRODUCTION``."""

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"
