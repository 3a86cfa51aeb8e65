from __future__ import annotations

"""
Data Models Package.

Re-exports all Pydantic models for short imports:
    from securyflex.models import AuthResult, UserIdentity, UserType
"""

from securyflex.models.auth_models import (
    AttemptRecord,
    AuthErrorCode,
    AuthResult,
    DemoAccount,
    LockoutState,
    PasswordValidationResult,
    ProviderUser,
    SessionRecord,
    ValidationResult,
    provider_error_message,
)
from securyflex.models.enums import AttemptKind, Environment, UserType
from securyflex.models.user import UserIdentity

__all__ = [
    "AttemptKind",
    "AttemptRecord",
    "AuthErrorCode",
    "AuthResult",
    "DemoAccount",
    "Environment",
    "LockoutState",
    "PasswordValidationResult",
    "ProviderUser",
    "SessionRecord",
    "UserIdentity",
    "UserType",
    "ValidationResult",
    "provider_error_message",
]
