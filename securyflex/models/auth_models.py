"""
Authentication Pipeline Models.

Pydantic models and enumerations for the auth request/response
contracts between ``AuthService`` and the UI layer.

Every auth operation returns a structured, inspectable ``AuthResult``
rather than raising, and every validator returns a result model that
lists each violated rule.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any, Optional

from pydantic import BaseModel, Field, SecretStr, model_validator

from securyflex.models.enums import UserType


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------

class AuthErrorCode(StrEnum):
    """Error codes produced locally by the auth core.

    Provider rejections are passed through as their own string codes
    (``user-not-found``, ``network-request-failed``, ...), so
    ``AuthResult.error_code`` is typed as ``str``.
    """

    ACCOUNT_LOCKED = "account-locked"
    RATE_LIMITED = "rate-limited"
    EMAIL_NOT_VERIFIED = "email-not-verified"
    AUTH_FAILED = "auth-failed"
    PROVIDER_NOT_CONFIGURED = "firebase-not-configured"
    WEAK_PASSWORD = "weak-password"
    WEAK_DEMO_PASSWORD = "weak-demo-password"
    INVALID_EMAIL = "invalid-email"
    REQUEST_IN_PROGRESS = "request-in-progress"
    NO_USER = "no-user"
    ALREADY_VERIFIED = "already-verified"
    INVALID_USER_TYPE = "invalid-user-type"
    UNKNOWN = "unknown"


# ---------------------------------------------------------------------------
# Provider error-code mapping (Dutch user-facing messages)
# ---------------------------------------------------------------------------

PROVIDER_ERROR_MESSAGES: dict[str, str] = {
    # Registration
    "email-already-in-use": (
        "Dit e-mailadres is al in gebruik. Probeer in te loggen of gebruik "
        "een ander e-mailadres."
    ),
    "weak-password": (
        "Wachtwoord is te zwak. Gebruik minimaal 12 tekens met hoofdletters, "
        "kleine letters, cijfers en speciale tekens."
    ),
    "invalid-email": "Ongeldig e-mailadres format. Controleer de invoer.",
    "operation-not-allowed": (
        "E-mail/wachtwoord registratie is niet ingeschakeld. Neem contact op "
        "met support."
    ),
    # Login
    "user-disabled": (
        "Uw account is uitgeschakeld. Neem contact op met support voor meer "
        "informatie."
    ),
    "user-not-found": (
        "Geen account gevonden met dit e-mailadres. Controleer uw invoer of "
        "registreer een nieuw account."
    ),
    "wrong-password": (
        'Onjuist wachtwoord. Probeer opnieuw of gebruik "Wachtwoord vergeten".'
    ),
    "invalid-credential": (
        "Ongeldige inloggegevens. Controleer uw e-mailadres en wachtwoord."
    ),
    # Rate limiting and security
    "too-many-requests": (
        "Te veel inlogpogingen. Wacht een paar minuten voordat u het opnieuw "
        "probeert."
    ),
    "account-exists-with-different-credential": (
        "Er bestaat al een account met dit e-mailadres maar met andere "
        "inlogmethode."
    ),
    # Network and technical
    "network-request-failed": (
        "Netwerkfout. Controleer uw internetverbinding en probeer opnieuw."
    ),
    "internal-error": "Interne serverfout. Probeer later opnieuw.",
    "timeout": "Verbinding verlopen. Controleer uw internetverbinding.",
    # Password reset
    "expired-action-code": (
        "De reset link is verlopen. Vraag een nieuwe wachtwoord reset aan."
    ),
    "invalid-action-code": (
        "Ongeldige of al gebruikte reset link. Vraag een nieuwe aan."
    ),
    "user-token-expired": "Uw sessie is verlopen. Log opnieuw in.",
    # Email verification
    "email-not-verified": (
        "E-mail niet geverifieerd. Controleer uw inbox en klik op de "
        "verificatielink."
    ),
    "requires-recent-login": (
        "Voor uw veiligheid moet u opnieuw inloggen om deze actie uit te "
        "voeren."
    ),
    # Local codes
    "firebase-not-configured": (
        "Authenticatieprovider is niet correct geconfigureerd. Neem contact "
        "op met support."
    ),
    "rate-limited": (
        "Te veel verzoeken. Wacht even voordat u het opnieuw probeert."
    ),
    "auth-failed": (
        "Inloggen mislukt. Controleer uw e-mailadres en wachtwoord."
    ),
}

DEFAULT_PROVIDER_ERROR_MESSAGE: str = (
    "Er is een onbekende fout opgetreden. Probeer opnieuw of neem contact op "
    "met support."
)


def provider_error_message(code: str) -> str:
    """Return the Dutch message for *code*, or the catch-all default."""
    return PROVIDER_ERROR_MESSAGES.get(str(code), DEFAULT_PROVIDER_ERROR_MESSAGE)


# ---------------------------------------------------------------------------
# Validation results
# ---------------------------------------------------------------------------

class PasswordValidationResult(BaseModel):
    """Outcome of the detailed password policy check.

    Attributes
    ----------
    is_valid:
        ``True`` exactly when ``errors`` is empty.
    errors:
        Every violated rule, in policy order, as Dutch UI text.
    strength:
        Score from ``calculate_password_strength`` in ``[0, 100]``.
    """

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    strength: int = Field(ge=0, le=100)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _validity_matches_errors(self) -> "PasswordValidationResult":
        if self.is_valid != (not self.errors):
            raise ValueError("is_valid must be True exactly when errors is empty")
        return self

    @property
    def strength_description(self) -> str:
        """Dutch label for the strength score."""
        if self.strength >= 80:
            return "Zeer sterk"
        if self.strength >= 60:
            return "Sterk"
        if self.strength >= 40:
            return "Gemiddeld"
        if self.strength >= 20:
            return "Zwak"
        return "Zeer zwak"

    @property
    def first_error(self) -> str:
        return self.errors[0] if self.errors else ""

    @property
    def all_errors(self) -> str:
        return "\n".join(self.errors)


class ValidationResult(BaseModel):
    """Result of a client-side field check (e-mail, KvK, postcode, ...).

    Attributes
    ----------
    is_valid:
        ``True`` when the value passes every rule.
    error_message:
        First failure (``None`` on success), for single-line UI hints.
    errors:
        All failures in check order.
    formatted:
        Canonical display form of the value; only set on success.
    message:
        Human-readable Dutch summary (success confirmation or first error).
    """

    is_valid: bool
    error_message: Optional[str] = None
    errors: list[str] = Field(default_factory=list)
    formatted: Optional[str] = None
    message: str = ""

    model_config = {"from_attributes": True, "frozen": True}

    @classmethod
    def ok(cls, message: str, formatted: Optional[str] = None) -> "ValidationResult":
        return cls(is_valid=True, message=message, formatted=formatted)

    @classmethod
    def fail(cls, errors: list[str]) -> "ValidationResult":
        return cls(
            is_valid=False,
            error_message=errors[0],
            errors=list(errors),
            message=errors[0],
        )


# ---------------------------------------------------------------------------
# Unified auth response
# ---------------------------------------------------------------------------

class AuthResult(BaseModel):
    """Immutable outcome of every ``AuthService`` operation.

    Use the ``success`` / ``error`` constructors; a success never carries
    an error code and an error always carries one.

    Attributes
    ----------
    is_success:
        ``True`` when the operation completed without error.
    error_code:
        Machine-readable code (``None`` on success).
    message:
        Localised (Dutch) message for display.
    data:
        Optional structured payload (remaining minutes, e-mail, ...).
    """

    is_success: bool
    error_code: Optional[str] = None
    message: str
    data: Optional[dict[str, Any]] = None

    model_config = {"from_attributes": True, "frozen": True}

    @model_validator(mode="after")
    def _success_xor_error(self) -> "AuthResult":
        if self.is_success and self.error_code is not None:
            raise ValueError("a successful AuthResult cannot carry an error code")
        if not self.is_success and not self.error_code:
            raise ValueError("a failed AuthResult requires an error code")
        return self

    @classmethod
    def success(
        cls,
        message: str,
        data: Optional[dict[str, Any]] = None,
    ) -> "AuthResult":
        return cls(is_success=True, message=message, data=data)

    @classmethod
    def error(
        cls,
        error_code: str,
        message: str,
        data: Optional[dict[str, Any]] = None,
    ) -> "AuthResult":
        return cls(
            is_success=False,
            error_code=str(error_code),
            message=message,
            data=data,
        )


# ---------------------------------------------------------------------------
# Policy state snapshots
# ---------------------------------------------------------------------------

class AttemptRecord(BaseModel):
    """Windowed attempt timestamps for one identifier (oldest first)."""

    identifier: str
    timestamps: list[datetime] = Field(default_factory=list)


class LockoutState(BaseModel):
    """Failure counter and optional lock stamp for one identifier."""

    identifier: str
    failed_count: int = 0
    locked_at: Optional[datetime] = None

    @property
    def is_locked(self) -> bool:
        return self.locked_at is not None


class SessionRecord(BaseModel):
    """Start and last-activity instants of an authenticated session."""

    user_id: str
    started_at: datetime
    last_activity_at: datetime

    @model_validator(mode="after")
    def _activity_after_start(self) -> "SessionRecord":
        if self.last_activity_at < self.started_at:
            raise ValueError("last_activity_at cannot precede started_at")
        return self


# ---------------------------------------------------------------------------
# Identity-provider payloads
# ---------------------------------------------------------------------------

class ProviderUser(BaseModel):
    """User as reported by the identity provider."""

    user_id: str
    email: Optional[str] = None
    email_verified: bool = False

    model_config = {"from_attributes": True}


class DemoAccount(BaseModel):
    """Pre-provisioned development account (never enabled in production)."""

    email: str
    password: SecretStr
    user_type: UserType
    name: str
