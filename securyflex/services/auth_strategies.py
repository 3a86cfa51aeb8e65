"""
Authentication Strategies.

``AuthService`` delegates the credential check itself to exactly one
``AuthStrategy`` chosen at start-up by ``select_auth_strategy``:

- ``ProductionAuthStrategy``: identity provider + profile store.
- ``DemoAuthStrategy``: pre-provisioned development accounts, wrapping
  the production strategy for every other e-mail.  Never selected when
  ``ENVIRONMENT=production`` (``AppConfig`` refuses that combination).

Strategies report failures with two exception types:

- ``ProviderError``: the credentials were rejected or the provider
  failed.  The orchestrator counts this as a failed login.
- ``AuthRejected``: a policy outcome that is not a wrong password
  (unverified e-mail, provider not configured, weak demo password).
  The orchestrator returns the code without counting a failure.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

from securyflex.config import AppConfig
from securyflex.identity_provider import IdentityProvider, ProviderError
from securyflex.logger import StructuredLogger
from securyflex.models.auth_models import AuthErrorCode, DemoAccount, ProviderUser
from securyflex.models.enums import UserType
from securyflex.models.user import UserIdentity
from securyflex.repositories.profile_repository import ProfileRepository, ProfileStoreError
from securyflex.services.credential_validator import validate_password_detailed
from securyflex.utils.general import Clock, mask_email, utc_now


class AuthRejected(Exception):
    """Sign-in refused for a reason other than bad credentials."""

    def __init__(self, code: str, message: str = "") -> None:
        super().__init__(message or code)
        self.code: str = code
        self.message: str = message


class AuthStrategy(Protocol):
    """Turns an e-mail / password pair into an authenticated identity."""

    def sign_in(self, email: str, password: str) -> UserIdentity: ...  # noqa: E704


# ---------------------------------------------------------------------------
# Default profile inference
# ---------------------------------------------------------------------------

_DEFAULT_PROFILE_BY_TYPE: dict[UserType, str] = {
    UserType.GUARD: "Demo Beveiliger",
    UserType.COMPANY: "Demo Bedrijf",
    UserType.ADMIN: "Demo Admin",
}


DEMO_USER_ID_PREFIX: str = "demo_"


def infer_user_type_from_email(email: str) -> UserType:
    """Guess a role from the address for legacy accounts without a profile.

    Only used when a verified user signs in and no profile document
    exists.  Registration always takes an explicit ``UserType``.
    """
    lowered = email.lower()
    if "guard" in lowered:
        return UserType.GUARD
    if "company" in lowered:
        return UserType.COMPANY
    if "admin" in lowered:
        return UserType.ADMIN
    return UserType.COMPANY


def default_profile_fields(email: str, timestamp: str) -> dict[str, Any]:
    """Profile document written for a verified user who has none yet."""
    user_type = infer_user_type_from_email(email)
    return {
        "userType": user_type.value,
        "name": _DEFAULT_PROFILE_BY_TYPE[user_type],
        "email": email,
        "createdAt": timestamp,
        "lastLoginAt": timestamp,
        "isActive": True,
    }


def load_or_create_identity(
    user: ProviderUser,
    profiles: ProfileRepository,
    logger: StructuredLogger,
    clock: Clock = utc_now,
) -> UserIdentity:
    """Profile for *user*, created with inferred defaults when absent.

    A profile store outage does not block a verified sign-in; the
    identity is then built from the inferred defaults without
    persisting them.
    """
    email = user.email or ""
    try:
        fields = profiles.get_document(user.user_id)
        if fields is None:
            fields = default_profile_fields(email, clock().isoformat())
            logger.info(
                "No profile for %s, creating default (%s).",
                mask_email(email),
                fields["userType"],
            )
            profiles.set_document(user.user_id, fields)
    except ProfileStoreError as exc:
        logger.warning("Profile store unavailable for %s: %s", user.user_id, exc)
        fields = default_profile_fields(email, clock().isoformat())

    identity = UserIdentity.from_profile(user.user_id, fields)
    if identity.email is None and user.email:
        identity = identity.model_copy(update={"email": user.email})
    return identity


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

class ProductionAuthStrategy:
    """Sign in through the identity provider and load the profile.

    Parameters
    ----------
    provider:
        Identity provider adapter.
    profiles:
        Profile store.
    logger:
        Structured logger.
    clock:
        Source of the current instant (profile timestamps).
    """

    def __init__(
        self,
        provider: IdentityProvider,
        profiles: ProfileRepository,
        logger: StructuredLogger,
        clock: Clock = utc_now,
    ) -> None:
        self._provider = provider
        self._profiles = profiles
        self._logger = logger
        self._clock = clock

    def sign_in(self, email: str, password: str) -> UserIdentity:
        if not self._provider.is_configured:
            raise AuthRejected(
                AuthErrorCode.PROVIDER_NOT_CONFIGURED,
                "Firebase niet geconfigureerd. Authenticatie niet mogelijk.",
            )

        try:
            user = self._provider.sign_in(email.strip(), password)
        except ProviderError as exc:
            # Supabase refuses unconfirmed sign-ins itself.
            if exc.code == AuthErrorCode.EMAIL_NOT_VERIFIED:
                self._sign_out_quietly()
                raise AuthRejected(AuthErrorCode.EMAIL_NOT_VERIFIED) from exc
            raise

        if not user.email_verified:
            self._sign_out_quietly()
            raise AuthRejected(AuthErrorCode.EMAIL_NOT_VERIFIED)

        return load_or_create_identity(user, self._profiles, self._logger, self._clock)

    def _sign_out_quietly(self) -> None:
        try:
            self._provider.sign_out()
        except Exception as exc:
            self._logger.warning("Sign-out after unverified login failed: %s", exc)


class DemoAuthStrategy:
    """Development accounts first, the wrapped strategy for everyone else.

    A demo e-mail with the wrong password is reported as
    ``invalid-credential`` and counted like any other failed login.
    """

    def __init__(
        self,
        accounts: dict[str, DemoAccount],
        fallback: AuthStrategy,
        logger: StructuredLogger,
        clock: Clock = utc_now,
    ) -> None:
        self._accounts = {key.strip().lower(): acc for key, acc in accounts.items()}
        self._fallback = fallback
        self._logger = logger
        self._clock = clock

    def find_account(self, email: str) -> Optional[DemoAccount]:
        return self._accounts.get(email.strip().lower())

    def sign_in(self, email: str, password: str) -> UserIdentity:
        account = self.find_account(email)
        if account is None:
            return self._fallback.sign_in(email, password)

        if account.password.get_secret_value() != password:
            raise ProviderError("invalid-credential", "Demo password mismatch.")

        if not validate_password_detailed(password).is_valid:
            self._logger.warning(
                "SECURITY: demo password for %s does not meet the password policy.",
                account.user_type.value,
            )
            raise AuthRejected(
                AuthErrorCode.WEAK_DEMO_PASSWORD,
                "Demo wachtwoord voldoet niet aan veiligheidseisen",
            )

        self._logger.info("DEMO: successful login for %s account", account.user_type.value)
        return UserIdentity(
            user_id=f"{DEMO_USER_ID_PREFIX}{account.user_type.value}_001",
            user_type=account.user_type,
            name=account.name,
            email=account.email,
            raw_profile_fields={
                "email": account.email,
                "name": account.name,
                "userType": account.user_type.value,
                "isDemo": True,
                "demoLoginTime": self._clock().isoformat(),
            },
            is_demo=True,
        )


def select_auth_strategy(
    config: AppConfig,
    provider: IdentityProvider,
    profiles: ProfileRepository,
    logger: StructuredLogger,
    clock: Clock = utc_now,
) -> AuthStrategy:
    """Pick the sign-in strategy once, at start-up."""
    production = ProductionAuthStrategy(provider, profiles, logger, clock=clock)
    accounts = config.demo_accounts()
    if not accounts:
        return production

    logger.warning(
        "Demo mode active with %d account(s); never enable in production.",
        len(accounts),
    )
    return DemoAuthStrategy(accounts, production, logger, clock=clock)
