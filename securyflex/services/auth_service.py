"""
Authentication Service.

Single orchestrator for every authentication concern of the SecuryFlex
client: login, registration, logout, session restore, e-mail
verification, password reset, profile updates and terms acceptance.

It composes the local policy components (credential validator, attempt
tracker, lockout manager, session manager) with the identity provider
and the profile store, and is the only component with external side
effects.

All operations return typed ``AuthResult`` models with a Dutch
message; the UI never inspects raw exceptions.  The one exception is
``accept_current_terms``, which propagates ``ProfileStoreError`` so
the caller can block navigation until the write succeeds.

Check order for ``login``::

    in-flight guard -> lockout -> rate limit -> strategy sign-in

A locked account is reported as ``account-locked`` even when its rate
limit window is also active.
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Any, Optional, Union

from securyflex.auth import SessionManager
from securyflex.config import AppConfig
from securyflex.identity_provider import IdentityProvider, ProviderError
from securyflex.logger import StructuredLogger
from securyflex.models.auth_models import (
    AuthErrorCode,
    AuthResult,
    DemoAccount,
    provider_error_message,
)
from securyflex.models.enums import AttemptKind, UserType
from securyflex.models.user import UserIdentity
from securyflex.repositories.profile_repository import ProfileRepository, ProfileStoreError
from securyflex.services.attempt_tracker import AttemptTracker
from securyflex.services.auth_strategies import (
    AuthRejected,
    AuthStrategy,
    DEMO_USER_ID_PREFIX,
    load_or_create_identity,
)
from securyflex.services.base_service import BaseService
from securyflex.services.credential_validator import (
    is_valid_email,
    validate_password_detailed,
)
from securyflex.services.lockout_manager import LockoutManager
from securyflex.utils.audit import log_audit_event
from securyflex.utils.general import Clock, mask_email, utc_now, whole_minutes


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

_MSG_ACCOUNT_LOCKED: str = (
    "Account is vergrendeld wegens te veel mislukte inlogpogingen. Probeer "
    "over 24 uur opnieuw of neem contact op met support."
)
_MSG_LOGIN_RATE_LIMITED: str = (
    "Te veel inlogpogingen. Probeer opnieuw over {minutes} minuten."
)
_MSG_REGISTRATION_RATE_LIMITED: str = (
    "Te veel registratiepogingen. Probeer opnieuw over {minutes} minuten."
)
_MSG_REQUEST_IN_PROGRESS: str = "Er wordt al een verzoek verwerkt. Even geduld."
_MSG_AUTH_FAILED: str = "Inloggen mislukt. Controleer uw e-mailadres en wachtwoord."
_MSG_INVALID_EMAIL: str = "Ongeldig e-mailadres format"
_MSG_NO_USER: str = "Geen gebruiker ingelogd"
_MSG_ALREADY_VERIFIED: str = "E-mail is al geverifieerd"


class AuthService(BaseService):
    """Orchestrates authentication against injected collaborators.

    Parameters
    ----------
    provider:
        Identity provider adapter.
    profiles:
        Profile document store.
    strategy:
        Sign-in strategy selected at start-up (production or demo).
    attempts:
        Rolling-window attempt tracker.
    lockouts:
        Hard lockout manager.
    sessions:
        Session manager holding the current user.
    config:
        Application configuration (cooldowns, terms version, demo accounts).
    logger:
        Structured logger.
    clock:
        Source of the current instant.
    """

    def __init__(
        self,
        provider: IdentityProvider,
        profiles: ProfileRepository,
        strategy: AuthStrategy,
        attempts: AttemptTracker,
        lockouts: LockoutManager,
        sessions: SessionManager,
        config: AppConfig,
        logger: StructuredLogger,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(logger)
        self._provider = provider
        self._profiles = profiles
        self._strategy = strategy
        self._attempts = attempts
        self._lockouts = lockouts
        self._sessions = sessions
        self._clock = clock

        self._terms_version: str = config.TERMS_VERSION
        self._verification_cooldown_minutes: int = config.EMAIL_VERIFICATION_COOLDOWN_MINUTES
        self._reset_cooldown_minutes: int = config.PASSWORD_RESET_COOLDOWN_MINUTES
        self._demo_accounts: dict[str, DemoAccount] = config.demo_accounts()

        self._state_lock: threading.Lock = threading.Lock()
        self._in_flight: set[tuple[AttemptKind, str]] = set()
        self._verification_sent_at: dict[str, datetime] = {}
        self._reset_sent_at: dict[str, datetime] = {}
        self._terms_cache: dict[str, bool] = {}

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def normalize_email(email: str) -> str:
        """Trim and lowercase *email* for use as a tracking identifier."""
        return email.strip().lower()

    def _begin_request(self, kind: AttemptKind, identifier: str) -> bool:
        with self._state_lock:
            key = (kind, identifier)
            if key in self._in_flight:
                return False
            self._in_flight.add(key)
            return True

    def _end_request(self, kind: AttemptKind, identifier: str) -> None:
        with self._state_lock:
            self._in_flight.discard((kind, identifier))

    def _cooldown_remaining(
        self,
        sent_at: dict[str, datetime],
        key: str,
        cooldown_minutes: int,
    ) -> int:
        """Minutes left before *key* may trigger another mail (0 = allowed)."""
        with self._state_lock:
            last = sent_at.get(key)
        if last is None:
            return 0
        elapsed = whole_minutes(last, self._clock())
        if elapsed < cooldown_minutes:
            return cooldown_minutes - elapsed
        return 0

    def _stamp(self, sent_at: dict[str, datetime], key: str) -> None:
        with self._state_lock:
            sent_at[key] = self._clock()

    def _provider_failure(self, exc: ProviderError, operation: str) -> AuthResult:
        self._logger.warning("%s failed: %s", operation, exc.code)
        return AuthResult.error(exc.code, provider_error_message(exc.code))

    def _record_login_failure(self, identifier: str, reason: str) -> None:
        self._attempts.record_attempt(identifier, AttemptKind.LOGIN)
        engaged = self._lockouts.record_failed_login(identifier)
        failed_count = self._lockouts.failed_count(identifier)
        log_audit_event(
            self._logger,
            "LOGIN_FAILED",
            mask_email(identifier),
            details={"reason": reason, "failed_count": failed_count},
            timestamp=self._clock(),
        )
        if engaged:
            self._logger.warning(
                "SECURITY: account locked after %d failed logins: %s",
                failed_count,
                mask_email(identifier),
            )
            log_audit_event(
                self._logger,
                "ACCOUNT_LOCKED",
                mask_email(identifier),
                details={"failed_count": failed_count},
                timestamp=self._clock(),
            )

    def _now_iso(self) -> str:
        return self._clock().isoformat()

    @staticmethod
    def _is_demo_identity(user: Optional[UserIdentity]) -> bool:
        """Synthetic identity issued by the demo strategy."""
        return (
            user is not None
            and user.is_demo
            and user.user_id.startswith(DEMO_USER_ID_PREFIX)
        )

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> AuthResult:
        """Authenticate *email* / *password*.

        Parameters
        ----------
        email:
            The raw e-mail entered by the user.  The trimmed, original-case
            value is sent to the provider; the trimmed, lowercased value
            keys the attempt and lockout state.
        password:
            The raw password entered by the user.  Never logged.

        Returns
        -------
        AuthResult
            Success, or one of ``request-in-progress``, ``account-locked``,
            ``rate-limited``, ``email-not-verified``,
            ``firebase-not-configured``, ``weak-demo-password`` or
            ``auth-failed``.
        """
        identifier = self.normalize_email(email)
        if not self._begin_request(AttemptKind.LOGIN, identifier):
            return AuthResult.error(
                AuthErrorCode.REQUEST_IN_PROGRESS, _MSG_REQUEST_IN_PROGRESS
            )
        try:
            return self._login(identifier, email, password)
        finally:
            self._end_request(AttemptKind.LOGIN, identifier)

    def _login(self, identifier: str, email: str, password: str) -> AuthResult:
        if self._lockouts.is_locked_out(identifier):
            log_audit_event(
                self._logger,
                "LOGIN_BLOCKED",
                mask_email(identifier),
                details={"reason": AuthErrorCode.ACCOUNT_LOCKED.value},
                timestamp=self._clock(),
            )
            return AuthResult.error(AuthErrorCode.ACCOUNT_LOCKED, _MSG_ACCOUNT_LOCKED)

        if self._attempts.is_rate_limited(identifier, AttemptKind.LOGIN):
            remaining = self._attempts.remaining_lock_minutes(identifier, AttemptKind.LOGIN)
            log_audit_event(
                self._logger,
                "RATE_LIMITED",
                mask_email(identifier),
                details={"kind": AttemptKind.LOGIN.value, "remaining_minutes": remaining},
                timestamp=self._clock(),
            )
            return AuthResult.error(
                AuthErrorCode.RATE_LIMITED,
                _MSG_LOGIN_RATE_LIMITED.format(minutes=remaining),
                data={"remaining_minutes": remaining},
            )

        try:
            identity = self._strategy.sign_in(email, password)
        except AuthRejected as exc:
            self._logger.info(
                "Login rejected for %s: %s", mask_email(identifier), exc.code
            )
            return AuthResult.error(
                exc.code, exc.message or provider_error_message(exc.code)
            )
        except ProviderError as exc:
            self._record_login_failure(identifier, exc.code)
            return AuthResult.error(AuthErrorCode.AUTH_FAILED, _MSG_AUTH_FAILED)
        except Exception as exc:
            self._logger.error(
                "Unexpected login error for %s: %s",
                mask_email(identifier),
                exc,
                exc_info=True,
            )
            self._record_login_failure(identifier, AuthErrorCode.UNKNOWN.value)
            return AuthResult.error(AuthErrorCode.AUTH_FAILED, _MSG_AUTH_FAILED)

        self._sessions.set_current_user(identity)
        self._sessions.initialize_session(identity.user_id)
        self._attempts.reset(identifier, AttemptKind.LOGIN)
        self._lockouts.reset_on_success(identifier)

        is_demo = self._is_demo_identity(identity)
        if not is_demo:
            self._update_last_login(identity.user_id)

        log_audit_event(
            self._logger,
            "LOGIN",
            mask_email(identifier),
            user_id=identity.user_id,
            details={"user_type": identity.user_type.value, "demo": is_demo},
            timestamp=self._clock(),
        )

        if is_demo:
            return AuthResult.success(
                f"Demo account: succesvol ingelogd als {identity.name}"
            )
        return AuthResult.success("Succesvol ingelogd")

    def _update_last_login(self, user_id: str) -> None:
        try:
            self._profiles.update_document(user_id, {"lastLoginAt": self._now_iso()})
        except ProfileStoreError as exc:
            self._logger.warning("Last login update failed for %s: %s", user_id, exc)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        email: str,
        password: str,
        name: str,
        user_type: Union[UserType, str],
        additional_data: Optional[dict[str, Any]] = None,
    ) -> AuthResult:
        """Create a provider account, send the verification mail and
        write the profile document.

        Input validation runs before the rate limit and before any
        provider call.  A successful result carries
        ``data={"requires_email_verification": True, "email": ...}``.
        """
        if not is_valid_email(email.strip()):
            return AuthResult.error(AuthErrorCode.INVALID_EMAIL, _MSG_INVALID_EMAIL)

        password_result = validate_password_detailed(password)
        if not password_result.is_valid:
            return AuthResult.error(
                AuthErrorCode.WEAK_PASSWORD,
                password_result.first_error,
                data={"errors": list(password_result.errors)},
            )

        try:
            role = UserType(str(user_type).lower())
        except ValueError:
            return AuthResult.error(
                AuthErrorCode.INVALID_USER_TYPE, "Ongeldig gebruikerstype"
            )

        identifier = self.normalize_email(email)
        if not self._begin_request(AttemptKind.REGISTRATION, identifier):
            return AuthResult.error(
                AuthErrorCode.REQUEST_IN_PROGRESS, _MSG_REQUEST_IN_PROGRESS
            )
        try:
            return self._register(identifier, email, password, name, role, additional_data)
        finally:
            self._end_request(AttemptKind.REGISTRATION, identifier)

    def _register(
        self,
        identifier: str,
        email: str,
        password: str,
        name: str,
        role: UserType,
        additional_data: Optional[dict[str, Any]],
    ) -> AuthResult:
        if self._attempts.is_rate_limited(identifier, AttemptKind.REGISTRATION):
            remaining = self._attempts.remaining_lock_minutes(
                identifier, AttemptKind.REGISTRATION
            )
            log_audit_event(
                self._logger,
                "RATE_LIMITED",
                mask_email(identifier),
                details={
                    "kind": AttemptKind.REGISTRATION.value,
                    "remaining_minutes": remaining,
                },
                timestamp=self._clock(),
            )
            return AuthResult.error(
                AuthErrorCode.RATE_LIMITED,
                _MSG_REGISTRATION_RATE_LIMITED.format(minutes=remaining),
                data={"remaining_minutes": remaining},
            )

        if not self._provider.is_configured:
            return AuthResult.error(
                AuthErrorCode.PROVIDER_NOT_CONFIGURED, "Firebase niet geconfigureerd"
            )

        trimmed = email.strip()
        try:
            user = self._provider.sign_up(trimmed, password)
            self._provider.send_email_verification(trimmed)

            now = self._now_iso()
            fields: dict[str, Any] = {
                "email": trimmed,
                "name": name.strip(),
                "userType": role.value,
                "createdAt": now,
                "lastLoginAt": now,
                "isActive": True,
                "emailVerified": False,
            }
            fields.update(additional_data or {})
            self._profiles.set_document(user.user_id, fields)
        except ProviderError as exc:
            self._attempts.record_attempt(identifier, AttemptKind.REGISTRATION)
            return self._provider_failure(exc, "Registration")
        except Exception as exc:
            self._logger.error(
                "Unexpected registration error for %s: %s",
                mask_email(identifier),
                exc,
                exc_info=True,
            )
            self._attempts.record_attempt(identifier, AttemptKind.REGISTRATION)
            return AuthResult.error(
                AuthErrorCode.UNKNOWN, "Er is een onbekende fout opgetreden"
            )

        log_audit_event(
            self._logger,
            "REGISTER",
            mask_email(identifier),
            user_id=user.user_id,
            details={"user_type": role.value},
            timestamp=self._clock(),
        )
        return AuthResult.success(
            "Account succesvol aangemaakt! Controleer uw e-mail voor verificatie.",
            data={"requires_email_verification": True, "email": email},
        )

    # ------------------------------------------------------------------
    # Logout and session state
    # ------------------------------------------------------------------

    def logout(self) -> None:
        """Sign out at the provider (best effort) and clear local state."""
        user = self._sessions.current_user
        try:
            if self._provider.is_configured and not self._is_demo_identity(user):
                self._provider.sign_out()
        except Exception as exc:
            self._logger.warning("Provider sign-out failed: %s", exc)
        finally:
            self._sessions.clear()

        if user is not None:
            log_audit_event(
                self._logger,
                "LOGOUT",
                mask_email(user.email or ""),
                user_id=user.user_id,
                timestamp=self._clock(),
            )

    def _restore_from_provider(self) -> bool:
        if not self._provider.is_configured:
            return False
        provider_user = self._provider.current_user()
        if provider_user is None or not provider_user.email_verified:
            return False
        identity = load_or_create_identity(
            provider_user, self._profiles, self._logger, self._clock
        )
        self._sessions.set_current_user(identity)
        self._sessions.initialize_session(identity.user_id)
        self._logger.info("Session restored for %s", identity.user_id)
        return True

    def initialize(self) -> None:
        """Restore the current user from a persisted provider session."""
        try:
            if self._sessions.current_user is None:
                self._restore_from_provider()
        except Exception as exc:
            self._logger.error("Auth initialization error: %s", exc)

    def check_auth_state(self) -> bool:
        """``True`` when a user is logged in with a valid session.

        Restores a provider session when nobody is logged in locally,
        logs out when the local session has expired, and otherwise
        counts the call as activity.
        """
        try:
            current = self._sessions.current_user
            if current is None:
                return self._restore_from_provider()

            if not self._sessions.is_session_valid(current.user_id):
                log_audit_event(
                    self._logger,
                    "SESSION_EXPIRED",
                    mask_email(current.email or ""),
                    user_id=current.user_id,
                    timestamp=self._clock(),
                )
                self.logout()
                return False

            self._sessions.update_last_activity(current.user_id)
            return True
        except Exception as exc:
            self._logger.error("Auth state check error: %s", exc)
            return False

    # ------------------------------------------------------------------
    # E-mail verification
    # ------------------------------------------------------------------

    def send_email_verification(self) -> AuthResult:
        try:
            user = self._provider.current_user()
            if user is None:
                return AuthResult.error(AuthErrorCode.NO_USER, _MSG_NO_USER)
            if user.email_verified:
                return AuthResult.error(AuthErrorCode.ALREADY_VERIFIED, _MSG_ALREADY_VERIFIED)
            self._provider.send_email_verification(user.email or "")
        except ProviderError as exc:
            return self._provider_failure(exc, "Email verification")
        except Exception as exc:
            self._logger.error("Email verification error: %s", exc, exc_info=True)
            return AuthResult.error(
                AuthErrorCode.UNKNOWN,
                "Er is een fout opgetreden bij het verzenden van de verificatie e-mail",
            )
        return AuthResult.success("Verificatie e-mail verzonden. Controleer uw inbox.")

    def is_email_verified(self) -> bool:
        """Fresh verification state of the provider's current user."""
        try:
            user = self._provider.reload_current_user()
        except Exception as exc:
            self._logger.warning("Error checking email verification: %s", exc)
            return False
        return user is not None and user.email_verified

    def resend_email_verification(self) -> AuthResult:
        """Like ``send_email_verification`` with a per-user cooldown."""
        try:
            user = self._provider.current_user()
            if user is None:
                return AuthResult.error(AuthErrorCode.NO_USER, _MSG_NO_USER)
            if user.email_verified:
                return AuthResult.error(AuthErrorCode.ALREADY_VERIFIED, _MSG_ALREADY_VERIFIED)

            remaining = self._cooldown_remaining(
                self._verification_sent_at,
                user.user_id,
                self._verification_cooldown_minutes,
            )
            if remaining:
                return AuthResult.error(
                    AuthErrorCode.RATE_LIMITED,
                    f"Wacht {remaining} minuten voordat u opnieuw een verificatie "
                    "e-mail aanvraagt",
                    data={"remaining_minutes": remaining},
                )

            self._provider.send_email_verification(user.email or "")
            self._stamp(self._verification_sent_at, user.user_id)
        except ProviderError as exc:
            return self._provider_failure(exc, "Email verification resend")
        except Exception as exc:
            self._logger.error("Email verification resend error: %s", exc, exc_info=True)
            return AuthResult.error(
                AuthErrorCode.UNKNOWN,
                "Er is een fout opgetreden bij het verzenden van de verificatie e-mail",
            )
        return AuthResult.success(
            "Verificatie e-mail opnieuw verzonden. Controleer uw inbox."
        )

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------

    def send_password_reset_email(self, email: str) -> AuthResult:
        if not is_valid_email(email.strip()):
            return AuthResult.error(AuthErrorCode.INVALID_EMAIL, _MSG_INVALID_EMAIL)

        key = self.normalize_email(email)
        remaining = self._cooldown_remaining(
            self._reset_sent_at, key, self._reset_cooldown_minutes
        )
        if remaining:
            return AuthResult.error(
                AuthErrorCode.RATE_LIMITED,
                f"Wacht {remaining} minuten voordat u opnieuw een wachtwoord "
                "reset aanvraagt",
                data={"remaining_minutes": remaining},
            )

        try:
            self._provider.send_password_reset_email(email.strip())
        except ProviderError as exc:
            return self._provider_failure(exc, "Password reset")
        except Exception as exc:
            self._logger.error("Password reset error: %s", exc, exc_info=True)
            return AuthResult.error(
                AuthErrorCode.UNKNOWN,
                "Er is een fout opgetreden bij het verzenden van de wachtwoord "
                "reset e-mail",
            )
        self._stamp(self._reset_sent_at, key)
        log_audit_event(
            self._logger, "PASSWORD_RESET_REQUESTED", mask_email(key), timestamp=self._clock()
        )
        return AuthResult.success(
            f"Wachtwoord reset e-mail verzonden naar {email}. Controleer uw inbox."
        )

    def confirm_password_reset(self, code: str, new_password: str) -> AuthResult:
        password_result = validate_password_detailed(new_password)
        if not password_result.is_valid:
            return AuthResult.error(
                AuthErrorCode.WEAK_PASSWORD,
                password_result.first_error,
                data={"errors": list(password_result.errors)},
            )
        try:
            self._provider.confirm_password_reset(code, new_password)
        except ProviderError as exc:
            return self._provider_failure(exc, "Password reset confirmation")
        except Exception as exc:
            self._logger.error("Password reset confirmation error: %s", exc, exc_info=True)
            return AuthResult.error(
                AuthErrorCode.UNKNOWN,
                "Er is een fout opgetreden bij het wijzigen van het wachtwoord",
            )
        return AuthResult.success(
            "Wachtwoord succesvol gewijzigd. U kunt nu inloggen met uw nieuwe "
            "wachtwoord."
        )

    def verify_password_reset_code(self, code: str) -> AuthResult:
        try:
            email = self._provider.verify_password_reset_code(code)
        except ProviderError as exc:
            return self._provider_failure(exc, "Password reset code check")
        except Exception as exc:
            self._logger.error("Password reset code error: %s", exc, exc_info=True)
            return AuthResult.error(AuthErrorCode.UNKNOWN, "Ongeldige of verlopen code")
        return AuthResult.success(f"Code geverifieerd voor {email}", data={"email": email})

    # ------------------------------------------------------------------
    # Profile and terms
    # ------------------------------------------------------------------

    def update_profile(
        self,
        name: Optional[str] = None,
        additional_data: Optional[dict[str, Any]] = None,
    ) -> bool:
        """Merge *name* / *additional_data* into the current user's profile.

        Demo identities have no stored profile; only the in-memory
        identity is updated for them.
        """
        current = self._sessions.current_user
        if current is None:
            return False

        changes: dict[str, Any] = {"lastUpdatedAt": self._now_iso()}
        if name is not None:
            changes["name"] = name.strip()
        if additional_data:
            changes.update(additional_data)

        if not self._is_demo_identity(current):
            try:
                self._profiles.update_document(current.user_id, changes)
            except ProfileStoreError as exc:
                self._logger.error("Profile update error: %s", exc)
                return False

        updated = current.model_copy(
            update={
                "name": changes.get("name", current.name),
                "raw_profile_fields": {**current.raw_profile_fields, **changes},
            }
        )
        self._sessions.set_current_user(updated)
        return True

    def _terms_key(self, user_id: str) -> str:
        return f"{user_id}_{self._terms_version}"

    def has_accepted_current_terms(self, user_id: str) -> bool:
        """Whether *user_id* accepted the current terms version.

        Answers from the cache when possible.  A cache miss reads the
        profile once; a store failure answers ``False`` without caching.
        """
        if not user_id:
            return False
        key = self._terms_key(user_id)
        with self._state_lock:
            if key in self._terms_cache:
                return self._terms_cache[key]

        try:
            fields = self._profiles.get_document(user_id)
        except ProfileStoreError as exc:
            self._logger.warning("Error refreshing terms cache: %s", exc)
            return False

        accepted = fields is not None and fields.get("termsVersion") == self._terms_version
        with self._state_lock:
            self._terms_cache[key] = accepted
        return accepted

    def accept_current_terms(self, user_id: str) -> None:
        """Record acceptance of the current terms version.

        Raises
        ------
        ProfileStoreError
            If the profile document could not be updated.
        """
        self._profiles.update_document(
            user_id,
            {"termsVersion": self._terms_version, "termsAcceptedAt": self._now_iso()},
        )
        with self._state_lock:
            self._terms_cache[self._terms_key(user_id)] = True
        self._logger.info("Terms %s accepted by %s", self._terms_version, user_id)

    # ------------------------------------------------------------------
    # Synchronous getters
    # ------------------------------------------------------------------

    @property
    def is_logged_in(self) -> bool:
        return self._sessions.is_authenticated

    @property
    def current_user(self) -> Optional[UserIdentity]:
        return self._sessions.current_user

    @property
    def current_user_id(self) -> Optional[str]:
        user = self._sessions.current_user
        return user.user_id if user else None

    @property
    def current_user_type(self) -> Optional[UserType]:
        user = self._sessions.current_user
        return user.user_type if user else None

    @property
    def current_user_name(self) -> Optional[str]:
        user = self._sessions.current_user
        return user.name if user else None

    @property
    def current_user_data(self) -> dict[str, Any]:
        user = self._sessions.current_user
        return dict(user.raw_profile_fields) if user else {}

    def has_role(self, role: Union[UserType, str]) -> bool:
        user = self._sessions.current_user
        if user is None:
            return False
        return user.user_type.value == str(role).lower()

    # ------------------------------------------------------------------
    # Development helpers
    # ------------------------------------------------------------------

    def get_provider_status(self) -> str:
        provider_status = (
            "Supabase is configured and ready"
            if self._provider.is_configured
            else "Supabase not configured"
        )
        demo_status = (
            f"Demo mode enabled ({len(self._demo_accounts)} accounts)"
            if self._demo_accounts
            else "Demo mode disabled"
        )
        return f"{provider_status} | {demo_status}"

    def get_available_demo_accounts(self) -> list[str]:
        return list(self._demo_accounts)

    def is_demo_account(self, email: str) -> bool:
        return self.normalize_email(email) in self._demo_accounts

    def get_demo_account_info(self, email: str) -> Optional[dict[str, Any]]:
        """Demo account details without the password, or ``None``."""
        account = self._demo_accounts.get(self.normalize_email(email))
        if account is None:
            return None
        return {
            "email": account.email,
            "userType": account.user_type.value,
            "name": account.name,
            "isDemo": True,
        }
