"""
Identity Provider Contract and Supabase Adapter.

``AuthService`` depends only on the ``IdentityProvider`` protocol.  The
production implementation, ``SupabaseIdentityProvider``, talks to the
Supabase ``auth`` API and translates every failure into a
``ProviderError`` whose ``code`` uses the SecuryFlex vocabulary
(``user-not-found``, ``wrong-password``, ``network-request-failed``, ...),
so the orchestrator and its Dutch message table never see raw
Supabase exceptions.
"""

from __future__ import annotations

import threading
from typing import Optional, Protocol, runtime_checkable

import httpx

from securyflex.database import SupabaseConnection
from securyflex.logger import StructuredLogger
from securyflex.models.auth_models import ProviderUser


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ProviderError(Exception):
    """Failure reported by (or while reaching) the identity provider."""

    def __init__(self, code: str, message: str = "") -> None:
        super().__init__(message or code)
        self.code: str = code
        self.message: str = message or code


# Supabase GoTrue error codes -> SecuryFlex provider codes.
SUPABASE_ERROR_CODES: dict[str, str] = {
    "invalid_credentials": "invalid-credential",
    "invalid_grant": "invalid-credential",
    "user_not_found": "user-not-found",
    "email_exists": "email-already-in-use",
    "user_already_exists": "email-already-in-use",
    "email_not_confirmed": "email-not-verified",
    "over_request_rate_limit": "too-many-requests",
    "over_email_send_rate_limit": "too-many-requests",
    "user_banned": "user-disabled",
    "weak_password": "weak-password",
    "email_address_invalid": "invalid-email",
    "otp_expired": "expired-action-code",
    "bad_jwt": "user-token-expired",
    "session_expired": "user-token-expired",
    "session_not_found": "user-token-expired",
    "signup_disabled": "operation-not-allowed",
    "email_provider_disabled": "operation-not-allowed",
    "reauthentication_needed": "requires-recent-login",
}


def translate_supabase_error(exc: Exception) -> ProviderError:
    """Map a Supabase / transport exception onto a ``ProviderError``.

    Prefers the structured ``code`` attribute of ``AuthApiError``; falls
    back to scanning the message text for a known code, then to
    ``internal-error``.
    """
    if isinstance(exc, ProviderError):
        return exc
    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return ProviderError("timeout", str(exc))
    if isinstance(exc, (httpx.TransportError, ConnectionError)):
        return ProviderError("network-request-failed", str(exc))

    raw_code = getattr(exc, "code", None)
    if isinstance(raw_code, str) and raw_code in SUPABASE_ERROR_CODES:
        return ProviderError(SUPABASE_ERROR_CODES[raw_code], str(exc))

    error_str = str(exc).lower()
    for supabase_code, provider_code in SUPABASE_ERROR_CODES.items():
        if supabase_code in error_str:
            return ProviderError(provider_code, str(exc))
    if "invalid login credentials" in error_str:
        return ProviderError("invalid-credential", str(exc))
    if "email not confirmed" in error_str:
        return ProviderError("email-not-verified", str(exc))

    return ProviderError("internal-error", str(exc))


# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------

@runtime_checkable
class IdentityProvider(Protocol):
    """Logical identity-provider contract used by the auth core."""

    @property
    def is_configured(self) -> bool: ...  # noqa: E704

    def sign_in(self, email: str, password: str) -> ProviderUser: ...  # noqa: E704

    def sign_up(self, email: str, password: str) -> ProviderUser: ...  # noqa: E704

    def sign_out(self) -> None: ...  # noqa: E704

    def send_email_verification(self, email: str) -> None: ...  # noqa: E704

    def send_password_reset_email(self, email: str) -> None: ...  # noqa: E704

    def confirm_password_reset(self, code: str, new_password: str) -> None: ...  # noqa: E704

    def verify_password_reset_code(self, code: str) -> str: ...  # noqa: E704

    def current_user(self) -> Optional[ProviderUser]: ...  # noqa: E704

    def reload_current_user(self) -> Optional[ProviderUser]: ...  # noqa: E704


# ---------------------------------------------------------------------------
# Supabase implementation
# ---------------------------------------------------------------------------

def _to_provider_user(user: object) -> ProviderUser:
    return ProviderUser(
        user_id=str(getattr(user, "id")),
        email=getattr(user, "email", None),
        email_verified=getattr(user, "email_confirmed_at", None) is not None,
    )


class SupabaseIdentityProvider:
    """``IdentityProvider`` backed by the Supabase ``auth`` API.

    Supabase sends the confirmation mail as part of ``sign_up``; the first
    ``send_email_verification`` for an address signed up through this
    instance is therefore a no-op, and later calls use ``auth.resend``.

    Password-reset codes are Supabase recovery ``token_hash`` values.
    ``verify_password_reset_code`` consumes the token and opens a recovery
    session, so ``confirm_password_reset`` only re-verifies codes it has
    not already seen.

    Parameters
    ----------
    connection:
        Shared Supabase connection.
    logger:
        Structured logger.
    password_reset_redirect_url:
        Optional ``redirect_to`` for reset mails.
    """

    def __init__(
        self,
        connection: SupabaseConnection,
        logger: StructuredLogger,
        password_reset_redirect_url: str = "",
    ) -> None:
        self._connection: SupabaseConnection = connection
        self._logger: StructuredLogger = logger
        self._redirect_url: str = password_reset_redirect_url
        self._lock: threading.Lock = threading.Lock()
        self._confirmation_sent: set[str] = set()
        self._verified_reset_codes: set[str] = set()

    @property
    def is_configured(self) -> bool:
        return self._connection.is_configured

    def _auth(self):
        try:
            return self._connection.client.auth
        except RuntimeError as exc:
            raise ProviderError("firebase-not-configured", str(exc)) from exc

    def sign_in(self, email: str, password: str) -> ProviderUser:
        auth = self._auth()
        try:
            response = auth.sign_in_with_password({"email": email, "password": password})
        except Exception as exc:
            raise translate_supabase_error(exc) from exc
        if response.user is None:
            raise ProviderError("invalid-credential", "Sign-in returned no user.")
        return _to_provider_user(response.user)

    def sign_up(self, email: str, password: str) -> ProviderUser:
        auth = self._auth()
        try:
            response = auth.sign_up({"email": email, "password": password})
        except Exception as exc:
            raise translate_supabase_error(exc) from exc
        if response.user is None:
            raise ProviderError("internal-error", "Sign-up returned no user.")
        with self._lock:
            self._confirmation_sent.add(email.strip().lower())
        return _to_provider_user(response.user)

    def sign_out(self) -> None:
        auth = self._auth()
        try:
            auth.sign_out()
        except Exception as exc:
            raise translate_supabase_error(exc) from exc

    def send_email_verification(self, email: str) -> None:
        key = email.strip().lower()
        with self._lock:
            if key in self._confirmation_sent:
                self._confirmation_sent.discard(key)
                self._logger.debug("Confirmation mail already sent by sign-up.")
                return
        auth = self._auth()
        try:
            auth.resend({"type": "signup", "email": email.strip()})
        except Exception as exc:
            raise translate_supabase_error(exc) from exc

    def send_password_reset_email(self, email: str) -> None:
        auth = self._auth()
        options = {"redirect_to": self._redirect_url} if self._redirect_url else {}
        try:
            auth.reset_password_for_email(email, options)
        except Exception as exc:
            raise translate_supabase_error(exc) from exc

    def verify_password_reset_code(self, code: str) -> str:
        auth = self._auth()
        try:
            response = auth.verify_otp({"token_hash": code, "type": "recovery"})
        except Exception as exc:
            raise translate_supabase_error(exc) from exc
        if response.user is None or not response.user.email:
            raise ProviderError("invalid-action-code", "Recovery token has no user.")
        with self._lock:
            self._verified_reset_codes.add(code)
        return response.user.email

    def confirm_password_reset(self, code: str, new_password: str) -> None:
        with self._lock:
            already_verified = code in self._verified_reset_codes
        if not already_verified:
            self.verify_password_reset_code(code)
        auth = self._auth()
        try:
            auth.update_user({"password": new_password})
        except Exception as exc:
            raise translate_supabase_error(exc) from exc
        finally:
            with self._lock:
                self._verified_reset_codes.discard(code)

    def current_user(self) -> Optional[ProviderUser]:
        """User of the locally held session, without a server round-trip."""
        auth = self._auth()
        try:
            session = auth.get_session()
        except Exception as exc:
            raise translate_supabase_error(exc) from exc
        if session is None or session.user is None:
            return None
        return _to_provider_user(session.user)

    def reload_current_user(self) -> Optional[ProviderUser]:
        """Fetch the session user from the server (fresh verification state)."""
        if self.current_user() is None:
            return None
        auth = self._auth()
        try:
            response = auth.get_user()
        except Exception as exc:
            raise translate_supabase_error(exc) from exc
        if response is None or response.user is None:
            return None
        return _to_provider_user(response.user)
