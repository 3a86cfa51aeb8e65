"""
Tests for the auth pipeline models.
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from securyflex.models.auth_models import (
    DEFAULT_PROVIDER_ERROR_MESSAGE,
    AuthErrorCode,
    AuthResult,
    PasswordValidationResult,
    SessionRecord,
    provider_error_message,
)
from securyflex.models.enums import UserType
from securyflex.models.user import UserIdentity


class TestAuthResult:

    def test_constructors(self):
        ok = AuthResult.success("Gelukt", data={"email": "a@b.nl"})
        assert ok.is_success and ok.error_code is None

        err = AuthResult.error(AuthErrorCode.RATE_LIMITED, "Wacht")
        assert not err.is_success
        assert err.error_code == "rate-limited"

    def test_success_with_error_code_rejected(self):
        with pytest.raises(ValidationError):
            AuthResult(is_success=True, error_code="unknown", message="x")

    def test_failure_without_code_rejected(self):
        with pytest.raises(ValidationError):
            AuthResult(is_success=False, message="x")

    def test_frozen(self):
        result = AuthResult.success("Gelukt")
        with pytest.raises(ValidationError):
            result.message = "anders"


class TestProviderMessages:

    def test_known_and_unknown_codes(self):
        assert provider_error_message("user-not-found").startswith("Geen account gevonden")
        assert provider_error_message("something-new") == DEFAULT_PROVIDER_ERROR_MESSAGE
        assert provider_error_message(AuthErrorCode.AUTH_FAILED).startswith("Inloggen mislukt")


class TestPasswordValidationResult:

    def test_validity_must_match_errors(self):
        with pytest.raises(ValidationError):
            PasswordValidationResult(is_valid=True, errors=["te kort"], strength=10)
        with pytest.raises(ValidationError):
            PasswordValidationResult(is_valid=False, errors=[], strength=10)

    def test_strength_range(self):
        with pytest.raises(ValidationError):
            PasswordValidationResult(is_valid=True, strength=101)

    def test_error_helpers(self):
        result = PasswordValidationResult(is_valid=False, errors=["a", "b"], strength=0)
        assert result.first_error == "a"
        assert result.all_errors == "a\nb"
        assert result.strength_description == "Zeer zwak"


class TestSessionRecord:

    def test_activity_cannot_precede_start(self):
        start = datetime(2025, 3, 1, tzinfo=timezone.utc)
        with pytest.raises(ValidationError):
            SessionRecord(user_id="u", started_at=start, last_activity_at=start - timedelta(seconds=1))


class TestUserIdentity:

    def test_from_profile(self):
        identity = UserIdentity.from_profile(
            "uid-1", {"userType": "Company", "name": "Bewaking BV", "city": "Delft"}
        )
        assert identity.user_type == UserType.COMPANY
        assert identity.name == "Bewaking BV"
        assert identity.email is None
        assert identity.raw_profile_fields["city"] == "Delft"
        assert not identity.is_demo

    def test_defaults_for_incomplete_documents(self):
        identity = UserIdentity.from_profile("uid-2", {"userType": "manager"})
        assert identity.user_type == UserType.GUARD
        assert identity.name == "Unknown User"

        assert UserIdentity.from_profile("uid-3", {}).user_type == UserType.GUARD
        assert not UserIdentity.from_profile("uid-4", {"isDemo": True}).is_demo
