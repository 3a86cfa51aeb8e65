"""
Tests for the authentication orchestrator.
"""

import threading
from unittest.mock import MagicMock

import pytest

from securyflex.auth import SessionManager
from securyflex.identity_provider import ProviderError
from securyflex.models.auth_models import ProviderUser
from securyflex.models.enums import AttemptKind, UserType
from securyflex.repositories.profile_repository import ProfileStoreError
from securyflex.services.attempt_tracker import AttemptTracker
from securyflex.services.auth_service import AuthService
from securyflex.services.auth_strategies import select_auth_strategy
from securyflex.services.lockout_manager import LockoutManager
from tests.conftest import VALID_PASSWORD


def build_service(config, provider, profiles, logger, clock):
    return AuthService(
        provider=provider,
        profiles=profiles,
        strategy=select_auth_strategy(config, provider, profiles, logger, clock=clock),
        attempts=AttemptTracker(clock=clock),
        lockouts=LockoutManager(clock=clock),
        sessions=SessionManager(clock=clock),
        config=config,
        logger=logger,
        clock=clock,
    )


@pytest.fixture
def service(config, provider, profiles, logger, clock):
    return build_service(config, provider, profiles, logger, clock)


@pytest.fixture
def demo_service(demo_config, provider, profiles, logger, clock):
    return build_service(demo_config, provider, profiles, logger, clock)


class TestLogin:
    """Login flow, policy gates and counters."""

    def test_successful_login(self, service, provider, profiles, clock):
        result = service.login("  Jan@SecuryFlex.nl ", VALID_PASSWORD)

        assert result.is_success
        assert result.error_code is None
        assert result.message == "Succesvol ingelogd"
        provider.sign_in.assert_called_once_with("Jan@SecuryFlex.nl", VALID_PASSWORD)
        assert service.is_logged_in
        assert service.current_user_id == "uid-1"
        assert service.current_user_type == UserType.GUARD
        assert service.current_user_name == "Jan Jansen"
        assert service._sessions.is_session_valid("uid-1")
        profiles.update_document.assert_called_once_with(
            "uid-1", {"lastLoginAt": clock.now.isoformat()}
        )

    def test_success_resets_counters(self, service, provider):
        provider.sign_in.side_effect = [ProviderError("wrong-password"), ProviderError("wrong-password")]
        service.login("jan@securyflex.nl", "Verkeerd!Wacht9")
        service.login("jan@securyflex.nl", "Verkeerd!Wacht9")
        assert service._lockouts.failed_count("jan@securyflex.nl") == 2

        provider.sign_in.side_effect = None
        result = service.login("jan@securyflex.nl", VALID_PASSWORD)

        assert result.is_success
        assert service._lockouts.failed_count("jan@securyflex.nl") == 0
        assert service._attempts.attempt_count("jan@securyflex.nl", AttemptKind.LOGIN) == 0

    def test_three_failures_rate_limit_without_provider_call(self, service, provider):
        provider.sign_in.side_effect = ProviderError("wrong-password")
        for _ in range(3):
            result = service.login("test@example.nl", "Verkeerd!Wacht9")
            assert result.error_code == "auth-failed"
        assert provider.sign_in.call_count == 3

        result = service.login("test@example.nl", "Verkeerd!Wacht9")

        assert result.error_code == "rate-limited"
        assert result.data["remaining_minutes"] > 0
        assert f"over {result.data['remaining_minutes']} minuten" in result.message
        assert provider.sign_in.call_count == 3

    def test_lockout_takes_precedence_over_rate_limit(self, service, provider, clock):
        provider.sign_in.side_effect = ProviderError("wrong-password")
        for _ in range(3):
            service.login("a@b.nl", "Verkeerd!Wacht9")
        clock.advance(minutes=16)
        for _ in range(2):
            service.login("a@b.nl", "Verkeerd!Wacht9")
        service._attempts.record_attempt("a@b.nl", AttemptKind.LOGIN)
        assert service._lockouts.is_locked_out("a@b.nl")
        assert service._attempts.is_rate_limited("a@b.nl")

        result = service.login("a@b.nl", VALID_PASSWORD)

        assert result.error_code == "account-locked"
        assert provider.sign_in.call_count == 5

    def test_lock_releases_after_24_hours(self, service, provider, clock):
        provider.sign_in.side_effect = ProviderError("wrong-password")
        for _ in range(3):
            service.login("a@b.nl", "Verkeerd!Wacht9")
        clock.advance(minutes=16)
        for _ in range(2):
            service.login("a@b.nl", "Verkeerd!Wacht9")
        clock.advance(hours=24)
        provider.sign_in.side_effect = None

        assert service.login("a@b.nl", VALID_PASSWORD).is_success

    def test_unverified_email(self, service, provider, profiles):
        provider.sign_in.return_value = ProviderUser(user_id="uid-9", email="a@b.nl")

        result = service.login("a@b.nl", VALID_PASSWORD)

        assert result.error_code == "email-not-verified"
        provider.sign_out.assert_called_once()
        assert not service.is_logged_in
        assert service._sessions.get_session("uid-9") is None
        assert service._lockouts.failed_count("a@b.nl") == 0

    def test_provider_not_configured(self, service, provider):
        provider.is_configured = False

        result = service.login("a@b.nl", VALID_PASSWORD)

        assert result.error_code == "firebase-not-configured"
        provider.sign_in.assert_not_called()

    def test_unexpected_error_counts_as_failure(self, service, provider, logger):
        provider.sign_in.side_effect = KeyError("boom")

        result = service.login("a@b.nl", VALID_PASSWORD)

        assert result.error_code == "auth-failed"
        assert service._lockouts.failed_count("a@b.nl") == 1
        logger.error.assert_called()

    def test_last_login_failure_does_not_block_login(self, service, profiles):
        profiles.update_document.side_effect = ProfileStoreError("down")
        assert service.login("jan@securyflex.nl", VALID_PASSWORD).is_success

    def test_concurrent_login_is_rejected(self, service, provider):
        entered = threading.Event()
        release = threading.Event()
        results = []

        def slow_sign_in(email, password):
            entered.set()
            release.wait(timeout=5)
            return ProviderUser(user_id="uid-1", email=email, email_verified=True)

        provider.sign_in.side_effect = slow_sign_in
        worker = threading.Thread(
            target=lambda: results.append(service.login("jan@securyflex.nl", VALID_PASSWORD))
        )
        worker.start()
        assert entered.wait(timeout=5)

        second = service.login("JAN@securyflex.nl", VALID_PASSWORD)
        release.set()
        worker.join(timeout=5)

        assert second.error_code == "request-in-progress"
        assert results[0].is_success
        assert provider.sign_in.call_count == 1

    def test_audit_events_are_logged(self, service, provider, logger):
        provider.sign_in.side_effect = ProviderError("wrong-password")
        service.login("a@b.nl", "Verkeerd!Wacht9")

        events = [
            call.kwargs["extra"]["event"]
            for call in logger.info.call_args_list
            if "extra" in call.kwargs
        ]
        assert "LOGIN_FAILED" in events
        assert all("Verkeerd!Wacht9" not in str(call) for call in logger.info.call_args_list)


class TestFirstLoginWithoutProfile:
    """Verified provider account signing in before a profile exists."""

    @pytest.fixture(autouse=True)
    def no_profile(self, provider, profiles):
        provider.sign_in.return_value = ProviderUser(
            user_id="uid-7", email="nieuw.bedrijf@securyflex.nl", email_verified=True
        )
        profiles.get_document.return_value = None

    def test_login_is_a_regular_account(self, service, profiles, clock):
        result = service.login("nieuw.bedrijf@securyflex.nl", VALID_PASSWORD)

        assert result.is_success
        assert result.message == "Succesvol ingelogd"
        assert not service.current_user.is_demo
        user_id, fields = profiles.set_document.call_args.args
        assert user_id == "uid-7"
        assert fields["userType"] == "company"
        profiles.update_document.assert_called_once_with(
            "uid-7", {"lastLoginAt": clock.now.isoformat()}
        )

    def test_logout_signs_out_at_provider(self, service, provider):
        service.login("nieuw.bedrijf@securyflex.nl", VALID_PASSWORD)

        service.logout()

        provider.sign_out.assert_called_once()
        assert not service.is_logged_in
        assert service.check_auth_state() is False

    def test_profile_update_is_persisted(self, service, profiles):
        service.login("nieuw.bedrijf@securyflex.nl", VALID_PASSWORD)
        profiles.update_document.reset_mock()

        assert service.update_profile(name="Bewaking BV")

        profiles.update_document.assert_called_once()
        assert profiles.update_document.call_args.args[1]["name"] == "Bewaking BV"


class TestDemoLogin:
    """Demo strategy through the orchestrator."""

    def test_demo_login(self, demo_service, provider, profiles):
        result = demo_service.login("Guard@Demo.nl", "Wacht!Toren58x")

        assert result.is_success
        assert result.message == "Demo account: succesvol ingelogd als Demo Beveiliger"
        assert demo_service.current_user_id == "demo_guard_001"
        assert demo_service.current_user_data["isDemo"] is True
        provider.sign_in.assert_not_called()
        profiles.update_document.assert_not_called()

    def test_weak_demo_password(self, demo_service):
        result = demo_service.login("company@demo.nl", "kort")
        assert result.error_code == "weak-demo-password"
        assert not demo_service.is_logged_in

    def test_demo_helpers(self, demo_service):
        assert sorted(demo_service.get_available_demo_accounts()) == [
            "company@demo.nl",
            "guard@demo.nl",
        ]
        assert demo_service.is_demo_account("GUARD@demo.nl")
        assert not demo_service.is_demo_account("jan@securyflex.nl")
        info = demo_service.get_demo_account_info("guard@demo.nl")
        assert info == {
            "email": "guard@demo.nl",
            "userType": "guard",
            "name": "Demo Beveiliger",
            "isDemo": True,
        }
        assert demo_service.get_demo_account_info("x@y.nl") is None
        assert demo_service.get_provider_status() == (
            "Supabase is configured and ready | Demo mode enabled (2 accounts)"
        )

    def test_demo_logout_skips_provider(self, demo_service, provider):
        demo_service.login("guard@demo.nl", "Wacht!Toren58x")
        demo_service.logout()
        provider.sign_out.assert_not_called()
        assert not demo_service.is_logged_in


class TestRegister:
    """Registration flow."""

    def test_successful_registration(self, service, provider, profiles, clock):
        result = service.register(
            " nieuw@securyflex.nl",
            VALID_PASSWORD,
            " Piet Pietersen ",
            UserType.COMPANY,
            additional_data={"kvkNumber": "12345678"},
        )

        assert result.is_success
        assert result.data == {
            "requires_email_verification": True,
            "email": " nieuw@securyflex.nl",
        }
        provider.sign_up.assert_called_once_with("nieuw@securyflex.nl", VALID_PASSWORD)
        provider.send_email_verification.assert_called_once_with("nieuw@securyflex.nl")
        user_id, fields = profiles.set_document.call_args.args
        assert user_id == "uid-new"
        assert fields["name"] == "Piet Pietersen"
        assert fields["userType"] == "company"
        assert fields["emailVerified"] is False
        assert fields["kvkNumber"] == "12345678"
        assert fields["createdAt"] == clock.now.isoformat()

    def test_invalid_email_before_network(self, service, provider):
        result = service.register("geen-email", VALID_PASSWORD, "Piet", UserType.GUARD)
        assert result.error_code == "invalid-email"
        provider.sign_up.assert_not_called()

    def test_weak_password_itemised(self, service, provider):
        result = service.register("a@b.nl", "kort", "Piet", UserType.GUARD)

        assert result.error_code == "weak-password"
        assert result.message == "Wachtwoord moet minimaal 12 tekens bevatten"
        assert len(result.data["errors"]) > 1
        provider.sign_up.assert_not_called()

    def test_invalid_user_type(self, service, provider):
        result = service.register("a@b.nl", VALID_PASSWORD, "Piet", "manager")
        assert result.error_code == "invalid-user-type"
        provider.sign_up.assert_not_called()

    def test_string_user_type_is_accepted(self, service, profiles):
        assert service.register("a@b.nl", VALID_PASSWORD, "Piet", "Guard").is_success
        assert profiles.set_document.call_args.args[1]["userType"] == "guard"

    def test_provider_error_passes_code_through(self, service, provider):
        provider.sign_up.side_effect = ProviderError("email-already-in-use")

        result = service.register("a@b.nl", VALID_PASSWORD, "Piet", UserType.GUARD)

        assert result.error_code == "email-already-in-use"
        assert result.message.startswith("Dit e-mailadres is al in gebruik")
        assert service._attempts.attempt_count("a@b.nl", AttemptKind.REGISTRATION) == 1

    def test_registration_rate_limit(self, service, provider):
        provider.sign_up.side_effect = ProviderError("network-request-failed")
        for _ in range(3):
            service.register("a@b.nl", VALID_PASSWORD, "Piet", UserType.GUARD)

        result = service.register("a@b.nl", VALID_PASSWORD, "Piet", UserType.GUARD)

        assert result.error_code == "rate-limited"
        assert result.message == "Te veel registratiepogingen. Probeer opnieuw over 120 minuten."
        assert provider.sign_up.call_count == 3

    def test_not_configured(self, service, provider):
        provider.is_configured = False
        result = service.register("a@b.nl", VALID_PASSWORD, "Piet", UserType.GUARD)
        assert result.error_code == "firebase-not-configured"

    def test_profile_write_failure_is_unknown(self, service, profiles):
        profiles.set_document.side_effect = ProfileStoreError("down")
        result = service.register("a@b.nl", VALID_PASSWORD, "Piet", UserType.GUARD)
        assert result.error_code == "unknown"


class TestLogoutAndSessionState:
    """Logout, restore and session checks."""

    def test_logout_clears_state_even_when_provider_fails(self, service, provider):
        service.login("jan@securyflex.nl", VALID_PASSWORD)
        provider.sign_out.side_effect = ProviderError("network-request-failed")

        service.logout()

        assert not service.is_logged_in
        assert service.current_user_id is None
        assert service.current_user_data == {}
        assert service._sessions.get_session("uid-1") is None

    def test_check_auth_state_bumps_activity(self, service, clock):
        service.login("jan@securyflex.nl", VALID_PASSWORD)
        clock.advance(minutes=20)
        assert service.check_auth_state()
        clock.advance(minutes=20)
        assert service.check_auth_state()

    def test_check_auth_state_logs_out_expired_session(self, service, clock):
        service.login("jan@securyflex.nl", VALID_PASSWORD)
        clock.advance(minutes=30)

        assert service.check_auth_state() is False
        assert not service.is_logged_in

    def test_check_auth_state_restores_provider_session(self, service, provider, verified_user):
        provider.current_user.return_value = verified_user

        assert service.check_auth_state() is True
        assert service.current_user_id == "uid-1"
        assert service._sessions.is_session_valid("uid-1")

    def test_check_auth_state_without_any_user(self, service):
        assert service.check_auth_state() is False

    def test_initialize_restores_and_survives_errors(self, service, provider, verified_user):
        provider.current_user.side_effect = ProviderError("network-request-failed")
        service.initialize()
        assert not service.is_logged_in

        provider.current_user.side_effect = None
        provider.current_user.return_value = verified_user
        service.initialize()
        assert service.is_logged_in

    def test_has_role(self, service):
        assert not service.has_role(UserType.GUARD)
        service.login("jan@securyflex.nl", VALID_PASSWORD)
        assert service.has_role("GUARD")
        assert not service.has_role(UserType.ADMIN)


class TestEmailVerification:
    """Verification mail and cooldown."""

    def test_no_user(self, service):
        assert service.send_email_verification().error_code == "no-user"
        assert service.resend_email_verification().error_code == "no-user"

    def test_already_verified(self, service, provider, verified_user):
        provider.current_user.return_value = verified_user
        assert service.resend_email_verification().error_code == "already-verified"

    def test_resend_cooldown(self, service, provider, clock):
        provider.current_user.return_value = ProviderUser(user_id="uid-5", email="a@b.nl")

        assert service.resend_email_verification().is_success
        clock.advance(seconds=30)
        blocked = service.resend_email_verification()
        assert blocked.error_code == "rate-limited"
        assert blocked.data == {"remaining_minutes": 2}
        clock.advance(minutes=1)
        assert service.resend_email_verification().data == {"remaining_minutes": 1}
        clock.advance(seconds=30)
        assert service.resend_email_verification().is_success
        assert provider.send_email_verification.call_count == 2

    def test_send_provider_error(self, service, provider):
        provider.current_user.return_value = ProviderUser(user_id="uid-5", email="a@b.nl")
        provider.send_email_verification.side_effect = ProviderError("too-many-requests")

        result = service.send_email_verification()

        assert result.error_code == "too-many-requests"

    def test_is_email_verified(self, service, provider, verified_user):
        assert service.is_email_verified() is False
        provider.reload_current_user.return_value = verified_user
        assert service.is_email_verified() is True
        provider.reload_current_user.side_effect = ProviderError("network-request-failed")
        assert service.is_email_verified() is False


class TestPasswordReset:
    """Password reset wrappers."""

    def test_reset_mail_and_cooldown(self, service, provider, clock):
        assert service.send_password_reset_email("Jan@SecuryFlex.nl").is_success
        provider.send_password_reset_email.assert_called_once_with("Jan@SecuryFlex.nl")

        blocked = service.send_password_reset_email("jan@securyflex.nl")
        assert blocked.error_code == "rate-limited"
        assert blocked.data == {"remaining_minutes": 5}

        clock.advance(minutes=5)
        assert service.send_password_reset_email("jan@securyflex.nl").is_success

    def test_reset_accepts_surrounding_whitespace(self, service, provider):
        assert service.send_password_reset_email("  jan@securyflex.nl ").is_success
        provider.send_password_reset_email.assert_called_once_with("jan@securyflex.nl")

    def test_reset_invalid_email(self, service, provider):
        assert service.send_password_reset_email("fout").error_code == "invalid-email"
        provider.send_password_reset_email.assert_not_called()

    def test_failed_send_does_not_start_cooldown(self, service, provider):
        provider.send_password_reset_email.side_effect = ProviderError("user-not-found")
        assert service.send_password_reset_email("a@b.nl").error_code == "user-not-found"
        provider.send_password_reset_email.side_effect = None
        assert service.send_password_reset_email("a@b.nl").is_success

    def test_confirm_validates_password(self, service, provider):
        result = service.confirm_password_reset("code", "zwak")
        assert result.error_code == "weak-password"
        provider.confirm_password_reset.assert_not_called()

        assert service.confirm_password_reset("code", VALID_PASSWORD).is_success
        provider.confirm_password_reset.assert_called_once_with("code", VALID_PASSWORD)

    def test_confirm_expired_code(self, service, provider):
        provider.confirm_password_reset.side_effect = ProviderError("expired-action-code")
        result = service.confirm_password_reset("code", VALID_PASSWORD)
        assert result.error_code == "expired-action-code"
        assert "verlopen" in result.message

    def test_verify_code(self, service, provider):
        result = service.verify_password_reset_code("code")
        assert result.is_success
        assert result.data == {"email": "jan@securyflex.nl"}

        provider.verify_password_reset_code.side_effect = RuntimeError("boom")
        assert service.verify_password_reset_code("code").error_code == "unknown"


class TestProfileAndTerms:
    """Profile updates and terms acceptance."""

    def test_update_profile_requires_login(self, service, profiles):
        assert service.update_profile(name="Nieuw") is False
        profiles.update_document.assert_not_called()

    def test_update_profile(self, service, profiles, clock):
        service.login("jan@securyflex.nl", VALID_PASSWORD)
        profiles.update_document.reset_mock()

        assert service.update_profile(name=" Jan de Vries ", additional_data={"city": "Utrecht"})

        profiles.update_document.assert_called_once_with(
            "uid-1",
            {
                "lastUpdatedAt": clock.now.isoformat(),
                "name": "Jan de Vries",
                "city": "Utrecht",
            },
        )
        assert service.current_user_name == "Jan de Vries"
        assert service.current_user_data["city"] == "Utrecht"

    def test_update_profile_store_failure(self, service, profiles):
        service.login("jan@securyflex.nl", VALID_PASSWORD)
        profiles.update_document.side_effect = ProfileStoreError("down")
        assert service.update_profile(name="Nieuw") is False
        assert service.current_user_name == "Jan Jansen"

    def test_terms_are_cached(self, service, profiles):
        profiles.get_document.return_value = {"termsVersion": "2025.1"}

        assert service.has_accepted_current_terms("uid-1")
        assert service.has_accepted_current_terms("uid-1")
        profiles.get_document.assert_called_once_with("uid-1")

    def test_old_terms_version(self, service, profiles):
        profiles.get_document.return_value = {"termsVersion": "2024.2"}
        assert not service.has_accepted_current_terms("uid-1")
        assert not service.has_accepted_current_terms("")

    def test_terms_store_failure_is_not_cached(self, service, profiles):
        profiles.get_document.side_effect = ProfileStoreError("down")
        assert not service.has_accepted_current_terms("uid-1")
        profiles.get_document.side_effect = None
        profiles.get_document.return_value = {"termsVersion": "2025.1"}
        assert service.has_accepted_current_terms("uid-1")

    def test_accept_terms(self, service, profiles, clock):
        service.accept_current_terms("uid-1")

        profiles.update_document.assert_called_once_with(
            "uid-1",
            {"termsVersion": "2025.1", "termsAcceptedAt": clock.now.isoformat()},
        )
        assert service.has_accepted_current_terms("uid-1")
        profiles.get_document.assert_not_called()

    def test_accept_terms_propagates_store_errors(self, service, profiles):
        profiles.update_document.side_effect = ProfileStoreError("down")
        with pytest.raises(ProfileStoreError):
            service.accept_current_terms("uid-1")
        assert service._terms_cache == {}


class TestStatus:
    """Status helpers without demo mode."""

    def test_provider_status(self, service, provider):
        assert service.get_provider_status() == (
            "Supabase is configured and ready | Demo mode disabled"
        )
        provider.is_configured = False
        assert service.get_provider_status().startswith("Supabase not configured")
        assert service.get_available_demo_accounts() == []
        assert service.get_demo_account_info("guard@demo.nl") is None
