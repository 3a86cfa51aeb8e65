"""
Tests for the lockout manager.
"""

from datetime import timedelta

import pytest

from securyflex.services.lockout_manager import LockoutManager


@pytest.fixture
def lockouts(clock):
    return LockoutManager(clock=clock)


class TestLockout:
    """Failure counting, lock engagement and lazy expiry."""

    def test_five_failures_lock_the_account(self, lockouts):
        for _ in range(4):
            assert lockouts.record_failed_login("a@b.nl") is False
        assert not lockouts.is_locked_out("a@b.nl")
        assert lockouts.record_failed_login("a@b.nl") is True
        assert lockouts.is_locked_out("a@b.nl")

    def test_sixth_failure_does_not_restamp(self, lockouts, clock):
        for _ in range(5):
            lockouts.record_failed_login("a@b.nl")
        locked_at = lockouts.state("a@b.nl").locked_at
        clock.advance(hours=1)
        assert lockouts.record_failed_login("a@b.nl") is False
        assert lockouts.is_locked_out("a@b.nl")
        assert lockouts.state("a@b.nl").locked_at == locked_at
        assert lockouts.failed_count("a@b.nl") == 6

    def test_lock_expires_after_24_hours(self, lockouts, clock):
        for _ in range(5):
            lockouts.record_failed_login("a@b.nl")
        clock.advance(hours=23, minutes=59)
        assert lockouts.is_locked_out("a@b.nl")
        clock.advance(minutes=1)
        assert not lockouts.is_locked_out("a@b.nl")
        assert lockouts.failed_count("a@b.nl") == 0
        assert not lockouts.state("a@b.nl").is_locked

    def test_reset_on_success_is_idempotent(self, lockouts):
        for _ in range(5):
            lockouts.record_failed_login("a@b.nl")
        lockouts.reset_on_success("a@b.nl")
        assert not lockouts.is_locked_out("a@b.nl")
        lockouts.reset_on_success("a@b.nl")
        assert not lockouts.is_locked_out("a@b.nl")
        assert lockouts.failed_count("a@b.nl") == 0

    def test_identifier_is_normalised(self, lockouts):
        for _ in range(5):
            lockouts.record_failed_login(" A@B.nl")
        assert lockouts.is_locked_out("a@b.nl")

    def test_custom_threshold(self, clock):
        lockouts = LockoutManager(max_failed_logins=2, lockout_duration=timedelta(minutes=5), clock=clock)
        lockouts.record_failed_login("a@b.nl")
        assert lockouts.record_failed_login("a@b.nl") is True
        assert lockouts.max_failed_logins == 2
        clock.advance(minutes=5)
        assert not lockouts.is_locked_out("a@b.nl")
