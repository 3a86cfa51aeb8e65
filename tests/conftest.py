"""
Shared fixtures for the auth core tests.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from securyflex.config import AppConfig
from securyflex.identity_provider import IdentityProvider
from securyflex.logger import StructuredLogger
from securyflex.models.auth_models import ProviderUser
from securyflex.repositories.profile_repository import ProfileRepository


class FakeClock:
    """Controllable clock; call it to read, ``advance`` to move forward."""

    def __init__(self, start: datetime = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


VALID_PASSWORD = "Zomer!Vlinder47"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def logger():
    """Mock logger; assertions can inspect the calls."""
    return MagicMock(spec=StructuredLogger)


@pytest.fixture
def config():
    return AppConfig(
        _env_file=None,
        ENVIRONMENT="test",
        SUPABASE_URL="https://example.supabase.co",
        SUPABASE_ANON_KEY="anon-key",
        DEMO_MODE_ENABLED=False,
        LOG_FILE="",
    )


@pytest.fixture
def demo_config():
    return AppConfig(
        _env_file=None,
        ENVIRONMENT="development",
        SUPABASE_URL="https://example.supabase.co",
        SUPABASE_ANON_KEY="anon-key",
        DEMO_MODE_ENABLED=True,
        DEMO_GUARD_EMAIL="Guard@Demo.nl",
        DEMO_GUARD_PASSWORD="Wacht!Toren58x",
        DEMO_COMPANY_EMAIL="company@demo.nl",
        DEMO_COMPANY_PASSWORD="kort",
        LOG_FILE="",
    )


@pytest.fixture
def verified_user():
    return ProviderUser(user_id="uid-1", email="Jan@SecuryFlex.nl", email_verified=True)


@pytest.fixture
def provider(verified_user):
    """Identity provider mock that signs in a verified user."""
    mock = MagicMock(spec=IdentityProvider)
    mock.is_configured = True
    mock.sign_in.return_value = verified_user
    mock.sign_up.return_value = ProviderUser(user_id="uid-new", email="nieuw@securyflex.nl")
    mock.current_user.return_value = None
    mock.reload_current_user.return_value = None
    mock.verify_password_reset_code.return_value = "jan@securyflex.nl"
    return mock


@pytest.fixture
def profiles():
    """Profile store mock holding a guard profile for ``uid-1``."""
    mock = MagicMock(spec=ProfileRepository)
    mock.get_document.return_value = {
        "userType": "guard",
        "name": "Jan Jansen",
        "email": "jan@securyflex.nl",
    }
    return mock
