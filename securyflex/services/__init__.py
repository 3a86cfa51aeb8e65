"""
Business Logic Services Package.

Contains the authentication policy components and the orchestrator.
Services depend on the repository layer for profile documents and on
the identity-provider adapter for credentials.

The ``create_services()`` factory wires every collaborator together,
returning a typed dict that the application layer can consume without
knowing the internal dependency graph.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional, TypedDict

from securyflex.auth import SessionManager
from securyflex.config import AppConfig
from securyflex.database import SupabaseConnection
from securyflex.identity_provider import IdentityProvider, SupabaseIdentityProvider
from securyflex.logger import StructuredLogger, get_logger
from securyflex.repositories.profile_repository import ProfileRepository
from securyflex.services.attempt_tracker import AttemptTracker, policies_from_config
from securyflex.services.auth_service import AuthService
from securyflex.services.auth_strategies import AuthStrategy, select_auth_strategy
from securyflex.services.lockout_manager import LockoutManager
from securyflex.utils.general import Clock, utc_now


class ServiceContainer(TypedDict):
    """Typed container for the wired authentication core."""

    connection: SupabaseConnection
    identity_provider: IdentityProvider
    profile_repository: ProfileRepository
    attempt_tracker: AttemptTracker
    lockout_manager: LockoutManager
    session_manager: SessionManager
    auth_strategy: AuthStrategy
    auth_service: AuthService


def create_services(
    config: AppConfig,
    connection: Optional[SupabaseConnection] = None,
    logger: Optional[StructuredLogger] = None,
    clock: Clock = utc_now,
) -> ServiceContainer:
    """
    Wire the connection, adapters, policy components and orchestrator.

    This is the single composition root for the service layer.  The
    application entry-point calls this once at startup; every component
    holds its state as instance fields, so one container equals one
    process-wide auth state.

    Args:
        config: Application configuration.
        connection: Pre-built Supabase connection (tests inject one backed
            by a mock client).  Built from ``config`` when omitted.
        logger: Logger shared by all services.
        clock: Source of the current instant for every time-based policy.

    Returns:
        ServiceContainer mapping component names to wired instances.
    """
    logger = logger or get_logger("services")

    # ------------------------------------------------------------------
    # 1. Infrastructure
    # ------------------------------------------------------------------
    if connection is None:
        connection = SupabaseConnection(
            supabase_url=config.SUPABASE_URL,
            supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
            logger=logger,
        )
    provider = SupabaseIdentityProvider(
        connection=connection,
        logger=logger,
        password_reset_redirect_url=config.PASSWORD_RESET_REDIRECT_URL,
    )
    profile_repo = ProfileRepository(db=connection, logger=logger, table=config.PROFILES_TABLE)

    # ------------------------------------------------------------------
    # 2. Policy components (no service dependencies)
    # ------------------------------------------------------------------
    attempts = AttemptTracker(policies=policies_from_config(config), clock=clock)
    lockouts = LockoutManager(
        max_failed_logins=config.LOCKOUT_MAX_FAILED_LOGINS,
        lockout_duration=timedelta(hours=config.LOCKOUT_HOURS),
        clock=clock,
    )
    sessions = SessionManager(
        idle_timeout=timedelta(minutes=config.SESSION_IDLE_TIMEOUT_MINUTES),
        absolute_timeout=timedelta(hours=config.SESSION_ABSOLUTE_TIMEOUT_HOURS),
        clock=clock,
    )

    # ------------------------------------------------------------------
    # 3. Orchestration
    # ------------------------------------------------------------------
    strategy = select_auth_strategy(config, provider, profile_repo, logger, clock=clock)
    auth_service = AuthService(
        provider=provider,
        profiles=profile_repo,
        strategy=strategy,
        attempts=attempts,
        lockouts=lockouts,
        sessions=sessions,
        config=config,
        logger=logger,
        clock=clock,
    )

    return ServiceContainer(
        connection=connection,
        identity_provider=provider,
        profile_repository=profile_repo,
        attempt_tracker=attempts,
        lockout_manager=lockouts,
        session_manager=sessions,
        auth_strategy=strategy,
        auth_service=auth_service,
    )
