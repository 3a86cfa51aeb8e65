"""
SecuryFlex Authentication Core Entry Point.

Bootstraps the dependency graph via constructor injection, restores a
persisted provider session if one exists, and reports the provider /
demo-mode status.  Every subsystem is wired here; no module-level
globals.

Usage::

    python main.py
"""

from __future__ import annotations

import sys
import traceback

from securyflex.config import get_config
from securyflex.logger import StructuredLogger, get_logger
from securyflex.services import create_services


def main() -> int:
    """Wire dependencies, restore the session and log the auth status."""
    logger: StructuredLogger = get_logger("main")
    logger.info("Starting SecuryFlex auth core...")

    # ------------------------------------------------------------------
    # 1. Configuration (from .env / environment variables)
    # ------------------------------------------------------------------
    config = get_config()

    # ------------------------------------------------------------------
    # 2. Service Container (single composition root)
    # ------------------------------------------------------------------
    services = create_services(config=config, logger=get_logger("services"))
    auth_service = services["auth_service"]

    # ------------------------------------------------------------------
    # 3. Session restore
    # ------------------------------------------------------------------
    auth_service.initialize()

    logger.info("Auth status: %s", auth_service.get_provider_status())
    if auth_service.is_logged_in:
        logger.info(
            "Restored session for %s (%s)",
            auth_service.current_user_id,
            auth_service.current_user_type,
        )
    for email in auth_service.get_available_demo_accounts():
        logger.info("Demo account available: %s", email)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        sys.stderr.write(
            f"FATAL: {type(exc).__name__}: {exc}\n"
            + "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        )
        sys.exit(1)
