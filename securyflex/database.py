"""
Supabase Connection.

Owns the single Supabase client shared by the identity provider
adapter (``auth`` API) and the profile repository (``profiles`` table).

When ``supabase_url`` or ``supabase_key`` is empty the client is **not**
created.  The auth core then reports ``firebase-not-configured`` for
every operation that needs the provider instead of failing at start-up.

Usage (dependency injection at app startup)::

    from securyflex.database import SupabaseConnection
    from securyflex.logger import StructuredLogger

    connection = SupabaseConnection(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        logger=StructuredLogger(name="database"),
    )
"""

from __future__ import annotations

from typing import Optional

from supabase import create_client, Client as SupabaseClient

from securyflex.logger import StructuredLogger


class SupabaseConnection:
    """Lazily-usable wrapper around the Supabase client.

    Fully configured at construction time via dependency injection.

    Parameters
    ----------
    supabase_url:
        The Supabase project URL (e.g. ``https://xyz.supabase.co``).
        May be empty when the provider is not configured.
    supabase_key:
        The Supabase anonymous key.  May be empty.
    logger:
        A ``StructuredLogger`` instance for structured JSON log output.
    client:
        Pre-built client (tests inject a mock here).
    """

    def __init__(
        self,
        supabase_url: str,
        supabase_key: str,
        logger: StructuredLogger,
        client: Optional[SupabaseClient] = None,
    ) -> None:
        self._logger: StructuredLogger = logger
        self._client: Optional[SupabaseClient] = client

        if self._client is not None:
            return

        if supabase_url and supabase_key:
            try:
                self._client = create_client(supabase_url, supabase_key)
                self._logger.info("Supabase client initialized.")
            except (ValueError, TypeError) as exc:
                self._logger.warning(
                    "Supabase credential format error: %s. "
                    "Authentication is unavailable.",
                    exc,
                )
            except Exception as exc:
                self._logger.error(
                    "Unexpected Supabase initialization failure: %s. "
                    "Authentication is unavailable.",
                    exc,
                    exc_info=True,
                )
        else:
            self._logger.warning(
                "Supabase credentials not configured; authentication is unavailable."
            )

    @property
    def client(self) -> SupabaseClient:
        """Return the initialised Supabase client.

        Raises
        ------
        RuntimeError
            If the client was not initialised (provider not configured).
        """
        if self._client is None:
            raise RuntimeError(
                "Supabase client is not initialised. "
                "The identity provider is not configured."
            )
        return self._client

    @property
    def is_configured(self) -> bool:
        """``True`` when the Supabase client is available."""
        return self._client is not None
