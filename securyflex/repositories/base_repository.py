"""
Base Repository.

Provides shared infrastructure for all repositories:
- SupabaseConnection reference
- Logger reference
- Convenience property for accessing the client
"""

from __future__ import annotations

from supabase import Client as SupabaseClient

from securyflex.database import SupabaseConnection
from securyflex.logger import StructuredLogger


class BaseRepository:
    """Base class for all repositories. Receives dependencies via __init__."""

    TABLE: str = ""

    def __init__(self, db: SupabaseConnection, logger: StructuredLogger) -> None:
        self._db = db
        self._logger = logger

    @property
    def supabase(self) -> SupabaseClient:
        """Returns the Supabase client for cloud operations."""
        return self._db.client

    @property
    def is_available(self) -> bool:
        return self._db.is_configured
