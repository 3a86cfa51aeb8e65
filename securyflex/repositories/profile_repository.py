"""
Profile Repository.

Per-user profile documents stored as rows of the Supabase ``profiles``
table, keyed by the identity-provider user id.  Field names are the
camelCase keys the mobile clients already read (``userType``,
``lastLoginAt``, ``termsVersion`` ...); timestamps are ISO-8601 strings.

Every failure, including an unconfigured client, surfaces as
``ProfileStoreError`` so callers handle a single exception type.
"""

from __future__ import annotations

from typing import Any, Optional

from securyflex.database import SupabaseConnection
from securyflex.logger import StructuredLogger
from securyflex.repositories.base_repository import BaseRepository


class ProfileStoreError(Exception):
    """Raised when the profile store cannot be read or written."""


class ProfileRepository(BaseRepository):
    """Data access layer for user profile documents."""

    TABLE = "profiles"

    def __init__(
        self,
        db: SupabaseConnection,
        logger: StructuredLogger,
        table: str = "profiles",
    ) -> None:
        super().__init__(db, logger)
        self.TABLE = table

    def get_document(self, user_id: str) -> Optional[dict[str, Any]]:
        """Fetch the profile fields for *user_id*, or ``None`` when absent."""
        try:
            response = (
                self.supabase.table(self.TABLE)
                .select("*")
                .eq("id", user_id)
                .maybe_single()
                .execute()
            )
        except Exception as exc:
            self._logger.error("Failed to read profile %s: %s", user_id, exc)
            raise ProfileStoreError(f"Could not read profile {user_id}") from exc

        data = getattr(response, "data", None) if response is not None else None
        if not data:
            return None
        return {key: value for key, value in data.items() if key != "id"}

    def set_document(self, user_id: str, fields: dict[str, Any]) -> None:
        """Create or replace the profile for *user_id*."""
        payload = {**fields, "id": user_id}
        try:
            self.supabase.table(self.TABLE).upsert(payload).execute()
        except Exception as exc:
            self._logger.error("Failed to write profile %s: %s", user_id, exc)
            raise ProfileStoreError(f"Could not write profile {user_id}") from exc
        self._logger.info("Profile written: %s", user_id)

    def update_document(self, user_id: str, fields: dict[str, Any]) -> None:
        """Merge *fields* into the existing profile for *user_id*."""
        try:
            (
                self.supabase.table(self.TABLE)
                .update(fields)
                .eq("id", user_id)
                .execute()
            )
        except Exception as exc:
            self._logger.error("Failed to update profile %s: %s", user_id, exc)
            raise ProfileStoreError(f"Could not update profile {user_id}") from exc
