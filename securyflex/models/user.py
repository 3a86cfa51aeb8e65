"""
User Identity Model.

The profile store (Supabase ``profiles`` table) owns the full profile
document.  The auth core only reads and writes a handful of fields
(``userType``, ``name``, ``email``, ``lastLoginAt``, terms acceptance),
and keeps the rest untouched in ``raw_profile_fields``.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from securyflex.models.enums import UserType


class UserIdentity(BaseModel):
    """The authenticated user as seen by the UI layer."""

    user_id: str
    user_type: UserType
    name: str
    email: Optional[str] = None
    raw_profile_fields: dict[str, Any] = Field(default_factory=dict)
    is_demo: bool = False

    model_config = {"from_attributes": True}

    @classmethod
    def from_profile(cls, user_id: str, fields: dict[str, Any]) -> "UserIdentity":
        """Build an identity from a stored profile document.

        Missing ``userType`` falls back to ``guard`` and missing ``name``
        to ``"Unknown User"``, matching how older documents were read.
        Stored profiles never produce a demo identity; only the demo
        sign-in strategy sets ``is_demo``.
        """
        raw_type = str(fields.get("userType") or UserType.GUARD).lower()
        try:
            user_type = UserType(raw_type)
        except ValueError:
            user_type = UserType.GUARD
        return cls(
            user_id=user_id,
            user_type=user_type,
            name=fields.get("name") or "Unknown User",
            email=fields.get("email"),
            raw_profile_fields=dict(fields),
        )
