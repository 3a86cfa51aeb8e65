"""Data access layer."""

from securyflex.repositories.base_repository import BaseRepository
from securyflex.repositories.profile_repository import ProfileRepository, ProfileStoreError

__all__ = ["BaseRepository", "ProfileRepository", "ProfileStoreError"]
