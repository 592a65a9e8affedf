# ============================================================================
# LOGO STORE CONTRACT
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Repository - Abstract persistence contract
# PURPOSE: Operations every logo store must expose to the history layer
# CREATED: 14 OCT 2026
# ============================================================================
"""
Logo Store Contract

The history layer never talks to a database directly. It consumes the
operations below, which any key-value persistence can provide:

- fetch_originals / fetch_revisions: metadata only, never the image
- fetch_full_logo: metadata plus image, None when missing or foreign
- delete_logo / rename_logo: raise LogoNotFoundError for missing or
  foreign ids, RepositoryError for anything else

Deleting an original leaves its revisions to the store's cascade rules.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from core.models.logo import LogoMetadata, LogoParameters, LogoPayload


class LogoStore(ABC):
    """Abstract owner-partitioned logo persistence."""

    @abstractmethod
    async def fetch_originals(self, owner_id: str) -> List[LogoMetadata]:
        """All non-revision logos of an owner."""

    @abstractmethod
    async def fetch_revisions(self, original_id: str, owner_id: str) -> List[LogoMetadata]:
        """Revisions of one original, ordered by revision_number."""

    @abstractmethod
    async def fetch_full_logo(self, logo_id: str, owner_id: str) -> Optional[LogoPayload]:
        """One logo with its image, or None."""

    @abstractmethod
    async def delete_logo(self, logo_id: str, owner_id: str) -> None:
        """Delete one logo."""

    @abstractmethod
    async def rename_logo(self, logo_id: str, new_name: str, owner_id: str) -> None:
        """Change a logo's name in place."""

    @abstractmethod
    async def create_logo(
        self,
        owner_id: str,
        image_data_uri: str,
        parameters: LogoParameters,
        original_logo_id: Optional[str] = None,
        name: Optional[str] = None,
    ) -> LogoPayload:
        """Store a new original, or a revision when original_logo_id is set."""
