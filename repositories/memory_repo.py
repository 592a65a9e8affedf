# ============================================================================
# IN-MEMORY LOGO STORE
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Repository - Process-local implementation of LogoStore
# PURPOSE: Development backend and test double with real store semantics
# CREATED: 14 OCT 2026
# ============================================================================
"""
In-Memory Logo Store

Dict-backed LogoStore. Applies the same rules the PostgreSQL store does:
owner checks on every read and write, revision numbers assigned as
count + 1, at most MAX_REVISIONS revisions per original, blank names
stored as "Untitled", and revisions cascade-deleted with their original.
"""

import logging
import time
import uuid
from typing import Callable, Dict, List, Optional

from core.contracts import MAX_REVISIONS, UNTITLED
from core.errors import LogoNotFoundError, RevisionLimitError
from core.models.logo import LogoMetadata, LogoParameters, LogoPayload
from repositories.base import LogoStore

logger = logging.getLogger(__name__)


def generate_logo_id() -> str:
    """Opaque, sortable-enough logo id."""
    return f"logo_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


class InMemoryLogoStore(LogoStore):
    """LogoStore held in a dict keyed by logo id."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._logos: Dict[str, LogoPayload] = {}

    def __len__(self) -> int:
        return len(self._logos)

    def add(self, logo: LogoPayload) -> LogoPayload:
        """Insert a fully formed record (seeding)."""
        self._logos[logo.id] = logo
        return logo

    async def fetch_originals(self, owner_id: str) -> List[LogoMetadata]:
        originals = [
            logo.to_metadata()
            for logo in self._logos.values()
            if logo.owner_id == owner_id and not logo.is_revision
        ]
        originals.sort(key=lambda logo: logo.created_at, reverse=True)
        return originals

    async def fetch_revisions(self, original_id: str, owner_id: str) -> List[LogoMetadata]:
        revisions = [
            logo.to_metadata()
            for logo in self._logos.values()
            if logo.owner_id == owner_id
            and logo.is_revision
            and logo.original_logo_id == original_id
        ]
        revisions.sort(key=lambda logo: logo.revision_number or 0)
        return revisions

    async def fetch_full_logo(self, logo_id: str, owner_id: str) -> Optional[LogoPayload]:
        logo = self._logos.get(logo_id)
        if logo is None or logo.owner_id != owner_id:
            return None
        return logo.model_copy()

    async def delete_logo(self, logo_id: str, owner_id: str) -> None:
        logo = self._logos.get(logo_id)
        if logo is None or logo.owner_id != owner_id:
            raise LogoNotFoundError(logo_id, operation="delete")

        del self._logos[logo_id]
        if not logo.is_revision:
            orphans = [
                other.id for other in self._logos.values()
                if other.original_logo_id == logo_id
            ]
            for orphan_id in orphans:
                del self._logos[orphan_id]
            if orphans:
                logger.debug(f"Cascade-deleted {len(orphans)} revisions of {logo_id}")

    async def rename_logo(self, logo_id: str, new_name: str, owner_id: str) -> None:
        logo = self._logos.get(logo_id)
        if logo is None or logo.owner_id != owner_id:
            raise LogoNotFoundError(logo_id, operation="rename")
        self._logos[logo_id] = logo.model_copy(
            update={"name": new_name.strip() or UNTITLED}
        )

    async def create_logo(
        self,
        owner_id: str,
        image_data_uri: str,
        parameters: LogoParameters,
        original_logo_id: Optional[str] = None,
        name: Optional[str] = None,
    ) -> LogoPayload:
        revision_number = None
        if original_logo_id:
            original = self._logos.get(original_logo_id)
            if original is None or original.owner_id != owner_id:
                raise LogoNotFoundError(original_logo_id, operation="create_revision")
            existing = await self.fetch_revisions(original_logo_id, owner_id)
            if len(existing) >= MAX_REVISIONS:
                raise RevisionLimitError(
                    f"Logo {original_logo_id} already has {MAX_REVISIONS} revisions",
                    operation="create_revision",
                    entity_id=original_logo_id,
                )
            revision_number = max((r.revision_number or 0) for r in existing) + 1 if existing else 1

        logo = LogoPayload(
            id=generate_logo_id(),
            owner_id=owner_id,
            name=(name or "").strip() or UNTITLED,
            created_at=int(self._clock() * 1000),
            parameters=parameters,
            is_revision=bool(original_logo_id),
            original_logo_id=original_logo_id or None,
            revision_number=revision_number,
            image_data_uri=image_data_uri,
        )
        self._logos[logo.id] = logo
        return logo
