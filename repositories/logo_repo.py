# ============================================================================
# LOGO REPOSITORY
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Repository - PostgreSQL implementation of LogoStore
# PURPOSE: Owner-partitioned logo CRUD; metadata queries skip the image column
# CREATED: 14 OCT 2026
# ============================================================================
"""
Logo Repository

CRUD operations for the logos table.
All SQL uses psycopg sql.SQL composition for injection safety.

Metadata reads never select image_data_uri, so listing a history of
hundreds of logos moves kilobytes, not megabytes. The image is read only
by fetch_full_logo.
"""

import logging
from typing import Any, Dict, List, Optional

from psycopg import sql
from psycopg.rows import dict_row
from psycopg.types.json import Json
from psycopg_pool import AsyncConnectionPool

from core.contracts import MAX_REVISIONS, UNTITLED
from core.errors import LogoNotFoundError, RepositoryError, RevisionLimitError
from core.models.logo import LogoMetadata, LogoParameters, LogoPayload
from repositories.base import LogoStore
from repositories.memory_repo import generate_logo_id
from .database import SCHEMA, TABLE_LOGOS

logger = logging.getLogger(__name__)

_METADATA_COLUMNS = sql.SQL(
    "id, owner_id, name, created_at, parameters, "
    "is_revision, original_logo_id, revision_number"
)


class PostgresLogoRepository(LogoStore):
    """Repository for stored logos."""

    def __init__(self, pool: AsyncConnectionPool):
        self.pool = pool

    async def fetch_originals(self, owner_id: str) -> List[LogoMetadata]:
        """All originals of an owner, newest first."""
        async with self.pool.connection() as conn:
            conn.row_factory = dict_row
            result = await conn.execute(
                sql.SQL("""
                    SELECT {} FROM {}
                    WHERE owner_id = %s AND is_revision = false
                    ORDER BY created_at DESC
                """).format(_METADATA_COLUMNS, TABLE_LOGOS),
                (owner_id,),
            )
            rows = await result.fetchall()
            return [self._row_to_metadata(row) for row in rows]

    async def fetch_revisions(self, original_id: str, owner_id: str) -> List[LogoMetadata]:
        """Revisions of one original, oldest revision first."""
        async with self.pool.connection() as conn:
            conn.row_factory = dict_row
            result = await conn.execute(
                sql.SQL("""
                    SELECT {} FROM {}
                    WHERE owner_id = %s AND is_revision = true AND original_logo_id = %s
                    ORDER BY revision_number ASC
                """).format(_METADATA_COLUMNS, TABLE_LOGOS),
                (owner_id, original_id),
            )
            rows = await result.fetchall()
            return [self._row_to_metadata(row) for row in rows]

    async def fetch_full_logo(self, logo_id: str, owner_id: str) -> Optional[LogoPayload]:
        """One logo with its image; None if missing or owned by someone else."""
        async with self.pool.connection() as conn:
            conn.row_factory = dict_row
            result = await conn.execute(
                sql.SQL("SELECT * FROM {} WHERE id = %s AND owner_id = %s").format(TABLE_LOGOS),
                (logo_id, owner_id),
            )
            row = await result.fetchone()
            if row is None:
                return None
            return LogoPayload(
                **self._row_to_metadata(row).model_dump(),
                image_data_uri=row["image_data_uri"],
            )

    async def delete_logo(self, logo_id: str, owner_id: str) -> None:
        """Delete a logo; revisions of an original go with it."""
        async with self.pool.connection() as conn:
            conn.row_factory = dict_row
            async with conn.transaction():
                result = await conn.execute(
                    sql.SQL(
                        "DELETE FROM {} WHERE id = %s AND owner_id = %s RETURNING is_revision"
                    ).format(TABLE_LOGOS),
                    (logo_id, owner_id),
                )
                row = await result.fetchone()
                if row is None:
                    raise LogoNotFoundError(logo_id, operation="delete")

                if not row["is_revision"]:
                    cascade = await conn.execute(
                        sql.SQL(
                            "DELETE FROM {} WHERE original_logo_id = %s AND owner_id = %s"
                        ).format(TABLE_LOGOS),
                        (logo_id, owner_id),
                    )
                    if cascade.rowcount:
                        logger.info(f"Deleted {cascade.rowcount} revisions of {logo_id}")

        logger.info(f"Deleted logo {logo_id}")

    async def rename_logo(self, logo_id: str, new_name: str, owner_id: str) -> None:
        """Update only the name column."""
        async with self.pool.connection() as conn:
            result = await conn.execute(
                sql.SQL(
                    "UPDATE {} SET name = %s WHERE id = %s AND owner_id = %s"
                ).format(TABLE_LOGOS),
                (new_name.strip() or UNTITLED, logo_id, owner_id),
            )
            if result.rowcount == 0:
                raise LogoNotFoundError(logo_id, operation="rename")

    async def create_logo(
        self,
        owner_id: str,
        image_data_uri: str,
        parameters: LogoParameters,
        original_logo_id: Optional[str] = None,
        name: Optional[str] = None,
    ) -> LogoPayload:
        """Insert an original, or the next revision of original_logo_id."""
        revision_number = None
        if original_logo_id:
            existing = await self.fetch_revisions(original_logo_id, owner_id)
            if len(existing) >= MAX_REVISIONS:
                raise RevisionLimitError(
                    f"Logo {original_logo_id} already has {MAX_REVISIONS} revisions",
                    operation="create_revision",
                    entity_id=original_logo_id,
                )
            revision_number = max((r.revision_number or 0) for r in existing) + 1 if existing else 1

        async with self.pool.connection() as conn:
            conn.row_factory = dict_row
            try:
                result = await conn.execute(
                    sql.SQL("""
                        INSERT INTO {} (
                            id, owner_id, name, created_at, parameters,
                            is_revision, original_logo_id, revision_number, image_data_uri
                        ) VALUES (
                            %(id)s, %(owner_id)s, %(name)s,
                            (extract(epoch from now()) * 1000)::bigint, %(parameters)s,
                            %(is_revision)s, %(original_logo_id)s, %(revision_number)s,
                            %(image_data_uri)s
                        )
                        RETURNING *
                    """).format(TABLE_LOGOS),
                    {
                        "id": generate_logo_id(),
                        "owner_id": owner_id,
                        "name": (name or "").strip() or UNTITLED,
                        "parameters": Json(parameters.to_store()),
                        "is_revision": bool(original_logo_id),
                        "original_logo_id": original_logo_id or None,
                        "revision_number": revision_number,
                        "image_data_uri": image_data_uri,
                    },
                )
            except Exception as e:
                raise RepositoryError(
                    f"Failed to save logo: {e}", operation="create"
                ) from e
            row = await result.fetchone()

        logo = LogoPayload(
            **self._row_to_metadata(row).model_dump(),
            image_data_uri=row["image_data_uri"],
        )
        logger.info(f"Saved logo {logo.id} (revision={logo.revision_number})")
        return logo

    async def ensure_schema(self) -> None:
        """Create the schema and logos table if missing (development bootstrap)."""
        async with self.pool.connection() as conn:
            await conn.execute(
                sql.SQL("CREATE SCHEMA IF NOT EXISTS {}").format(sql.Identifier(SCHEMA))
            )
            await conn.execute(LOGOS_DDL)
        logger.info(f"Ensured table {SCHEMA}.logos")

    def _row_to_metadata(self, row: Dict[str, Any]) -> LogoMetadata:
        """Convert a database row to a LogoMetadata instance."""
        return LogoMetadata(
            id=row["id"],
            owner_id=row["owner_id"],
            name=row.get("name") or UNTITLED,
            created_at=int(row["created_at"]),
            parameters=LogoParameters.model_validate(row.get("parameters") or {}),
            is_revision=row.get("is_revision", False),
            original_logo_id=row.get("original_logo_id"),
            revision_number=row.get("revision_number"),
        )


# ============================================================================
# DDL
# ============================================================================

LOGOS_DDL = sql.SQL("""
    CREATE TABLE IF NOT EXISTS {} (
        id               VARCHAR(64) PRIMARY KEY,
        owner_id         VARCHAR(320) NOT NULL,
        name             VARCHAR(200) NOT NULL DEFAULT 'Untitled',
        created_at       BIGINT NOT NULL,
        parameters       JSONB NOT NULL DEFAULT '{{}}'::jsonb,
        is_revision      BOOLEAN NOT NULL DEFAULT false,
        original_logo_id VARCHAR(64),
        revision_number  INTEGER CHECK (revision_number >= 1),
        image_data_uri   TEXT NOT NULL,
        UNIQUE (original_logo_id, revision_number)
    )
""").format(TABLE_LOGOS)
