# ============================================================================
# LOGO MODELS
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Domain model - Logo metadata, payload, revision groups
# PURPOSE: Lightweight listing records, heavy image records, display resolution
# LAST_REVIEWED: 14 OCT 2026
# ============================================================================
"""
Logo Models

Two shapes of the same stored logo:
- LogoMetadata: everything except the image; what listings and filters use
- LogoPayload: metadata plus the base64 image data URI; fetched per card

Revision chain:
    original (is_revision=False)
      └─ revision 1..3 (is_revision=True, original_logo_id=original.id)

The displayed logo of a group is its highest-numbered revision, or the
original when there are none. View, edit, delete, catalog and selection
all act on the displayed logo.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from core.contracts import MAX_REVISIONS, UNTITLED


class LogoParameters(BaseModel):
    """
    Generation parameters stored with a logo.

    Opaque to this layer apart from company name and industry, which the
    filters read. Unknown keys are preserved as-is.
    """
    company_name: Optional[str] = Field(default=None, alias="companyName")
    industry: Optional[str] = Field(default=None)
    style: Optional[str] = Field(default=None)

    model_config = {"extra": "allow", "populate_by_name": True}

    def to_store(self) -> Dict[str, Any]:
        """Dump with the camelCase keys the store and catalog API expect."""
        return self.model_dump(by_alias=True, exclude_none=True)


class LogoMetadata(BaseModel):
    """
    A stored logo without its image.

    Invariant: originals carry neither original_logo_id nor revision_number;
    revisions carry both.
    """

    id: str = Field(..., min_length=1, description="Opaque unique id")
    owner_id: str = Field(..., min_length=1, description="Partition key (owner email)")
    name: str = Field(default=UNTITLED)
    created_at: int = Field(..., ge=0, description="Epoch milliseconds, immutable")
    parameters: LogoParameters = Field(default_factory=LogoParameters)
    is_revision: bool = Field(default=False)
    original_logo_id: Optional[str] = Field(default=None)
    revision_number: Optional[int] = Field(default=None, ge=1)

    @field_validator("name", mode="before")
    @classmethod
    def default_blank_name(cls, value):
        """Blank names are stored as the placeholder."""
        if value is None or not str(value).strip():
            return UNTITLED
        return value

    @model_validator(mode="after")
    def check_revision_fields(self) -> "LogoMetadata":
        if self.is_revision:
            if not self.original_logo_id or self.revision_number is None:
                raise ValueError(
                    "Revisions require original_logo_id and revision_number"
                )
        elif self.original_logo_id is not None or self.revision_number is not None:
            raise ValueError(
                "Originals must not set original_logo_id or revision_number"
            )
        return self

    @property
    def company_name(self) -> Optional[str]:
        return self.parameters.company_name

    @property
    def industry(self) -> Optional[str]:
        return self.parameters.industry

    def matches_text(self, query: str) -> bool:
        """Case-insensitive substring match on name or company name."""
        query = query.lower()
        if self.name and query in self.name.lower():
            return True
        company = self.company_name
        return bool(company) and query in company.lower()

    def created_date(self) -> str:
        """created_at rendered as YYYY-MM-DD in UTC."""
        return datetime.fromtimestamp(
            self.created_at / 1000, tz=timezone.utc
        ).strftime("%Y-%m-%d")


class LogoPayload(LogoMetadata):
    """A stored logo including its base64 image data URI."""

    image_data_uri: str = Field(..., min_length=1)

    def to_metadata(self) -> LogoMetadata:
        """Drop the image, keeping every listing field."""
        return LogoMetadata.model_validate(
            self.model_dump(exclude={"image_data_uri"})
        )


class LogoGroup(BaseModel):
    """
    An original logo with its revisions, as listed in history.

    Revisions are ordered by revision_number ascending.
    """

    original: LogoMetadata
    revisions: List[LogoMetadata] = Field(default_factory=list)

    @property
    def id(self) -> str:
        return self.original.id

    @property
    def latest_revision(self) -> Optional[LogoMetadata]:
        """Highest-numbered revision, if any."""
        if not self.revisions:
            return None
        return max(self.revisions, key=lambda r: r.revision_number or 0)

    @computed_field
    @property
    def displayed(self) -> LogoMetadata:
        """The logo actions and selection apply to."""
        return self.latest_revision or self.original

    @computed_field
    @property
    def can_create_revision(self) -> bool:
        """False once the original has its maximum number of revisions."""
        return len(self.revisions) < MAX_REVISIONS

    def members(self) -> List[LogoMetadata]:
        """Original first, then revisions."""
        return [self.original, *self.revisions]

    def contains(self, logo_id: str) -> bool:
        return any(member.id == logo_id for member in self.members())
