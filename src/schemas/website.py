"""Pydantic schemas for website registry endpoints."""
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.validators import (
    normalize_categories,
    validate_description_length,
    validate_title_length,
)


class WebsiteSort(StrEnum):
    """Orderings supported by the website listing."""

    RECENT = "recent"
    POPULAR = "popular"


class WebsiteUpsert(BaseModel):
    """
    Schema for creating or refreshing a canonical website record.

    canonical_url is the dedup key; callers normally obtain it (and origin)
    from services.utils.normalize_to_homepage.
    """

    canonical_url: str = Field(min_length=1)
    origin: str = Field(min_length=1)
    title: str = Field(min_length=1)
    slug: str = ""
    description: str = ""
    categories: list[str] = []
    favicon_url: str | None = None
    og_image_url: str | None = None

    @field_validator("categories", mode="before")
    @classmethod
    def clean_categories(cls, v: list[str] | None) -> list[str]:
        """Trim and de-duplicate categories, preserving order."""
        return normalize_categories(v)

    @field_validator("title")
    @classmethod
    def check_title_length(cls, v: str) -> str:
        """Validate title length."""
        return validate_title_length(v)

    @field_validator("description")
    @classmethod
    def check_description_length(cls, v: str) -> str:
        """Validate description length."""
        return validate_description_length(v)


class WebsiteSummary(BaseModel):
    """Compact website shape used by lists and feeds."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    slug: str
    title: str
    description: str
    origin: str
    canonical_url: str
    categories: list[str]
    favicon_url: str | None
    og_image_url: str | None = None
    save_count: int
    public_save_count: int
    created_at: datetime
    updated_at: datetime


class WebsiteResponse(WebsiteSummary):
    """Full website record."""


class WebsiteIdsResponse(BaseModel):
    """Website ids in creation order (bulk seeding)."""

    ids: list[UUID]


class WebsiteDetailsResponse(BaseModel):
    """A website plus whether the requesting owner has saved it."""

    website: WebsiteResponse
    is_saved: bool
    board_item_id: UUID | None


class AddWebsiteRequest(BaseModel):
    """
    Schema for the add-website flow.

    Any metadata supplied here overrides what the scanner finds. ``save_to``
    controls where the new website is saved: nowhere, the caller's default
    board, or the public discovery board.
    """

    url: str = Field(min_length=1, max_length=2048)
    title: str | None = None
    slug: str | None = None
    description: str | None = None
    category: str | None = None
    favicon_url: str | None = None
    save_to: str = Field(default="discover", pattern="^(none|default|discover)$")

    @field_validator("title")
    @classmethod
    def check_title_length(cls, v: str | None) -> str | None:
        """Validate title length."""
        return validate_title_length(v)

    @field_validator("description")
    @classmethod
    def check_description_length(cls, v: str | None) -> str | None:
        """Validate description length."""
        return validate_description_length(v)


class AddWebsiteResponse(BaseModel):
    """Result of the add-website flow."""

    website: WebsiteResponse
    created: bool  # False when the canonical URL was already registered
    scanned: bool  # True when the metadata scanner ran
    board_item_id: UUID | None = None
    deduped: bool | None = None


class ScanRequest(BaseModel):
    """Schema for a scan preview."""

    url: str = Field(min_length=1, max_length=2048)


class ScanResponse(BaseModel):
    """Best-effort metadata for a homepage."""

    canonical_url: str
    origin: str
    title: str
    slug: str
    description: str
    category: str
    favicon_url: str
    error: str | None = None  # Why the fetch failed, when defaults were used
