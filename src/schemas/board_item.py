"""Pydantic schemas for saving websites into boards ("waps")."""
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class WapSort(StrEnum):
    """Orderings supported by list_user_waps."""

    RECENT = "recent"
    AZ = "az"
    POPULAR = "popular"


class AddToBoardRequest(BaseModel):
    """Save a website; without board_id it goes to the owner's default board."""

    website_id: UUID
    board_id: UUID | None = None


class AddToBoardResult(BaseModel):
    """Outcome of a save: the membership id and whether it already existed."""

    board_item_id: UUID
    deduped: bool


class SaveBySlugRequest(BaseModel):
    """Save a website identified by slug into the owner's board with ``board_slug``."""

    website_slug: str = Field(min_length=1)
    board_slug: str | None = None


class SaveBySlugResult(BaseModel):
    """Outcome of a save by slug."""

    board_item_id: UUID
    already_saved: bool


class UserWapWebsite(BaseModel):
    """Website fields carried by each user wap."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    slug: str
    canonical_url: str
    origin: str
    favicon_url: str | None
    og_image_url: str | None
    categories: list[str]
    save_count: int


class UserWap(BaseModel):
    """One saved website of an owner."""

    id: UUID  # board item id
    created_at: datetime
    board_id: UUID
    website_id: UUID
    website: UserWapWebsite


class PageInfo(BaseModel):
    """Opaque continuation cursor for the next page."""

    cursor: str | None
    has_more: bool


class UserWapsPage(BaseModel):
    """A page of an owner's saved websites."""

    items: list[UserWap]
    page_info: PageInfo
