"""Pydantic schemas for the public discovery feed."""
from uuid import UUID

from pydantic import BaseModel


class ExploreItem(BaseModel):
    """
    A website in the explore feed.

    public_save_count here is the number of distinct owners that have the
    website on a public board, computed at read time.
    """

    id: UUID
    slug: str
    title: str
    description: str
    origin: str
    categories: list[str]
    favicon_url: str | None
    canonical_url: str
    public_save_count: int
