"""Public discovery feed endpoint."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session
from schemas.feed import ExploreItem
from services import feed_service

router = APIRouter(prefix="/explore", tags=["explore"])


@router.get("/", response_model=list[ExploreItem])
async def explore(
    q: str | None = Query(default=None, description="Search title, description and origin"),
    limit: int | None = Query(default=None, description="Maximum results (10..300, default 120)"),
    db: AsyncSession = Depends(get_async_session),
) -> list[ExploreItem]:
    """
    Websites saved to public boards, ordered by how many distinct owners
    saved them publicly.
    """
    entries = await feed_service.explore_feed(db, search=q, limit=limit)
    return [
        ExploreItem(
            id=entry.website.id,
            slug=entry.website.slug,
            title=entry.website.title,
            description=entry.website.description,
            origin=entry.website.origin,
            categories=entry.website.categories or [],
            favicon_url=entry.website.favicon_url,
            canonical_url=entry.website.canonical_url,
            public_save_count=entry.public_save_count,
        )
        for entry in entries
    ]
