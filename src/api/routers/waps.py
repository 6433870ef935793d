"""Endpoints for saving websites into boards ("waps")."""
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_owner_key
from schemas.board_item import (
    AddToBoardRequest,
    AddToBoardResult,
    PageInfo,
    SaveBySlugRequest,
    SaveBySlugResult,
    UserWap,
    UserWapsPage,
    UserWapWebsite,
    WapSort,
)
from schemas.website import WebsiteSummary
from services import board_item_service, feed_service

router = APIRouter(prefix="/waps", tags=["waps"])


@router.post("/", response_model=AddToBoardResult, status_code=201)
async def add_wap(
    data: AddToBoardRequest,
    owner_key: str = Depends(get_owner_key),
    db: AsyncSession = Depends(get_async_session),
) -> AddToBoardResult:
    """
    Save a website to one of the caller's boards, or to their default board
    when ``board_id`` is omitted.

    Saving a website the caller already saved (on any board) returns the
    existing membership with ``deduped=true``.
    """
    if data.board_id is None:
        result = await board_item_service.add_to_default(db, owner_key, data.website_id)
    else:
        result = await board_item_service.add_to_board(
            db, owner_key, data.board_id, data.website_id,
        )
    return AddToBoardResult(board_item_id=result.board_item_id, deduped=result.deduped)


@router.post("/by-slug", response_model=SaveBySlugResult, status_code=201)
async def save_wap_by_slug(
    data: SaveBySlugRequest,
    owner_key: str = Depends(get_owner_key),
    db: AsyncSession = Depends(get_async_session),
) -> SaveBySlugResult:
    """Save a website by slug into the caller's board with ``board_slug``."""
    result = await board_item_service.save_by_slug(
        db, owner_key, data.website_slug, data.board_slug,
    )
    return SaveBySlugResult(board_item_id=result.board_item_id, already_saved=result.deduped)


@router.delete("/{board_item_id}", status_code=204)
async def remove_wap(
    board_item_id: UUID,
    owner_key: str = Depends(get_owner_key),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Remove one of the caller's saves."""
    await board_item_service.remove(db, owner_key, board_item_id)


@router.get("/mine", response_model=list[WebsiteSummary])
async def list_my_websites(
    board_id: UUID | None = Query(default=None, description="Restrict to one board"),
    q: str | None = Query(default=None, description="Search title, description and origin"),
    limit: int | None = Query(default=None, description="Maximum results (10..2000, default 500)"),
    owner_key: str = Depends(get_owner_key),
    db: AsyncSession = Depends(get_async_session),
) -> list[WebsiteSummary]:
    """Websites the caller saved, most recently updated first."""
    websites = await board_item_service.list_mine(
        db, owner_key, board_id=board_id, search=q, limit=limit,
    )
    return [WebsiteSummary.model_validate(w) for w in websites]


@router.get("/", response_model=UserWapsPage)
async def list_user_waps(  # noqa: PLR0913
    q: str | None = Query(default=None, description="Search title, URL and origin"),
    tag: str | None = Query(default=None, description="Exact category (case-insensitive)"),
    board_slug: str | None = Query(default=None, description="Restrict to one board"),
    sort: WapSort = Query(default=WapSort.RECENT, description="Ordering within the page"),
    limit: int | None = Query(default=None, description="Page size (1..100, default 24)"),
    cursor: str | None = Query(default=None, description="Cursor from the previous page"),
    owner_key: str = Depends(get_owner_key),
    db: AsyncSession = Depends(get_async_session),
) -> UserWapsPage:
    """
    The caller's saves, newest first, one page at a time.

    Filters and sort apply within the fetched page, so a page may hold fewer
    than ``limit`` items while ``has_more`` is still true.
    """
    result = await feed_service.list_user_waps(
        db,
        owner_key,
        search=q,
        tag=tag,
        board_slug=board_slug,
        sort=sort,
        limit=limit,
        cursor=cursor,
    )
    return UserWapsPage(
        items=[
            UserWap(
                id=entry.board_item.id,
                created_at=entry.board_item.created_at,
                board_id=entry.board_item.board_id,
                website_id=entry.board_item.website_id,
                website=UserWapWebsite.model_validate(entry.website),
            )
            for entry in result.items
        ],
        page_info=PageInfo(cursor=result.cursor, has_more=result.has_more),
    )
