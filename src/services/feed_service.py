"""
Ranking and feed queries: popularity-ordered discovery, similar websites,
website details and an owner's paginated saves.
"""
import logging
from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.board import Board
from models.board_item import BoardItem
from models.website import Website
from schemas.board_item import WapSort
from services import board_item_service, board_service, website_service
from services.exceptions import InvalidInputError
from services.utils import matches_search, normalize_search
from services.website_service import build_text_search_filter, clamp_limit

logger = logging.getLogger(__name__)

EXPLORE_DEFAULT = 120
EXPLORE_MIN = 10
EXPLORE_MAX = 300
SIMILAR_DEFAULT = 8
SIMILAR_MAX = 24
USER_WAPS_DEFAULT = 24
USER_WAPS_MAX = 100


@dataclass(frozen=True)
class ExploreEntry:
    """A website with its distinct-owner public save count."""

    website: Website
    public_save_count: int


@dataclass(frozen=True)
class WebsiteDetails:
    """A website plus the requesting owner's membership, if any."""

    website: Website
    is_saved: bool
    board_item_id: UUID | None


@dataclass(frozen=True)
class UserWapEntry:
    """One membership of an owner resolved to its website."""

    board_item: BoardItem
    website: Website


@dataclass(frozen=True)
class UserWapsResult:
    """A page of memberships and the cursor to continue from."""

    items: list[UserWapEntry]
    cursor: str | None
    has_more: bool


async def explore_feed(
    db: AsyncSession,
    search: str | None = None,
    limit: int | None = None,
) -> list[ExploreEntry]:
    """
    Public discovery feed.

    Candidates are visited in save_count order (desc, newest first on ties).
    For each, the public save count is recomputed from memberships as the
    number of distinct owners holding the website on a public board; the
    cached Website.public_save_count is not consulted. Websites without any
    public save are skipped. Collection stops at ``limit`` (10..300, default
    120) and the result is ordered by the recomputed count, desc.
    """
    lim = clamp_limit(limit, EXPLORE_DEFAULT, EXPLORE_MIN, EXPLORE_MAX)
    public_owners = func.count(distinct(Board.owner_key)).label("public_owners")

    stmt = (
        select(Website, public_owners)
        .join(BoardItem, BoardItem.website_id == Website.id)
        .join(Board, Board.id == BoardItem.board_id)
        .where(Board.is_public.is_(True))
    )
    normalized = normalize_search(search)
    if normalized:
        stmt = stmt.where(build_text_search_filter(normalized))

    stmt = (
        stmt.group_by(Website.id)
        .order_by(Website.save_count.desc(), Website.created_at.desc())
        .limit(lim)
    )
    result = await db.execute(stmt)
    entries = [
        ExploreEntry(website=website, public_save_count=count)
        for website, count in result.all()
        if count > 0
    ]
    # Stable: equal counts keep the save_count order
    entries.sort(key=lambda e: e.public_save_count, reverse=True)
    return entries


async def get_similar_websites(
    db: AsyncSession,
    slug: str,
    limit: int | None = None,
) -> list[Website]:
    """
    Websites sharing at least one category with the website at ``slug``.

    Ordered by cached public_save_count desc, then save_count desc. A seed
    without categories (or an unknown slug) yields an empty list.
    """
    lim = clamp_limit(limit, SIMILAR_DEFAULT, 1, SIMILAR_MAX)
    seed = await website_service.get_by_slug(db, slug)
    if seed is None or not seed.categories:
        return []

    seed_categories = set(seed.categories)
    result = await db.execute(
        select(Website)
        .where(Website.id != seed.id)
        .order_by(
            Website.public_save_count.desc(),
            Website.save_count.desc(),
            Website.created_at.desc(),
        ),
    )
    similar = []
    for website in result.scalars():
        if seed_categories.intersection(website.categories or []):
            similar.append(website)
            if len(similar) >= lim:
                break
    return similar


async def get_website_details(
    db: AsyncSession,
    slug: str,
    owner_key: str | None = None,
) -> WebsiteDetails | None:
    """Website by slug plus whether ``owner_key`` (if given) has saved it."""
    website = await website_service.get_by_slug(db, slug)
    if website is None:
        return None

    board_item_id = None
    if owner_key:
        membership = await board_item_service.find_membership(db, owner_key, website.id)
        if membership is not None:
            board_item_id = membership.id

    return WebsiteDetails(
        website=website,
        is_saved=board_item_id is not None,
        board_item_id=board_item_id,
    )


def _by_title(entry: UserWapEntry, position: int) -> tuple:
    return (entry.website.title.casefold(), position)


def _by_popularity(entry: UserWapEntry, position: int) -> tuple:
    return (-(entry.website.save_count or 0), position)


# RECENT keeps the page order (newest membership first)
_WAP_SORT_KEYS: dict[WapSort, Callable[[UserWapEntry, int], tuple]] = {
    WapSort.AZ: _by_title,
    WapSort.POPULAR: _by_popularity,
}


def sort_user_waps(entries: list[UserWapEntry], sort: WapSort) -> list[UserWapEntry]:
    """Order a page of memberships; ties keep their page order."""
    key = _WAP_SORT_KEYS.get(sort)
    if key is None:
        return list(entries)
    indexed = list(enumerate(entries))
    indexed.sort(key=lambda pair: key(pair[1], pair[0]))
    return [entry for _, entry in indexed]


def _parse_cursor(cursor: str) -> UUID:
    try:
        return UUID(cursor)
    except ValueError as e:
        raise InvalidInputError(f"Invalid cursor: {cursor}") from e


async def list_user_waps(  # noqa: PLR0913
    db: AsyncSession,
    owner_key: str,
    search: str | None = None,
    tag: str | None = None,
    board_slug: str | None = None,
    sort: WapSort = WapSort.RECENT,
    limit: int | None = None,
    cursor: str | None = None,
) -> UserWapsResult:
    """
    Cursor-paginated scan of an owner's memberships, newest first.

    The page is read first; search (title, canonical URL, origin) and tag
    (case-insensitive exact category match) filters and the requested sort
    then apply to that page only, so a filtered page can be shorter than
    ``limit`` while ``has_more`` is still true.

    An unknown ``board_slug`` leaves the scan unfiltered.

    Raises:
        InvalidInputError: If the cursor is malformed.
    """
    lim = clamp_limit(limit, USER_WAPS_DEFAULT, 1, USER_WAPS_MAX)

    stmt = select(BoardItem).where(BoardItem.owner_key == owner_key)
    if board_slug:
        board = await board_service.get_by_owner_and_slug(db, owner_key, board_slug)
        if board is not None:
            stmt = stmt.where(BoardItem.board_id == board.id)
    if cursor:
        stmt = stmt.where(BoardItem.id < _parse_cursor(cursor))

    # One extra row tells us whether another page exists; ids are time-ordered
    result = await db.execute(stmt.order_by(BoardItem.id.desc()).limit(lim + 1))
    page = list(result.scalars().all())
    has_more = len(page) > lim
    page = page[:lim]
    next_cursor = str(page[-1].id) if page else None

    website_ids = {item.website_id for item in page}
    websites: dict[UUID, Website] = {}
    if website_ids:
        rows = await db.execute(select(Website).where(Website.id.in_(website_ids)))
        websites = {w.id: w for w in rows.scalars()}

    normalized_search = normalize_search(search)
    normalized_tag = normalize_search(tag)

    entries = []
    for item in page:
        website = websites.get(item.website_id)
        if website is None:
            continue
        if not matches_search(
            normalized_search, website.title, website.canonical_url, website.origin,
        ):
            continue
        if normalized_tag and not any(
            c.lower() == normalized_tag for c in (website.categories or [])
        ):
            continue
        entries.append(UserWapEntry(board_item=item, website=website))

    return UserWapsResult(
        items=sort_user_waps(entries, sort),
        cursor=next_cursor,
        has_more=has_more,
    )
