"""
Service layer for board memberships ("waps").

Dedup rule: an owner holds at most one membership per website, whichever of
their boards it sits on. Saving an already-saved website again (to any board)
returns the existing membership and writes nothing.
"""
import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.board import DEFAULT_BOARD_SLUG, Board
from models.board_item import BoardItem
from models.website import Website
from services import board_service, website_service
from services.counters import bump_website_counters, membership_delta
from services.exceptions import ForbiddenError, NotFoundError
from services.utils import normalize_search
from services.website_service import build_text_search_filter, clamp_limit

logger = logging.getLogger(__name__)

MEMBERSHIP_CONSTRAINT = "uq_board_items_owner_key_website_id"

LIST_MINE_DEFAULT = 500
LIST_MINE_MIN = 10
LIST_MINE_MAX = 2000


@dataclass(frozen=True)
class AddResult:
    """Membership id and whether it already existed."""

    board_item_id: UUID
    deduped: bool


def _is_membership_conflict(error: IntegrityError) -> bool:
    # PostgreSQL names the constraint; SQLite names the columns
    message = str(error)
    return (
        MEMBERSHIP_CONSTRAINT in message
        or "board_items.owner_key, board_items.website_id" in message
    )


async def find_membership(
    db: AsyncSession,
    owner_key: str,
    website_id: UUID,
) -> BoardItem | None:
    """The owner's membership for a website on any of their boards, if any."""
    result = await db.execute(
        select(BoardItem).where(
            BoardItem.website_id == website_id,
            BoardItem.owner_key == owner_key,
        ),
    )
    return result.scalars().first()


async def _require_website(db: AsyncSession, website_id: UUID) -> Website:
    website = await website_service.get_by_id(db, website_id)
    if website is None:
        raise NotFoundError("Website", website_id)
    return website


async def _insert_membership(
    db: AsyncSession,
    owner_key: str,
    board: Board,
    website_id: UUID,
) -> AddResult:
    """
    Insert a membership and bump the website counters.

    The (owner_key, website_id) unique constraint turns a concurrent duplicate
    save into a dedup hit instead of a second row.
    """
    item = BoardItem(owner_key=owner_key, board_id=board.id, website_id=website_id)
    try:
        async with db.begin_nested():  # Creates savepoint
            db.add(item)
    except IntegrityError as e:
        if not _is_membership_conflict(e):
            raise
        existing = await find_membership(db, owner_key, website_id)
        if existing is None:
            raise
        return AddResult(board_item_id=existing.id, deduped=True)

    await bump_website_counters(db, website_id, membership_delta(board.is_public, 1))
    return AddResult(board_item_id=item.id, deduped=False)


async def add_to_board(
    db: AsyncSession,
    owner_key: str,
    board_id: UUID,
    website_id: UUID,
) -> AddResult:
    """
    Save a website to a specific board of the owner.

    Raises:
        NotFoundError: If the board or website does not exist.
        ForbiddenError: If the board belongs to another owner.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    board = await board_service.get_owned_board(db, owner_key, board_id)
    await _require_website(db, website_id)

    existing = await find_membership(db, owner_key, website_id)
    if existing is not None:
        logger.debug("Owner %s already saved website %s", owner_key, website_id)
        return AddResult(board_item_id=existing.id, deduped=True)

    return await _insert_membership(db, owner_key, board, website_id)


async def add_to_default(db: AsyncSession, owner_key: str, website_id: UUID) -> AddResult:
    """
    Save a website to the owner's default board, creating that board if needed.

    The dedup check runs first, so an already-saved website never causes a
    default board to be created.

    Raises:
        NotFoundError: If the website does not exist.
    """
    await _require_website(db, website_id)

    existing = await find_membership(db, owner_key, website_id)
    if existing is not None:
        return AddResult(board_item_id=existing.id, deduped=True)

    board = await board_service.ensure_default_board(db, owner_key)
    return await _insert_membership(db, owner_key, board, website_id)


async def save_by_slug(
    db: AsyncSession,
    owner_key: str,
    website_slug: str,
    board_slug: str | None = None,
) -> AddResult:
    """
    Save a website identified by slug into the owner's board with ``board_slug``.

    The board (default: the owner's default board) is created as a private
    board when missing.

    Raises:
        NotFoundError: If no website has this slug.
    """
    website = await website_service.get_by_slug(db, website_slug)
    if website is None:
        raise NotFoundError("Website", website_slug)

    slug = (board_slug or "").strip() or DEFAULT_BOARD_SLUG
    board = await board_service.ensure_board(db, owner_key, slug)
    return await add_to_board(db, owner_key, board.id, website.id)


async def remove(db: AsyncSession, owner_key: str, board_item_id: UUID) -> None:
    """
    Delete a membership and decrement the website counters.

    public_save_count is decremented only if the board is public now.

    Raises:
        NotFoundError: If the membership or its board does not exist.
        ForbiddenError: If the board belongs to another owner.
    """
    item = await db.get(BoardItem, board_item_id)
    if item is None:
        raise NotFoundError("Board item", board_item_id)

    board = await board_service.get_board(db, item.board_id)
    if board is None:
        raise NotFoundError("Board", item.board_id)
    if board.owner_key != owner_key:
        raise ForbiddenError()

    website_id = item.website_id
    await db.delete(item)
    await db.flush()
    await bump_website_counters(db, website_id, membership_delta(board.is_public, -1))


async def list_mine(
    db: AsyncSession,
    owner_key: str,
    board_id: UUID | None = None,
    search: str | None = None,
    limit: int | None = None,
) -> list[Website]:
    """
    Websites saved by an owner, most recently updated first.

    Args:
        db: Database session.
        owner_key: Owner whose memberships are listed.
        board_id: Restrict to one board.
        search: Case-insensitive substring over title, description and origin.
        limit: Bounded to 10..2000 (default 500).

    Returns:
        Distinct websites ordered by updated_at desc, then title asc.
    """
    lim = clamp_limit(limit, LIST_MINE_DEFAULT, LIST_MINE_MIN, LIST_MINE_MAX)

    owned = select(BoardItem.website_id).where(BoardItem.owner_key == owner_key)
    if board_id is not None:
        owned = owned.where(BoardItem.board_id == board_id)

    # IN (subquery) collapses any duplicate memberships to one row per website
    stmt = select(Website).where(Website.id.in_(owned))

    normalized = normalize_search(search)
    if normalized:
        stmt = stmt.where(build_text_search_filter(normalized))

    stmt = stmt.order_by(Website.updated_at.desc(), Website.title.asc()).limit(lim)
    result = await db.execute(stmt)
    return list(result.scalars().all())
