"""Service layer for board operations."""
import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.board import DEFAULT_BOARD_NAME, DEFAULT_BOARD_SLUG, Board
from schemas.board import BoardCreate
from services.exceptions import ConflictError, ForbiddenError, InvalidInputError, NotFoundError
from services.utils import slugify

logger = logging.getLogger(__name__)

BOARD_SLUG_CONSTRAINT = "uq_boards_owner_key_slug"


def _is_slug_conflict(error: IntegrityError) -> bool:
    # PostgreSQL names the constraint; SQLite names the columns
    message = str(error)
    return BOARD_SLUG_CONSTRAINT in message or "boards.owner_key, boards.slug" in message


async def get_board(db: AsyncSession, board_id: UUID) -> Board | None:
    """Get a board by id (not owner-scoped; callers check ownership)."""
    return await db.get(Board, board_id)


async def get_owned_board(db: AsyncSession, owner_key: str, board_id: UUID) -> Board:
    """
    Get a board and assert it belongs to ``owner_key``.

    Raises:
        NotFoundError: If the board does not exist.
        ForbiddenError: If the board belongs to another owner.
    """
    board = await get_board(db, board_id)
    if board is None:
        raise NotFoundError("Board", board_id)
    if board.owner_key != owner_key:
        raise ForbiddenError()
    return board


async def get_by_owner_and_slug(db: AsyncSession, owner_key: str, slug: str) -> Board | None:
    """Get an owner's board by slug."""
    result = await db.execute(
        select(Board).where(Board.owner_key == owner_key, Board.slug == slug),
    )
    return result.scalar_one_or_none()


async def list_boards(db: AsyncSession, owner_key: str) -> list[Board]:
    """All boards of an owner, newest first."""
    result = await db.execute(
        select(Board)
        .where(Board.owner_key == owner_key)
        .order_by(Board.created_at.desc(), Board.id.desc()),
    )
    return list(result.scalars().all())


async def _get_or_insert(
    db: AsyncSession,
    owner_key: str,
    slug: str,
    name: str,
    is_public: bool,
) -> Board:
    """
    Insert-if-absent keyed on (owner_key, slug).

    The unique constraint makes concurrent first calls safe: the loser's
    savepoint is rolled back and the winner's row is returned. An existing
    board is returned unchanged (name and visibility are not patched).
    """
    existing = await get_by_owner_and_slug(db, owner_key, slug)
    if existing is not None:
        return existing

    board = Board(owner_key=owner_key, slug=slug, name=name, is_public=is_public)
    try:
        async with db.begin_nested():  # Creates savepoint
            db.add(board)
    except IntegrityError as e:
        if not _is_slug_conflict(e):
            raise
        # Race condition: another request created the board between our SELECT and INSERT
        existing = await get_by_owner_and_slug(db, owner_key, slug)
        if existing is None:
            raise
        return existing

    await db.refresh(board)
    logger.info("Created board %s/%s (public=%s)", owner_key, slug, is_public)
    return board


async def ensure_default_board(db: AsyncSession, owner_key: str) -> Board:
    """Return the owner's private "default" board, creating it as "My Waps" if absent."""
    return await _get_or_insert(
        db, owner_key, DEFAULT_BOARD_SLUG, DEFAULT_BOARD_NAME, is_public=False,
    )


async def ensure_public_board(db: AsyncSession, owner_key: str, slug: str, name: str) -> Board:
    """
    Return the owner's board with ``slug``, creating it as a public board if absent.

    An existing board is returned as is, even if it is private.
    """
    return await _get_or_insert(db, owner_key, slug, name, is_public=True)


async def ensure_board(db: AsyncSession, owner_key: str, slug: str) -> Board:
    """
    Return the owner's board with ``slug``, creating a private one if absent.

    The default slug gets the default board name; other boards are named
    after their slug.
    """
    name = DEFAULT_BOARD_NAME if slug == DEFAULT_BOARD_SLUG else slug
    return await _get_or_insert(db, owner_key, slug, name, is_public=False)


async def create_board(db: AsyncSession, owner_key: str, data: BoardCreate) -> Board:
    """
    Create a board explicitly.

    Raises:
        InvalidInputError: If no slug can be derived from the name.
        ConflictError: If the owner already has a board with this slug.
    """
    slug = slugify(data.slug or data.name)
    if not slug:
        raise InvalidInputError("Board slug must contain letters or digits")

    if await get_by_owner_and_slug(db, owner_key, slug) is not None:
        raise ConflictError(f"A board with slug '{slug}' already exists")

    board = Board(owner_key=owner_key, name=data.name.strip(), slug=slug, is_public=data.is_public)
    try:
        async with db.begin_nested():  # Creates savepoint
            db.add(board)
    except IntegrityError as e:
        if _is_slug_conflict(e):
            raise ConflictError(f"A board with slug '{slug}' already exists") from e
        raise
    await db.refresh(board)
    return board


async def set_public(db: AsyncSession, owner_key: str, board_id: UUID, is_public: bool) -> Board:
    """
    Change a board's visibility.

    Existing memberships keep the counters they contributed when they were
    added; only later adds/removes see the new visibility.

    Raises:
        NotFoundError: If the board does not exist.
        ForbiddenError: If the board belongs to another owner.
    """
    board = await get_owned_board(db, owner_key, board_id)
    board.is_public = is_public
    await db.flush()
    await db.refresh(board)
    return board
