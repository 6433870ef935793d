"""Board endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_owner_key
from schemas.board import BoardCreate, BoardEnsurePublic, BoardResponse, BoardVisibilityUpdate
from services import board_service

router = APIRouter(prefix="/boards", tags=["boards"])


@router.get("/", response_model=list[BoardResponse])
async def list_boards(
    owner_key: str = Depends(get_owner_key),
    db: AsyncSession = Depends(get_async_session),
) -> list[BoardResponse]:
    """The caller's boards, newest first."""
    boards = await board_service.list_boards(db, owner_key)
    return [BoardResponse.model_validate(b) for b in boards]


@router.post("/", response_model=BoardResponse, status_code=201)
async def create_board(
    data: BoardCreate,
    owner_key: str = Depends(get_owner_key),
    db: AsyncSession = Depends(get_async_session),
) -> BoardResponse:
    """Create a board; 409 if the caller already has one with the same slug."""
    board = await board_service.create_board(db, owner_key, data)
    return BoardResponse.model_validate(board)


@router.post("/default", response_model=BoardResponse)
async def ensure_default_board(
    owner_key: str = Depends(get_owner_key),
    db: AsyncSession = Depends(get_async_session),
) -> BoardResponse:
    """Return the caller's default board, creating it if needed."""
    board = await board_service.ensure_default_board(db, owner_key)
    return BoardResponse.model_validate(board)


@router.post("/public", response_model=BoardResponse)
async def ensure_public_board(
    data: BoardEnsurePublic,
    owner_key: str = Depends(get_owner_key),
    db: AsyncSession = Depends(get_async_session),
) -> BoardResponse:
    """Return the caller's board with ``slug``, creating it as public if needed."""
    board = await board_service.ensure_public_board(db, owner_key, data.slug, data.name)
    return BoardResponse.model_validate(board)


@router.get("/by-slug/{slug}", response_model=BoardResponse)
async def get_board_by_slug(
    slug: str,
    owner_key: str = Depends(get_owner_key),
    db: AsyncSession = Depends(get_async_session),
) -> BoardResponse:
    """Get one of the caller's boards by slug."""
    board = await board_service.get_by_owner_and_slug(db, owner_key, slug)
    if board is None:
        raise HTTPException(status_code=404, detail="Board not found")
    return BoardResponse.model_validate(board)


@router.patch("/{board_id}", response_model=BoardResponse)
async def set_board_visibility(
    board_id: UUID,
    data: BoardVisibilityUpdate,
    owner_key: str = Depends(get_owner_key),
    db: AsyncSession = Depends(get_async_session),
) -> BoardResponse:
    """Make a board public or private. Existing saves keep their counters."""
    board = await board_service.set_public(db, owner_key, board_id, data.is_public)
    return BoardResponse.model_validate(board)
