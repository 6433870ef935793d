"""Waitlist endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session
from schemas.waitlist import WaitlistJoin, WaitlistJoinResult, WaitlistStats
from services import waitlist_service

router = APIRouter(prefix="/waitlist", tags=["waitlist"])


@router.post("/", response_model=WaitlistJoinResult)
async def join_waitlist(
    data: WaitlistJoin,
    db: AsyncSession = Depends(get_async_session),
) -> WaitlistJoinResult:
    """Join the waitlist; joining again with the same email returns the original entry."""
    return await waitlist_service.join(db, data)


@router.get("/stats", response_model=WaitlistStats)
async def waitlist_stats(
    db: AsyncSession = Depends(get_async_session),
) -> WaitlistStats:
    """Total number of signups."""
    return await waitlist_service.stats(db)
