"""Liveness endpoint."""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session


logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Overall status, database status and the SQL dialect in use."""

    status: str
    database: str
    dialect: str


async def _ping(db: AsyncSession) -> bool:
    try:
        await db.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Database did not answer the health ping")
        return False
    return True


@router.get("/health", response_model=HealthResponse)
async def health_check(db: AsyncSession = Depends(get_async_session)) -> HealthResponse:
    """
    Report whether the API is up and the database answers.

    The API stays "degraded" rather than failing when the database is down,
    so the endpoint itself always returns 200.
    """
    reachable = await _ping(db)
    return HealthResponse(
        status="healthy" if reachable else "degraded",
        database="healthy" if reachable else "unhealthy",
        dialect=db.get_bind().dialect.name,
    )
