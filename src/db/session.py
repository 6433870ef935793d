"""Engine and request-scoped sessions for the Waps database."""
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.config import get_settings


def _engine_options() -> dict:
    settings = get_settings()
    if settings.is_sqlite:
        # aiosqlite runs on one connection; pool sizing does not apply
        return {}
    return {
        "pool_pre_ping": True,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
    }


engine = create_async_engine(get_settings().database_url, echo=False, **_engine_options())

async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """
    One session per request.

    Services only flush. The request commits here once every write it made
    succeeded (board rows, memberships and the counter updates they drive),
    and rolls back all of them if any step raised.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
