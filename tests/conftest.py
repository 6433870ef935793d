"""
Pytest fixtures for testing.

Tests run against an in-memory SQLite database by default. Set
TEST_POSTGRES=1 to run them against a PostgreSQL container instead.
"""
import os

# Must be set before any app import that triggers Settings validation
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from collections.abc import AsyncGenerator, Generator  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncConnection,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from models.base import Base  # noqa: E402

OWNER = "owner-a"
OTHER_OWNER = "owner-b"

USE_POSTGRES = os.environ.get("TEST_POSTGRES") == "1"


@pytest.fixture(scope="session")
def database_url() -> Generator[str]:
    """SQLite in memory, or a PostgreSQL container when TEST_POSTGRES=1."""
    if not USE_POSTGRES:
        yield "sqlite+aiosqlite:///:memory:"
        return

    from testcontainers.postgres import PostgresContainer

    with PostgresContainer("postgres:16", driver="asyncpg") as postgres:
        url = postgres.get_connection_url()
        os.environ["DATABASE_URL"] = url
        yield url


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    # pysqlite/aiosqlite manage BEGIN themselves and break SAVEPOINT; take over
    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, _connection_record) -> None:  # noqa: ANN001
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn) -> None:  # noqa: ANN001
        conn.exec_driver_sql("BEGIN")


@pytest.fixture
async def async_engine(database_url: str) -> AsyncGenerator[AsyncEngine]:
    """Create an async engine for testing."""
    if database_url.startswith("sqlite"):
        engine = create_async_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        _enable_sqlite_savepoints(engine)
    else:
        engine = create_async_engine(database_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    if not database_url.startswith("sqlite"):
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_connection(async_engine: AsyncEngine) -> AsyncGenerator[AsyncConnection]:
    """
    Create a connection with a transaction that will be rolled back after the test.

    This provides test isolation - each test runs in its own transaction
    that is rolled back, so tests don't affect each other.
    """
    async with async_engine.connect() as connection:
        transaction = await connection.begin()
        try:
            yield connection
        finally:
            await transaction.rollback()


@pytest.fixture
async def db_session(db_connection: AsyncConnection) -> AsyncGenerator[AsyncSession]:
    """
    Create an async session bound to the test transaction.

    Session-level transactions become savepoints inside the outer test
    transaction, so service code can flush and use begin_nested() freely.
    """
    session_factory = async_sessionmaker(
        bind=db_connection,
        class_=AsyncSession,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )

    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient]:
    """Create a test client with database session override."""
    from core.config import get_settings

    get_settings.cache_clear()

    from api.main import app
    from db.session import get_async_session

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_async_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-Owner-Key": OWNER},
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_website(db_session: AsyncSession):  # noqa: ANN201
    """Factory that registers a website through the upsert service."""
    from schemas.website import WebsiteUpsert
    from services import website_service

    async def _make(
        host: str,
        title: str | None = None,
        categories: list[str] | None = None,
        description: str = "",
    ):  # noqa: ANN202
        return await website_service.upsert(
            db_session,
            WebsiteUpsert(
                canonical_url=f"https://{host}/",
                origin=host,
                title=title or host,
                categories=categories or [],
                description=description,
            ),
        )

    return _make
