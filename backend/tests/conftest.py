"""Pytest configuration and fixtures for async testing.

Tests run against a throwaway SQLite database (aiosqlite) per test. A file
database is used instead of :memory: so the SQL data source can open its own
sessions next to the request session and still see the same tables.
"""
from typing import AsyncGenerator, Callable, Iterable, Mapping

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import logistics.models  # noqa: F401  (registers every table on Base.metadata)
from logistics.auth.jwt import jwt_auth
from logistics.database import Base
from logistics.main import app
from logistics.services.metrics_source import COLLECTION_MODELS, Collection, Record, SqlMetricsDataSource


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """
    Create a SQLite engine with all tables for one test.

    Yields:
        AsyncEngine: Engine bound to a temporary database file
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'analytics_test.db'}",
        echo=False,
        poolclass=NullPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory for the test database, configured like AsyncSessionLocal."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database session for each test.

    Yields:
        AsyncSession: Database session for testing
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture(scope="function")
def sql_source(session_factory: async_sessionmaker[AsyncSession]) -> SqlMetricsDataSource:
    """SQL metrics data source reading the test database."""
    return SqlMetricsDataSource(session_factory)


@pytest.fixture(scope="function")
def seed(session_factory: async_sessionmaker[AsyncSession]) -> Callable:
    """
    Insert records into their collection tables and commit.

    Usage:
        await seed({Collection.PAYMENTS: [PaymentFactory.create()]})
    """

    async def _seed(records: Mapping[Collection, Iterable[Record]]) -> None:
        async with session_factory() as session:
            for collection, rows in records.items():
                model = COLLECTION_MODELS[collection]
                session.add_all([model(**row) for row in rows])
            await session.commit()

    return _seed


async def _mock_current_user() -> dict:
    """
    Mock current user for testing.

    Returns a super admin so RBAC checks pass in tests.
    """
    return {
        "sub": "test-admin-123",
        "email": "admin@example.com",
        "permissions": ["super_admin"],
        "type": "access",
    }


@pytest_asyncio.fixture(scope="function")
async def raw_client(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client using the test database and real token authentication.

    Yields:
        AsyncClient: Async HTTP client for API testing
    """
    from logistics.api.deps import get_db, get_metrics_source

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        """Override database dependency to use test database."""
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_metrics_source] = lambda: SqlMetricsDataSource(session_factory)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    # Clean up
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def async_client(raw_client: AsyncClient) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client authenticated as a super admin.

    Yields:
        AsyncClient: Async HTTP client for API testing
    """
    from logistics.api.deps import get_current_user

    app.dependency_overrides[get_current_user] = _mock_current_user
    yield raw_client


@pytest.fixture(scope="function")
def auth_headers() -> Callable[..., dict[str, str]]:
    """
    Build Authorization headers carrying a signed access token.

    Usage:
        headers = auth_headers("view_analytics")
    """

    def _headers(*permissions: str) -> dict[str, str]:
        token = jwt_auth.create_access_token(
            user_id="admin-42",
            email="ops@example.com",
            permissions=list(permissions),
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers
