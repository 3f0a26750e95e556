"""
CareNotes Backend: Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.
Who:   Used by all test files in the tests/ directory.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── test_settings:   Settings with a known API key and generous rate limit
    ├── database:        Database on a throwaway SQLite file, schema created
    ├── db_session:      AsyncSession on that database
    ├── mock_db_session: Mock database session (no real DB needed)
    ├── api_headers:     Headers carrying the valid API key
    └── test_client:     HTTPX AsyncClient bound to a fresh app
"""

import os

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["API_KEY"] = "test-api-key"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402

from app.config import Settings  # noqa: E402
from app.database import Database  # noqa: E402

TEST_API_KEY = "test-api-key"


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        api_key=TEST_API_KEY,
        log_level="WARNING",
        rate_limit_requests=1000,
        rate_limit_window=900,
    )


@pytest_asyncio.fixture
async def database(test_settings):
    """
    A Database on a per-test SQLite file with all tables created.

    httpx's ASGITransport does not run the lifespan handler, so the schema
    is created here instead.
    """
    db = Database(test_settings.database_url, test_settings)
    await db.create_schema()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_create(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = None
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.get = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def api_headers():
    return {"x-api-key": TEST_API_KEY}


@pytest_asyncio.fixture
async def test_client(test_settings, database):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from app.main import create_app

    app = create_app(test_settings, database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
