"""
CareNotes Backend: Database Handle & Session Management
=========================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI session dependency.
How:   A single `Database` object owns the engine. The app factory creates it,
       the lifespan handler creates the schema on startup and disposes the
       engine on shutdown, and route handlers receive one session per request.
Who:   Created by app.main.create_app(); used by routes via get_db_session().
When:  Engine is opened lazily on first use; sessions are created per-request.

Lifecycle:
    create_app()          → Database(url)  (no connection yet)
    lifespan startup      → await database.create_schema()
    each request          → get_db_session() yields AsyncSession
                            commit on success, rollback on error
    lifespan shutdown     → await database.dispose()

SQLite notes:
    SQLite only enforces FOREIGN KEY / ON DELETE CASCADE when the
    `foreign_keys` pragma is on, and the pragma is per-connection. A connect
    listener turns it on for every pooled connection.
"""

from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import Settings, settings as default_settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class so they share one metadata object,
    which both `Database.create_schema()` and Alembic read.
    """
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    The application's single store handle.

    Attributes:
        engine:          AsyncEngine owning the connection pool
        session_factory: async_sessionmaker producing AsyncSession objects
    """

    def __init__(self, url: str, app_settings: Optional[Settings] = None):
        app_settings = app_settings or default_settings
        self.url = url
        self.is_sqlite = url.startswith("sqlite")

        engine_kwargs = {
            # SQL echo only when debugging; it is very noisy otherwise
            "echo": app_settings.log_level == "DEBUG",
        }
        if not self.is_sqlite:
            engine_kwargs.update(
                pool_size=app_settings.db_pool_size,
                max_overflow=app_settings.db_max_overflow,
                pool_pre_ping=app_settings.db_pool_pre_ping,
                pool_recycle=3600,
            )

        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)

        if self.is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        # expire_on_commit=False: records returned by the pipeline stay readable
        # after the request's transaction commits
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_schema(self) -> None:
        """Create any missing tables, indexes and constraints."""
        # Import models so every table is registered on Base.metadata
        from app import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        """Run a trivial query; used by the health check."""
        from sqlalchemy import text

        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def dispose(self) -> None:
        """
        What:  Gracefully closes all connections in the pool.
        When:  Called during application shutdown (lifespan handler).
        """
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the application's Database
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back the transaction and re-raises
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/patients")
        async def list_patients(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
