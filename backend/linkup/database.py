"""
LinkUp Backend: Database Session Management
=============================================

What:  Async SQLAlchemy engine construction, declarative base, and the
       per-request session dependency.
Why:   Centralizes all database connection logic in one place.
How:   `build_engine()` creates an engine from Settings; `create_app()` keeps it
       (and its session factory) on the AppContext. `get_db_session` pulls the
       factory from the request's app, yields a session, commits on success and
       rolls back on error.

Connection Pooling Strategy:
    PostgreSQL (asyncpg):
        pool_size / max_overflow / pool_pre_ping from Settings, pool_recycle=3600.
    SQLite (aiosqlite, tests and local runs):
        SQLAlchemy picks its own pool; passing QueuePool arguments would fail.
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from linkup.config import Settings


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine described by `settings.database_url`."""
    options = {
        # SQL echo is only useful during development
        "echo": settings.log_level == "DEBUG",
    }
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(settings.database_url, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to `engine`.

    expire_on_commit=False: attributes stay readable after the dependency
    commits, which happens after the handler has built its response model.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object between the models, Alembic and the test
    fixtures that create tables directly.
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the app's session factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handlers
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/search")
        async def search(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    session_factory = request.app.state.context.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            # Rollback for ANY failure, including errors raised after a flush
            await session.rollback()
            raise
        finally:
            await session.close()
