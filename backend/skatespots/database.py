"""
SkateSpots Backend - Database Session Management
==================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   The engine is built from DATABASE_URL at import time. Without a URL
       there is no engine: startup logs the connection error and every
       session request raises DatabaseError, which the global handler turns
       into a 500. The process itself keeps serving.
Who:   Route handlers (via Depends), the lifespan handler, Alembic and tests.

Connection Pooling:
    PostgreSQL: pool_size / max_overflow / pre-ping from settings,
                connections recycled every hour.
    SQLite:     NullPool, every session opens its own aiosqlite connection.
"""

import logging
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from skatespots.config import settings
from skatespots.exceptions import DatabaseError

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> Dict[str, Any]:
    """Pool options for the given URL; SQLite gets no pool at all."""
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if database_url.startswith("sqlite"):
        options["poolclass"] = NullPool
    else:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


def build_engine(database_url: str) -> AsyncEngine:
    return create_async_engine(database_url, **_engine_options(database_url))


# ── Engine & Session Factory ──────────────────────────────────────────────
engine: Optional[AsyncEngine] = None
async_session_factory: Optional[async_sessionmaker[AsyncSession]] = None

if settings.database_configured:
    try:
        engine = build_engine(settings.database_url)
        # expire_on_commit=False keeps attributes readable after commit,
        # the store returns committed objects straight to the routes
        async_session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
    except (SQLAlchemyError, ImportError, ValueError) as e:
        logger.error("Could not create database engine: %s", str(e))
        engine = None
        async_session_factory = None


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models (shared metadata for Alembic)."""
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Fails with DatabaseError when no engine could be configured
        2. Yields a fresh session to the route handler
        3. On success: commits whatever the handler left pending
        4. On error: rolls back and re-raises for the global handlers
        5. Always: closes the session (returns connection to pool)
    """
    if async_session_factory is None:
        raise DatabaseError(
            message="The spot database is not available.",
            context={"reason": "DATABASE_URL is not configured"},
        )

    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def check_connection() -> bool:
    """
    Open one connection and run SELECT 1.

    Returns False (and logs) instead of raising, so startup can report a
    broken database and carry on serving.
    """
    if engine is None:
        logger.error(
            "Database connection error: DATABASE_URL is not set or invalid; "
            "spot routes will fail until it is configured"
        )
        return False
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Database connection error: %s", str(e))
        return False
    logger.info("Database connected")
    return True


async def dispose_engine() -> None:
    """Closes all pooled connections (application shutdown)."""
    if engine is not None:
        await engine.dispose()
