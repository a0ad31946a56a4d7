"""
Asynchronous Database Utilities Module

This module provides the SQLAlchemy async engine, the session factory and the
helpers the application uses to talk to the relational database.

The engine is created lazily so that importing repositories or entities does
not open connections, and so tests can point DATABASE_URL at SQLite before the
first session is requested.

**Security Note**: Never log the connection URL; it carries credentials.

Key Components:
    - get_engine: Returns the process-wide async engine.
    - get_session_factory: Returns the session factory bound to the engine.
    - get_async_db: FastAPI dependency yielding an AsyncSession.
    - check_database_health: Connectivity check with retry.
    - create_async_db_and_tables: Creates all tables from SQLModel metadata.
    - dispose_engine: Closes pooled connections on shutdown.
"""

from typing import AsyncGenerator, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from backoffice.core.config.settings import settings

logger = structlog.get_logger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def build_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """Creates an async engine for `database_url` (defaults to settings).

    Pool sizing only applies to server databases; SQLite uses its own pool.
    """
    url = database_url or settings.DATABASE_URL
    engine_kwargs = {"echo": settings.DATABASE_ECHO, "future": True}
    if not url.startswith("sqlite"):
        engine_kwargs.update(
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            pool_timeout=settings.DATABASE_POOL_TIMEOUT,
            pool_pre_ping=True,
        )
    return create_async_engine(url, **engine_kwargs)


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = build_engine()
        logger.debug("async_engine_created", sqlite=settings.is_sqlite)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(), class_=AsyncSession, expire_on_commit=False
        )
    return _session_factory


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields an AsyncSession.

    The transaction is rolled back if the request handler raises, and the
    session is always closed.

    Yields:
        AsyncSession: An asynchronous database session.
    """
    async with get_session_factory()() as session:
        logger.debug("Async database session created")
        try:
            yield session
        except Exception:
            await session.rollback()
            logger.error("Async database session rollback due to error")
            raise


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(OperationalError),
    reraise=True,
)
async def check_database_health(engine: Optional[AsyncEngine] = None) -> bool:
    """
    Verifies database connectivity with `SELECT 1`.

    Operational errors are retried with exponential backoff and re-raised
    after the last attempt.

    Returns:
        bool: True if the database answered.
    """
    engine = engine or get_engine()
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info("database_health_check_passed")
    return True


async def create_async_db_and_tables(engine: Optional[AsyncEngine] = None) -> None:
    """Creates every table registered on the SQLModel metadata."""
    # Entities must be imported so their tables are registered.
    import backoffice.domain.entities  # noqa: F401

    engine = engine or get_engine()
    logger.info("Creating async database tables")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Async database tables created")


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("async_engine_disposed")
    _engine = None
    _session_factory = None
