"""Application lifecycle management.

This module handles application startup and shutdown events, ensuring proper
initialization and cleanup of application resources.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from backoffice.core.config.settings import settings
from backoffice.core.logging import logger
from backoffice.infrastructure.database import (
    check_database_health,
    create_async_db_and_tables,
    dispose_engine,
)
from backoffice.infrastructure.services.throttling import RedisThrottlerService, build_throttler


def create_lifespan_manager():
    """Create the application lifespan manager.

    Returns:
        AsyncContextManager: The lifespan manager for the FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Checks the database, creates tables and builds the throttler.

        A throttler already placed on `app.state` is kept.

        Raises:
            RuntimeError: If database is unavailable during startup
        """
        # Startup
        try:
            await check_database_health()
        except (SQLAlchemyError, OSError) as exc:
            logger.error("database_unavailable_on_startup", error_type=type(exc).__name__)
            raise RuntimeError("Database unavailable") from exc
        await create_async_db_and_tables()

        if getattr(app.state, "throttler", None) is None:
            app.state.throttler = build_throttler(settings)
        logger.info(
            "application_startup",
            env=settings.APP_ENV,
            version=settings.VERSION,
            throttler=type(app.state.throttler).__name__,
            throttle_limit=str(app.state.throttle_limit),
        )

        yield

        # Shutdown
        throttler = app.state.throttler
        if isinstance(throttler, RedisThrottlerService):
            await throttler.redis.aclose()
        await dispose_engine()
        logger.info("application_shutdown", env=settings.APP_ENV)

    return lifespan
