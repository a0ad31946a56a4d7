import asyncio
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Request
from pydantic import BaseModel
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from backoffice.core.config.settings import settings
from backoffice.core.logging import logger
from backoffice.infrastructure.database.async_db import get_engine
from backoffice.infrastructure.services.throttling import RedisThrottlerService

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    env: str
    version: str
    services: Dict[str, Any]
    timestamp: datetime


async def check_database() -> Dict[str, Any]:
    """Check database connection health."""
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        return {"status": "healthy"}
    except (SQLAlchemyError, OSError) as e:
        logger.error("database_health_check_failed", error_type=type(e).__name__)
        return {"status": "unhealthy", "error": type(e).__name__}


async def check_throttler(request: Request) -> Dict[str, Any]:
    """Check the throttler backend; in-process throttlers are always healthy."""
    throttler = getattr(request.app.state, "throttler", None)
    if throttler is None:
        return {"status": "disabled"}
    if isinstance(throttler, RedisThrottlerService):
        try:
            await throttler.redis.ping()
        except RedisError as e:
            logger.error("redis_health_check_failed", error_type=type(e).__name__)
            return {"status": "unhealthy", "backend": "redis", "error": type(e).__name__}
        return {"status": "healthy", "backend": "redis"}
    return {"status": "healthy", "backend": "memory"}


@router.get("", response_model=HealthResponse)
async def health_check(request: Request):
    """
    Health check endpoint that verifies the database and the throttler backend.
    """
    db_health, throttler_health = await asyncio.gather(
        check_database(),
        check_throttler(request),
    )

    services_healthy = db_health["status"] == "healthy" and throttler_health["status"] != "unhealthy"

    return HealthResponse(
        status="ok" if services_healthy else "degraded",
        env=settings.APP_ENV,
        version=settings.VERSION,
        services={"database": db_health, "throttler": throttler_health},
        timestamp=datetime.now(timezone.utc),
    )
