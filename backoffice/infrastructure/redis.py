"""
Redis Connection Module

Provides the asynchronous Redis client used by the distributed throttler.

**Security Note**: Use a `rediss://` REDIS_URL over untrusted networks and
never log the URL, which may embed the password.
"""

from typing import Optional

from redis.asyncio import Redis
from structlog import get_logger

from backoffice.core.config.settings import settings

logger = get_logger(__name__)


def create_redis_client(url: Optional[str] = None) -> Redis:
    """Builds a client from `url`, defaulting to the configured REDIS_URL.

    The connection is opened lazily on the first command.
    """
    client = Redis.from_url(url or settings.REDIS_URL, encoding="utf-8", decode_responses=True)
    logger.debug("Redis client created")
    return client
