"""Throttler implementations and the factory selecting one from settings."""

from typing import Optional

from redis.asyncio import Redis

from backoffice.core.config.settings import Settings, settings as default_settings
from backoffice.domain.interfaces.throttling import IThrottlerService
from backoffice.infrastructure.redis import create_redis_client

from .memory import InMemoryThrottlerService
from .redis import RedisThrottlerService


def build_throttler(
    config: Optional[Settings] = None,
    redis_client: Optional[Redis] = None,
) -> IThrottlerService:
    """Builds the throttler selected by `THROTTLE_BACKEND`."""
    config = config or default_settings
    if config.THROTTLE_BACKEND == "redis":
        client = redis_client or create_redis_client(config.REDIS_URL)
        return RedisThrottlerService(client, key_prefix=config.THROTTLE_KEY_PREFIX)
    return InMemoryThrottlerService()


__all__ = ["InMemoryThrottlerService", "RedisThrottlerService", "build_throttler"]
