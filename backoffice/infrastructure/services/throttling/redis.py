"""
Redis-backed fixed-window throttler.

Counts are stored under `<prefix>:<identifier>` with a TTL equal to the
window, so every worker sharing the Redis instance sees the same budget.
The increment and the TTL are applied atomically by a Lua script.
"""

from typing import Optional

from redis.asyncio import Redis
from redis.exceptions import NoScriptError, RedisError
from structlog import get_logger

from backoffice.core.exceptions import ThrottlerUnavailableError
from backoffice.domain.interfaces.throttling import IThrottlerService
from backoffice.domain.value_objects.throttle_limit import ThrottleLimit

logger = get_logger(__name__)

# KEYS[1] = counter key, ARGV[1] = window in seconds
TRACK_REQUEST_SCRIPT = """
local current = redis.call('INCR', KEYS[1])
if current == 1 or redis.call('TTL', KEYS[1]) == -1 then
    redis.call('EXPIRE', KEYS[1], tonumber(ARGV[1]))
end
return current
"""


class RedisThrottlerService(IThrottlerService):
    """
    Throttler sharing state across processes through Redis.

    Backend failures are raised as `ThrottlerUnavailableError`; callers
    decide whether to fail open or closed.
    """

    def __init__(self, redis_client: Redis, key_prefix: str = "throttle"):
        self.redis = redis_client
        self.key_prefix = key_prefix
        self._track_sha: Optional[str] = None

    def _key(self, identifier: str) -> str:
        return f"{self.key_prefix}:{identifier}"

    async def _register_scripts(self) -> None:
        if self._track_sha is None:
            self._track_sha = await self.redis.script_load(TRACK_REQUEST_SCRIPT)

    async def _get_count(self, identifier: str) -> int:
        try:
            value = await self.redis.get(self._key(identifier))
        except RedisError as e:
            raise self._unavailable("get_count", identifier, e) from e
        return int(value) if value is not None else 0

    async def is_allowed(self, identifier: str, limit: ThrottleLimit) -> bool:
        return await self._get_count(identifier) < limit.max_requests

    async def track_request(self, identifier: str, limit: ThrottleLimit) -> int:
        key = self._key(identifier)
        try:
            await self._register_scripts()
            try:
                count = await self.redis.evalsha(self._track_sha, 1, key, limit.window_seconds)
            except NoScriptError:
                # Script cache was flushed on the server.
                self._track_sha = None
                await self._register_scripts()
                count = await self.redis.evalsha(self._track_sha, 1, key, limit.window_seconds)
        except RedisError as e:
            raise self._unavailable("track_request", identifier, e) from e
        logger.debug("Request tracked", identifier=identifier, count=int(count))
        return int(count)

    async def get_remaining_requests(self, identifier: str, limit: ThrottleLimit) -> int:
        return max(0, limit.max_requests - await self._get_count(identifier))

    async def reset_throttling(self, identifier: str) -> None:
        try:
            await self.redis.delete(self._key(identifier))
        except RedisError as e:
            raise self._unavailable("reset_throttling", identifier, e) from e
        logger.debug("Throttling state reset", identifier=identifier)

    async def get_retry_after(self, identifier: str, limit: ThrottleLimit) -> int:
        try:
            ttl = await self.redis.ttl(self._key(identifier))
        except RedisError as e:
            raise self._unavailable("get_retry_after", identifier, e) from e
        return int(ttl) if ttl and int(ttl) > 0 else limit.window_seconds

    def _unavailable(self, operation: str, identifier: str, error: Exception) -> ThrottlerUnavailableError:
        logger.error(
            "Throttler backend unavailable",
            operation=operation,
            identifier=identifier,
            error=str(error),
            error_type=type(error).__name__,
        )
        return ThrottlerUnavailableError(f"Throttling backend unavailable during {operation}")
