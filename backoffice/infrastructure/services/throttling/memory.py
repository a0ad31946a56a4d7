"""In-process fixed-window throttler.

Suitable for a single worker and for tests. State lives in a dict guarded by
one asyncio lock, so concurrent `track_request` calls on the same identifier
never lose an increment. Expired windows are swept from `track_request` at
most once per window length, so idle identifiers do not accumulate.
"""

import asyncio
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from structlog import get_logger

from backoffice.domain.interfaces.throttling import IThrottlerService
from backoffice.domain.value_objects.throttle_limit import ThrottleLimit

logger = get_logger(__name__)


@dataclass
class _WindowState:
    count: int
    expires_at: float


class InMemoryThrottlerService(IThrottlerService):
    """Fixed-window throttler backed by process memory.

    Args:
        clock: Monotonic time source in seconds; injectable for tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._states: Dict[str, _WindowState] = {}
        self._lock = asyncio.Lock()
        self._next_sweep = clock()

    async def is_allowed(self, identifier: str, limit: ThrottleLimit) -> bool:
        async with self._lock:
            return self._count(identifier) < limit.max_requests

    async def track_request(self, identifier: str, limit: ThrottleLimit) -> int:
        async with self._lock:
            now = self._clock()
            if now >= self._next_sweep:
                self._sweep(now)
                self._next_sweep = now + limit.window_seconds
            state = self._current(identifier)
            if state is None:
                self._states[identifier] = _WindowState(
                    count=1, expires_at=now + limit.window_seconds
                )
                return 1
            state.count += 1
            return state.count

    async def get_remaining_requests(self, identifier: str, limit: ThrottleLimit) -> int:
        async with self._lock:
            return max(0, limit.max_requests - self._count(identifier))

    async def reset_throttling(self, identifier: str) -> None:
        async with self._lock:
            self._states.pop(identifier, None)
        logger.debug("Throttling state reset", identifier=identifier)

    async def get_retry_after(self, identifier: str, limit: ThrottleLimit) -> int:
        async with self._lock:
            state = self._current(identifier)
            if state is None:
                return limit.window_seconds
            return max(1, math.ceil(state.expires_at - self._clock()))

    async def cleanup_expired(self) -> int:
        """Drops expired windows and returns how many were removed."""
        async with self._lock:
            return self._sweep(self._clock())

    def _sweep(self, now: float) -> int:
        expired = [key for key, state in self._states.items() if state.expires_at <= now]
        for key in expired:
            del self._states[key]
        if expired:
            logger.debug("Expired throttle windows removed", count=len(expired))
        return len(expired)

    def _current(self, identifier: str) -> Optional[_WindowState]:
        state = self._states.get(identifier)
        if state is not None and state.expires_at <= self._clock():
            del self._states[identifier]
            return None
        return state

    def _count(self, identifier: str) -> int:
        state = self._current(identifier)
        return state.count if state else 0
