"""Throttler service contract.

Implementations keep a per-identifier request count inside a fixed window.
An identifier is any opaque string: a user id, a session token or an IP
address. Being over the limit is reported through return values; only a
backend failure raises.
"""

from abc import ABC, abstractmethod

from backoffice.domain.value_objects.throttle_limit import ThrottleLimit


class IThrottlerService(ABC):
    """Interface for tracking, checking and resetting request counts."""

    @abstractmethod
    async def is_allowed(self, identifier: str, limit: ThrottleLimit) -> bool:
        """Checks whether one more request fits in the current window.

        This is a read-only check; it does not record the request.

        Returns:
            `True` if the recorded count is below `limit.max_requests`.
        """
        raise NotImplementedError

    @abstractmethod
    async def track_request(self, identifier: str, limit: ThrottleLimit) -> int:
        """Records one request, opening a new window when none is active.

        The increment is atomic, so callers that must enforce the limit
        under concurrency decide from the returned count rather than from a
        separate `is_allowed` call.

        Returns:
            The count for the current window, including this request.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_remaining_requests(self, identifier: str, limit: ThrottleLimit) -> int:
        """Returns `max(0, limit.max_requests - count)` for the current window."""
        raise NotImplementedError

    @abstractmethod
    async def reset_throttling(self, identifier: str) -> None:
        """Clears all state for `identifier`."""
        raise NotImplementedError

    async def get_retry_after(self, identifier: str, limit: ThrottleLimit) -> int:
        """Seconds until the current window closes.

        Backends that cannot tell fall back to the full window length.
        """
        return limit.window_seconds
