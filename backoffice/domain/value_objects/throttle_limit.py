"""Throttle limit value object.

Describes how many requests a caller may issue within a fixed time window.
Instances are immutable, so a single limit can be shared safely by every
concurrent request that checks against it.
"""

from dataclasses import dataclass
from typing import ClassVar

from backoffice.core.exceptions import InvalidValueObjectError


@dataclass(frozen=True, slots=True)
class ThrottleLimit:
    """Immutable rate-limit descriptor.

    Attributes:
        window_seconds: Length of the throttle window in seconds.
        max_requests: Maximum number of requests allowed within one window.
    """

    window_seconds: int
    max_requests: int

    DEFAULT_WINDOW_SECONDS: ClassVar[int] = 60
    DEFAULT_MAX_REQUESTS: ClassVar[int] = 60

    def __post_init__(self) -> None:
        """Validate the limit at construction time."""
        if not self._is_positive_int(self.window_seconds):
            raise InvalidValueObjectError("Window seconds must be a positive integer")
        if not self._is_positive_int(self.max_requests):
            raise InvalidValueObjectError("Max requests must be a positive integer")

    @staticmethod
    def _is_positive_int(value: object) -> bool:
        return isinstance(value, int) and not isinstance(value, bool) and value > 0

    @classmethod
    def create(cls, window_seconds: int, max_requests: int) -> "ThrottleLimit":
        """Create a limit of `max_requests` per `window_seconds`.

        Raises:
            InvalidValueObjectError: If either value is not a positive integer.
        """
        return cls(window_seconds=window_seconds, max_requests=max_requests)

    @classmethod
    def create_default(cls) -> "ThrottleLimit":
        """Return the canonical limit of 60 requests per 60 seconds."""
        return cls(
            window_seconds=cls.DEFAULT_WINDOW_SECONDS,
            max_requests=cls.DEFAULT_MAX_REQUESTS,
        )

    def __str__(self) -> str:
        return f"{self.max_requests} requests per {self.window_seconds} seconds"
