"""
Throttling settings.
"""
from typing import Annotated, Iterable, Optional, Set

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode


class ThrottlingSettings(BaseSettings):
    """
    Defines the global request throttling configuration.

    THROTTLE_TTL is the window length in seconds and THROTTLE_LIMIT the number
    of requests allowed per window; both feed the application's default
    `ThrottleLimit`.

    THROTTLE_BACKEND selects the throttler implementation:
        - "memory": per-process counters, suitable for a single worker and tests.
        - "redis": shared counters with atomic increments across workers.

    THROTTLE_FAIL_OPEN decides what happens when the backing store is down:
    let the request through (True) or reject it with 503 (False).
    """
    THROTTLE_ENABLED: bool = True
    THROTTLE_BACKEND: str = Field(default="memory", pattern="^(memory|redis)$")
    THROTTLE_TTL: int = Field(ge=1, default=60)
    THROTTLE_LIMIT: int = Field(ge=1, default=60)
    THROTTLE_FAIL_OPEN: bool = True
    THROTTLE_KEY_PREFIX: str = "throttle"
    THROTTLE_EXEMPT_PATHS: Annotated[Set[str], NoDecode] = Field(
        default_factory=lambda: {"/api/v1/health"}
    )
    THROTTLE_IGNORE_USER_AGENTS: Annotated[Set[str], NoDecode] = Field(default_factory=set)

    @field_validator("THROTTLE_EXEMPT_PATHS", "THROTTLE_IGNORE_USER_AGENTS", mode="before")
    @classmethod
    def parse_comma_separated_sets(cls, v):
        """Parse comma-separated strings into sets."""
        if isinstance(v, str):
            return {item.strip() for item in v.split(",") if item.strip()}
        elif isinstance(v, (list, set, tuple)):
            return set(v)
        return set()


def user_agent_matches(user_agent: Optional[str], fragments: Iterable[str]) -> bool:
    """Check whether a user agent contains one of the ignored fragments.

    Matching is a case-insensitive substring test, so "bot" ignores
    "Googlebot/2.1".
    """
    if not user_agent:
        return False
    agent = user_agent.lower()
    return any(fragment.lower() in agent for fragment in fragments)
