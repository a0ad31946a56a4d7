"""Per-route throttling dependency.

The global limit is enforced by `ThrottlingMiddleware`; routes that need a
tighter budget add `throttle(...)` to their dependencies:

    @router.post("/exports", dependencies=[Depends(throttle(60, 5))])
    async def export(): ...

Route budgets are tracked per caller *and* path, so they never consume the
global budget of the same caller.
"""

from typing import Awaitable, Callable, Optional

from fastapi import Depends, Request
from structlog import get_logger

from backoffice.core.config.settings import settings
from backoffice.core.exceptions import ThrottleLimitExceededError, ThrottlerUnavailableError
from backoffice.domain.interfaces.throttling import IThrottlerService
from backoffice.domain.value_objects.throttle_limit import ThrottleLimit
from backoffice.infrastructure.dependency_injection.dependencies import get_throttler

logger = get_logger(__name__)


def resolve_identifier(request: Request, session_cookie: Optional[str] = None) -> str:
    """Identifies the caller of `request`.

    Preference order: authenticated user id placed on `request.state.user`
    by the authentication layer, then the session cookie, then the client IP.
    """
    user = getattr(request.state, "user", None)
    if user is not None:
        user_id = user.get("id") if isinstance(user, dict) else getattr(user, "id", None)
        if user_id is not None:
            return f"user:{user_id}"

    session = request.cookies.get(session_cookie or settings.SESSION_COOKIE_NAME)
    if session:
        return f"session:{session}"

    host = request.client.host if request.client else None
    return f"ip:{host or 'unknown'}"


def throttle(window_seconds: int, max_requests: int) -> Callable[..., Awaitable[None]]:
    """Return a FastAPI dependency enforcing `max_requests` per `window_seconds`.

    Raises:
        InvalidValueObjectError: At declaration time, for a non-positive limit.
    """
    limit = ThrottleLimit.create(window_seconds, max_requests)

    async def _dependency(
        request: Request,
        throttler: IThrottlerService = Depends(get_throttler),
    ) -> None:
        if not settings.THROTTLE_ENABLED:
            return

        identifier = f"{resolve_identifier(request)}:{request.url.path}"
        try:
            count = await throttler.track_request(identifier, limit)
            if count > limit.max_requests:
                retry_after = await throttler.get_retry_after(identifier, limit)
                logger.warning(
                    "route_throttle_limit_exceeded",
                    identifier=identifier,
                    limit=str(limit),
                )
                raise ThrottleLimitExceededError(retry_after=retry_after)
        except ThrottlerUnavailableError:
            if settings.THROTTLE_FAIL_OPEN:
                logger.warning("route_throttle_backend_unavailable_fail_open", path=request.url.path)
                return
            raise

    return _dependency
