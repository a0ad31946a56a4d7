"""Middleware configuration for the FastAPI application.

This module handles the registration of all middleware components: CORS and
the global request throttling.
"""

from typing import Iterable, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette import status
from starlette.middleware.base import BaseHTTPMiddleware
from structlog import get_logger

from backoffice.core.config.settings import settings
from backoffice.core.config.throttling import user_agent_matches
from backoffice.core.exceptions import ThrottlerUnavailableError
from backoffice.core.rate_limit import resolve_identifier
from backoffice.domain.value_objects.throttle_limit import ThrottleLimit

logger = get_logger(__name__)


def _normalize_path(path: str) -> str:
    return path.rstrip("/") or "/"


class ThrottlingMiddleware(BaseHTTPMiddleware):
    """Applies the application's default `ThrottleLimit` to every request.

    The throttler and the limit are read from `app.state.throttler` and
    `app.state.throttle_limit`. Configuration defaults to the settings and
    can be overridden per instance.

    Every throttled request is counted before the decision, so parallel
    requests cannot all pass a check made before any of them was recorded.
    Over-limit requests get a 429 with `X-RateLimit-Limit`,
    `X-RateLimit-Remaining` and `Retry-After` headers. When the throttler
    backend fails, the request passes through if `fail_open` is set and is
    answered with 503 otherwise.
    """

    def __init__(
        self,
        app,
        *,
        enabled: Optional[bool] = None,
        fail_open: Optional[bool] = None,
        exempt_paths: Optional[Iterable[str]] = None,
        ignored_user_agents: Optional[Iterable[str]] = None,
        session_cookie: Optional[str] = None,
    ):
        super().__init__(app)
        self.enabled = settings.THROTTLE_ENABLED if enabled is None else enabled
        self.fail_open = settings.THROTTLE_FAIL_OPEN if fail_open is None else fail_open
        self.exempt_paths = {
            _normalize_path(path)
            for path in (settings.THROTTLE_EXEMPT_PATHS if exempt_paths is None else exempt_paths)
        }
        self.ignored_user_agents = set(
            settings.THROTTLE_IGNORE_USER_AGENTS
            if ignored_user_agents is None
            else ignored_user_agents
        )
        self.session_cookie = session_cookie or settings.SESSION_COOKIE_NAME

    def _should_skip(self, request: Request) -> bool:
        if not self.enabled:
            return True
        if _normalize_path(request.url.path) in self.exempt_paths:
            return True
        return user_agent_matches(request.headers.get("user-agent"), self.ignored_user_agents)

    async def dispatch(self, request: Request, call_next):
        throttler = getattr(request.app.state, "throttler", None)
        if throttler is None or self._should_skip(request):
            return await call_next(request)

        limit = getattr(request.app.state, "throttle_limit", None) or ThrottleLimit.create_default()
        identifier = resolve_identifier(request, self.session_cookie)

        try:
            count = await throttler.track_request(identifier, limit)
            if count > limit.max_requests:
                retry_after = await throttler.get_retry_after(identifier, limit)
                logger.warning(
                    "throttle_limit_exceeded",
                    identifier=identifier,
                    path=request.url.path,
                    limit=str(limit),
                )
                return JSONResponse(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    content={"detail": "Too many requests", "code": "throttle_limit_exceeded"},
                    headers={
                        "X-RateLimit-Limit": str(limit.max_requests),
                        "X-RateLimit-Remaining": "0",
                        "Retry-After": str(retry_after),
                    },
                )
        except ThrottlerUnavailableError as exc:
            if self.fail_open:
                logger.warning("throttler_unavailable_fail_open", path=request.url.path)
                return await call_next(request)
            logger.error("throttler_unavailable_fail_closed", path=request.url.path)
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"detail": exc.message, "code": exc.code},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limit.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(max(0, limit.max_requests - count))
        return response


def configure_middleware(app: FastAPI) -> None:
    """Configure all middleware for the FastAPI application.

    Args:
        app (FastAPI): The FastAPI application instance
    """
    app.add_middleware(ThrottlingMiddleware)

    # Added last so it wraps throttling and 429 responses carry CORS headers.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "Retry-After"],
    )
