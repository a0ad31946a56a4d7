"""Application factory for creating and configuring the FastAPI application.

This module provides a factory function to create a properly configured FastAPI application
with all necessary middleware, exception handlers, and routers registered.
"""

from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from backoffice.adapters.api.v1 import api_router
from backoffice.core.config.settings import settings
from backoffice.core.handlers import register_exception_handlers
from backoffice.core.lifecycle import create_lifespan_manager
from backoffice.core.middleware import configure_middleware
from backoffice.domain.interfaces.throttling import IThrottlerService
from backoffice.domain.value_objects.throttle_limit import ThrottleLimit


def create_application(throttler: Optional[IThrottlerService] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        throttler: Throttler to use instead of the one built from settings
            at startup.

    Returns:
        FastAPI: The configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Administrative back office API.",
        debug=settings.DEBUG,
        lifespan=create_lifespan_manager(),
        default_response_class=JSONResponse,
    )

    app.state.throttle_limit = ThrottleLimit.create(settings.THROTTLE_TTL, settings.THROTTLE_LIMIT)
    app.state.throttler = throttler

    # Configure middleware
    configure_middleware(app)

    # Register exception handlers
    register_exception_handlers(app)

    # Include routers
    app.include_router(api_router, prefix="/api/v1")

    return app
