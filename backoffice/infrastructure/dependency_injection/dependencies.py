"""FastAPI dependency factories.

Repositories and services are wired by hand through constructor arguments;
these factories only adapt that wiring to FastAPI's `Depends`.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.domain.interfaces.throttling import IThrottlerService
from backoffice.domain.services.deactivation_service import DeactivationService
from backoffice.domain.value_objects.throttle_limit import ThrottleLimit
from backoffice.infrastructure.database.async_db import get_async_db
from backoffice.infrastructure.repositories import (
    CustomerRepository,
    PermissionRepository,
    ProductRepository,
    RoleRepository,
    UserRepository,
)

# ---------------------------------------------------------------------------
# Type aliases for dependency injection
# ---------------------------------------------------------------------------

AsyncDB = Annotated[AsyncSession, Depends(get_async_db)]

# ---------------------------------------------------------------------------
# Infrastructure Layer Dependencies
# ---------------------------------------------------------------------------


def get_user_repository(db: AsyncDB) -> UserRepository:
    return UserRepository(db)


def get_role_repository(db: AsyncDB) -> RoleRepository:
    return RoleRepository(db)


def get_permission_repository(db: AsyncDB) -> PermissionRepository:
    return PermissionRepository(db)


def get_product_repository(db: AsyncDB) -> ProductRepository:
    return ProductRepository(db)


def get_customer_repository(db: AsyncDB) -> CustomerRepository:
    return CustomerRepository(db)


def get_throttler(request: Request) -> IThrottlerService:
    """Returns the application-wide throttler built during startup."""
    return request.app.state.throttler


def get_default_throttle_limit(request: Request) -> ThrottleLimit:
    return getattr(request.app.state, "throttle_limit", None) or ThrottleLimit.create_default()


# ---------------------------------------------------------------------------
# Domain Service Dependencies
# ---------------------------------------------------------------------------


def get_customer_deactivation_service(
    repository: CustomerRepository = Depends(get_customer_repository),
) -> DeactivationService:
    return DeactivationService(repository)


def get_role_deactivation_service(
    repository: RoleRepository = Depends(get_role_repository),
) -> DeactivationService:
    return DeactivationService(repository)


def get_product_deactivation_service(
    repository: ProductRepository = Depends(get_product_repository),
) -> DeactivationService:
    return DeactivationService(repository)


Throttler = Annotated[IThrottlerService, Depends(get_throttler)]
