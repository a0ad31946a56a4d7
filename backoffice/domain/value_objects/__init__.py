"""Domain Value Objects.

Value objects are immutable objects that describe domain concepts by their
attributes rather than their identity.
"""

from .deactivation import (
    DEFAULT_DELETE_STRATEGY,
    DeactivationCommand,
    DeactivationStrategy,
    DeactivationValidationResult,
    ReactivationCommand,
    SoftDeleteCascadeConfig,
)
from .email import Email
from .pagination import PaginatedResult, PaginationParams
from .price import Price
from .throttle_limit import ThrottleLimit

__all__ = [
    "DEFAULT_DELETE_STRATEGY",
    "DeactivationCommand",
    "DeactivationStrategy",
    "DeactivationValidationResult",
    "Email",
    "PaginatedResult",
    "PaginationParams",
    "Price",
    "ReactivationCommand",
    "SoftDeleteCascadeConfig",
    "ThrottleLimit",
]
