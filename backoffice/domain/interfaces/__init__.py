"""Domain interfaces for dependency inversion.

Infrastructure adapters implement these contracts; domain services depend on
them only.
"""

from .repositories import EntityT, IBaseRepository
from .throttling import IThrottlerService

__all__ = [
    "EntityT",
    "IBaseRepository",
    "IThrottlerService",
]
