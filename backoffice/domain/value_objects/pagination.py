"""Pagination value objects used by list queries."""

import math
from dataclasses import dataclass
from typing import ClassVar, Generic, List, TypeVar

from backoffice.core.exceptions import InvalidValueObjectError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class PaginationParams:
    """Page request, 1-based.

    Attributes:
        page: Page number starting at 1.
        page_size: Number of items per page, at most `MAX_PAGE_SIZE`.
    """

    page: int = 1
    page_size: int = 10

    MAX_PAGE_SIZE: ClassVar[int] = 100

    def __post_init__(self) -> None:
        if self.page < 1:
            raise InvalidValueObjectError("Page must be greater than or equal to 1")
        if not 1 <= self.page_size <= self.MAX_PAGE_SIZE:
            raise InvalidValueObjectError(
                f"Page size must be between 1 and {self.MAX_PAGE_SIZE}"
            )

    @property
    def offset(self) -> int:
        """Index of the first item of the page."""
        return (self.page - 1) * self.page_size


@dataclass(frozen=True)
class PaginatedResult(Generic[T]):
    """One page of items plus navigation metadata."""

    items: List[T]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.total else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1
