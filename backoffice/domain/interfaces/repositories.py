"""Repository interfaces for abstracting data persistence in the domain layer.

The domain layer talks to persistence only through these abstract base
classes. Concrete SQL implementations live in
`backoffice.infrastructure.repositories`.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Iterable, List, Mapping, Optional, TypeVar, Union

from backoffice.domain.entities.base import BaseEntity
from backoffice.domain.value_objects.deactivation import (
    DeactivationCommand,
    DeactivationStrategy,
    DeactivationValidationResult,
    ReactivationCommand,
    SoftDeleteCascadeConfig,
)
from backoffice.domain.value_objects.pagination import PaginatedResult, PaginationParams

EntityT = TypeVar("EntityT", bound=BaseEntity)

Filters = Mapping[str, Any]


class IBaseRepository(ABC, Generic[EntityT]):
    """Contract shared by every entity repository.

    Besides plain CRUD, repositories own the deactivation lifecycle: soft
    delete with one-hop cascades, hard delete with referential checks, and
    reactivation.
    """

    @abstractmethod
    async def find_by_id(self, entity_id: str) -> Optional[EntityT]:
        """Retrieves an entity by id regardless of its active flag.

        Returns:
            The entity, or `None` if no row has that id.
        """
        raise NotImplementedError

    @abstractmethod
    async def find_many(
        self,
        filters: Optional[Filters] = None,
        include_inactive: bool = False,
    ) -> List[EntityT]:
        """Lists entities matching equality filters, active ones by default."""
        raise NotImplementedError

    @abstractmethod
    async def count(self, filters: Optional[Filters] = None, include_inactive: bool = False) -> int:
        raise NotImplementedError

    @abstractmethod
    async def find_many_paginated(
        self,
        params: PaginationParams,
        filters: Optional[Filters] = None,
        include_inactive: bool = False,
    ) -> PaginatedResult[EntityT]:
        raise NotImplementedError

    @abstractmethod
    async def create(self, entity: EntityT) -> EntityT:
        """Persists a new entity.

        Raises:
            DuplicateEntityError: If a unique column value is already taken.
        """
        raise NotImplementedError

    @abstractmethod
    async def update(self, entity_id: str, changes: Filters) -> EntityT:
        """Applies column changes to an existing entity.

        Raises:
            EntityNotFoundError: If the id does not resolve.
            ValidationError: If a change names an unknown or protected column.
        """
        raise NotImplementedError

    @abstractmethod
    async def toggle_is_active(self, command: DeactivationCommand) -> EntityT:
        """Soft- or hard-deletes the entity described by `command`.

        Soft deletes mark the entity and the records reachable through each
        named cascade relation inactive. Hard deletes remove the row, remove
        records of cascading relations and fail if restricting relations
        still reference it. Everything happens in a single transaction.

        Returns:
            The updated entity, or the removed entity for hard deletes.

        Raises:
            EntityNotFoundError: If the id does not resolve.
            ConflictError: If dependent records block a hard delete.
            DeactivationRestrictedError: If a business restriction applies.
            ValidationError: If a cascade relation name is unknown.
        """
        raise NotImplementedError

    @abstractmethod
    async def reactivate(self, command: ReactivationCommand) -> EntityT:
        """Reverses a soft delete, cascading when the command asks for it."""
        raise NotImplementedError

    @abstractmethod
    async def deactivate_many(
        self,
        ids: Iterable[str],
        strategy: Union[DeactivationStrategy, str, None] = None,
        cascade: Optional[SoftDeleteCascadeConfig] = None,
        skipped_restrictions: Iterable[str] = (),
    ) -> List[EntityT]:
        """Applies the same deactivation to several ids, all or nothing."""
        raise NotImplementedError

    @abstractmethod
    async def reactivate_many(
        self,
        ids: Iterable[str],
        cascade: Optional[SoftDeleteCascadeConfig] = None,
    ) -> List[EntityT]:
        """Reactivates several ids, all or nothing."""
        raise NotImplementedError

    @abstractmethod
    async def validate_deactivation_restrictions(
        self,
        entity: EntityT,
        skipped_restrictions: Iterable[str] = (),
    ) -> DeactivationValidationResult:
        """Evaluates the repository's deactivation restrictions for `entity`."""
        raise NotImplementedError
