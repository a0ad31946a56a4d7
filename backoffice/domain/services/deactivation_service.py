"""Deactivation domain service.

Thin orchestration over a repository: it builds commands from raw input,
logs the outcome and leaves transactional work to the repository.
"""

from typing import Generic, Iterable, List, Optional, Union

import structlog

from backoffice.domain.interfaces.repositories import EntityT, IBaseRepository
from backoffice.domain.value_objects.deactivation import (
    DeactivationCommand,
    DeactivationStrategy,
    ReactivationCommand,
    SoftDeleteCascadeConfig,
)

logger = structlog.get_logger(__name__)


class DeactivationService(Generic[EntityT]):
    """Executes deactivation and reactivation commands against a repository.

    Example:
        service = DeactivationService(customer_repository)
        await service.execute(
            DeactivationCommand(
                id=customer_id,
                cascade=SoftDeleteCascadeConfig.of("contacts", "addresses"),
            )
        )
    """

    def __init__(self, repository: IBaseRepository[EntityT]):
        self._repository = repository

    async def execute(self, command: DeactivationCommand) -> EntityT:
        """Soft- or hard-deletes one entity.

        Raises:
            EntityNotFoundError: If the id does not resolve.
            ConflictError: If dependent records or restrictions block it.
            ValidationError: If a cascade relation is unknown.
        """
        logger.info(
            "Deactivation requested",
            entity_id=command.id,
            strategy=command.strategy.value,
            cascade=list(command.cascade_relations),
            skipped_restrictions=list(command.skipped_restrictions),
        )
        entity = await self._repository.toggle_is_active(command)
        logger.info(
            "Deactivation completed",
            entity_id=command.id,
            strategy=command.strategy.value,
        )
        return entity

    async def execute_many(
        self,
        ids: Iterable[str],
        strategy: Union[DeactivationStrategy, str, None] = None,
        cascade: Optional[SoftDeleteCascadeConfig] = None,
        skipped_restrictions: Iterable[str] = (),
    ) -> List[EntityT]:
        ids = list(ids)
        logger.info("Bulk deactivation requested", count=len(ids))
        entities = await self._repository.deactivate_many(
            ids,
            strategy=strategy,
            cascade=cascade,
            skipped_restrictions=skipped_restrictions,
        )
        logger.info("Bulk deactivation completed", count=len(entities))
        return entities

    async def reactivate(self, command: ReactivationCommand) -> EntityT:
        logger.info(
            "Reactivation requested",
            entity_id=command.id,
            cascade=list(command.cascade_relations),
        )
        return await self._repository.reactivate(command)

    async def reactivate_many(
        self,
        ids: Iterable[str],
        cascade: Optional[SoftDeleteCascadeConfig] = None,
    ) -> List[EntityT]:
        ids = list(ids)
        logger.info("Bulk reactivation requested", count=len(ids))
        entities = await self._repository.reactivate_many(ids, cascade=cascade)
        logger.info("Bulk reactivation completed", count=len(entities))
        return entities
