"""Generic SQLAlchemy repository with the deactivation lifecycle.

Concrete repositories declare their model, the relations a deactivation can
reach and the business restrictions that block it:

    class CustomerRepository(BaseSQLRepository[Customer]):
        model = Customer
        relations = (
            CascadeRelation("contacts", Contact, "customer_id", HardDeleteRule.CASCADE),
            CascadeRelation("invoices", Invoice, "customer_id"),
        )
        restrictions = (
            DeactivationRestriction(
                "invoices", Invoice, "customer_id",
                "Cannot deactivate a customer with open invoices",
                condition={"status": InvoiceStatus.OPEN, "is_active": True},
            ),
        )

Every public write runs in one transaction. A repository created with
`managed=True` (see `UnitOfWork`) only flushes and leaves commit and rollback
to its owner.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import (
    Any,
    AsyncIterator,
    ClassVar,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Tuple,
    Type,
    Union,
)

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from backoffice.core.exceptions import (
    BackofficeError,
    ConflictError,
    DatabaseError,
    DeactivationRestrictedError,
    DuplicateEntityError,
    EntityNotFoundError,
    ValidationError,
)
from backoffice.domain.entities.base import BaseEntity, utcnow
from backoffice.domain.interfaces.repositories import EntityT, Filters, IBaseRepository
from backoffice.domain.services.deactivation_policy import can_skip_restriction
from backoffice.domain.value_objects.deactivation import (
    DeactivationCommand,
    DeactivationStrategy,
    DeactivationValidationResult,
    ReactivationCommand,
    SoftDeleteCascadeConfig,
)
from backoffice.domain.value_objects.pagination import PaginatedResult, PaginationParams

logger = get_logger(__name__)


class HardDeleteRule(str, Enum):
    """What happens to related rows when the parent is hard deleted."""

    CASCADE = "cascade"
    RESTRICT = "restrict"


@dataclass(frozen=True)
class CascadeRelation:
    """One hop from the repository's model to a dependent model.

    Attributes:
        name: Name used in cascade configs, e.g. "contacts".
        model: Dependent entity class.
        foreign_key: Column on `model` referencing the parent id.
        on_hard_delete: Remove dependents with the parent, or block the delete.
    """

    name: str
    model: Type[BaseEntity]
    foreign_key: str
    on_hard_delete: HardDeleteRule = HardDeleteRule.RESTRICT


@dataclass(frozen=True)
class DeactivationRestriction:
    """A business rule that blocks deactivation while matching records exist.

    `relation` doubles as the name callers pass in `skipped_restrictions`.
    """

    relation: str
    model: Type[BaseEntity]
    foreign_key: str
    message: str
    condition: Mapping[str, Any] = field(default_factory=lambda: {"is_active": True})


PROTECTED_FIELDS = frozenset({"id", "created_at", "is_active", "deleted_at"})


class BaseSQLRepository(IBaseRepository[EntityT]):
    """SQLAlchemy implementation of `IBaseRepository`.

    Subclasses set `model`, and optionally `relations` and `restrictions`.
    """

    model: ClassVar[Type[BaseEntity]]
    relations: ClassVar[Tuple[CascadeRelation, ...]] = ()
    restrictions: ClassVar[Tuple[DeactivationRestriction, ...]] = ()

    def __init__(self, db_session: AsyncSession, managed: bool = False):
        """Initialize repository with database session.

        Args:
            db_session: SQLAlchemy async session for database operations.
            managed: When True the caller owns the transaction; the
                repository flushes instead of committing.
        """
        self.db_session = db_session
        self._managed = managed

    @property
    def entity_name(self) -> str:
        return self.model.__name__

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def find_by_id(self, entity_id: str) -> Optional[EntityT]:
        try:
            statement = select(self.model).where(self.model.id == entity_id)
            result = await self.db_session.execute(statement)
            entity = result.scalars().first()
        except SQLAlchemyError as e:
            logger.error(
                "Error retrieving entity by ID",
                entity=self.entity_name,
                entity_id=entity_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise DatabaseError(f"Failed to load {self.entity_name}") from e

        logger.debug(
            "Entity lookup by ID completed",
            entity=self.entity_name,
            entity_id=entity_id,
            found=entity is not None,
        )
        return entity

    async def find_many(
        self,
        filters: Optional[Filters] = None,
        include_inactive: bool = False,
    ) -> List[EntityT]:
        statement = self._filtered(select(self.model), filters, include_inactive)
        statement = statement.order_by(self.model.created_at, self.model.id)
        return await self._fetch_all(statement)

    async def count(self, filters: Optional[Filters] = None, include_inactive: bool = False) -> int:
        statement = self._filtered(
            select(func.count()).select_from(self.model), filters, include_inactive
        )
        try:
            result = await self.db_session.execute(statement)
        except SQLAlchemyError as e:
            logger.error("Error counting entities", entity=self.entity_name, error=str(e))
            raise DatabaseError(f"Failed to count {self.entity_name} records") from e
        return result.scalar_one()

    async def find_many_paginated(
        self,
        params: PaginationParams,
        filters: Optional[Filters] = None,
        include_inactive: bool = False,
    ) -> PaginatedResult[EntityT]:
        total = await self.count(filters, include_inactive)
        statement = (
            self._filtered(select(self.model), filters, include_inactive)
            .order_by(self.model.created_at, self.model.id)
            .offset(params.offset)
            .limit(params.page_size)
        )
        items = await self._fetch_all(statement)
        return PaginatedResult(
            items=items, total=total, page=params.page, page_size=params.page_size
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, entity: EntityT) -> EntityT:
        if not isinstance(entity, self.model):
            raise ValidationError(f"Expected a {self.entity_name} instance")

        async with self._transaction("create", entity_id=entity.id):
            await self._ensure_unique(
                {column.name: getattr(entity, column.name, None) for column in self._columns()}
            )
            self.db_session.add(entity)

        logger.info("Entity created", entity=self.entity_name, entity_id=entity.id)
        return entity

    async def update(self, entity_id: str, changes: Filters) -> EntityT:
        columns = {column.name for column in self._columns()}
        unknown = sorted(set(changes) - columns)
        if unknown:
            raise ValidationError(
                f"Unknown {self.entity_name} field(s): {', '.join(unknown)}",
                code="unknown_field",
            )
        protected = sorted(set(changes) & PROTECTED_FIELDS)
        if protected:
            raise ValidationError(
                f"Field(s) cannot be updated directly: {', '.join(protected)}",
                code="protected_field",
            )

        async with self._transaction("update", entity_id=entity_id):
            entity = await self._get_or_raise(entity_id)
            await self._ensure_unique(changes, exclude_id=entity_id)
            for key, value in changes.items():
                setattr(entity, key, value)
            entity.touch()
            self.db_session.add(entity)

        logger.info(
            "Entity updated",
            entity=self.entity_name,
            entity_id=entity_id,
            fields=sorted(changes),
        )
        return entity

    async def toggle_is_active(self, command: DeactivationCommand) -> EntityT:
        if not isinstance(command, DeactivationCommand):
            raise ValidationError("Expected a DeactivationCommand")
        cascade = self._resolve_relations(command.cascade_relations)

        async with self._transaction(
            "toggle_is_active", entity_id=command.id, strategy=command.strategy.value
        ):
            entity = await self._deactivate(command, cascade)

        return entity

    async def reactivate(self, command: ReactivationCommand) -> EntityT:
        cascade = self._resolve_relations(command.cascade_relations)

        async with self._transaction("reactivate", entity_id=command.id):
            entity = await self._reactivate(command.id, cascade, utcnow())

        logger.info(
            "Entity reactivated",
            entity=self.entity_name,
            entity_id=command.id,
            cascade=[relation.name for relation in cascade],
        )
        return entity

    async def reactivate_many(
        self,
        ids: Iterable[str],
        cascade: Optional[SoftDeleteCascadeConfig] = None,
    ) -> List[EntityT]:
        commands = [
            ReactivationCommand(id=entity_id, cascade=cascade)
            for entity_id in dict.fromkeys(ids)
        ]
        if not commands:
            return []
        relations = self._resolve_relations(commands[0].cascade_relations)
        now = utcnow()

        async with self._transaction("reactivate_many", count=len(commands)):
            entities = [
                await self._reactivate(command.id, relations, now) for command in commands
            ]

        logger.info(
            "Entities reactivated",
            entity=self.entity_name,
            count=len(entities),
            cascade=[relation.name for relation in relations],
        )
        return entities

    async def deactivate_many(
        self,
        ids: Iterable[str],
        strategy: Union[DeactivationStrategy, str, None] = None,
        cascade: Optional[SoftDeleteCascadeConfig] = None,
        skipped_restrictions: Iterable[str] = (),
    ) -> List[EntityT]:
        unique_ids = list(dict.fromkeys(ids))
        commands = [
            DeactivationCommand(
                id=entity_id,
                strategy=strategy,
                cascade=cascade,
                skipped_restrictions=tuple(skipped_restrictions),
            )
            for entity_id in unique_ids
        ]
        if not commands:
            return []
        relations = self._resolve_relations(commands[0].cascade_relations)

        async with self._transaction(
            "deactivate_many", count=len(commands), strategy=commands[0].strategy.value
        ):
            entities = [await self._deactivate(command, relations) for command in commands]

        return entities

    async def validate_deactivation_restrictions(
        self,
        entity: EntityT,
        skipped_restrictions: Iterable[str] = (),
    ) -> DeactivationValidationResult:
        skipped = set(skipped_restrictions)
        violations: List[str] = []
        blocked_by: List[str] = []

        for restriction in self.restrictions:
            if restriction.relation in skipped:
                logger.debug(
                    "Deactivation restriction skipped",
                    entity=self.entity_name,
                    entity_id=entity.id,
                    restriction=restriction.relation,
                )
                continue
            matches = await self._count_dependents(
                restriction.model, restriction.foreign_key, entity.id, restriction.condition
            )
            if matches:
                violations.append(restriction.message)
                blocked_by.append(restriction.relation)

        if not violations:
            return DeactivationValidationResult.allowed()
        return DeactivationValidationResult(
            can_deactivate=False,
            violations=tuple(violations),
            blocked_by=tuple(blocked_by),
        )

    # ------------------------------------------------------------------
    # Deactivation internals
    # ------------------------------------------------------------------

    async def _deactivate(
        self, command: DeactivationCommand, cascade: Tuple[CascadeRelation, ...]
    ) -> EntityT:
        entity = await self._get_or_raise(command.id)
        if command.is_soft:
            await self._soft_delete(entity, command, cascade)
        else:
            await self._hard_delete(entity)
        return entity

    async def _reactivate(
        self, entity_id: str, cascade: Tuple[CascadeRelation, ...], now: datetime
    ) -> EntityT:
        entity = await self._get_or_raise(entity_id)
        if not entity.is_active:
            entity.activate(now)
            self.db_session.add(entity)
        for relation in cascade:
            affected = await self._set_relation_active(relation, entity.id, True, now)
            logger.debug(
                "Cascade reactivation applied",
                entity=self.entity_name,
                entity_id=entity.id,
                relation=relation.name,
                affected=affected,
            )
        return entity

    async def _soft_delete(
        self,
        entity: EntityT,
        command: DeactivationCommand,
        cascade: Tuple[CascadeRelation, ...],
    ) -> None:
        now = utcnow()
        if entity.is_active:
            skipped: Tuple[str, ...] = ()
            if can_skip_restriction(command.skipped_restrictions, command.strategy):
                skipped = command.skipped_restrictions
            await self._assert_can_deactivate(entity, skipped)
            entity.soft_delete(now)
            self.db_session.add(entity)
        else:
            logger.debug(
                "Entity already inactive",
                entity=self.entity_name,
                entity_id=entity.id,
            )

        for relation in cascade:
            affected = await self._set_relation_active(relation, entity.id, False, now)
            logger.debug(
                "Cascade deactivation applied",
                entity=self.entity_name,
                entity_id=entity.id,
                relation=relation.name,
                affected=affected,
            )

        logger.info(
            "Entity soft deleted",
            entity=self.entity_name,
            entity_id=entity.id,
            cascade=[relation.name for relation in cascade],
        )

    async def _hard_delete(self, entity: EntityT) -> None:
        await self._assert_can_deactivate(entity, ())

        for relation in self.relations:
            if relation.on_hard_delete is not HardDeleteRule.RESTRICT:
                continue
            if await self._count_dependents(relation.model, relation.foreign_key, entity.id):
                raise ConflictError(
                    f"Cannot delete {self.entity_name} '{entity.id}': "
                    f"related {relation.name} records exist",
                    code="dependent_records_exist",
                )

        for relation in self.relations:
            if relation.on_hard_delete is HardDeleteRule.CASCADE:
                column = getattr(relation.model, relation.foreign_key)
                await self.db_session.execute(
                    delete(relation.model)
                    .where(column == entity.id)
                    .execution_options(synchronize_session="fetch")
                )

        await self.db_session.delete(entity)
        await self.db_session.flush()
        logger.info("Entity hard deleted", entity=self.entity_name, entity_id=entity.id)

    async def _assert_can_deactivate(self, entity: EntityT, skipped: Iterable[str]) -> None:
        result = await self.validate_deactivation_restrictions(entity, skipped)
        if not result.can_deactivate:
            raise DeactivationRestrictedError(result.violations, result.blocked_by)

    async def _set_relation_active(
        self,
        relation: CascadeRelation,
        parent_id: str,
        active: bool,
        at: datetime,
    ) -> int:
        model = relation.model
        current_state = not active
        statement = (
            update(model)
            .where(getattr(model, relation.foreign_key) == parent_id)
            .where(model.is_active == current_state)
            .values(is_active=active, deleted_at=None if active else at, updated_at=at)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.db_session.execute(statement)
        return result.rowcount

    async def _count_dependents(
        self,
        model: Type[BaseEntity],
        foreign_key: str,
        parent_id: str,
        condition: Optional[Mapping[str, Any]] = None,
    ) -> int:
        statement = (
            select(func.count())
            .select_from(model)
            .where(getattr(model, foreign_key) == parent_id)
        )
        for key, value in (condition or {}).items():
            statement = statement.where(getattr(model, key) == value)
        result = await self.db_session.execute(statement)
        return result.scalar_one()

    def _resolve_relations(self, names: Iterable[str]) -> Tuple[CascadeRelation, ...]:
        known: Dict[str, CascadeRelation] = {relation.name: relation for relation in self.relations}
        resolved = []
        for name in names:
            if name not in known:
                available = ", ".join(sorted(known)) or "none"
                raise ValidationError(
                    f"Unknown cascade relation '{name}' for {self.entity_name}. "
                    f"Available relations: {available}",
                    code="unknown_cascade_relation",
                )
            resolved.append(known[name])
        return tuple(resolved)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _columns(self):
        return self.model.__table__.columns

    async def _get_or_raise(self, entity_id: str) -> EntityT:
        entity = await self.find_by_id(entity_id)
        if entity is None:
            raise EntityNotFoundError(self.entity_name, entity_id)
        return entity

    def _filtered(self, statement, filters: Optional[Filters], include_inactive: bool):
        if not include_inactive:
            statement = statement.where(self.model.is_active == True)  # noqa: E712
        for key, value in (filters or {}).items():
            if key not in self.model.__table__.columns:
                raise ValidationError(
                    f"Cannot filter {self.entity_name} by unknown field '{key}'",
                    code="unknown_field",
                )
            column = getattr(self.model, key)
            if value is None:
                statement = statement.where(column.is_(None))
            elif isinstance(value, (list, tuple, set, frozenset)):
                statement = statement.where(column.in_(list(value)))
            else:
                statement = statement.where(column == value)
        return statement

    async def _fetch_all(self, statement) -> List[EntityT]:
        try:
            result = await self.db_session.execute(statement)
        except SQLAlchemyError as e:
            logger.error("Error listing entities", entity=self.entity_name, error=str(e))
            raise DatabaseError(f"Failed to list {self.entity_name} records") from e
        return list(result.scalars().all())

    async def _ensure_unique(self, values: Mapping[str, Any], exclude_id: Optional[str] = None) -> None:
        for column in self._columns():
            if not column.unique or column.primary_key:
                continue
            value = values.get(column.name)
            if value is None:
                continue
            statement = select(self.model.id).where(column == value)
            if exclude_id is not None:
                statement = statement.where(self.model.id != exclude_id)
            result = await self.db_session.execute(statement)
            if result.first() is not None:
                raise DuplicateEntityError(self.entity_name, column.name, str(value))

    @asynccontextmanager
    async def _transaction(self, operation: str, **context: Any) -> AsyncIterator[None]:
        """Commits on success and rolls back on any failure.

        Driver errors are translated into the application hierarchy:
        integrity violations become `ConflictError`, anything else
        `DatabaseError`.
        """
        try:
            yield
            if self._managed:
                await self.db_session.flush()
            else:
                await self.db_session.commit()
        except BackofficeError as e:
            await self._rollback()
            logger.warning(
                "Repository operation rejected",
                entity=self.entity_name,
                operation=operation,
                error=e.message,
                code=e.code,
                **context,
            )
            raise
        except IntegrityError as e:
            await self._rollback()
            logger.error(
                "Repository operation violated a database constraint",
                entity=self.entity_name,
                operation=operation,
                error_type=type(e).__name__,
                **context,
            )
            raise ConflictError(
                f"{self.entity_name} {operation} conflicts with existing records",
                code="integrity_error",
            ) from e
        except SQLAlchemyError as e:
            await self._rollback()
            logger.error(
                "Repository operation failed",
                entity=self.entity_name,
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
                **context,
            )
            raise DatabaseError(f"Failed to {operation} {self.entity_name}") from e

    async def _rollback(self) -> None:
        if not self._managed:
            await self.db_session.rollback()
