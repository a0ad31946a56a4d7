"""Deactivation value objects.

These objects describe a request to remove an entity, either by marking it
inactive (soft delete) or by physically deleting it (hard delete), and the
optional propagation of that change to related entities.

Commands are plain immutable values handed from callers to the repository
layer. They are never persisted.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Tuple, Union

from backoffice.core.exceptions import ValidationError


class DeactivationStrategy(str, Enum):
    """How an entity is removed.

    Attributes:
        SOFT: Mark the entity inactive and stamp `deleted_at`. Reversible.
        HARD: Physically remove the row. Irreversible.
    """

    SOFT = "soft"
    HARD = "hard"

    @classmethod
    def parse(cls, value: Union["DeactivationStrategy", str, None]) -> "DeactivationStrategy":
        """Coerce a raw value into a strategy, applying the system default.

        Raises:
            ValidationError: If the value is not a supported strategy.
        """
        if value is None:
            return DEFAULT_DELETE_STRATEGY
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            supported = ", ".join(s.value for s in cls)
            raise ValidationError(
                f"Unsupported deactivation strategy '{value}'. Expected one of: {supported}",
                code="invalid_deactivation_strategy",
            ) from None


DEFAULT_DELETE_STRATEGY = DeactivationStrategy.SOFT


def _normalize_names(names: Optional[Iterable[str]], label: str) -> Tuple[str, ...]:
    if names is None:
        return ()
    if isinstance(names, str):
        names = [names]
    normalized = []
    for name in names:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError(f"{label} names must be non-empty strings")
        if name.strip() not in normalized:
            normalized.append(name.strip())
    return tuple(normalized)


@dataclass(frozen=True)
class SoftDeleteCascadeConfig:
    """Relations a soft delete propagates to.

    Each name is resolved by the repository to exactly one relation hop; the
    cascade never follows relations of the related entities.

    Attributes:
        relations: Relation names, e.g. ("contacts", "addresses") for a customer.
        cascade_on_reactivation: Also reactivate the relations when the parent
            is reactivated.
    """

    relations: Tuple[str, ...] = ()
    cascade_on_reactivation: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "relations", _normalize_names(self.relations, "Cascade relation"))

    @classmethod
    def of(cls, *relations: str, cascade_on_reactivation: bool = False) -> "SoftDeleteCascadeConfig":
        return cls(relations=relations, cascade_on_reactivation=cascade_on_reactivation)


@dataclass(frozen=True)
class DeactivationCommand:
    """A request to soft- or hard-delete an entity.

    Attributes:
        id: Identifier of the entity to remove.
        strategy: Soft or hard delete; defaults to soft.
        cascade: Relations to soft-deactivate along with the entity. Ignored
            by hard deletes, whose propagation is fixed by the schema.
        skipped_restrictions: Restriction names the caller asks to bypass.
            Only honoured for soft deletes.
    """

    id: str
    strategy: DeactivationStrategy = DEFAULT_DELETE_STRATEGY
    cascade: Optional[SoftDeleteCascadeConfig] = None
    skipped_restrictions: Tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        if self.id is None or not str(self.id).strip():
            raise ValidationError("Entity id is required", code="missing_entity_id")
        object.__setattr__(self, "id", str(self.id).strip())
        object.__setattr__(self, "strategy", DeactivationStrategy.parse(self.strategy))
        object.__setattr__(
            self,
            "skipped_restrictions",
            _normalize_names(self.skipped_restrictions, "Skipped restriction"),
        )

    @property
    def is_soft(self) -> bool:
        return self.strategy is DeactivationStrategy.SOFT

    @property
    def cascade_relations(self) -> Tuple[str, ...]:
        """Relation names to cascade to; empty for hard deletes."""
        if not self.is_soft or self.cascade is None:
            return ()
        return self.cascade.relations


@dataclass(frozen=True)
class ReactivationCommand:
    """A request to reverse a soft delete.

    Related entities are reactivated only when `cascade` is given with
    `cascade_on_reactivation` enabled.
    """

    id: str
    cascade: Optional[SoftDeleteCascadeConfig] = None

    def __post_init__(self) -> None:
        if self.id is None or not str(self.id).strip():
            raise ValidationError("Entity id is required", code="missing_entity_id")
        object.__setattr__(self, "id", str(self.id).strip())

    @property
    def cascade_relations(self) -> Tuple[str, ...]:
        if self.cascade is None or not self.cascade.cascade_on_reactivation:
            return ()
        return self.cascade.relations


@dataclass(frozen=True)
class DeactivationValidationResult:
    """Outcome of evaluating deactivation restrictions.

    Attributes:
        can_deactivate: True when no restriction blocks the operation.
        violations: Messages of the violated restrictions.
        blocked_by: Relation names holding blocking records.
    """

    can_deactivate: bool
    violations: Tuple[str, ...] = ()
    blocked_by: Tuple[str, ...] = ()

    @classmethod
    def allowed(cls) -> "DeactivationValidationResult":
        return cls(can_deactivate=True)
