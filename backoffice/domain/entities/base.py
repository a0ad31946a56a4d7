"""Shared base for every persisted entity.

All tables carry a string UUID primary key, an `is_active` flag and audit
timestamps. A populated `deleted_at` always implies `is_active` is False; the
helpers below are the only code paths that change those fields.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, inspect
from sqlalchemy.exc import NoInspectionAvailable
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class BaseEntity(SQLModel):
    """Columns and lifecycle helpers shared by all table models.

    Attributes:
        id: String UUID primary key, generated on instantiation.
        is_active: False once the entity has been soft deleted.
        created_at: Creation timestamp.
        updated_at: Timestamp of the last change made through the helpers.
        deleted_at: Soft-delete timestamp, None while active.
    """

    id: str = Field(
        default_factory=new_id,
        primary_key=True,
        max_length=36,
        description="String UUID of the entity.",
    )
    is_active: bool = Field(default=True, index=True, nullable=False)
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
        nullable=False,
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        sa_type=DateTime(timezone=True),
        nullable=True,
    )
    deleted_at: Optional[datetime] = Field(
        default=None,
        sa_type=DateTime(timezone=True),
        nullable=True,
    )

    def touch(self, at: Optional[datetime] = None) -> None:
        self.updated_at = at or utcnow()

    def soft_delete(self, at: Optional[datetime] = None) -> None:
        """Marks the entity inactive and stamps `deleted_at`."""
        moment = at or utcnow()
        self.is_active = False
        self.deleted_at = moment
        self.touch(moment)

    def activate(self, at: Optional[datetime] = None) -> None:
        """Reverses a soft delete."""
        self.is_active = True
        self.deleted_at = None
        self.touch(at)

    @property
    def is_persisted(self) -> bool:
        """True when the instance is attached to a session and has a row."""
        try:
            return inspect(self).persistent
        except NoInspectionAvailable:
            return False
