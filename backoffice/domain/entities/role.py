"""Role-based access control entities.

A `Role` groups `Permission` records through the `RolePermission` link table.
Permissions are named `resource:action`, for example `products:update`.
"""

import re
from typing import ClassVar, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from backoffice.core.exceptions import InvalidValueObjectError
from backoffice.domain.entities.base import BaseEntity


class Role(BaseEntity, table=True):
    """A named set of permissions assigned to users."""

    __tablename__ = "roles"

    name: str = Field(max_length=50, unique=True, index=True, nullable=False)
    description: Optional[str] = Field(default=None, max_length=255)

    @classmethod
    def create(cls, name: str, description: Optional[str] = None) -> "Role":
        name = (name or "").strip().lower()
        if not 2 <= len(name) <= 50:
            raise InvalidValueObjectError("Role name must be between 2 and 50 characters")
        return cls(name=name, description=description)


class Permission(BaseEntity, table=True):
    """A single `resource:action` capability."""

    __tablename__ = "permissions"

    NAME_PATTERN: ClassVar[re.Pattern] = re.compile(r"^[a-z][a-z0-9_-]*:[a-z][a-z0-9_-]*$")

    name: str = Field(max_length=100, unique=True, index=True, nullable=False)
    description: Optional[str] = Field(default=None, max_length=255)

    @classmethod
    def create(cls, name: str, description: Optional[str] = None) -> "Permission":
        name = (name or "").strip().lower()
        if not cls.NAME_PATTERN.match(name):
            raise InvalidValueObjectError(
                "Permission name must follow the 'resource:action' format"
            )
        return cls(name=name, description=description)

    @property
    def resource(self) -> str:
        return self.name.split(":", 1)[0]

    @property
    def action(self) -> str:
        return self.name.split(":", 1)[1]


class RolePermission(BaseEntity, table=True):
    """Grants a permission to a role."""

    __tablename__ = "role_permissions"
    __table_args__ = (UniqueConstraint("role_id", "permission_id", name="uq_role_permission"),)

    role_id: str = Field(foreign_key="roles.id", ondelete="CASCADE", index=True, nullable=False)
    permission_id: str = Field(
        foreign_key="permissions.id", ondelete="CASCADE", index=True, nullable=False
    )
