from typing import List, Optional

from sqlalchemy import select

from backoffice.domain.entities.role import Permission, Role, RolePermission
from backoffice.domain.entities.user import User
from backoffice.infrastructure.repositories.base import (
    BaseSQLRepository,
    CascadeRelation,
    DeactivationRestriction,
    HardDeleteRule,
)


class RoleRepository(BaseSQLRepository[Role]):
    """Roles cannot be deactivated while active users hold them.

    Permission grants are removed with a hard-deleted role; users block it.
    """

    model = Role
    relations = (
        CascadeRelation("permissions", RolePermission, "role_id", HardDeleteRule.CASCADE),
        CascadeRelation("users", User, "role_id", HardDeleteRule.RESTRICT),
    )
    restrictions = (
        DeactivationRestriction(
            relation="users",
            model=User,
            foreign_key="role_id",
            message="Cannot deactivate a role assigned to active users",
        ),
    )

    async def find_by_name(self, name: str) -> Optional[Role]:
        result = await self.db_session.execute(select(Role).where(Role.name == name.strip().lower()))
        return result.scalars().first()

    async def get_permissions(self, role_id: str) -> List[Permission]:
        statement = (
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .where(RolePermission.role_id == role_id)
            .where(RolePermission.is_active == True)  # noqa: E712
            .where(Permission.is_active == True)  # noqa: E712
            .order_by(Permission.name)
        )
        result = await self.db_session.execute(statement)
        return list(result.scalars().all())

    async def grant(self, role_id: str, permission_id: str) -> RolePermission:
        await self._get_or_raise(role_id)
        return await RolePermissionRepository(self.db_session, managed=self._managed).create(
            RolePermission(role_id=role_id, permission_id=permission_id)
        )


class PermissionRepository(BaseSQLRepository[Permission]):
    model = Permission
    relations = (
        CascadeRelation("roles", RolePermission, "permission_id", HardDeleteRule.CASCADE),
    )


class RolePermissionRepository(BaseSQLRepository[RolePermission]):
    model = RolePermission
