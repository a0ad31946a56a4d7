import pytest

from backoffice.core.exceptions import ConflictError, DeactivationRestrictedError
from backoffice.domain.entities import Role, RolePermission
from backoffice.domain.value_objects.deactivation import (
    DeactivationCommand,
    DeactivationStrategy,
    SoftDeleteCascadeConfig,
)
from backoffice.infrastructure.repositories import (
    PermissionRepository,
    RoleRepository,
    UserRepository,
)
from tests.factories import create_fake_permission, create_fake_role, create_fake_user

pytestmark = pytest.mark.integration


@pytest.fixture
def roles(db_session):
    return RoleRepository(db_session)


async def _role_with_user(db_session):
    role = await RoleRepository(db_session).create(create_fake_role())
    user = await UserRepository(db_session).create(create_fake_user(role_id=role.id))
    return role, user


async def test_find_by_name_is_case_insensitive(roles):
    await roles.create(create_fake_role(name="Billing"))

    found = await roles.find_by_name("  BILLING ")

    assert found is not None
    assert found.name == "billing"


async def test_grant_and_list_permissions(roles, db_session):
    role = await roles.create(create_fake_role())
    permissions = PermissionRepository(db_session)
    write = await permissions.create(create_fake_permission("invoices:update"))
    read = await permissions.create(create_fake_permission("invoices:read"))

    await roles.grant(role.id, write.id)
    await roles.grant(role.id, read.id)

    granted = await roles.get_permissions(role.id)
    assert [permission.name for permission in granted] == ["invoices:read", "invoices:update"]


async def test_duplicate_grant_conflicts(roles, db_session):
    role = await roles.create(create_fake_role())
    permission = await PermissionRepository(db_session).create(create_fake_permission())
    await roles.grant(role.id, permission.id)

    with pytest.raises(ConflictError):
        await roles.grant(role.id, permission.id)


async def test_active_users_block_role_deactivation(roles, db_session, session_factory):
    role, _ = await _role_with_user(db_session)

    with pytest.raises(DeactivationRestrictedError) as exc_info:
        await roles.toggle_is_active(DeactivationCommand(id=role.id))

    assert exc_info.value.message == "Cannot deactivate a role assigned to active users"
    async with session_factory() as session:
        assert (await session.get(Role, role.id)).is_active is True


async def test_inactive_users_do_not_block_soft_delete(roles, db_session):
    role, user = await _role_with_user(db_session)
    await UserRepository(db_session).toggle_is_active(DeactivationCommand(id=user.id))

    result = await roles.toggle_is_active(DeactivationCommand(id=role.id))

    assert result.is_active is False


async def test_soft_delete_cascades_to_grants(roles, db_session, session_factory):
    role = await roles.create(create_fake_role())
    permission = await PermissionRepository(db_session).create(create_fake_permission())
    grant = await roles.grant(role.id, permission.id)

    await roles.toggle_is_active(
        DeactivationCommand(id=role.id, cascade=SoftDeleteCascadeConfig.of("permissions"))
    )

    async with session_factory() as session:
        assert (await session.get(RolePermission, grant.id)).is_active is False


async def test_hard_delete_blocked_by_any_assigned_user(roles, db_session):
    role, user = await _role_with_user(db_session)
    await UserRepository(db_session).toggle_is_active(DeactivationCommand(id=user.id))

    with pytest.raises(ConflictError) as exc_info:
        await roles.toggle_is_active(
            DeactivationCommand(id=role.id, strategy=DeactivationStrategy.HARD)
        )

    assert exc_info.value.code == "dependent_records_exist"


async def test_hard_delete_removes_grants(roles, db_session, session_factory):
    role = await roles.create(create_fake_role())
    permission = await PermissionRepository(db_session).create(create_fake_permission())
    grant = await roles.grant(role.id, permission.id)

    await roles.toggle_is_active(DeactivationCommand(id=role.id, strategy="hard"))

    async with session_factory() as session:
        assert await session.get(Role, role.id) is None
        assert await session.get(RolePermission, grant.id) is None
