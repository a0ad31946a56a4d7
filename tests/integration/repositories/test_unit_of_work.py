import pytest

from backoffice.core.exceptions import DeactivationRestrictedError
from backoffice.domain.entities import Customer, Role
from backoffice.domain.value_objects.deactivation import DeactivationCommand
from backoffice.infrastructure.database import UnitOfWork
from backoffice.infrastructure.repositories import CustomerRepository, RoleRepository, UserRepository
from tests.factories import create_fake_customer, create_fake_role, create_fake_user

pytestmark = pytest.mark.integration


async def _seed(db_session):
    customer = await CustomerRepository(db_session).create(create_fake_customer())
    role = await RoleRepository(db_session).create(create_fake_role())
    return customer, role


async def _is_active(session_factory, model, entity_id):
    async with session_factory() as session:
        return (await session.get(model, entity_id)).is_active


async def test_commit_applies_every_change(db_session, session_factory):
    customer, role = await _seed(db_session)

    async with UnitOfWork(session_factory) as uow:
        await uow.get_repo(CustomerRepository).toggle_is_active(DeactivationCommand(id=customer.id))
        await uow.get_repo(RoleRepository).toggle_is_active(DeactivationCommand(id=role.id))
        await uow.commit()

    assert await _is_active(session_factory, Customer, customer.id) is False
    assert await _is_active(session_factory, Role, role.id) is False


async def test_leaving_without_commit_rolls_back(db_session, session_factory):
    customer, _ = await _seed(db_session)

    async with UnitOfWork(session_factory) as uow:
        await uow.get_repo(CustomerRepository).toggle_is_active(DeactivationCommand(id=customer.id))

    assert await _is_active(session_factory, Customer, customer.id) is True


async def test_failure_rolls_back_earlier_steps(db_session, session_factory):
    customer, role = await _seed(db_session)
    await UserRepository(db_session).create(create_fake_user(role_id=role.id))

    with pytest.raises(DeactivationRestrictedError):
        async with UnitOfWork(session_factory) as uow:
            await uow.get_repo(CustomerRepository).toggle_is_active(
                DeactivationCommand(id=customer.id)
            )
            await uow.get_repo(RoleRepository).toggle_is_active(DeactivationCommand(id=role.id))
            await uow.commit()

    assert await _is_active(session_factory, Customer, customer.id) is True


async def test_repositories_are_cached_per_unit(session_factory):
    async with UnitOfWork(session_factory) as uow:
        first = uow.get_repo(CustomerRepository)
        assert uow.get_repo(CustomerRepository) is first
        assert first.db_session is uow.session


def test_repository_before_enter_is_an_error():
    with pytest.raises(RuntimeError):
        UnitOfWork().get_repo(CustomerRepository)
