from types import SimpleNamespace

from backoffice.domain.services.deactivation_service import DeactivationService
from backoffice.domain.value_objects.throttle_limit import ThrottleLimit
from backoffice.infrastructure.dependency_injection.dependencies import (
    get_customer_deactivation_service,
    get_customer_repository,
    get_default_throttle_limit,
    get_permission_repository,
    get_product_deactivation_service,
    get_product_repository,
    get_role_deactivation_service,
    get_role_repository,
    get_throttler,
    get_user_repository,
)
from backoffice.infrastructure.repositories import (
    CustomerRepository,
    PermissionRepository,
    ProductRepository,
    RoleRepository,
    UserRepository,
)


def _request(**state):
    return SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(**state)))


def test_repository_factories_bind_the_session(mocker):
    session = mocker.AsyncMock()

    assert isinstance(get_user_repository(session), UserRepository)
    assert isinstance(get_role_repository(session), RoleRepository)
    assert isinstance(get_permission_repository(session), PermissionRepository)
    assert isinstance(get_product_repository(session), ProductRepository)
    customers = get_customer_repository(session)
    assert isinstance(customers, CustomerRepository)
    assert customers.db_session is session


def test_deactivation_service_factories(mocker):
    session = mocker.AsyncMock()

    for factory, repository in (
        (get_customer_deactivation_service, CustomerRepository(session)),
        (get_role_deactivation_service, RoleRepository(session)),
        (get_product_deactivation_service, ProductRepository(session)),
    ):
        service = factory(repository)
        assert isinstance(service, DeactivationService)
        assert service._repository is repository


def test_throttler_comes_from_app_state():
    throttler = object()

    assert get_throttler(_request(throttler=throttler)) is throttler


def test_default_throttle_limit():
    configured = ThrottleLimit.create(30, 5)

    assert get_default_throttle_limit(_request(throttle_limit=configured)) is configured
    assert get_default_throttle_limit(_request()) == ThrottleLimit.create_default()
