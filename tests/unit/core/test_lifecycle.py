import pytest
from sqlalchemy.exc import OperationalError

from backoffice.core.application import create_application
from backoffice.infrastructure.services.throttling import (
    InMemoryThrottlerService,
    RedisThrottlerService,
)


@pytest.fixture
def database(mocker):
    return {
        "health": mocker.patch("backoffice.core.lifecycle.check_database_health"),
        "tables": mocker.patch("backoffice.core.lifecycle.create_async_db_and_tables"),
        "dispose": mocker.patch("backoffice.core.lifecycle.dispose_engine"),
    }


async def test_startup_builds_throttler_from_settings(database):
    app = create_application()

    async with app.router.lifespan_context(app):
        assert isinstance(app.state.throttler, InMemoryThrottlerService)
        database["health"].assert_awaited_once()
        database["tables"].assert_awaited_once()

    database["dispose"].assert_awaited_once()


async def test_startup_keeps_injected_throttler(database):
    throttler = InMemoryThrottlerService()
    app = create_application(throttler=throttler)

    async with app.router.lifespan_context(app):
        assert app.state.throttler is throttler


async def test_shutdown_closes_redis_client(database, mocker):
    redis_client = mocker.AsyncMock()
    app = create_application(throttler=RedisThrottlerService(redis_client))

    async with app.router.lifespan_context(app):
        pass

    redis_client.aclose.assert_awaited_once()


async def test_unavailable_database_aborts_startup(database):
    database["health"].side_effect = OperationalError("SELECT 1", {}, Exception("refused"))
    app = create_application()

    with pytest.raises(RuntimeError, match="Database unavailable"):
        async with app.router.lifespan_context(app):
            pass

    database["tables"].assert_not_awaited()
