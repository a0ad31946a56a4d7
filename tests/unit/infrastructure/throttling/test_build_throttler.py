from backoffice.core.config.settings import Settings
from backoffice.infrastructure.services.throttling import (
    InMemoryThrottlerService,
    RedisThrottlerService,
    build_throttler,
)


def test_memory_backend(monkeypatch):
    monkeypatch.setenv("THROTTLE_BACKEND", "memory")

    assert isinstance(build_throttler(Settings(_env_file=None)), InMemoryThrottlerService)


def test_redis_backend_uses_given_client(monkeypatch, mocker):
    monkeypatch.setenv("THROTTLE_BACKEND", "redis")
    monkeypatch.setenv("THROTTLE_KEY_PREFIX", "bo")
    client = mocker.AsyncMock()

    throttler = build_throttler(Settings(_env_file=None), redis_client=client)

    assert isinstance(throttler, RedisThrottlerService)
    assert throttler.redis is client
    assert throttler._key("user:1") == "bo:user:1"


def test_redis_backend_builds_client_from_url(monkeypatch, mocker):
    monkeypatch.setenv("THROTTLE_BACKEND", "redis")
    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/2")
    create_client = mocker.patch(
        "backoffice.infrastructure.services.throttling.create_redis_client"
    )

    throttler = build_throttler(Settings(_env_file=None))

    create_client.assert_called_once_with("redis://cache:6379/2")
    assert throttler.redis is create_client.return_value
