import os

# Settings are read at import time, so the environment must be prepared first.
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["THROTTLE_BACKEND"] = "memory"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import backoffice.domain.entities  # noqa: F401  registers tables
from backoffice.core.application import create_application
from backoffice.infrastructure.services.throttling import InMemoryThrottlerService


@pytest_asyncio.fixture(scope="function")
async def engine():
    """Fresh in-memory SQLite database per test."""
    async_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with async_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield async_engine
    await async_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def throttler():
    return InMemoryThrottlerService()


@pytest.fixture
def app(throttler):
    return create_application(throttler=throttler)


@pytest_asyncio.fixture(scope="function")
async def async_client(app):
    # ASGITransport does not run the lifespan; state is set by the factory.
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
