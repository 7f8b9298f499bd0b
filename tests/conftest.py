"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  Redis is replaced by a small dict-backed
double that understands the handful of commands the code issues.
"""

import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SECRET_KEY", "test-secret")

from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from airport_transfer.domain.entities import Caller  # noqa: E402
from airport_transfer.domain.enums import Role  # noqa: E402
from airport_transfer.domain.lifecycle import BookingLifecycle  # noqa: E402
from airport_transfer.infrastructure.database import Base  # noqa: E402
from airport_transfer.infrastructure.memory import (  # noqa: E402
    InMemoryBookingStore,
    InMemoryProfileStore,
)
from airport_transfer.infrastructure.models import (  # noqa: E402
    AccountModel,
    ProfileModel,
)
from airport_transfer.infrastructure.security import create_access_token  # noqa: E402

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


class FakeRedis:
    """Just enough of ``redis.asyncio.Redis`` for verification codes."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.ttl: dict[str, int] = {}

    async def set(self, key, value, ex=None, nx=False):
        if nx and key in self.data:
            return False
        self.data[key] = str(value)
        if ex is not None:
            self.ttl[key] = ex
        return True

    async def get(self, key):
        return self.data.get(key)

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.ttl.pop(key, None)
        return removed


class TickingClock:
    """Deterministic clock advancing one minute per reading."""

    def __init__(self, start: datetime = NOW, step: timedelta = timedelta(minutes=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


# ── Domain fixtures ───────────────────────────────────────────────────


@pytest.fixture
def customer() -> Caller:
    return Caller(id="customer-1", role=Role.USER)


@pytest.fixture
def other_customer() -> Caller:
    return Caller(id="customer-2", role=Role.USER)


@pytest.fixture
def admin() -> Caller:
    return Caller(id="admin-1", role=Role.ADMIN)


@pytest.fixture
def booking_store() -> InMemoryBookingStore:
    return InMemoryBookingStore()


@pytest.fixture
def profile_store() -> InMemoryProfileStore:
    return InMemoryProfileStore()


@pytest.fixture
def lifecycle(booking_store) -> BookingLifecycle:
    return BookingLifecycle(booking_store, clock=lambda: NOW)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


# ── Test DB (SQLite in-memory) ────────────────────────────────────────


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Create tables on a fresh in-memory database, drop them afterwards."""
    engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ── HTTP client ───────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def client(session_factory, fake_redis) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient backed by SQLite and the fake Redis."""
    from airport_transfer.api.app import create_app
    from airport_transfer.api.dependencies import get_db
    from airport_transfer.infrastructure.redis_client import get_redis

    async def _test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def _test_redis():
        return fake_redis

    app = create_app()
    app.dependency_overrides[get_db] = _test_db
    app.dependency_overrides[get_redis] = _test_redis

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def admin_headers(session_factory) -> dict[str, str]:
    """Bearer headers for an administrator created out-of-band."""
    async with session_factory() as session:
        session.add(AccountModel(id="admin0001", email="admin@example.com"))
        await session.flush()
        session.add(ProfileModel(id="admin0001", role=Role.ADMIN))
        await session.commit()
    return {"Authorization": f"Bearer {create_access_token('admin0001')}"}
