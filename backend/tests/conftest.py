"""Pytest configuration and fixtures.

Every test gets its own in-memory SQLite database. HTTP tests go through the
real app with ``get_db`` pointed at that database.
"""
import os
import tempfile

# Settings are read at import time; keep tests off /data and the scheduler
os.environ.setdefault("DATA_PATH", tempfile.gettempdir())
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from pulsewatch import models  # noqa: F401
from pulsewatch.database import Base, get_db
from pulsewatch.main import app
from pulsewatch.services.monitor_service import monitor_service
from pulsewatch.services.notifier import notifier


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def isolated_notifier(monkeypatch):
    """No sender registered by one test leaks into another."""
    monkeypatch.setattr(notifier, "_senders", {})
    return notifier


@pytest.fixture
def make_monitor(db):
    """Create a monitor through the service with sensible defaults."""
    counter = {"n": 0}

    async def _make(**overrides):
        counter["n"] += 1
        data = {"name": f"monitor-{counter['n']}", "type": "http"}
        data.update(overrides)
        if data["type"] != "push":
            data.setdefault("target", "https://example.com")
        return await monitor_service.create(db, data)

    return _make
