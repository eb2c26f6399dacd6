"""Shared pytest fixtures for all tests."""
import os

# Point the application engine at SQLite before fileservice is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from fileservice.database import get_db
from fileservice.main import app
from fileservice.models import Base
from fileservice.services.file_lifecycle import FileLifecycleManager
from fileservice.services.file_listing import FileListingService
from fileservice.services.file_store import FileStore


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """
    Create a file-backed SQLite database with all tables for each test.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'files.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(db_session):
    return FileStore(db_session)


@pytest.fixture
def lifecycle(store):
    return FileLifecycleManager(store)


@pytest.fixture
def listing(store):
    return FileListingService(store)


@pytest_asyncio.fixture
async def async_client(session_factory):
    """
    HTTP client bound to the app, with one fresh session per request.
    """
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
