"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach a real PostgreSQL at import time
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool

from book_catalog.config import Settings
from book_catalog.db.base import Base
from book_catalog.infrastructure.database import DatabaseSessionManager
from book_catalog.main import create_app
from book_catalog.models.book import Book

SEED_BOOKS = [
    {
        "isbn": "1234567890",
        "amazon_url": "http://amazon.com/book1",
        "author": "Author 1",
        "language": "English",
        "pages": 200,
        "publisher": "Publisher 1",
        "title": "Book 1",
        "year": 2020,
    },
    {
        "isbn": "0987654321",
        "amazon_url": "http://amazon.com/book2",
        "author": "Author 2",
        "language": "Spanish",
        "pages": 300,
        "publisher": "Publisher 2",
        "title": "Book 2",
        "year": 2021,
    },
]


@pytest.fixture
async def test_engine():
    # StaticPool: every session shares the single in-memory database
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def seed_books(test_session_factory):
    """Insert the two reference books."""
    async with test_session_factory() as session:
        session.add_all([Book(**data) for data in SEED_BOOKS])
        await session.commit()
    return SEED_BOOKS


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        environment="test",
        database_url="sqlite+aiosqlite:///:memory:",
        log_format="text",
    )


@pytest.fixture
async def client(test_engine, test_session_factory, test_settings):
    """API client wired to the in-memory database through app.state."""
    app = create_app(test_settings)

    # Lifespan is not run by ASGITransport: inject the store client directly
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = test_session_factory
    app.state.db_manager = manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.state.db_manager = None
