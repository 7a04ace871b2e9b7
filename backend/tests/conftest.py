import os
from collections.abc import AsyncIterator
from pathlib import Path

import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import coffee_shop.models  # noqa: F401 - registers tables on Base.metadata
from coffee_shop.db.session import Base, get_db
from coffee_shop.main import app

# Pytest only picks up fixtures from conftest.py files. Fixtures defined in other
# modules (like tests/seeds.py) are invisible unless registered here.
pytest_plugins = ["tests.seeds"]


def database_url(tmp_path: Path) -> str:
    """Test database URL: TEST_DATABASE_URL if set, else a SQLite file under tmp_path.

    Point at Postgres with e.g.
        TEST_DATABASE_URL=postgresql+asyncpg://coffee@localhost:5432/coffee_test
    """
    default = f"sqlite+aiosqlite:///{tmp_path / 'coffee_test.db'}"
    return os.environ.get("TEST_DATABASE_URL") or default


@pytest_asyncio.fixture
async def db(tmp_path: Path) -> AsyncIterator[AsyncSession]:
    """Create tables and yield a session, then drop tables after test."""
    engine = create_async_engine(database_url(tmp_path), poolclass=NullPool)
    async_session = async_sessionmaker(engine, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


def override_db(target_app: FastAPI, session: AsyncSession) -> None:
    """Make every request in ``target_app`` use ``session``."""

    async def override_get_db() -> AsyncIterator[AsyncSession]:
        yield session

    target_app.dependency_overrides[get_db] = override_get_db


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncIterator[AsyncClient]:
    """HTTP client that uses the test database session."""
    override_db(app, db)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()
