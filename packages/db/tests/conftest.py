"""Fixtures for persistence gateway tests.

Each test gets a fresh in-memory SQLite database with the full schema. A
StaticPool keeps the single connection alive for the life of the engine so
every session sees the same database.
"""

import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from fairlend_db import DatabaseService


@pytest_asyncio.fixture
async def db_service():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    service = DatabaseService(engine=engine)
    await service.create_all()
    yield service
    await service.close()


@pytest_asyncio.fixture
async def session(db_service):
    async with db_service.session_factory() as session:
        yield session
