"""Async engine, session factory and FastAPI session dependency."""

import logging
from collections.abc import AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from .config import db_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


engine = create_async_engine(db_settings.DATABASE_URL, echo=db_settings.SQL_ECHO, pool_pre_ping=True)
SessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False,
)


class DatabaseService:
    """Owns an engine and hands out sessions bound to it."""

    def __init__(self, engine: AsyncEngine | None = None) -> None:
        self.engine = engine or globals()["engine"]
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )

    async def create_all(self) -> None:
        """Create all tables (tests and local bootstrap; production uses Alembic)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.warning("Database health check failed", exc_info=True)
            return False

    async def close(self) -> None:
        await self.engine.dispose()


db_service = DatabaseService(engine=engine)


def get_db_service() -> DatabaseService:
    return db_service


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding a request-scoped session."""
    async with SessionLocal() as session:
        yield session
