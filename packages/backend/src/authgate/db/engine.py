"""Async SQLAlchemy engine and session factory.

Learn: SQLAlchemy 2.0 async mode — create_async_engine for connection pooling,
async_sessionmaker for short-lived sessions. The engine is built from the
Settings object in the app lifespan and disposed on shutdown.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from authgate.config import Settings
from authgate.db.models import Base


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the engine. echo=True in debug to see SQL queries."""
    return create_async_engine(settings.database_url, echo=settings.debug)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: users are read after the session closes.
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    """Create any missing tables (dev / test databases)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
