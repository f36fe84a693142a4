"""
Database configuration and connection management
"""
from contextlib import asynccontextmanager
from typing import Any, Dict

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from core.config import settings
from database.models import Base


def to_async_url(database_url: str) -> str:
    """Convert a plain driver URL to its async counterpart"""
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("sqlite://"):
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return database_url


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection"""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_engine_for(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine; pooling options only apply to server databases"""
    url = to_async_url(database_url)
    kwargs: Dict[str, Any] = {"echo": echo}
    if not url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,
        )

    engine = create_async_engine(url, **kwargs)
    if url.startswith("sqlite"):
        enable_sqlite_foreign_keys(engine)
    return engine


DATABASE_URL = to_async_url(settings.database_url)

engine = create_engine_for(settings.database_url, echo=settings.debug)

AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables(target: AsyncEngine = None):
    """Create all database tables"""
    async with (target or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def get_db_session():
    """Get async database session"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def get_db():
    """FastAPI dependency for database sessions"""
    async with get_db_session() as session:
        yield session
