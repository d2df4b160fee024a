"""Async database engine and session management."""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from profusion.core.config import settings
from profusion.core.logging import get_logger
from profusion.models.base import Base

logger = get_logger(__name__)


def _engine_kwargs(url: str) -> dict:
    # SQLite does not take pool sizing arguments
    if url.startswith("sqlite"):
        return {}
    return {
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_pre_ping": True,
    }


engine = create_async_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a request-scoped session."""
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


def should_auto_create(url: str) -> bool:
    """Whether startup may create tables on ``url`` instead of Alembic."""
    return url.startswith("sqlite") or settings.DATABASE_AUTO_CREATE


async def init_db() -> bool:
    """Create tables that do not exist yet and report whether it ran.

    Outside SQLite the schema belongs to Alembic unless
    ``DATABASE_AUTO_CREATE`` is set.
    """
    if not should_auto_create(settings.DATABASE_URL):
        logger.info("Skipping table creation, schema is managed by Alembic")
        return False

    # Import models so they register on the metadata
    import profusion.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return True


async def close_db() -> None:
    """Dispose of the connection pool."""
    await engine.dispose()
    logger.info("Database connections closed")
