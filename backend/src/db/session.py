"""Async SQLAlchemy session factory."""
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from core.config import Settings, get_settings


def create_engine_for(settings: Settings) -> AsyncEngine:
    """
    Create an async engine for the configured database.

    Pool sizing only applies to server databases; SQLite URLs (used in tests
    and local experiments) keep SQLAlchemy's default pool for the driver.
    """
    kwargs: dict[str, Any] = {"echo": False}
    if not settings.database_url.startswith("sqlite"):
        kwargs.update(
            pool_pre_ping=True,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
        )
    return create_async_engine(settings.database_url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory with objects kept usable after commit."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


settings = get_settings()

engine = create_engine_for(settings)

async_session_factory = create_session_factory(engine)


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """
    Yield an async database session.

    Uses unit-of-work pattern: services use flush() for refreshing objects,
    commit happens once here at request end. This ensures atomic transactions
    per request - if anything fails, all changes are rolled back.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
