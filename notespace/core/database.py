"""Async database engine and session factory."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from notespace.core.config import Settings


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the process-wide engine. Pool sizing only applies to server databases."""
    kwargs: dict = {"echo": False}
    if settings.database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"timeout": settings.db_pool_timeout}
    else:
        kwargs.update(
            pool_size=20,
            max_overflow=10,
            pool_timeout=settings.db_pool_timeout,
        )
    return create_async_engine(settings.database_url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables."""
    # Import models so SQLModel.metadata is populated
    import notespace.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
