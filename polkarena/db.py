from __future__ import annotations

from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from polkarena.core.config import settings
from polkarena.models import Base


def _build_engine(database_url: str) -> AsyncEngine:
    kwargs = {"echo": settings.sql_echo}
    if make_url(database_url).get_backend_name() == "sqlite":
        # aiosqlite connections are bound to the loop that opened them
        kwargs["poolclass"] = NullPool
    else:
        kwargs["pool_pre_ping"] = True
    return create_async_engine(database_url, **kwargs)


engine: AsyncEngine = _build_engine(settings.database_url)
SessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False,
)


async def get_db():
    """FastAPI dependency that yields an AsyncSession."""

    async with SessionLocal() as session:
        yield session


async def init_models(drop: bool = False) -> None:
    """Create every mapped table; ``drop`` first empties the schema (tests)."""

    async with engine.begin() as conn:
        if drop:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
