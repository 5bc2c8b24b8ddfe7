"""Declarative base plus the engine and sessions used by the bracket stores."""
from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

import config


class Base(DeclarativeBase):
    """Base class for alliance and match tables."""
    pass


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    """
    Sessions keep loaded matches usable after commit; the stores commit after every
    write and the scheduler keeps working with the same Match objects.
    """
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False, autoflush=False)


engine = create_async_engine(config.DATABASE_URL, echo=False)
async_session_factory = make_session_factory(engine)


async def get_async_session():
    """Yield a session on the configured database. Use: async for session in get_async_session(): ..."""
    async with async_session_factory() as session:
        yield session


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create the alliance_teams and matches tables. Defaults to the configured engine."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
