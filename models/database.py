import logging
from typing import AsyncIterator

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import config
from models.models import Base


logger = logging.getLogger(__name__)


def make_engine(url: str = config.DATABASE_URL, **kwargs):
    if not url.startswith("sqlite") and "poolclass" not in kwargs:
        kwargs.setdefault("pool_size", config.DB_POOL_SIZE)
        kwargs.setdefault("max_overflow", config.DB_MAX_OVERFLOW)
        kwargs.setdefault("pool_timeout", config.DB_POOL_TIMEOUT)
        kwargs.setdefault("pool_pre_ping", True)
    return create_async_engine(url, echo=config.DB_ECHO, **kwargs)


def make_session_maker(bind) -> async_sessionmaker:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = make_engine()
async_session_maker = make_session_maker(engine)


async def init_db(bind=None):
    bind = bind or engine
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema is up to date")


async def close_db():
    await engine.dispose()


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency: one session per request."""
    async with async_session_maker() as session:
        yield session


def dialect_insert(session: AsyncSession, table):
    """INSERT construct with ON CONFLICT support for the session's backend."""
    name = session.get_bind().dialect.name
    if name == "postgresql":
        return postgresql.insert(table)
    if name == "sqlite":
        return sqlite.insert(table)
    raise ValueError(
        f"DATABASE_URL dialect '{name}' is not supported, use postgresql+asyncpg or sqlite+aiosqlite"
    )
