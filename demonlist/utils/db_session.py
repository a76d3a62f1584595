from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker, AsyncSession
from typing import AsyncGenerator, Optional
from functools import lru_cache
from contextlib import asynccontextmanager

from demonlist.config.settings import settings


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@lru_cache
def get_async_engine() -> AsyncEngine:
    """
    Returns a cached instance of the async engine for ``settings.DATABASE_URL``.

    PostgreSQL (asyncpg) in production. SQLite (aiosqlite) is accepted for
    local runs and tests and gets foreign key enforcement switched on.
    """
    url = make_url(settings.DATABASE_URL)
    if url.get_backend_name() == "sqlite":
        engine = create_async_engine(url, echo=settings.DEBUG)
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_async_engine(
        url,
        echo=settings.DEBUG,
        pool_pre_ping=True,
        pool_recycle=3600,
    )


@lru_cache
def get_async_session_factory() -> async_sessionmaker[AsyncSession]:
    """Returns a cached instance of the async session factory."""
    return async_sessionmaker(
        bind=get_async_engine(),
        autoflush=False,
        expire_on_commit=False,
        class_=AsyncSession,
    )


def dialect_name(session: AsyncSession) -> str:
    """Name of the database dialect behind ``session``, e.g. 'postgresql' or 'sqlite'."""
    return session.get_bind().dialect.name


@asynccontextmanager
async def get_db_session_context_manager(existing_session: Optional[AsyncSession] = None) -> AsyncGenerator[AsyncSession, None]:
    """
    Provides an SQLAlchemy async session as one unit of work.

    Every public demonlist operation accepts an optional ``existing_session``
    and runs through here, so several operations can be composed into one
    transaction by passing the same session. The caller then owns commit,
    rollback and close. Without one, a new session is created that is
    committed when the block exits normally, rolled back when it raises, and
    closed either way.
    """
    if existing_session is not None:
        yield existing_session
        return

    factory = get_async_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
