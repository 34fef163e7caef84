"""Database connection and session management."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from adminkit.config import settings


def enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let SQLAlchemy emit BEGIN itself so SAVEPOINTs work under aiosqlite."""

    @event.listens_for(engine.sync_engine, "connect")
    def _do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_engine_from_settings(pooled: bool = True) -> AsyncEngine:
    """Create the async engine for the configured database.

    Unpooled engines are for code that runs each job in a fresh event loop
    (Celery tasks), where pooled connections would outlive their loop.
    """
    if settings.is_sqlite:
        engine = create_async_engine(settings.database_url, echo=settings.database_echo)
        enable_sqlite_savepoints(engine)
        return engine

    if not pooled:
        return create_async_engine(settings.database_url, echo=settings.database_echo, poolclass=NullPool)

    return create_async_engine(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        echo=settings.database_echo,
        pool_pre_ping=True,
    )


# Create async engine
async_engine = create_engine_from_settings()

# Session factory
async_session_maker = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


@asynccontextmanager
async def worker_sessions() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session factory on a private, unpooled engine, disposed on exit."""
    engine = create_engine_from_settings(pooled=False)
    try:
        yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    finally:
        await engine.dispose()


async def init_db() -> None:
    """Initialize database connection."""
    # Just verify the connection works
    async with async_engine.begin() as conn:
        await conn.run_sync(lambda _: None)


async def close_db() -> None:
    """Close database connections."""
    await async_engine.dispose()
