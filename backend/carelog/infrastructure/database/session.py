"""SQLAlchemy database session and engine configuration."""

from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from carelog.config import Settings, get_settings


def _get_async_url(url: str) -> str:
    """Convert a sync SQLAlchemy URL to an async one."""
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def _configure_sqlite(engine: AsyncEngine, settings: Settings) -> None:
    """Apply connect-time pragmas and take over transaction control.

    pysqlite's implicit BEGIN handling breaks SAVEPOINT nesting, so the
    driver is put in autocommit mode and BEGIN is emitted by SQLAlchemy.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute(f"PRAGMA journal_mode={settings.sqlite_journal_mode}")
        cursor.execute(f"PRAGMA synchronous={settings.sqlite_synchronous}")
        cursor.execute(f"PRAGMA cache_size={int(settings.sqlite_cache_size)}")
        cursor.execute(f"PRAGMA temp_store={settings.sqlite_temp_store}")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(database_url: str, settings: Settings | None = None) -> AsyncEngine:
    """Create an async engine for *database_url* with store-specific setup."""
    settings = settings or get_settings()
    async_url = _get_async_url(database_url)

    kwargs: dict = {"echo": settings.database_echo, "future": True}
    if async_url.startswith("sqlite") and ":memory:" in async_url:
        # One shared connection, otherwise every checkout sees an empty database
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}

    engine = create_async_engine(async_url, **kwargs)
    if async_url.startswith("sqlite"):
        _configure_sqlite(engine, settings)
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


settings = get_settings()
engine = build_engine(settings.database_url, settings)
async_session_factory = build_session_factory(engine)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency — yields an async DB session per request."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """FastAPI dependency — the factory itself, for responses that outlive the request scope."""
    return async_session_factory
