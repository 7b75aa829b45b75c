"""
Async engines and sessions for the queue table — PostgreSQL, MySQL, SQLite.

Driver mapping:
  postgresql://  → postgresql+asyncpg://     (requires asyncpg)
  mysql://       → mysql+aiomysql://         (requires aiomysql)
  sqlite://      → sqlite+aiosqlite://       (requires aiosqlite)

One QueueDatabase exists per distinct database URL. Code that holds its
own Settings asks for that one; everything else gets the database named
by the global settings.

Usage:
    db = get_database(settings)        # or get_database() for global settings
    await db.create_tables()
    async with db.session() as session:
        await SqlInsertGateway(session).insert(...)
    await close_db()                   # dispose every engine at shutdown
"""
from __future__ import annotations

import structlog
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker,
)

from config.settings import Settings, get_settings
from database.models import Base

logger = structlog.get_logger()


def _to_async_url(db_url: str) -> str:
    """Convert a sync database URL to its async driver equivalent."""
    replacements = [
        ("postgresql://", "postgresql+asyncpg://"),
        ("postgres://", "postgresql+asyncpg://"),
        ("mysql://", "mysql+aiomysql://"),
        ("mysql+pymysql://", "mysql+aiomysql://"),
        ("sqlite://", "sqlite+aiosqlite://"),
    ]
    for sync_prefix, async_prefix in replacements:
        if db_url.startswith(sync_prefix):
            return db_url.replace(sync_prefix, async_prefix, 1)
    return db_url


def _engine_kwargs(db_url: str, echo: bool) -> dict:
    if "sqlite" in db_url:
        return {"echo": echo, "connect_args": {"check_same_thread": False}}
    # Producers hold a connection only for one INSERT.
    return {
        "echo": echo,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 1800,
        "pool_pre_ping": True,
    }


def _safe_url(url: str) -> str:
    return url.split("@")[-1] if "@" in url else url


class QueueDatabase:
    """Lazily created engine and session factory for one Settings object."""

    def __init__(self, settings: Settings):
        self.url = _to_async_url(settings.database.url)
        self.echo = settings.debug
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = create_async_engine(self.url, **_engine_kwargs(self.url, self.echo))
            logger.info("database_engine_created",
                        dialect=self._engine.dialect.name,
                        url=_safe_url(self.url))
        return self._engine

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session scope that commits on success and rolls back on error."""
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(self.engine, expire_on_commit=False)
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_initialized",
                    url=_safe_url(self.url),
                    tables=list(Base.metadata.tables.keys()))

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("database_closed", url=_safe_url(self.url))


_databases: dict[str, QueueDatabase] = {}


def get_database(settings: Settings = None) -> QueueDatabase:
    """Return the QueueDatabase for ``settings`` (global settings when omitted)."""
    settings = settings or get_settings()
    url = _to_async_url(settings.database.url)
    if url not in _databases:
        _databases[url] = QueueDatabase(settings)
    return _databases[url]


def get_engine(settings: Settings = None) -> AsyncEngine:
    return get_database(settings).engine


def get_session(settings: Settings = None):
    """``async with get_session() as db:`` — shorthand for get_database().session()."""
    return get_database(settings).session()


async def init_db(settings: Settings = None) -> None:
    """Create the queue table. Call once at application startup."""
    await get_database(settings).create_tables()


async def close_db() -> None:
    """Dispose every engine. Call at application shutdown."""
    for database in list(_databases.values()):
        await database.dispose()
    _databases.clear()
