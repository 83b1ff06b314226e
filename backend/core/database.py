from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Async database manager with a single engine and session factory.

    Every unit of work (one fixture, one validation run) gets its own session,
    so concurrent workers never share a transaction.
    """

    def __init__(self, database_url: str) -> None:
        self._database_url = database_url
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def is_sqlite(self) -> bool:
        return self._database_url.startswith("sqlite")

    async def init(self) -> None:
        """Initialize the async engine and sessionmaker if not already initialized."""
        if self._engine is not None:
            return

        logger.info("Initializing async database engine")
        engine_kwargs = {"echo": False}
        if self.is_sqlite and ":memory:" in self._database_url:
            # one shared connection, otherwise every session sees an empty database
            engine_kwargs["poolclass"] = StaticPool
        self._engine = create_async_engine(self._database_url, **engine_kwargs)

        if self.is_sqlite:

            @event.listens_for(self._engine.sync_engine, "connect")
            def _set_sqlite_pragma(dbapi_connection, connection_record) -> None:  # type: ignore[override]  # pragma: no cover
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                try:
                    cursor.execute("PRAGMA journal_mode=WAL")
                    cursor.execute("PRAGMA busy_timeout=5000")
                except Exception:
                    # in-memory databases report journal_mode=memory; nothing to do
                    logger.debug("SQLite WAL journal_mode not applied")
                finally:
                    cursor.close()

        self._sessionmaker = async_sessionmaker(
            self._engine,
            expire_on_commit=False,
            class_=AsyncSession,
        )
        logger.info("Async database engine and sessionmaker initialized")

    async def create_all(self) -> None:
        """Create every table registered on the canonical metadata (idempotent)."""
        import models  # noqa: F401
        from models.base import Base

        if self._engine is None:
            raise RuntimeError("DatabaseManager is not initialized. Call init() first.")
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Dispose of the engine and clear the sessionmaker."""
        if self._engine is not None:
            logger.info("Disposing async database engine")
            await self._engine.dispose()
            self._engine = None
            self._sessionmaker = None

    def _new_session(self) -> AsyncSession:
        if self._sessionmaker is None:
            raise RuntimeError("DatabaseManager is not initialized. Call init() first.")
        return self._sessionmaker()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Async context manager yielding an AsyncSession.

        Ensures commit on success and rollback on errors.
        """
        session = self._new_session()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    @asynccontextmanager
    async def rollback_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session that is always rolled back: dry runs and read-only reporting."""
        session = self._new_session()
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()


_db_manager: Optional[DatabaseManager] = None


async def init_database(database_url: str) -> None:
    """Create and initialize the global DatabaseManager singleton."""
    global _db_manager

    if _db_manager is None:
        _db_manager = DatabaseManager(database_url)
    await _db_manager.init()


async def dispose_database() -> None:
    """Dispose the global DatabaseManager singleton."""
    global _db_manager

    if _db_manager is not None:
        await _db_manager.dispose()
        _db_manager = None


def get_database_manager() -> DatabaseManager:
    """Return the initialized DatabaseManager instance."""
    if _db_manager is None:
        raise RuntimeError("DatabaseManager is not initialized.")
    return _db_manager
