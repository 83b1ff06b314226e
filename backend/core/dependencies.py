from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from .database import get_database_manager


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a rolled-back AsyncSession (report routes never write)."""
    manager = get_database_manager()
    async with manager.rollback_session() as session:
        yield session
