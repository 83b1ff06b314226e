from __future__ import annotations

from typing import Any, Generic, Mapping, Optional, Sequence, Type, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.base import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Base repository with common CRUD helpers.

    No commits are performed here - commit responsibility is left to the
    caller that owns the session (one session per fixture in the importer).
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with an async session."""
        self.session = session

    async def get_by_id(
        self, model: Type[T], id_value: str | int
    ) -> Optional[T]:
        """Get an entity by its primary key."""
        result = await self.session.get(model, id_value)
        return result

    async def insert_ignoring_conflicts(
        self,
        model: Type[T],
        values: Mapping[str, Any],
        conflict_columns: Sequence[str],
    ) -> bool:
        """
        Insert one row unless it violates a unique constraint.

        Returns True when a row was written. Uses INSERT ... ON CONFLICT DO
        NOTHING on SQLite/PostgreSQL; other dialects fall back to a savepoint
        that swallows the IntegrityError of the losing writer.
        """
        dialect = self.session.get_bind().dialect.name
        if dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert as dialect_insert
        elif dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert as dialect_insert
        else:
            return await self._insert_in_savepoint(model, values)

        stmt = (
            dialect_insert(model)
            .values(**dict(values))
            .on_conflict_do_nothing(index_elements=list(conflict_columns))
        )
        result = await self.session.execute(stmt)
        return (result.rowcount or 0) > 0

    async def _insert_in_savepoint(self, model: Type[T], values: Mapping[str, Any]) -> bool:
        try:
            async with self.session.begin_nested():
                self.session.add(model(**dict(values)))
        except IntegrityError:
            return False
        return True
