from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.team import Team
from models.team_alias import TeamAlias
from .base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    """Repository for Team entities."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_by_id(self, id: str) -> Optional[Team]:
        """Get team by ID."""
        return await super().get_by_id(Team, id)

    async def get_many(self, ids: Iterable[str]) -> Dict[str, Team]:
        """Teams keyed by id; unknown ids are simply absent."""
        wanted = sorted(set(ids))
        if not wanted:
            return {}
        stmt = select(Team).where(Team.id.in_(wanted))
        result = await self.session.execute(stmt)
        return {team.id: team for team in result.scalars().all()}

    async def resolve_canonical_name(self, raw_name: str) -> Optional[Team]:
        """Team whose canonical or short name equals ``raw_name`` (canonical name preferred)."""
        name = (raw_name or "").strip()
        if not name:
            return None
        stmt = (
            select(Team)
            .where(or_(Team.name == name, Team.short_name == name))
            .order_by((Team.name == name).desc(), Team.id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_all(self) -> List[Team]:
        stmt = select(Team).order_by(Team.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_alias_pairs(self) -> List[Tuple[str, str]]:
        """(alias, canonical team name) for every stored alias, stable order."""
        stmt = (
            select(TeamAlias.alias, Team.name)
            .join(Team, Team.id == TeamAlias.team_id)
            .order_by(TeamAlias.quality, TeamAlias.id)
        )
        result = await self.session.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]
