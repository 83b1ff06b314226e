from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.goal import Goal
from models.player import Player
from .base import BaseRepository


class GoalRepository(BaseRepository[Goal]):
    """Repository for attributed goals."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def insert_if_absent(
        self,
        match_id: str,
        player_id: int,
        team_id: str,
        minute: int,
        goal_type: str = "regular",
    ) -> bool:
        """
        Insert a goal unless (match_id, player_id, team_id, minute) exists.

        Returns True when a new row was written, False for a duplicate.
        """
        return await self.insert_ignoring_conflicts(
            Goal,
            {
                "match_id": match_id,
                "player_id": player_id,
                "team_id": team_id,
                "minute": minute,
                "goal_type": goal_type,
                "created_at_utc": datetime.now(timezone.utc),
            },
            conflict_columns=("match_id", "player_id", "team_id", "minute"),
        )

    async def list_by_match(self, match_id: str) -> List[Goal]:
        stmt = (
            select(Goal)
            .where(Goal.match_id == match_id)
            .order_by(Goal.minute, Goal.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_by_match_and_team(self, match_id: str, team_id: str) -> int:
        stmt = (
            select(func.count(Goal.id))
            .where(Goal.match_id == match_id)
            .where(Goal.team_id == team_id)
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def counts_by_match(
        self, match_ids: Iterable[str] | None = None
    ) -> Dict[Tuple[str, str], int]:
        """Goal counts keyed by (match_id, team_id) in one grouped query."""
        stmt = select(Goal.match_id, Goal.team_id, func.count(Goal.id)).group_by(
            Goal.match_id, Goal.team_id
        )
        if match_ids is not None:
            ids = list(match_ids)
            if not ids:
                return {}
            stmt = stmt.where(Goal.match_id.in_(ids))
        result = await self.session.execute(stmt)
        return {(row[0], row[1]): int(row[2]) for row in result.all()}

    async def count_all(self) -> int:
        result = await self.session.execute(select(func.count(Goal.id)))
        return int(result.scalar_one())

    async def scorers_at(self, match_id: str, team_id: str, minute: int) -> List[Player]:
        """Players already credited with a goal for ``team_id`` at ``minute`` of ``match_id``."""
        stmt = (
            select(Player)
            .join(Goal, Goal.player_id == Player.id)
            .where(Goal.match_id == match_id)
            .where(Goal.team_id == team_id)
            .where(Goal.minute == minute)
            .order_by(Goal.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
