from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import and_, func, literal, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.goal import Goal
from models.player import Player
from models.player_team import PlayerTeam
from .base import BaseRepository


class PlayerRepository(BaseRepository[Player]):
    """Repository for Player entities and squad memberships."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_by_id(self, id: int) -> Optional[Player]:
        """Get player by ID."""
        return await super().get_by_id(Player, id)

    async def find_by_name(self, name_norm: str) -> Optional[Player]:
        """Player whose normalized name equals ``name_norm`` (unique)."""
        if not name_norm:
            return None
        stmt = select(Player).where(Player.name_norm == name_norm)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_substring(
        self, name_norm: str, min_length: int = 4, limit: int = 25
    ) -> List[Player]:
        """
        Players whose normalized name contains ``name_norm`` as whole words, or
        whose whole name appears as words inside ``name_norm``.

        Stored names shorter than ``min_length`` never match the reverse way, so
        a short surname does not swallow longer scorer tokens.
        """
        if not name_norm:
            return []
        stored = literal(" ") + Player.name_norm + literal(" ")
        stmt = (
            select(Player)
            .where(
                or_(
                    stored.contains(f" {name_norm} ", autoescape=True),
                    and_(
                        func.length(Player.name_norm) >= min_length,
                        literal(f" {name_norm} ").contains(stored),
                    ),
                )
            )
            .order_by(Player.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_team_history(self, team_id: str) -> List[Player]:
        """Players with a squad membership for ``team_id`` or a goal credited to it."""
        squad = select(PlayerTeam.player_id).where(PlayerTeam.team_id == team_id)
        scorers = select(Goal.player_id).where(Goal.team_id == team_id)
        stmt = (
            select(Player)
            .where(or_(Player.id.in_(squad), Player.id.in_(scorers)))
            .order_by(Player.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def team_history_ids(self, player_ids: List[int], team_id: str) -> List[int]:
        """Subset of ``player_ids`` with history for ``team_id``."""
        if not player_ids:
            return []
        squad = select(PlayerTeam.player_id).where(PlayerTeam.team_id == team_id)
        scorers = select(Goal.player_id).where(Goal.team_id == team_id)
        stmt = (
            select(Player.id)
            .where(Player.id.in_(player_ids))
            .where(or_(Player.id.in_(squad), Player.id.in_(scorers)))
        )
        result = await self.session.execute(stmt)
        return sorted(result.scalars().all())

    async def create(self, name: str, name_norm: str) -> Tuple[Player, bool]:
        """
        Create a player, or return the existing one when a concurrent writer
        (or an earlier run) already holds ``name_norm``.

        Returns (player, created).
        """
        created = await self.insert_ignoring_conflicts(
            Player,
            {"name": name, "name_norm": name_norm},
            conflict_columns=("name_norm",),
        )
        player = await self.find_by_name(name_norm)
        if player is None:
            raise RuntimeError(f"player {name_norm!r} missing after insert")
        return player, created

    async def add_team_membership(
        self, player_id: int, team_id: str, season_id: Optional[str] = None
    ) -> bool:
        """Record that a player appeared for a team (idempotent)."""
        stmt = (
            select(PlayerTeam.id)
            .where(PlayerTeam.player_id == player_id)
            .where(PlayerTeam.team_id == team_id)
        )
        if season_id is None:
            stmt = stmt.where(PlayerTeam.season_id.is_(None))
        else:
            stmt = stmt.where(PlayerTeam.season_id == season_id)
        result = await self.session.execute(stmt.limit(1))
        if result.scalar_one_or_none() is not None:
            return False
        return await self.insert_ignoring_conflicts(
            PlayerTeam,
            {"player_id": player_id, "team_id": team_id, "season_id": season_id},
            conflict_columns=("player_id", "team_id", "season_id"),
        )
