from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from models.match import Match
from models.team import Team
from .base import BaseRepository


@dataclass
class MatchWithTeams:
    """Match row with both canonical team names (for fuzzy comparison and reports)."""

    match: Match
    home_name: str
    away_name: str
    home_short_name: Optional[str] = None
    away_short_name: Optional[str] = None


class MatchRepository(BaseRepository[Match]):
    """Repository for Match entities. Read-only: the importer never writes matches."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_by_id(self, id: str) -> Optional[Match]:
        """Get match by ID."""
        return await super().get_by_id(Match, id)

    async def find_by_teams_and_date(
        self,
        home_name: str,
        away_name: str,
        match_date: date,
    ) -> List[Match]:
        """
        Matches on ``match_date`` whose home/away team canonical-or-short name
        equals the given names exactly. Returns every candidate so callers can
        treat more than one as ambiguous.
        """
        home = aliased(Team)
        away = aliased(Team)
        stmt = (
            select(Match)
            .join(home, home.id == Match.home_team_id)
            .join(away, away.id == Match.away_team_id)
            .where(or_(home.name == home_name, home.short_name == home_name))
            .where(or_(away.name == away_name, away.short_name == away_name))
            .where(Match.match_date == match_date)
            .order_by(Match.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().unique().all())

    async def find_by_date(self, match_date: date) -> List[Match]:
        """All matches on a calendar date (uses ix_match_date)."""
        stmt = (
            select(Match)
            .where(Match.match_date == match_date)
            .order_by(Match.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_with_teams_between(
        self,
        date_from: date,
        date_to: date,
    ) -> List[MatchWithTeams]:
        """Matches in [date_from, date_to] with both team names attached."""
        home = aliased(Team)
        away = aliased(Team)
        stmt = (
            select(Match, home.name, away.name, home.short_name, away.short_name)
            .join(home, home.id == Match.home_team_id)
            .join(away, away.id == Match.away_team_id)
            .where(and_(Match.match_date >= date_from, Match.match_date <= date_to))
            .order_by(Match.match_date, Match.id)
        )
        result = await self.session.execute(stmt)
        return [
            MatchWithTeams(
                match=row[0],
                home_name=row[1],
                away_name=row[2],
                home_short_name=row[3],
                away_short_name=row[4],
            )
            for row in result.all()
        ]

    async def list_scored(self, match_ids: Optional[List[str]] = None) -> List[Match]:
        """Matches with both final scores recorded, optionally restricted to ``match_ids``."""
        stmt = (
            select(Match)
            .where(Match.home_score.is_not(None))
            .where(Match.away_score.is_not(None))
        )
        if match_ids is not None:
            if not match_ids:
                return []
            stmt = stmt.where(Match.id.in_(match_ids))
        stmt = stmt.order_by(Match.match_date, Match.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_unscored(self) -> int:
        from sqlalchemy import func

        stmt = select(func.count(Match.id)).where(
            or_(Match.home_score.is_(None), Match.away_score.is_(None))
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one())
