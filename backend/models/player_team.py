from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class PlayerTeam(Base):
    """Squad membership: a player known to have appeared for a team."""

    __tablename__ = "player_teams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    player_id: Mapped[int] = mapped_column(
        ForeignKey("players.id"), nullable=False, index=True
    )
    team_id: Mapped[str] = mapped_column(
        ForeignKey("teams.id"), nullable=False, index=True
    )
    season_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("seasons.id"), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("player_id", "team_id", "season_id", name="uq_player_team_season"),
    )
