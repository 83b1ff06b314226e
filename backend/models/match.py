from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy import (
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Match(Base):
    """Canonical match between two teams. Read-only for the importer."""

    __tablename__ = "matches"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    season_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("seasons.id"), nullable=True
    )
    match_date: Mapped[date] = mapped_column(Date, nullable=False)

    home_team_id: Mapped[str] = mapped_column(
        ForeignKey("teams.id"), nullable=False
    )
    away_team_id: Mapped[str] = mapped_column(
        ForeignKey("teams.id"), nullable=False
    )

    home_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    away_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        Index("ix_match_date", "match_date"),
        Index(
            "ix_match_teams_date",
            "home_team_id",
            "away_team_id",
            "match_date",
        ),
    )
