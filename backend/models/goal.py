from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

GOAL_TYPES = ("regular", "penalty", "own_goal")


class Goal(Base):
    """Attributed scoring event.

    (match_id, player_id, team_id, minute) is the idempotency key: re-running
    an import never duplicates a row.
    """

    __tablename__ = "goals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_id: Mapped[str] = mapped_column(
        ForeignKey("matches.id"), nullable=False
    )
    player_id: Mapped[int] = mapped_column(
        ForeignKey("players.id"), nullable=False, index=True
    )
    team_id: Mapped[str] = mapped_column(
        ForeignKey("teams.id"), nullable=False
    )
    minute: Mapped[int] = mapped_column(Integer, nullable=False)
    goal_type: Mapped[str] = mapped_column(String(16), nullable=False, default="regular")
    created_at_utc: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    __table_args__ = (
        UniqueConstraint(
            "match_id", "player_id", "team_id", "minute", name="uq_goal_identity"
        ),
        Index("ix_goal_match_team", "match_id", "team_id"),
    )
