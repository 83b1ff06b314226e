from __future__ import annotations

from sqlalchemy import Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class TeamAlias(Base):
    """Source-side spelling of a team (e.g. a historical CSV name)."""

    __tablename__ = "team_aliases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    team_id: Mapped[str] = mapped_column(
        ForeignKey("teams.id"), nullable=False, index=True
    )
    alias: Mapped[str] = mapped_column(String(255), nullable=False)
    alias_norm: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    source: Mapped[str] = mapped_column(String(64), nullable=False, default="csv")
    quality: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)

    team = relationship("Team")

    __table_args__ = (
        UniqueConstraint("alias_norm", "source", name="uq_team_alias_norm_source"),
    )
