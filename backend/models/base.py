from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Canonical SQLAlchemy base for the match/goal reconciliation store."""

    pass
