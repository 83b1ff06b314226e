"""Canonical SQLAlchemy models for the match/goal reconciliation store.

Matches, teams and seasons are owned by the storage collaborator; players and
goals are written by the importer.
"""

from .base import Base
from .goal import Goal
from .match import Match
from .player import Player
from .player_team import PlayerTeam
from .season import Season
from .team import Team
from .team_alias import TeamAlias

__all__ = [
    "Base",
    "Goal",
    "Match",
    "Player",
    "PlayerTeam",
    "Season",
    "Team",
    "TeamAlias",
]
