"""Repository layer for DB access only (CRUD + simple queries).

Repositories operate on the models in backend/models/ and never commit:
the caller that owns the session decides when a unit of work ends.
"""

from .base import BaseRepository
from .goal_repo import GoalRepository
from .match_repo import MatchRepository, MatchWithTeams
from .player_repo import PlayerRepository
from .season_repo import SeasonRepository
from .team_repo import TeamRepository

__all__ = [
    "BaseRepository",
    "GoalRepository",
    "MatchRepository",
    "MatchWithTeams",
    "PlayerRepository",
    "SeasonRepository",
    "TeamRepository",
]
