"""Goal attribution: resolve scorer/minute text of a linked fixture into Goal rows."""

from .goal_resolver import PLAYER_SIMILARITY_FLOOR, GoalAttributionResolver
from .types import AttributedGoal, AttributionResult, UnresolvedScorer

__all__ = [
    "AttributedGoal",
    "AttributionResult",
    "GoalAttributionResolver",
    "PLAYER_SIMILARITY_FLOOR",
    "UnresolvedScorer",
]
