from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

RESOLVED_EXACT = "exact"
RESOLVED_SUBSTRING = "substring"
RESOLVED_TEAM_FUZZY = "team_fuzzy"
RESOLVED_CREATED = "created"
# player already credited at this match, team and minute by an earlier run
RESOLVED_RECORDED = "recorded"


@dataclass
class AttributedGoal:
    """One goal emitted for a match (inserted now, or already present)."""

    match_id: str
    player_id: int
    team_id: str
    minute: int
    goal_type: str
    scorer_raw: str
    resolution: str
    inserted: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "match_id": self.match_id,
            "player_id": self.player_id,
            "team_id": self.team_id,
            "minute": self.minute,
            "goal_type": self.goal_type,
            "scorer_raw": self.scorer_raw,
            "resolution": self.resolution,
            "inserted": self.inserted,
        }


@dataclass
class UnresolvedScorer:
    side: str
    scorer_raw: str
    minute_raw: Optional[str]
    reason: str


@dataclass
class AttributionResult:
    """Goals produced for one match plus what could not be attributed."""

    match_id: str
    goals: List[AttributedGoal] = field(default_factory=list)
    unresolved: List[UnresolvedScorer] = field(default_factory=list)
    players_created: int = 0
    length_mismatches: List[str] = field(default_factory=list)

    @property
    def unresolved_scorers(self) -> int:
        return len(self.unresolved)

    @property
    def inserted(self) -> int:
        return sum(1 for g in self.goals if g.inserted)

    @property
    def duplicates(self) -> int:
        return sum(1 for g in self.goals if not g.inserted)

    def goals_for(self, team_id: str) -> List[AttributedGoal]:
        return [g for g in self.goals if g.team_id == team_id]
