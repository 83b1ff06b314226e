from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

STATUS_CONSISTENT = "consistent"
STATUS_MISSING = "missing"
STATUS_PARTIAL = "partial"
STATUS_INCONSISTENT = "inconsistent"
STATUS_NO_SCORE = "no_score"

STATUSES = (
    STATUS_CONSISTENT,
    STATUS_PARTIAL,
    STATUS_MISSING,
    STATUS_INCONSISTENT,
    STATUS_NO_SCORE,
)

SUGGEST_UNDER = "goals under-attributed"
SUGGEST_OVER = "goals over-attributed"
SUGGEST_SKEW = "attribution skew"


@dataclass
class CorrectionCandidate:
    """A match whose attributed goals disagree with its final score (report-only)."""

    match_id: str
    expected_goal_count: int
    actual_goal_count: int
    difference: int  # actual - expected
    suggestion: str
    home_expected: int = 0
    away_expected: int = 0
    home_actual: int = 0
    away_actual: int = 0

    def rank_key(self) -> Tuple[int, int, str]:
        """Closest to reconciliation first; ties broken by per-team error, then id."""
        split_error = abs(self.home_actual - self.home_expected) + abs(self.away_actual - self.away_expected)
        return (abs(self.difference), split_error, self.match_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "match_id": self.match_id,
            "expected_goal_count": self.expected_goal_count,
            "actual_goal_count": self.actual_goal_count,
            "difference": self.difference,
            "suggestion": self.suggestion,
            "home": {"expected": self.home_expected, "actual": self.home_actual},
            "away": {"expected": self.away_expected, "actual": self.away_actual},
        }


@dataclass
class MatchValidation:
    match_id: str
    home_goals_recorded: int
    away_goals_recorded: int
    status: str
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    match_date: Optional[date] = None
    season_id: Optional[str] = None
    home_team_id: Optional[str] = None
    away_team_id: Optional[str] = None
    correction: Optional[CorrectionCandidate] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "match_id": self.match_id,
            "match_date": self.match_date.isoformat() if self.match_date else None,
            "season_id": self.season_id,
            "home_team_id": self.home_team_id,
            "away_team_id": self.away_team_id,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "home_goals_recorded": self.home_goals_recorded,
            "away_goals_recorded": self.away_goals_recorded,
            "status": self.status,
            "correction": self.correction.to_dict() if self.correction else None,
        }


@dataclass
class PeriodCoverage:
    period: str
    matches: int = 0
    consistent: int = 0

    @property
    def coverage(self) -> float:
        return self.consistent / self.matches if self.matches else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "matches": self.matches,
            "consistent": self.consistent,
            "coverage": round(self.coverage, 4),
        }


@dataclass
class TeamCoverage:
    team_id: str
    team_name: str
    matches: int = 0
    expected_goals: int = 0
    recorded_goals: int = 0

    @property
    def coverage(self) -> Optional[float]:
        if not self.expected_goals:
            return None
        return self.recorded_goals / self.expected_goals

    def to_dict(self) -> Dict[str, Any]:
        coverage = self.coverage
        return {
            "team_id": self.team_id,
            "team_name": self.team_name,
            "matches": self.matches,
            "expected_goals": self.expected_goals,
            "recorded_goals": self.recorded_goals,
            "coverage": round(coverage, 4) if coverage is not None else None,
        }


@dataclass
class ValidationReport:
    group_by: str
    match_count: int = 0
    unscored_count: int = 0
    status_counts: Dict[str, int] = field(default_factory=dict)
    periods: List[PeriodCoverage] = field(default_factory=list)
    teams: List[TeamCoverage] = field(default_factory=list)
    patterns: List[Dict[str, int]] = field(default_factory=list)
    corrections: List[CorrectionCandidate] = field(default_factory=list)
    correction_count: int = 0

    @property
    def consistency_rate(self) -> float:
        if not self.match_count:
            return 0.0
        return self.status_counts.get(STATUS_CONSISTENT, 0) / self.match_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group_by": self.group_by,
            "match_count": self.match_count,
            "unscored_count": self.unscored_count,
            "status_counts": dict(sorted(self.status_counts.items())),
            "consistency_rate": round(self.consistency_rate, 4),
            "periods": [p.to_dict() for p in self.periods],
            "teams": [t.to_dict() for t in self.teams],
            "patterns": list(self.patterns),
            "correction_count": self.correction_count,
            "corrections": [c.to_dict() for c in self.corrections],
        }
