"""
Consistency validator: attributed goals vs recorded final scores.

Read-only and safe to re-run at any time; it never writes. Matches without
both scores are counted as ``no_score`` and are not classified.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from models.match import Match
from ops.ops_events import log_validation_summary
from repositories.goal_repo import GoalRepository
from repositories.match_repo import MatchRepository
from repositories.season_repo import SeasonRepository
from repositories.team_repo import TeamRepository
from .types import (
    STATUS_CONSISTENT,
    STATUS_INCONSISTENT,
    STATUS_MISSING,
    STATUS_NO_SCORE,
    STATUS_PARTIAL,
    STATUSES,
    SUGGEST_OVER,
    SUGGEST_SKEW,
    SUGGEST_UNDER,
    CorrectionCandidate,
    MatchValidation,
    PeriodCoverage,
    TeamCoverage,
    ValidationReport,
)

logger = logging.getLogger(__name__)

GROUP_BY_SEASON = "season"
GROUP_BY_DECADE = "decade"
GROUP_BY_CHOICES = (GROUP_BY_SEASON, GROUP_BY_DECADE)
DEFAULT_CORRECTION_LIMIT = 50
DEFAULT_MIN_TEAM_MATCHES = 5
DEFAULT_PATTERN_LIMIT = 10


def suggest(expected_total: int, actual_total: int) -> str:
    if actual_total < expected_total:
        return SUGGEST_UNDER
    if actual_total > expected_total:
        return SUGGEST_OVER
    return SUGGEST_SKEW


def classify(
    home_score: Optional[int],
    away_score: Optional[int],
    home_recorded: int,
    away_recorded: int,
) -> str:
    """
    consistent: both sides equal the score (0-0 with no goals included)
    missing: no goals at all for a scored match
    partial: every side at or below its score
    inconsistent: some side above its score
    """
    if home_score is None or away_score is None:
        return STATUS_NO_SCORE
    if home_recorded == home_score and away_recorded == away_score:
        return STATUS_CONSISTENT
    if home_recorded == 0 and away_recorded == 0:
        return STATUS_MISSING
    if home_recorded <= home_score and away_recorded <= away_score:
        return STATUS_PARTIAL
    return STATUS_INCONSISTENT


def evaluate(match: Match, home_recorded: int, away_recorded: int) -> MatchValidation:
    status = classify(match.home_score, match.away_score, home_recorded, away_recorded)
    correction = None
    if status in (STATUS_MISSING, STATUS_PARTIAL, STATUS_INCONSISTENT):
        expected = match.home_score + match.away_score
        actual = home_recorded + away_recorded
        correction = CorrectionCandidate(
            match_id=match.id,
            expected_goal_count=expected,
            actual_goal_count=actual,
            difference=actual - expected,
            suggestion=suggest(expected, actual),
            home_expected=match.home_score,
            away_expected=match.away_score,
            home_actual=home_recorded,
            away_actual=away_recorded,
        )
    return MatchValidation(
        match_id=match.id,
        home_goals_recorded=home_recorded,
        away_goals_recorded=away_recorded,
        status=status,
        home_score=match.home_score,
        away_score=match.away_score,
        match_date=match.match_date,
        season_id=match.season_id,
        home_team_id=match.home_team_id,
        away_team_id=match.away_team_id,
        correction=correction,
    )


async def validate(session: AsyncSession, match: Match) -> MatchValidation:
    """Validate one match against its persisted goals."""
    goals = GoalRepository(session)
    home = await goals.count_by_match_and_team(match.id, match.home_team_id)
    away = await goals.count_by_match_and_team(match.id, match.away_team_id)
    return evaluate(match, home, away)


def _period_key(result: MatchValidation, group_by: str, season_names: Dict[str, str]) -> str:
    if group_by == GROUP_BY_DECADE:
        if result.match_date is None:
            return "unknown"
        return f"{(result.match_date.year // 10) * 10}s"
    if result.season_id is None:
        return "unknown"
    return season_names.get(result.season_id, result.season_id)


async def validate_all(
    session: AsyncSession,
    group_by: str = GROUP_BY_SEASON,
    limit: int = DEFAULT_CORRECTION_LIMIT,
    min_team_matches: int = DEFAULT_MIN_TEAM_MATCHES,
    pattern_limit: int = DEFAULT_PATTERN_LIMIT,
    audit: bool = True,
) -> ValidationReport:
    """
    Validate every scored match and aggregate coverage.

    Corrections are ranked closest-to-reconciled first and truncated to
    ``limit``; ``correction_count`` keeps the full total.
    """
    if group_by not in GROUP_BY_CHOICES:
        raise ValueError(f"group_by must be one of {GROUP_BY_CHOICES}, got {group_by!r}")

    match_repo = MatchRepository(session)
    matches = await match_repo.list_scored()
    counts = await GoalRepository(session).counts_by_match()
    season_names = {s.id: s.name for s in await SeasonRepository(session).list_all()}
    team_names = {t.id: t.name for t in await TeamRepository(session).list_all()}

    report = ValidationReport(group_by=group_by)
    report.unscored_count = await match_repo.count_unscored()
    status_counts: Counter = Counter({status: 0 for status in STATUSES if status != STATUS_NO_SCORE})
    periods: Dict[str, PeriodCoverage] = {}
    teams: Dict[str, TeamCoverage] = {}
    patterns: Counter = Counter()
    corrections: List[CorrectionCandidate] = []

    for match in matches:
        home = counts.get((match.id, match.home_team_id), 0)
        away = counts.get((match.id, match.away_team_id), 0)
        result = evaluate(match, home, away)
        status_counts[result.status] += 1

        key = _period_key(result, group_by, season_names)
        period = periods.setdefault(key, PeriodCoverage(period=key))
        period.matches += 1
        if result.status == STATUS_CONSISTENT:
            period.consistent += 1

        for team_id, expected, recorded in (
            (match.home_team_id, match.home_score, home),
            (match.away_team_id, match.away_score, away),
        ):
            team = teams.setdefault(team_id, TeamCoverage(team_id, team_names.get(team_id, team_id)))
            team.matches += 1
            team.expected_goals += expected
            team.recorded_goals += recorded

        patterns[(match.home_score + match.away_score, home + away)] += 1
        if result.correction is not None:
            corrections.append(result.correction)

    corrections.sort(key=lambda c: c.rank_key())
    report.match_count = len(matches)
    report.status_counts = dict(status_counts)
    report.periods = [periods[k] for k in sorted(periods)]
    report.teams = sorted(
        (t for t in teams.values() if t.matches >= min_team_matches),
        key=lambda t: (-(t.coverage or 0.0), t.team_name),
    )
    report.patterns = [
        {"expected_total": expected, "recorded_total": recorded, "count": count}
        for (expected, recorded), count in sorted(patterns.items(), key=lambda item: (-item[1], item[0]))[:pattern_limit]
    ]
    report.correction_count = len(corrections)
    report.corrections = corrections[: max(0, limit)]

    logger.info(
        "Validated %d matches: %s (consistency %.1f%%)",
        report.match_count,
        report.status_counts,
        report.consistency_rate * 100,
    )
    if audit:
        log_validation_summary(report.match_count, report.status_counts, report.consistency_rate)
    return report
