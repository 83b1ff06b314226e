"""Alias-maintenance hints for fixtures the cascade could not link."""

from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Dict, Iterable, List, Sequence, Tuple

from matching.similarity import composite_confidence, similarity
from repositories.match_repo import MatchWithTeams

ALIAS_CANDIDATE_FLOOR = 0.5


def nearest_team_names(
    raw_name: str,
    canonical_names: Sequence[str],
    floor: float = ALIAS_CANDIDATE_FLOOR,
    limit: int = 3,
) -> List[Dict[str, object]]:
    """Canonical names most similar to ``raw_name`` (similarity >= floor), best first."""
    scored = [(similarity(raw_name, name), name) for name in canonical_names]
    scored = [item for item in scored if item[0] >= floor]
    scored.sort(key=lambda item: (-item[0], item[1]))
    return [{"name": name, "similarity": round(score, 4)} for score, name in scored[:limit]]


def nearest_matches(
    home_raw: str,
    away_raw: str,
    fixture_date: date,
    rows: Sequence[MatchWithTeams],
    max_day_offset: int = 3,
    floor: float = ALIAS_CANDIDATE_FLOOR,
    limit: int = 3,
) -> List[Dict[str, object]]:
    """
    Stored matches near an unlinked fixture, ranked by composite confidence.

    The name score is the mean home/away similarity; the date distance then
    discounts it. Only candidates at or above ``floor`` are returned.
    """
    scored = []
    for row in rows:
        name_score = (similarity(home_raw, row.home_name) + similarity(away_raw, row.away_name)) / 2.0
        day_offset = (row.match.match_date - fixture_date).days
        confidence = composite_confidence(name_score, day_offset, max_day_offset)
        if confidence >= floor:
            scored.append((confidence, day_offset, row))
    scored.sort(key=lambda item: (-item[0], abs(item[1]), item[2].match.id))
    return [
        {
            "match_id": row.match.id,
            "home": row.home_name,
            "away": row.away_name,
            "day_offset": day_offset,
            "confidence": confidence,
        }
        for confidence, day_offset, row in scored[:limit]
    ]


def frequent_unmatched_names(
    pairs: Iterable[Tuple[str, str]],
    limit: int = 20,
) -> List[Dict[str, object]]:
    """Most frequent raw team names across unlinked (home, away) pairs."""
    counter: Counter = Counter()
    for home, away in pairs:
        counter[home] += 1
        counter[away] += 1
    ranked = sorted(counter.items(), key=lambda item: (-item[1], item[0]))
    return [{"name": name, "count": count} for name, count in ranked[:limit]]
