"""
Bounded string similarity for team and player names.

similarity() is a normalized Levenshtein similarity in [0, 1] computed on the
normalized forms of both strings (rapidfuzz). composite_confidence() folds a
name score and a date distance into one number for ranking near misses.
"""

from __future__ import annotations

from typing import Callable, Optional

from rapidfuzz.distance import Levenshtein

from .normalizer import normalize_player_name, normalize_team_name


def similarity(
    a: Optional[str],
    b: Optional[str],
    normalizer: Callable[[Optional[str]], str] = normalize_team_name,
) -> float:
    """Edit-distance similarity of two strings after normalization, in [0, 1]."""
    left = normalizer(a)
    right = normalizer(b)
    if not left or not right:
        return 0.0
    if left == right:
        return 1.0
    return float(Levenshtein.normalized_similarity(left, right))


def player_name_similarity(token: Optional[str], candidate: Optional[str]) -> float:
    """
    Similarity between a scorer token and a canonical player name.

    Source files often carry surnames only, so the score is the better of the
    full-name comparison and the surname-to-surname comparison.
    """
    left = normalize_player_name(token)
    right = normalize_player_name(candidate)
    if not left or not right:
        return 0.0
    full = similarity(left, right, normalizer=_identity)
    surname = similarity(left.split()[-1], right.split()[-1], normalizer=_identity)
    return max(full, surname)


def _identity(text: Optional[str]) -> str:
    return text or ""


def composite_confidence(
    name_score: float,
    day_offset: int,
    max_day_offset: int = 3,
) -> float:
    """
    Combine name similarity with temporal proximity, in [0, 1].

    A date distance of zero keeps the name score; each day away removes an
    equal share of half the score, reaching half at ``max_day_offset + 1``.
    """
    name_score = min(1.0, max(0.0, name_score))
    distance = abs(day_offset)
    if distance == 0:
        return round(name_score, 4)
    penalty = 0.5 * min(1.0, distance / float(max_day_offset + 1))
    return round(name_score * (1.0 - penalty), 4)
