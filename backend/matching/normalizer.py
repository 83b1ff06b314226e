"""
Text normalization for team names, player names, minute tokens and free-text dates.

Everything the linker and the attribution resolver compare goes through here
first, so two spellings that differ only in case, accents, punctuation or
spacing compare equal.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from datetime import date
from typing import Optional

_PUNCT_RE = re.compile(r"[^\w\s]")
_SPACE_RE = re.compile(r"\s+")
_BRACKETED_RE = re.compile(r"[\(\[]([^\)\]]*)[\)\]]")
_LEADING_INT_RE = re.compile(r"^\s*(\d+)")
_PLAYER_DROP_RE = re.compile(r"[^a-z\s]")

MONTHS = {
    "january": 1, "february": 2, "march": 3, "april": 4, "may": 5, "june": 6,
    "july": 7, "august": 8, "september": 9, "october": 10, "november": 11, "december": 12,
}
MONTH_ABBREVIATIONS = {name[:3]: num for name, num in MONTHS.items()}
MONTH_ABBREVIATIONS["sept"] = 9
WEEKDAYS = {
    "monday": 0, "tuesday": 1, "wednesday": 2, "thursday": 3,
    "friday": 4, "saturday": 5, "sunday": 6,
}

PENALTY_MARKERS = frozenset({"pen", "p", "penalty"})
OWN_GOAL_MARKERS = frozenset({"og", "o.g", "o.g.", "own goal"})


def strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def normalize_text(text: Optional[str]) -> str:
    """Lowercase, strip accents, drop punctuation, collapse whitespace."""
    if not text:
        return ""
    normalized = strip_accents(text).lower().strip()
    normalized = _PUNCT_RE.sub(" ", normalized)
    normalized = normalized.replace("_", " ")
    return _SPACE_RE.sub(" ", normalized).strip()


def normalize_team_name(name: Optional[str]) -> str:
    """Team key: ``&`` reads as ``and`` so 'Brighton & Hove' == 'Brighton and Hove'."""
    if not name:
        return ""
    return normalize_text(name.replace("&", " and "))


def normalize_player_name(name: Optional[str]) -> str:
    """Player key: letters and single spaces only.

    Apostrophes and dots are removed ("O'Neill" -> "oneill"), hyphens split
    ("Smith-Rowe" -> "smith rowe") and bracketed annotations are dropped.
    """
    if not name:
        return ""
    text = _BRACKETED_RE.sub(" ", name)
    text = strip_accents(text).lower()
    text = text.replace("'", "").replace("’", "").replace(".", "")
    text = text.replace("-", " ")
    text = _PLAYER_DROP_RE.sub(" ", text)
    return _SPACE_RE.sub(" ", text).strip()


def display_player_name(name: str) -> str:
    """Human-readable scorer name with annotations removed (stored on new players)."""
    text = _BRACKETED_RE.sub(" ", name)
    return _SPACE_RE.sub(" ", text).strip()


def _goal_type_from_markers(text: str) -> str:
    lowered = text.strip().lower()
    for marker in OWN_GOAL_MARKERS:
        if marker in lowered:
            return "own_goal"
    words = set(re.findall(r"[a-z]+", lowered))
    if words & PENALTY_MARKERS:
        return "penalty"
    return "regular"


def scorer_goal_type(token: str) -> str:
    """Goal type hinted by a scorer annotation such as 'Henry (pen)' or 'Keown (og)'."""
    annotations = " ".join(_BRACKETED_RE.findall(token or ""))
    if not annotations:
        return "regular"
    return _goal_type_from_markers(annotations)


@dataclass(frozen=True)
class ParsedMinute:
    minute: int
    goal_type: str = "regular"


def parse_minute(token: Optional[str]) -> Optional[ParsedMinute]:
    """Leading integer run of a minute token; None when there is none.

    '45+2' -> 45, "23'" -> 23, '67 PEN' -> 67 (penalty), '12og' -> 12 (own goal),
    'PEN' -> None.
    """
    if token is None:
        return None
    m = _LEADING_INT_RE.match(token)
    if not m:
        return None
    remainder = token[m.end():]
    if remainder.lstrip().startswith("+"):
        remainder = re.sub(r"^\s*\+\s*\d*", "", remainder)
    return ParsedMinute(minute=int(m.group(1)), goal_type=_goal_type_from_markers(remainder))


@dataclass(frozen=True)
class ParsedDate:
    value: date
    weekday_mismatch: bool = False


def _month_number(token: str) -> Optional[int]:
    key = token.strip().lower().rstrip(".")
    if key in MONTHS:
        return MONTHS[key]
    return MONTH_ABBREVIATIONS.get(key)


def _expand_year(raw: str) -> int:
    value = int(raw)
    if len(raw) <= 2:
        return 1900 + value if value >= 50 else 2000 + value
    return value


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_fixture_date(
    text: Optional[str],
    year: Optional[int] = None,
    season_start_month: Optional[int] = None,
) -> Optional[ParsedDate]:
    """
    Resolve a free-text fixture date to a calendar date.

    Accepts 'Saturday, August 18' / 'August 18' / 'Aug 18' (combined with
    ``year``), 'DD/MM/YYYY', 'DD/MM/YY' and ISO 'YYYY-MM-DD'. With
    ``season_start_month`` set, month/day forms before that month resolve into
    ``year + 1`` (the second half of a season). Returns None when unresolvable.
    """
    if not text or not text.strip():
        return None
    raw = text.strip()

    iso = re.fullmatch(r"(\d{4})-(\d{1,2})-(\d{1,2})", raw)
    if iso:
        d = _safe_date(int(iso.group(1)), int(iso.group(2)), int(iso.group(3)))
        return ParsedDate(d) if d else None

    slashed = re.fullmatch(r"(\d{1,2})/(\d{1,2})/(\d{2}|\d{4})", raw)
    if slashed:
        d = _safe_date(_expand_year(slashed.group(3)), int(slashed.group(2)), int(slashed.group(1)))
        return ParsedDate(d) if d else None

    weekday: Optional[int] = None
    body = raw
    if "," in raw:
        head, _, body = raw.partition(",")
        weekday = WEEKDAYS.get(head.strip().lower())
    tokens = body.replace(",", " ").split()
    if len(tokens) < 2 or year is None:
        return None

    month = _month_number(tokens[0])
    day_token = tokens[1]
    if month is None:
        # "18 August" ordering
        month = _month_number(tokens[1])
        day_token = tokens[0]
    day_match = re.match(r"(\d{1,2})", day_token)
    if month is None or not day_match:
        return None

    resolved_year = year
    if season_start_month is not None and month < season_start_month:
        resolved_year = year + 1
    d = _safe_date(resolved_year, month, int(day_match.group(1)))
    if d is None:
        return None
    mismatch = weekday is not None and d.weekday() != weekday
    return ParsedDate(d, weekday_mismatch=mismatch)
