"""Turn tokenized CSV records into Fixture values."""

from __future__ import annotations

import re
from typing import List, Optional

from pydantic import ValidationError

from matching.normalizer import parse_fixture_date
from .csv_reader import ColumnMap
from .schema import Fixture

_SCORE_RE = re.compile(r"^\s*(\d+)\s*$")
_YEAR_RE = re.compile(r"(\d{4})")


class FixtureParseError(Exception):
    """A record that cannot become a Fixture (skipped and counted, never fatal)."""

    def __init__(self, line_number: int, reason: str) -> None:
        super().__init__(f"line {line_number}: {reason}")
        self.line_number = line_number
        self.reason = reason


def parse_score(raw: Optional[str]) -> Optional[int]:
    """Non-negative integer score; blank or non-numeric -> None."""
    if raw is None:
        return None
    m = _SCORE_RE.match(raw)
    return int(m.group(1)) if m else None


def _row_year(raw: str, default_year: Optional[int]) -> Optional[int]:
    m = _YEAR_RE.search(raw or "")
    if m:
        return int(m.group(1))
    return default_year


def parse_fixture(
    line_number: int,
    row: List[str],
    columns: ColumnMap,
    year: Optional[int] = None,
    season_start_month: Optional[int] = None,
) -> Fixture:
    """
    Build a Fixture from one record.

    ``year`` completes month/day date forms; a year column in the record, when
    present and numeric, takes precedence. Raises FixtureParseError for a
    missing team name or an unresolvable date.
    """
    home = columns.get(row, "home_team").strip()
    away = columns.get(row, "away_team").strip()
    if not home or not away:
        raise FixtureParseError(line_number, "missing team name")

    date_raw = columns.get(row, "date").strip()
    row_year = _row_year(columns.get(row, "year"), year)
    parsed = parse_fixture_date(date_raw, row_year, season_start_month)
    if parsed is None:
        raise FixtureParseError(line_number, f"unresolvable date {date_raw!r}")

    try:
        return Fixture(
            line_number=line_number,
            home_team_raw=home,
            away_team_raw=away,
            match_date=parsed.value,
            date_raw=date_raw,
            weekday_mismatch=parsed.weekday_mismatch,
            home_score=parse_score(columns.get(row, "home_score")),
            away_score=parse_score(columns.get(row, "away_score")),
            home_scorers_raw=columns.get(row, "home_scorers"),
            away_scorers_raw=columns.get(row, "away_scorers"),
            home_minutes_raw=columns.get(row, "home_minutes"),
            away_minutes_raw=columns.get(row, "away_minutes"),
        )
    except ValidationError as exc:
        raise FixtureParseError(line_number, f"invalid fixture: {exc.errors()[0]['msg']}") from exc
