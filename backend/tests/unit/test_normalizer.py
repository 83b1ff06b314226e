"""Text normalizer: team/player keys, minute tokens, free-text dates."""

from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

_backend = Path(__file__).resolve().parent.parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

import pytest

from matching.normalizer import (
    display_player_name,
    normalize_player_name,
    normalize_team_name,
    normalize_text,
    parse_fixture_date,
    parse_minute,
    scorer_goal_type,
)


def test_normalize_text_collapses_case_accents_and_punctuation() -> None:
    assert normalize_text("  Atlético   Madrid. ") == "atletico madrid"
    assert normalize_text(None) == ""


def test_team_ampersand_reads_as_and() -> None:
    assert normalize_team_name("Brighton & Hove Albion") == normalize_team_name("Brighton and Hove Albion")


def test_player_name_drops_apostrophes_hyphens_and_annotations() -> None:
    assert normalize_player_name("O'Neill") == "oneill"
    assert normalize_player_name("Smith-Rowe") == "smith rowe"
    assert normalize_player_name("Henry (pen)") == "henry"
    assert normalize_player_name("Ruud van Nistelrooy") == "ruud van nistelrooy"


def test_display_player_name_strips_annotation() -> None:
    assert display_player_name("Keown (og)") == "Keown"


@pytest.mark.parametrize(
    "token,minute,goal_type",
    [
        ("60", 60, "regular"),
        ("45+2", 45, "regular"),
        ("90+3 pen", 90, "penalty"),
        ("23'", 23, "regular"),
        ("67 PEN", 67, "penalty"),
        ("12og", 12, "own_goal"),
        (" 5 ", 5, "regular"),
    ],
)
def test_parse_minute_takes_leading_integer(token: str, minute: int, goal_type: str) -> None:
    parsed = parse_minute(token)
    assert parsed is not None
    assert parsed.minute == minute
    assert parsed.goal_type == goal_type


@pytest.mark.parametrize("token", ["PEN", "", "x12", None])
def test_parse_minute_without_digits_is_none(token) -> None:
    assert parse_minute(token) is None


def test_scorer_goal_type_from_annotation() -> None:
    assert scorer_goal_type("Henry (pen)") == "penalty"
    assert scorer_goal_type("Keown (o.g.)") == "own_goal"
    assert scorer_goal_type("Penant") == "regular"


def test_parse_weekday_month_day_with_year() -> None:
    parsed = parse_fixture_date("Saturday, August 18", 2001)
    assert parsed is not None
    assert parsed.value == date(2001, 8, 18)
    assert parsed.weekday_mismatch is False


def test_parse_flags_contradicting_weekday() -> None:
    parsed = parse_fixture_date("Monday, August 18", 2001)
    assert parsed is not None
    assert parsed.value == date(2001, 8, 18)
    assert parsed.weekday_mismatch is True


@pytest.mark.parametrize(
    "text,expected",
    [
        ("2001-08-18", date(2001, 8, 18)),
        ("18/08/2001", date(2001, 8, 18)),
        ("18/08/01", date(2001, 8, 18)),
        ("18/08/98", date(1998, 8, 18)),
        ("Aug 18", date(2001, 8, 18)),
        ("Sept 1", date(2001, 9, 1)),
        ("18 August", date(2001, 8, 18)),
    ],
)
def test_parse_other_date_forms(text: str, expected: date) -> None:
    parsed = parse_fixture_date(text, 2001)
    assert parsed is not None
    assert parsed.value == expected


def test_season_roll_over_moves_early_months_to_next_year() -> None:
    assert parse_fixture_date("January 12", 2001, season_start_month=8).value == date(2002, 1, 12)
    assert parse_fixture_date("August 18", 2001, season_start_month=8).value == date(2001, 8, 18)
    assert parse_fixture_date("January 12", 2001).value == date(2001, 1, 12)


@pytest.mark.parametrize("text", ["", "   ", "someday", "February 30", "31/02/2001", "August"])
def test_unresolvable_dates_return_none(text: str) -> None:
    assert parse_fixture_date(text, 2001) is None


def test_month_day_without_year_is_unresolvable() -> None:
    assert parse_fixture_date("August 18", None) is None
