"""Name normalization, the team alias table and similarity scoring."""

from .aliases import AliasTable, AliasTableError, load_alias_table
from .normalizer import (
    ParsedDate,
    ParsedMinute,
    normalize_player_name,
    normalize_team_name,
    normalize_text,
    parse_fixture_date,
    parse_minute,
)
from .similarity import composite_confidence, player_name_similarity, similarity

__all__ = [
    "AliasTable",
    "AliasTableError",
    "load_alias_table",
    "ParsedDate",
    "ParsedMinute",
    "normalize_player_name",
    "normalize_team_name",
    "normalize_text",
    "parse_fixture_date",
    "parse_minute",
    "composite_confidence",
    "player_name_similarity",
    "similarity",
]
