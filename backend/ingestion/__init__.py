"""Ingestion: quote-aware CSV reading and fixture parsing."""

from .csv_reader import POSITIONAL_COLUMNS, ColumnMap, detect_columns, read_file, read_text
from .fixture_parser import FixtureParseError, parse_fixture, parse_score
from .schema import Fixture, split_field

__all__ = [
    "POSITIONAL_COLUMNS",
    "ColumnMap",
    "Fixture",
    "FixtureParseError",
    "detect_columns",
    "parse_fixture",
    "parse_score",
    "read_file",
    "read_text",
    "split_field",
]
