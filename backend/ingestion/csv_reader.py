"""
Quote-aware reader for historical fixture exports.

Every record goes through the standard csv tokenizer, so quoted fields may
contain the delimiter, doubled quotes and newlines. Columns are located from
the header when it is recognizable, else the historical positional layout
is used.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnMap:
    """Zero-based column index per fixture field (None = column absent)."""

    home_team: int
    away_team: int
    date: int
    year: Optional[int] = None
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    home_scorers: Optional[int] = None
    away_scorers: Optional[int] = None
    home_minutes: Optional[int] = None
    away_minutes: Optional[int] = None

    def get(self, row: List[str], name: str) -> str:
        index = getattr(self, name)
        if index is None or index >= len(row):
            return ""
        return row[index]


# Layout of the headerless historical exports.
POSITIONAL_COLUMNS = ColumnMap(
    home_team=1,
    away_team=2,
    date=3,
    year=4,
    home_minutes=30,
    home_scorers=31,
    away_minutes=32,
    away_scorers=33,
)


def _classify_header_cell(cell: str) -> Optional[str]:
    text = cell.strip().lower().replace("_", " ")
    if not text:
        return None
    side: Optional[str] = None
    if "home" in text:
        side = "home"
    elif "away" in text:
        side = "away"

    if side is not None:
        if "scorer" in text or "player" in text:
            return f"{side}_scorers"
        if "minute" in text or "time" in text:
            return f"{side}_minutes"
        if "score" in text or "goals" in text:
            return f"{side}_score"
        if "team" in text or text == side:
            return f"{side}_team"
        return None
    if "date" in text:
        return "date"
    if text in ("year", "season year"):
        return "year"
    return None


def detect_columns(header: List[str]) -> Optional[ColumnMap]:
    """Column map from a header row, or None when the row is not a header."""
    found = {}
    for index, cell in enumerate(header):
        name = _classify_header_cell(cell)
        if name is not None and name not in found:
            found[name] = index
    if not {"home_team", "away_team", "date"} <= found.keys():
        return None
    known = {f.name for f in fields(ColumnMap)}
    return ColumnMap(**{k: v for k, v in found.items() if k in known})


def iter_records(lines: Iterable[str], delimiter: str = ",") -> Iterator[Tuple[int, List[str]]]:
    """Yield (line_number, cells) for each non-blank record; line_number is where the record starts."""
    reader = csv.reader(lines, delimiter=delimiter)
    start = 1
    for row in reader:
        line_number = start
        start = reader.line_num + 1
        if not row or all(not cell.strip() for cell in row):
            continue
        yield line_number, row


def read_rows(
    lines: Iterable[str],
    delimiter: str = ",",
) -> Tuple[ColumnMap, List[Tuple[int, List[str]]]]:
    """
    Tokenize a whole export and pick its column map.

    The first record is consumed as a header when detect_columns recognizes
    it; otherwise it is data and POSITIONAL_COLUMNS applies.
    """
    records = list(iter_records(lines, delimiter=delimiter))
    if not records:
        return POSITIONAL_COLUMNS, []
    columns = detect_columns(records[0][1])
    if columns is not None:
        logger.debug("Header detected: %s", columns)
        return columns, records[1:]
    logger.info("No recognizable header; using positional column layout")
    return POSITIONAL_COLUMNS, records


def read_file(path: str | Path, delimiter: str = ",") -> Tuple[ColumnMap, List[Tuple[int, List[str]]]]:
    with open(path, newline="", encoding="utf-8-sig") as handle:
        return read_rows(handle, delimiter=delimiter)


def read_text(text: str, delimiter: str = ",") -> Tuple[ColumnMap, List[Tuple[int, List[str]]]]:
    return read_rows(io.StringIO(text, newline=""), delimiter=delimiter)
