"""
Parsed fixture record: one external line, before linking.

Deterministic and store-independent. Produced by fixture_parser, consumed by
the match linker and the goal attribution resolver.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

SCORER_DELIMITER = ":"


def split_field(raw: Optional[str], delimiter: str = SCORER_DELIMITER) -> List[str]:
    """Split a colon-delimited field into stripped tokens; blank field -> []."""
    if raw is None or not raw.strip():
        return []
    return [part.strip() for part in raw.split(delimiter)]


class Fixture(BaseModel):
    """One historical fixture as read from the flat file."""

    line_number: int = Field(..., ge=1, description="1-based physical line of the record in the source file")
    home_team_raw: str = Field(..., min_length=1, description="Home team name as written in the source")
    away_team_raw: str = Field(..., min_length=1, description="Away team name as written in the source")
    match_date: date = Field(..., description="Resolved calendar date")
    date_raw: str = Field("", description="Date text as written in the source")
    weekday_mismatch: bool = Field(False, description="Stated weekday disagrees with the resolved date")
    home_score: Optional[int] = Field(None, ge=0, description="Home final score (absent when blank)")
    away_score: Optional[int] = Field(None, ge=0, description="Away final score (absent when blank)")
    home_scorers_raw: str = Field("", description="Colon-delimited home scorer names")
    away_scorers_raw: str = Field("", description="Colon-delimited away scorer names")
    home_minutes_raw: str = Field("", description="Colon-delimited home goal minutes")
    away_minutes_raw: str = Field("", description="Colon-delimited away goal minutes")

    def scorers(self, side: str) -> List[str]:
        return split_field(self.home_scorers_raw if side == "home" else self.away_scorers_raw)

    def minutes(self, side: str) -> List[str]:
        return split_field(self.home_minutes_raw if side == "home" else self.away_minutes_raw)
