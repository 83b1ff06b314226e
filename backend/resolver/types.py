from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from models.match import Match

STRATEGY_EXACT = "exact"
STRATEGY_ALIASED = "aliased"
STRATEGY_DATE_TOLERANT = "date_tolerant"
STRATEGY_FUZZY = "fuzzy"
UNLINKED = "unlinked"

# Cascade order, highest confidence first.
STRATEGY_ORDER = (
    STRATEGY_EXACT,
    STRATEGY_ALIASED,
    STRATEGY_DATE_TOLERANT,
    STRATEGY_FUZZY,
)


@dataclass
class StrategyOutcome:
    """What one cascade stage found: zero, one or several candidate matches."""

    candidates: List[Match] = field(default_factory=list)
    confidence: float = 0.0
    notes: List[str] = field(default_factory=list)


@dataclass
class MatchLinkResult:
    """Output of linking one fixture (audit/metrics only, never persisted)."""

    match_id: Optional[str]
    strategy: str  # one of STRATEGY_ORDER | "unlinked"
    confidence: float = 0.0
    notes: List[str] = field(default_factory=list)
    match: Optional[Match] = field(default=None, repr=False, compare=False)
    day_offset: int = 0

    @property
    def linked(self) -> bool:
        return self.match_id is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "match_id": self.match_id,
            "strategy": self.strategy,
            "confidence": round(self.confidence, 4),
            "day_offset": self.day_offset,
            "notes": list(self.notes),
        }

    @classmethod
    def unlinked(cls, notes: Optional[List[str]] = None) -> "MatchLinkResult":
        return cls(match_id=None, strategy=UNLINKED, confidence=0.0, notes=notes or [])
