from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from attribution.types import AttributionResult
from ingestion.schema import Fixture
from resolver.types import STRATEGY_ORDER, UNLINKED, MatchLinkResult
from validation.types import CorrectionCandidate


@dataclass
class FixtureOutcome:
    """End-to-end result for one fixture (link -> attribute -> persist)."""

    fixture: Fixture
    link: Optional[MatchLinkResult] = None
    attribution: Optional[AttributionResult] = None
    attempts: int = 1
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def linked(self) -> bool:
        return self.link is not None and self.link.linked


@dataclass
class ImportReport:
    """Per-batch import summary; serialized as the quality report."""

    source: str
    year: Optional[int] = None
    dry_run: bool = False
    workers: int = 1
    records_read: int = 0
    parse_errors: List[Dict[str, Any]] = field(default_factory=list)
    outcomes: List[FixtureOutcome] = field(default_factory=list)
    corrections: List[CorrectionCandidate] = field(default_factory=list)
    correction_count: int = 0
    frequent_unmatched: List[Dict[str, Any]] = field(default_factory=list)
    unlinked_samples: List[Dict[str, Any]] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def processed(self) -> int:
        return len(self.outcomes)

    @property
    def failed(self) -> List[FixtureOutcome]:
        return [o for o in self.outcomes if o.failed]

    @property
    def linked(self) -> List[FixtureOutcome]:
        return [o for o in self.outcomes if o.linked]

    @property
    def unlinked(self) -> List[FixtureOutcome]:
        return [o for o in self.outcomes if not o.failed and not o.linked]

    def strategy_counts(self) -> Dict[str, int]:
        counts = {name: 0 for name in STRATEGY_ORDER}
        counts[UNLINKED] = 0
        for outcome in self.outcomes:
            if outcome.link is not None:
                counts[outcome.link.strategy] = counts.get(outcome.link.strategy, 0) + 1
        return counts

    @property
    def link_rate(self) -> float:
        return len(self.linked) / self.processed if self.processed else 0.0

    def _attribution_totals(self) -> Dict[str, int]:
        totals = {"inserted": 0, "duplicates": 0, "unresolved_scorers": 0, "players_created": 0, "length_mismatches": 0}
        for outcome in self.outcomes:
            result = outcome.attribution
            if result is None:
                continue
            totals["inserted"] += result.inserted
            totals["duplicates"] += result.duplicates
            totals["unresolved_scorers"] += result.unresolved_scorers
            totals["players_created"] += result.players_created
            totals["length_mismatches"] += len(result.length_mismatches)
        return totals

    @property
    def goals_inserted(self) -> int:
        return self._attribution_totals()["inserted"]

    @property
    def unresolved_scorers(self) -> int:
        return self._attribution_totals()["unresolved_scorers"]

    @property
    def attribution_rate(self) -> float:
        """Attributed goal tokens / all goal tokens seen on linked fixtures."""
        totals = self._attribution_totals()
        attributed = totals["inserted"] + totals["duplicates"]
        seen = attributed + totals["unresolved_scorers"]
        return attributed / seen if seen else 0.0

    def to_dict(self) -> Dict[str, Any]:
        processed = self.processed
        strategy_counts = self.strategy_counts()
        totals = self._attribution_totals()
        return {
            "source": self.source,
            "year": self.year,
            "dry_run": self.dry_run,
            "workers": self.workers,
            "records_read": self.records_read,
            "fixtures_processed": processed,
            "parse_error_count": len(self.parse_errors),
            "parse_errors": list(self.parse_errors),
            "weekday_mismatches": sum(1 for o in self.outcomes if o.fixture.weekday_mismatch),
            "linking": {
                "linked": len(self.linked),
                "unlinked": len(self.unlinked),
                "link_rate": round(self.link_rate, 4),
                "by_strategy": strategy_counts,
                "rate_by_strategy": {
                    name: round(count / processed, 4) if processed else 0.0
                    for name, count in strategy_counts.items()
                },
            },
            "attribution": {
                "goals_inserted": totals["inserted"],
                "goals_duplicate": totals["duplicates"],
                "unresolved_scorers": totals["unresolved_scorers"],
                "players_created": totals["players_created"],
                "length_mismatches": totals["length_mismatches"],
                "attribution_rate": round(self.attribution_rate, 4),
            },
            "failures": [
                {"line": o.fixture.line_number, "attempts": o.attempts, "error": o.error}
                for o in self.failed
            ],
            "unlinked_diagnostics": {
                "frequent_names": list(self.frequent_unmatched),
                "samples": list(self.unlinked_samples),
            },
            "correction_count": self.correction_count,
            "corrections": [c.to_dict() for c in self.corrections],
        }
