"""
Cascading match linker: external fixture -> zero or one canonical Match.

Stages run in decreasing-confidence order and the first stage that yields
exactly one candidate wins. A stage with several candidates is ambiguous and
counts as a miss, so the cascade moves on rather than guessing.

    exact          raw names == canonical/short names, same date      1.0
    aliased        alias table applied to both names, same date       0.95
    date_tolerant  aliased names at date +/- 1..3 days, nearest first  0.85 - 0.05*|d|
    fuzzy          name similarity against matches on the same date   <= 0.70
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from ingestion.schema import Fixture
from matching.aliases import AliasTable
from matching.similarity import similarity
from models.match import Match
from models.team import Team
from ops.ops_events import log_match_link, log_match_unlinked
from repositories.match_repo import MatchRepository
from repositories.team_repo import TeamRepository
from .types import (
    STRATEGY_ALIASED,
    STRATEGY_DATE_TOLERANT,
    STRATEGY_EXACT,
    STRATEGY_FUZZY,
    MatchLinkResult,
    StrategyOutcome,
)

logger = logging.getLogger(__name__)

EXACT_CONFIDENCE = 1.0
ALIASED_CONFIDENCE = 0.95
DATE_TOLERANT_BASE = 0.85
DATE_TOLERANT_STEP = 0.05
MAX_DAY_OFFSET = 3
FUZZY_FLOOR = 0.6
FUZZY_MARGIN = 0.1
FUZZY_SCALE = 0.8
# Lowest date-tolerant confidence; fuzzy never ranks above it.
FUZZY_CEILING = round(DATE_TOLERANT_BASE - DATE_TOLERANT_STEP * MAX_DAY_OFFSET, 4)

Strategy = Callable[[Fixture], Awaitable[StrategyOutcome]]


def date_tolerant_confidence(day_offset: int) -> float:
    return round(DATE_TOLERANT_BASE - DATE_TOLERANT_STEP * abs(day_offset), 4)


def fuzzy_confidence(similarity_sum: float) -> float:
    """Winning similarity sum (0..2) scaled into [0, FUZZY_SCALE], capped at FUZZY_CEILING."""
    scaled = FUZZY_SCALE * max(0.0, min(2.0, similarity_sum)) / 2.0
    return round(min(scaled, FUZZY_CEILING), 4)


class MatchLinker:
    """Read-only linker bound to one session and one alias table."""

    def __init__(
        self,
        session: AsyncSession,
        alias_table: Optional[AliasTable] = None,
        *,
        max_day_offset: int = MAX_DAY_OFFSET,
        fuzzy_floor: float = FUZZY_FLOOR,
        fuzzy_margin: float = FUZZY_MARGIN,
    ) -> None:
        self.match_repo = MatchRepository(session)
        self.team_repo = TeamRepository(session)
        self.alias_table = alias_table or AliasTable()
        self.max_day_offset = max_day_offset
        self.fuzzy_floor = fuzzy_floor
        self.fuzzy_margin = fuzzy_margin
        self.strategies: Sequence[Tuple[str, Strategy]] = (
            (STRATEGY_EXACT, self._exact),
            (STRATEGY_ALIASED, self._aliased),
            (STRATEGY_DATE_TOLERANT, self._date_tolerant),
            (STRATEGY_FUZZY, self._fuzzy),
        )

    async def link(self, fixture: Fixture, *, audit: bool = True) -> MatchLinkResult:
        """Run the cascade for one fixture. Side-effect free apart from logging."""
        notes: List[str] = []
        for name, strategy in self.strategies:
            outcome = await strategy(fixture)
            notes.extend(outcome.notes)
            if len(outcome.candidates) == 1:
                match = outcome.candidates[0]
                result = MatchLinkResult(
                    match_id=match.id,
                    strategy=name,
                    confidence=outcome.confidence,
                    notes=notes,
                    match=match,
                    day_offset=(match.match_date - fixture.match_date).days,
                )
                logger.info(
                    "Linked line %d (%s v %s, %s) -> %s via %s (%.2f)",
                    fixture.line_number,
                    fixture.home_team_raw,
                    fixture.away_team_raw,
                    fixture.match_date.isoformat(),
                    match.id,
                    name,
                    result.confidence,
                )
                if audit:
                    log_match_link(fixture.line_number, name, match.id, result.confidence)
                return result
            if len(outcome.candidates) > 1:
                notes.append(f"{name}: ambiguous ({len(outcome.candidates)} candidates)")

        logger.info(
            "Unlinked line %d: %s v %s on %s",
            fixture.line_number,
            fixture.home_team_raw,
            fixture.away_team_raw,
            fixture.match_date.isoformat(),
        )
        if audit:
            log_match_unlinked(
                fixture.line_number,
                fixture.home_team_raw,
                fixture.away_team_raw,
                fixture.match_date.isoformat(),
            )
        return MatchLinkResult.unlinked(notes)

    def _aliased_names(self, fixture: Fixture) -> Tuple[str, str]:
        return (
            self.alias_table.apply(fixture.home_team_raw.strip()),
            self.alias_table.apply(fixture.away_team_raw.strip()),
        )

    async def _exact(self, fixture: Fixture) -> StrategyOutcome:
        candidates = await self.match_repo.find_by_teams_and_date(
            fixture.home_team_raw.strip(),
            fixture.away_team_raw.strip(),
            fixture.match_date,
        )
        return StrategyOutcome(candidates, EXACT_CONFIDENCE)

    async def _aliased(self, fixture: Fixture) -> StrategyOutcome:
        home, away = self._aliased_names(fixture)
        if home == fixture.home_team_raw.strip() and away == fixture.away_team_raw.strip():
            return StrategyOutcome()
        candidates = await self.match_repo.find_by_teams_and_date(home, away, fixture.match_date)
        return StrategyOutcome(candidates, ALIASED_CONFIDENCE)

    async def _date_tolerant(self, fixture: Fixture) -> StrategyOutcome:
        home_name, away_name = self._aliased_names(fixture)
        home = await self.team_repo.resolve_canonical_name(home_name)
        away = await self.team_repo.resolve_canonical_name(away_name)
        missing = [name for name, team in ((home_name, home), (away_name, away)) if team is None]
        if missing:
            return StrategyOutcome(notes=[f"date_tolerant: no team named {name!r}" for name in missing])
        for distance in range(1, self.max_day_offset + 1):
            found = []
            for offset in (-distance, distance):
                found.extend(
                    await self.match_repo.find_by_teams_and_date(
                        home.name, away.name, fixture.match_date + timedelta(days=offset)
                    )
                )
            if found:
                return StrategyOutcome(found, date_tolerant_confidence(distance))
        return StrategyOutcome()

    def _side_similarity(self, raw: str, aliased: str, team: Team) -> float:
        targets = [team.name] + ([team.short_name] if team.short_name else [])
        return max(similarity(text, target) for text in {raw, aliased} for target in targets)

    async def _fuzzy(self, fixture: Fixture) -> StrategyOutcome:
        matches = await self.match_repo.find_by_date(fixture.match_date)
        if not matches:
            return StrategyOutcome()
        teams = await self.team_repo.get_many(
            [m.home_team_id for m in matches] + [m.away_team_id for m in matches]
        )
        home, away = self._aliased_names(fixture)
        scored: List[Tuple[float, float, float, Match]] = []
        for match in matches:
            home_sim = self._side_similarity(fixture.home_team_raw, home, teams[match.home_team_id])
            away_sim = self._side_similarity(fixture.away_team_raw, away, teams[match.away_team_id])
            scored.append((home_sim + away_sim, home_sim, away_sim, match))
        scored.sort(key=lambda item: (-item[0], item[3].id))

        best_sum, best_home, best_away, best = scored[0]
        if best_home <= self.fuzzy_floor or best_away <= self.fuzzy_floor:
            return StrategyOutcome(notes=[f"fuzzy: best below floor ({best_home:.2f}/{best_away:.2f})"])
        if len(scored) > 1 and best_sum - scored[1][0] <= self.fuzzy_margin:
            tied = [item[3] for item in scored if best_sum - item[0] <= self.fuzzy_margin]
            return StrategyOutcome(tied, 0.0)
        return StrategyOutcome(
            [best],
            fuzzy_confidence(best_sum),
            notes=[
                f"fuzzy: {teams[best.home_team_id].name} v {teams[best.away_team_id].name}"
                f" ({best_home:.2f}/{best_away:.2f})"
            ],
        )
