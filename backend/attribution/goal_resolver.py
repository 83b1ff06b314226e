"""
Goal attribution: scorer/minute text of a linked fixture -> Goal rows.

Per side, scorer and minute lists are paired positionally up to the shorter
list. Each pair yields one goal or one unresolved entry; a bad token never
aborts the match. There is no fallback that credits an unresolved goal to
either team.

A goal already stored at the same match, team and minute keeps its player.
Otherwise player resolution order (first hit wins):
    1. exact normalized name
    2. substring either way (narrowed by team history when several hit)
    3. similarity >= floor among players with history for the team
    4. create a new player (race-safe on the unique normalized name)
"""

from __future__ import annotations

import logging
from typing import List, Optional, Set, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from ingestion.schema import Fixture
from matching.normalizer import (
    display_player_name,
    normalize_player_name,
    parse_minute,
    scorer_goal_type,
)
from matching.similarity import player_name_similarity
from models.match import Match
from models.player import Player
from ops.ops_events import log_goal_attribution
from repositories.goal_repo import GoalRepository
from repositories.player_repo import PlayerRepository
from .types import (
    RESOLVED_CREATED,
    RESOLVED_EXACT,
    RESOLVED_RECORDED,
    RESOLVED_SUBSTRING,
    RESOLVED_TEAM_FUZZY,
    AttributedGoal,
    AttributionResult,
    UnresolvedScorer,
)

logger = logging.getLogger(__name__)

PLAYER_SIMILARITY_FLOOR = 0.6
MIN_SUBSTRING_LENGTH = 4
SIDES = ("home", "away")


class GoalAttributionResolver:
    """Writes goals through the caller's session; the caller owns the transaction."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        similarity_floor: float = PLAYER_SIMILARITY_FLOOR,
        create_missing_players: bool = True,
    ) -> None:
        self.players = PlayerRepository(session)
        self.goals = GoalRepository(session)
        self.similarity_floor = similarity_floor
        self.create_missing_players = create_missing_players

    async def attribute(self, match: Match, fixture: Fixture, *, audit: bool = True) -> AttributionResult:
        """Attribute both sides of ``fixture`` to ``match``."""
        result = AttributionResult(match_id=match.id)
        for side in SIDES:
            await self._attribute_side(match, fixture, side, result)

        logger.info(
            "Attributed match %s: %d inserted, %d duplicate, %d unresolved",
            match.id,
            result.inserted,
            result.duplicates,
            result.unresolved_scorers,
        )
        if audit:
            log_goal_attribution(match.id, result.inserted, result.duplicates, result.unresolved_scorers)
        return result

    async def _attribute_side(
        self,
        match: Match,
        fixture: Fixture,
        side: str,
        result: AttributionResult,
    ) -> None:
        scorers = fixture.scorers(side)
        minutes = fixture.minutes(side)
        team_id = match.home_team_id if side == "home" else match.away_team_id
        opponent_id = match.away_team_id if side == "home" else match.home_team_id

        if len(scorers) != len(minutes):
            result.length_mismatches.append(f"{side}: {len(scorers)} scorers / {len(minutes)} minutes")
            for extra in scorers[len(minutes):]:
                result.unresolved.append(UnresolvedScorer(side, extra, None, "no minute"))
            for extra in minutes[len(scorers):]:
                result.unresolved.append(UnresolvedScorer(side, "", extra, "no scorer"))

        claimed: Set[Tuple[int, int]] = set()
        for scorer_raw, minute_raw in zip(scorers, minutes):
            parsed = parse_minute(minute_raw)
            if parsed is None:
                result.unresolved.append(UnresolvedScorer(side, scorer_raw, minute_raw, "unparseable minute"))
                continue
            goal_type = parsed.goal_type
            if goal_type == "regular":
                goal_type = scorer_goal_type(scorer_raw)

            # An own goal is scored by a player of the other team.
            history_team = opponent_id if goal_type == "own_goal" else team_id
            player = await self._recorded_scorer(match.id, team_id, parsed.minute, scorer_raw, claimed)
            if player is not None:
                resolution = RESOLVED_RECORDED
            else:
                player, resolution = await self.resolve_player(scorer_raw, history_team)
            if player is None:
                result.unresolved.append(UnresolvedScorer(side, scorer_raw, minute_raw, resolution))
                continue
            if resolution == RESOLVED_CREATED:
                result.players_created += 1
            claimed.add((parsed.minute, player.id))
            await self.players.add_team_membership(player.id, history_team, match.season_id)

            inserted = await self.goals.insert_if_absent(
                match.id, player.id, team_id, parsed.minute, goal_type
            )
            result.goals.append(
                AttributedGoal(
                    match_id=match.id,
                    player_id=player.id,
                    team_id=team_id,
                    minute=parsed.minute,
                    goal_type=goal_type,
                    scorer_raw=scorer_raw,
                    resolution=resolution,
                    inserted=inserted,
                )
            )

    async def _recorded_scorer(
        self,
        match_id: str,
        team_id: str,
        minute: int,
        scorer_raw: str,
        claimed: Set[Tuple[int, int]],
    ) -> Optional[Player]:
        """
        Player an earlier run already credited at this match, team and minute.

        A re-run must not move a stored goal to a player created since. Several
        unclaimed scorers at one minute are told apart by name similarity.
        """
        if not normalize_player_name(scorer_raw):
            return None
        recorded = [
            p for p in await self.goals.scorers_at(match_id, team_id, minute) if (minute, p.id) not in claimed
        ]
        if not recorded:
            return None
        if len(recorded) == 1:
            return recorded[0]
        return max(recorded, key=lambda p: (player_name_similarity(scorer_raw, p.name), -p.id))

    async def resolve_player(self, scorer_raw: str, team_id: str) -> Tuple[Optional[Player], str]:
        """
        Resolve a scorer token to a Player.

        Returns (player, resolution) or (None, reason) when the token is
        blank or the team-scoped similarity search is tied.
        """
        name_norm = normalize_player_name(scorer_raw)
        if not name_norm:
            return None, "blank scorer"

        player = await self.players.find_by_name(name_norm)
        if player is not None:
            return player, RESOLVED_EXACT

        if len(name_norm) >= MIN_SUBSTRING_LENGTH:
            hits = await self.players.find_by_substring(name_norm, min_length=MIN_SUBSTRING_LENGTH)
            if len(hits) == 1:
                return hits[0], RESOLVED_SUBSTRING
            if len(hits) > 1:
                scoped = await self.players.team_history_ids([p.id for p in hits], team_id)
                if len(scoped) == 1:
                    return next(p for p in hits if p.id == scoped[0]), RESOLVED_SUBSTRING

        candidate, tied = await self._best_team_candidate(scorer_raw, team_id)
        if candidate is not None:
            return candidate, RESOLVED_TEAM_FUZZY
        if tied:
            return None, "ambiguous player"

        if not self.create_missing_players:
            return None, "unknown player"
        player, created = await self.players.create(display_player_name(scorer_raw), name_norm)
        if created:
            logger.info("Created player %r (%s)", player.name, name_norm)
        return player, RESOLVED_CREATED if created else RESOLVED_EXACT

    async def _best_team_candidate(self, scorer_raw: str, team_id: str) -> Tuple[Optional[Player], bool]:
        history = await self.players.list_by_team_history(team_id)
        scored: List[Tuple[float, Player]] = []
        for player in history:
            score = player_name_similarity(scorer_raw, player.name)
            if score >= self.similarity_floor:
                scored.append((score, player))
        if not scored:
            return None, False
        scored.sort(key=lambda item: (-item[0], item[1].id))
        if len(scored) > 1 and scored[0][0] == scored[1][0]:
            return None, True
        return scored[0][1], False
