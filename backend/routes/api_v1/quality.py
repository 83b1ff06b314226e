"""GET /api/v1/quality/validation, GET /api/v1/quality/matches/{match_id} (read-only)."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from core.dependencies import get_db_session
from repositories.goal_repo import GoalRepository
from repositories.match_repo import MatchRepository
from validation.consistency import DEFAULT_CORRECTION_LIMIT, GROUP_BY_CHOICES, validate, validate_all

router = APIRouter(prefix="/quality", tags=["quality"])


@router.get(
    "/validation",
    summary="Consistency validation over all scored matches",
    response_description="Status counts, period/team coverage and ranked correction candidates.",
)
async def quality_validation(
    group_by: str = Query("season", description="season | decade"),
    limit: int = Query(DEFAULT_CORRECTION_LIMIT, ge=0, le=1000, description="Max corrections returned"),
    session: AsyncSession = Depends(get_db_session),
) -> Dict[str, Any]:
    """Run the validator. Never writes; safe to call while an import is running."""
    if group_by not in GROUP_BY_CHOICES:
        raise HTTPException(status_code=422, detail=f"group_by must be one of {list(GROUP_BY_CHOICES)}")
    report = await validate_all(session, group_by=group_by, limit=limit)
    return report.to_dict()


@router.get(
    "/matches/{match_id}",
    summary="Validation and attributed goals for one match",
)
async def quality_match(
    match_id: str,
    session: AsyncSession = Depends(get_db_session),
) -> Dict[str, Any]:
    match = await MatchRepository(session).get_by_id(match_id)
    if match is None:
        raise HTTPException(status_code=404, detail=f"Match {match_id!r} not found")
    result = await validate(session, match)
    goals = await GoalRepository(session).list_by_match(match_id)
    body = result.to_dict()
    body["goals"] = [
        {
            "player_id": g.player_id,
            "team_id": g.team_id,
            "minute": g.minute,
            "goal_type": g.goal_type,
        }
        for g in goals
    ]
    return body
