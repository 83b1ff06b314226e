"""Concurrent workers creating the same scorer must not duplicate players or goals."""

from __future__ import annotations

import asyncio
import io
import sys
from datetime import date, timedelta
from pathlib import Path

_backend = Path(__file__).resolve().parent.parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

import pytest
from sqlalchemy import func, select

from core.config import Settings
from core.database import get_database_manager
from models.goal import Goal
from models.player import Player
from pipeline.importer import import_fixtures

HEADER = "Home Team,Away Team,Date,Home Score,Away Score,Home Scorers,Home Minutes,Away Scorers,Away Minutes\n"
OPENING_DAY = date(2001, 8, 18)
ROUNDS = 8


def _fixture_lines() -> io.StringIO:
    rows = []
    for n in range(ROUNDS):
        day = OPENING_DAY + timedelta(days=7 * n)
        rows.append(f"Tottenham,Opponent {n},{day.isoformat()},1,0,Robbie Keane,{10 + n},,\n")
    return io.StringIO(HEADER + "".join(rows), newline="")


async def _seed(store) -> None:
    await store.team("t-tot", "Tottenham")
    for n in range(ROUNDS):
        await store.team(f"t-{n}", f"Opponent {n}")
        await store.match(f"m-{n}", OPENING_DAY + timedelta(days=7 * n), "t-tot", f"t-{n}", 1, 0)


async def _count(model_column) -> int:
    async with get_database_manager().rollback_session() as session:
        return int((await session.execute(select(func.count(model_column)))).scalar_one())


@pytest.mark.asyncio
async def test_parallel_workers_share_one_new_player(file_store, tmp_path):
    await _seed(file_store)
    settings = Settings(
        alias_table_path=str(tmp_path / "none.json"),
        import_workers=4,
        import_retry_attempts=8,
        import_retry_backoff_seconds=0.05,
    )

    report = await import_fixtures(_fixture_lines(), 2001, settings=settings, workers=4)

    assert report.failed == []
    assert len(report.linked) == ROUNDS
    assert await _count(Player.id) == 1
    assert await _count(Goal.id) == ROUNDS


@pytest.mark.asyncio
async def test_overlapping_batches_do_not_duplicate_goals(file_store, tmp_path):
    await _seed(file_store)
    settings = Settings(
        alias_table_path=str(tmp_path / "none.json"),
        import_retry_attempts=8,
        import_retry_backoff_seconds=0.05,
    )

    first, second = await asyncio.gather(
        import_fixtures(_fixture_lines(), 2001, settings=settings, workers=4),
        import_fixtures(_fixture_lines(), 2001, settings=settings, workers=4),
    )

    assert first.failed == [] and second.failed == []
    assert first.goals_inserted + second.goals_inserted == ROUNDS
    assert await _count(Player.id) == 1
    assert await _count(Goal.id) == ROUNDS
