"""Import pipeline end to end: scenario, idempotency, dry run, failure containment, retries."""

from __future__ import annotations

import io
import logging
import sys
from datetime import date
from pathlib import Path

_backend = Path(__file__).resolve().parent.parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError

from attribution.goal_resolver import GoalAttributionResolver
from core.config import Settings
from ops.ops_events import OPS_LOGGER_NAME
from pipeline.importer import FixtureImporter, import_fixtures, is_transient
from repositories.goal_repo import GoalRepository
from repositories.match_repo import MatchRepository
from validation.consistency import validate

HEADER = "Home Team,Away Team,Date,Home Score,Away Score,Home Scorers,Home Minutes,Away Scorers,Away Minutes\n"
SCENARIO = 'Tottenham Hotspur,Arsenal,"Saturday, August 18",1,1,Sheringham,60,Henry,23\n'


def _csv(*rows: str) -> io.StringIO:
    return io.StringIO(HEADER + "".join(rows), newline="")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        alias_table_path=str(tmp_path / "no_aliases.json"),
        import_workers=1,
        import_retry_attempts=3,
        import_retry_backoff_seconds=0.0,
    )


@pytest_asyncio.fixture
async def season(store):
    await store.team("t-tot", "Tottenham")
    await store.team("t-ars", "Arsenal")
    await store.team("t-che", "Chelsea")
    await store.alias("t-tot", "Tottenham Hotspur")
    await store.match("m-1", date(2001, 8, 18), "t-tot", "t-ars", 1, 1)
    await store.match("m-2", date(2001, 8, 25), "t-che", "t-tot", 2, 1)
    return store


async def _counts(db_manager, match_id: str, home: str, away: str):
    async with db_manager.rollback_session() as session:
        repo = GoalRepository(session)
        return (
            await repo.count_by_match_and_team(match_id, home),
            await repo.count_by_match_and_team(match_id, away),
        )


@pytest.mark.asyncio
async def test_tottenham_scenario_links_attributes_and_validates(season, db_manager, settings):
    report = await import_fixtures(_csv(SCENARIO), 2001, manager=db_manager, settings=settings)

    outcome = report.outcomes[0]
    assert outcome.link.strategy == "aliased"
    assert outcome.link.confidence == 0.95
    assert outcome.link.match_id == "m-1"
    goals = sorted((g.team_id, g.minute) for g in outcome.attribution.goals)
    assert goals == [("t-ars", 23), ("t-tot", 60)]
    assert await _counts(db_manager, "m-1", "t-tot", "t-ars") == (1, 1)

    async with db_manager.rollback_session() as session:
        match = await MatchRepository(session).get_by_id("m-1")
        assert (await validate(session, match)).status == "consistent"
    assert report.corrections == []
    assert report.to_dict()["attribution"]["attribution_rate"] == 1.0


@pytest.mark.asyncio
async def test_second_run_changes_nothing(season, db_manager, settings):
    rows = (SCENARIO, 'Chelsea,Tottenham,"Saturday, August 25",2,1,Zola:Hasselbaink,10:45+1,Ferdinand,80\n')
    await import_fixtures(_csv(*rows), 2001, manager=db_manager, settings=settings)
    before = [await _counts(db_manager, "m-1", "t-tot", "t-ars"), await _counts(db_manager, "m-2", "t-che", "t-tot")]

    second = await import_fixtures(_csv(*rows), 2001, manager=db_manager, settings=settings)
    after = [await _counts(db_manager, "m-1", "t-tot", "t-ars"), await _counts(db_manager, "m-2", "t-che", "t-tot")]

    assert before == after == [(1, 1), (2, 1)]
    assert second.goals_inserted == 0
    assert second.to_dict()["attribution"]["goals_duplicate"] == 5


@pytest.mark.asyncio
async def test_parse_errors_are_counted_not_fatal(season, db_manager, settings, caplog):
    caplog.set_level(logging.INFO, logger=OPS_LOGGER_NAME)
    report = await import_fixtures(
        _csv(",Arsenal,August 18,1,1,,,,\n", "Leeds,Arsenal,whenever,0,0,,,,\n", SCENARIO),
        2001,
        manager=db_manager,
        settings=settings,
    )
    assert [e["line"] for e in report.parse_errors] == [2, 3]
    assert report.processed == 1
    assert len(report.linked) == 1
    assert "ops_event=fixture_parse_error" in caplog.text


@pytest.mark.asyncio
async def test_dry_run_persists_nothing(season, db_manager, settings):
    report = await import_fixtures(_csv(SCENARIO), 2001, manager=db_manager, settings=settings, dry_run=True)
    assert report.goals_inserted == 2
    assert report.dry_run is True
    assert await _counts(db_manager, "m-1", "t-tot", "t-ars") == (0, 0)


@pytest.mark.asyncio
async def test_limit_caps_records(season, db_manager, settings):
    rows = (SCENARIO, 'Chelsea,Tottenham,"Saturday, August 25",2,1,Zola,10,Ferdinand,80\n')
    report = await import_fixtures(_csv(*rows), 2001, manager=db_manager, settings=settings, limit=1)
    assert report.records_read == 1
    assert report.processed == 1


@pytest.mark.asyncio
async def test_unlinked_fixtures_are_reported_with_alias_candidates(season, db_manager, settings):
    rows = ('Spurz,Arsenal,"Sunday, September 30",0,0,,,,\n', 'Spurz,Chelsea,"Monday, October 1",1,0,,,,\n')
    report = await import_fixtures(_csv(*rows), 2001, manager=db_manager, settings=settings)

    payload = report.to_dict()
    assert payload["linking"]["unlinked"] == 2
    assert payload["unlinked_diagnostics"]["frequent_names"][0] == {"name": "Spurz", "count": 2}
    sample = payload["unlinked_diagnostics"]["samples"][0]
    assert sample["away_candidates"][0] == {"name": "Arsenal", "similarity": 1.0}


@pytest.mark.asyncio
async def test_partial_scorer_data_shows_up_as_correction(season, db_manager, settings):
    row = 'Chelsea,Tottenham,"Saturday, August 25",2,1,Zola:Hasselbaink,10:??,Ferdinand,80\n'
    report = await import_fixtures(_csv(row), 2001, manager=db_manager, settings=settings)

    assert report.unresolved_scorers == 1
    assert [c.match_id for c in report.corrections] == ["m-2"]
    assert report.corrections[0].suggestion == "goals under-attributed"


@pytest.mark.asyncio
async def test_persistent_failure_rolls_back_fixture_and_batch_continues(season, db_manager, settings, monkeypatch):
    original = GoalAttributionResolver._attribute_side

    async def failing_away_side(self, match, fixture, side, result):
        if match.id == "m-1" and side == "away":
            raise RuntimeError("disk full")
        return await original(self, match, fixture, side, result)

    monkeypatch.setattr(GoalAttributionResolver, "_attribute_side", failing_away_side)
    rows = (SCENARIO, 'Chelsea,Tottenham,"Saturday, August 25",2,1,Zola:Hasselbaink,10:45,Ferdinand,80\n')
    report = await import_fixtures(_csv(*rows), 2001, manager=db_manager, settings=settings)

    assert len(report.failed) == 1
    assert report.failed[0].fixture.line_number == 2
    assert report.failed[0].attempts == 1
    # home goal of m-1 was written before the failure and must be rolled back
    assert await _counts(db_manager, "m-1", "t-tot", "t-ars") == (0, 0)
    assert await _counts(db_manager, "m-2", "t-che", "t-tot") == (2, 1)


@pytest.mark.asyncio
async def test_transient_failure_is_retried(season, db_manager, settings, monkeypatch, caplog):
    caplog.set_level(logging.INFO, logger=OPS_LOGGER_NAME)
    original = FixtureImporter.process
    calls = {"n": 0}

    async def flaky_process(self, fixture):
        calls["n"] += 1
        if calls["n"] == 1:
            raise OperationalError("INSERT INTO goals", {}, Exception("database is locked"))
        return await original(self, fixture)

    monkeypatch.setattr(FixtureImporter, "process", flaky_process)
    report = await import_fixtures(_csv(SCENARIO), 2001, manager=db_manager, settings=settings)

    assert report.failed == []
    assert report.outcomes[0].attempts == 2
    assert "ops_event=fixture_retry" in caplog.text
    assert await _counts(db_manager, "m-1", "t-tot", "t-ars") == (1, 1)


@pytest.mark.asyncio
async def test_transient_failure_gives_up_after_bounded_attempts(season, db_manager, settings, monkeypatch):
    async def always_locked(self, fixture):
        raise OperationalError("INSERT INTO goals", {}, Exception("database is locked"))

    monkeypatch.setattr(FixtureImporter, "process", always_locked)
    report = await import_fixtures(_csv(SCENARIO), 2001, manager=db_manager, settings=settings)

    assert report.failed[0].attempts == 3
    assert "OperationalError" in report.failed[0].error


def test_transient_classification() -> None:
    assert is_transient(OperationalError("SELECT 1", {}, Exception("locked")))
    assert not is_transient(ValueError("bad"))


@pytest.mark.asyncio
async def test_unlinked_fixture_lists_nearby_matches_by_composite_confidence(season, db_manager, settings):
    row = 'Tottenham Hotspurs,Arsenal,"Sunday, August 19",1,1,,,,\n'
    report = await import_fixtures(_csv(row), 2001, manager=db_manager, settings=settings)

    assert report.outcomes[0].link.strategy == "unlinked"
    candidates = report.unlinked_samples[0]["match_candidates"]
    assert [c["match_id"] for c in candidates] == ["m-1"]
    assert candidates[0]["day_offset"] == -1
    assert 0.5 <= candidates[0]["confidence"] < 1.0
