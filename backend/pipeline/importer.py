"""
Batch importer: CSV export -> linked matches -> attributed goals.

Fixtures are independent, so they run on a bounded pool of asyncio workers.
Each fixture gets its own session and transaction: it commits as a whole or
rolls back as a whole, and no error on one fixture stops the batch.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import timedelta
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from sqlalchemy.exc import DBAPIError, DisconnectionError, OperationalError

from attribution.goal_resolver import GoalAttributionResolver
from core.config import Settings, get_settings
from core.database import DatabaseManager, get_database_manager
from ingestion.csv_reader import ColumnMap, read_file, read_rows
from ingestion.fixture_parser import FixtureParseError, parse_fixture
from ingestion.schema import Fixture
from matching.aliases import AliasTable, load_alias_table
from ops.ops_events import (
    log_fixture_failed,
    log_fixture_parse_error,
    log_fixture_retry,
    log_import_end,
    log_import_start,
)
from repositories.goal_repo import GoalRepository
from repositories.match_repo import MatchRepository
from repositories.team_repo import TeamRepository
from resolver.diagnostics import frequent_unmatched_names, nearest_matches, nearest_team_names
from resolver.match_linker import MAX_DAY_OFFSET, MatchLinker
from validation.consistency import DEFAULT_CORRECTION_LIMIT, evaluate
from .types import FixtureOutcome, ImportReport

logger = logging.getLogger(__name__)

UNLINKED_SAMPLE_LIMIT = 20
BACKOFF_BASE = 2.0

Source = Union[str, Path, Iterable[str]]


def is_transient(exc: BaseException) -> bool:
    """Connectivity and lock errors worth retrying; everything else is persistent."""
    if isinstance(exc, (OperationalError, DisconnectionError)):
        return True
    return isinstance(exc, DBAPIError) and bool(exc.connection_invalidated)


def _read_source(source: Source) -> Tuple[str, ColumnMap, List[Tuple[int, List[str]]]]:
    if isinstance(source, (str, Path)):
        columns, records = read_file(source)
        return str(source), columns, records
    columns, records = read_rows(source)
    return "<lines>", columns, records


def parse_records(
    records: List[Tuple[int, List[str]]],
    columns: ColumnMap,
    year: Optional[int],
    season_start_month: Optional[int] = None,
) -> Tuple[List[Fixture], List[dict]]:
    """Parse every record; malformed ones are logged and returned as errors."""
    fixtures: List[Fixture] = []
    errors: List[dict] = []
    for line_number, row in records:
        try:
            fixtures.append(parse_fixture(line_number, row, columns, year, season_start_month))
        except FixtureParseError as exc:
            logger.warning("Skipping line %d: %s", exc.line_number, exc.reason)
            log_fixture_parse_error(exc.line_number, exc.reason)
            errors.append({"line": exc.line_number, "reason": exc.reason})
    return fixtures, errors


class FixtureImporter:
    """Runs link -> attribute for fixtures against one database manager."""

    def __init__(
        self,
        manager: DatabaseManager,
        alias_table: AliasTable,
        *,
        dry_run: bool = False,
        retry_attempts: int = 3,
        retry_backoff_seconds: float = 0.2,
    ) -> None:
        self.manager = manager
        self.alias_table = alias_table
        self.dry_run = dry_run
        self.retry_attempts = max(1, retry_attempts)
        self.retry_backoff_seconds = retry_backoff_seconds

    async def process(self, fixture: Fixture) -> FixtureOutcome:
        """One fixture in one transaction (always rolled back on dry runs)."""
        unit = self.manager.rollback_session() if self.dry_run else self.manager.session()
        async with unit as session:
            link = await MatchLinker(session, self.alias_table).link(fixture)
            outcome = FixtureOutcome(fixture=fixture, link=link)
            if link.linked:
                outcome.attribution = await GoalAttributionResolver(session).attribute(link.match, fixture)
        return outcome

    async def process_with_retry(self, fixture: Fixture) -> FixtureOutcome:
        last_error: Optional[BaseException] = None
        for attempt in range(1, self.retry_attempts + 1):
            try:
                outcome = await self.process(fixture)
                outcome.attempts = attempt
                return outcome
            except Exception as exc:
                last_error = exc
                if not is_transient(exc) or attempt == self.retry_attempts:
                    break
                delay = self.retry_backoff_seconds * (BACKOFF_BASE ** (attempt - 1))
                logger.warning(
                    "Retry %d/%d for line %d after error: %s",
                    attempt,
                    self.retry_attempts,
                    fixture.line_number,
                    exc,
                )
                log_fixture_retry(fixture.line_number, attempt, type(exc).__name__)
                await asyncio.sleep(delay)

        error = f"{type(last_error).__name__}: {last_error}"
        logger.error("Giving up on line %d: %s", fixture.line_number, error)
        log_fixture_failed(fixture.line_number, attempt, type(last_error).__name__)
        return FixtureOutcome(fixture=fixture, attempts=attempt, error=error)

    async def run(self, fixtures: List[Fixture], workers: int) -> List[FixtureOutcome]:
        """Process fixtures with at most ``workers`` in flight; results keep input order."""
        semaphore = asyncio.Semaphore(max(1, workers))

        async def _bounded(fixture: Fixture) -> FixtureOutcome:
            async with semaphore:
                return await self.process_with_retry(fixture)

        return list(await asyncio.gather(*(_bounded(f) for f in fixtures)))


async def _collect_corrections(manager: DatabaseManager, report: ImportReport, limit: int) -> None:
    match_ids = sorted({o.link.match_id for o in report.linked})
    if not match_ids:
        return
    corrections = []
    # rows expire when the read-only session rolls back; evaluate while bound
    async with manager.rollback_session() as session:
        matches = await MatchRepository(session).list_scored(match_ids)
        counts = await GoalRepository(session).counts_by_match(match_ids)
        for match in matches:
            result = evaluate(
                match,
                counts.get((match.id, match.home_team_id), 0),
                counts.get((match.id, match.away_team_id), 0),
            )
            if result.correction is not None:
                corrections.append(result.correction)
    corrections.sort(key=lambda c: c.rank_key())
    report.correction_count = len(corrections)
    report.corrections = corrections[:limit]


async def _collect_unlinked_diagnostics(manager: DatabaseManager, report: ImportReport) -> None:
    unlinked = report.unlinked
    if not unlinked:
        return
    report.frequent_unmatched = frequent_unmatched_names(
        (o.fixture.home_team_raw, o.fixture.away_team_raw) for o in unlinked
    )
    window = timedelta(days=MAX_DAY_OFFSET)
    async with manager.rollback_session() as session:
        names = [t.name for t in await TeamRepository(session).list_all()]
        match_repo = MatchRepository(session)
        for outcome in unlinked[:UNLINKED_SAMPLE_LIMIT]:
            fixture = outcome.fixture
            nearby = await match_repo.find_with_teams_between(
                fixture.match_date - window, fixture.match_date + window
            )
            report.unlinked_samples.append(
                {
                    "line": fixture.line_number,
                    "home": fixture.home_team_raw,
                    "away": fixture.away_team_raw,
                    "date": fixture.match_date.isoformat(),
                    "home_candidates": nearest_team_names(fixture.home_team_raw, names),
                    "away_candidates": nearest_team_names(fixture.away_team_raw, names),
                    "match_candidates": nearest_matches(
                        fixture.home_team_raw, fixture.away_team_raw, fixture.match_date, nearby
                    ),
                }
            )


async def import_fixtures(
    source: Source,
    year: Optional[int] = None,
    *,
    manager: Optional[DatabaseManager] = None,
    alias_table: Optional[AliasTable] = None,
    workers: Optional[int] = None,
    dry_run: bool = False,
    limit: Optional[int] = None,
    correction_limit: int = DEFAULT_CORRECTION_LIMIT,
    settings: Optional[Settings] = None,
) -> ImportReport:
    """
    Import one CSV export (a path, or an iterable of text lines).

    ``year`` completes month/day dates; ``limit`` caps the number of records
    processed; ``dry_run`` links and attributes but rolls every fixture back.
    Re-running over the same input is safe: goal inserts are idempotent.
    """
    settings = settings or get_settings()
    manager = manager or get_database_manager()
    workers = workers or settings.import_workers

    label, columns, records = _read_source(source)
    if limit is not None:
        records = records[: max(0, limit)]
    report = ImportReport(source=label, year=year, dry_run=dry_run, workers=workers, records_read=len(records))

    fixtures, report.parse_errors = parse_records(records, columns, year, settings.season_start_month)

    if alias_table is None:
        async with manager.rollback_session() as session:
            alias_table = await load_alias_table(session, settings.alias_table_path)

    started = log_import_start(label, len(fixtures), workers, dry_run)
    importer = FixtureImporter(
        manager,
        alias_table,
        dry_run=dry_run,
        retry_attempts=settings.import_retry_attempts,
        retry_backoff_seconds=settings.import_retry_backoff_seconds,
    )
    report.outcomes = await importer.run(fixtures, workers)

    await _collect_unlinked_diagnostics(manager, report)
    if not dry_run:
        await _collect_corrections(manager, report, correction_limit)

    report.duration_seconds = time.perf_counter() - started
    log_import_end(
        label,
        report.duration_seconds,
        report.processed,
        len(report.linked),
        report.goals_inserted,
        failed=len(report.failed),
    )
    logger.info(
        "Import of %s finished: %d fixtures, %d linked, %d goals inserted, %d failed",
        label,
        report.processed,
        len(report.linked),
        report.goals_inserted,
        len(report.failed),
    )
    return report
