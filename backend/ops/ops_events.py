"""
Structured ops events for import and validation milestones.
Log-level + structured event dict; deterministic (no random ids).
Timestamps only in log output, not in deterministic report artifacts.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

OPS_LOGGER_NAME = "ops_events"


def _logger() -> logging.Logger:
    return logging.getLogger(OPS_LOGGER_NAME)


def _event(event_type: str, level: int = logging.INFO, **kwargs: Any) -> None:
    """Emit a structured ops event (deterministic keys; no random ids)."""
    msg = f"ops_event={event_type} " + " ".join(f"{k}={v!r}" for k, v in sorted(kwargs.items()))
    _logger().log(level, msg, extra={"ops_event_type": event_type, "ops_event": {**kwargs}})


def log_import_start(source: str, fixture_count: int, workers: int, dry_run: bool = False) -> float:
    """Log import start; return start time for duration calculation."""
    _event(
        "import_start",
        source=source,
        fixture_count=fixture_count,
        workers=workers,
        dry_run=dry_run,
    )
    return time.perf_counter()


def log_import_end(
    source: str,
    duration_seconds: float,
    processed: int,
    linked: int,
    goals_inserted: int,
    failed: int = 0,
) -> None:
    """Log import end with duration and headline counts."""
    _event(
        "import_end",
        source=source,
        duration_seconds=round(duration_seconds, 4),
        processed=processed,
        linked=linked,
        goals_inserted=goals_inserted,
        failed=failed,
    )


def log_match_link(line_number: int, strategy: str, match_id: str, confidence: float) -> None:
    """Log which cascade strategy linked a fixture."""
    _event(
        "match_link",
        line=line_number,
        strategy=strategy,
        match_id=match_id,
        confidence=round(confidence, 4),
    )


def log_match_unlinked(line_number: int, home: str, away: str, match_date: str) -> None:
    """Log a fixture no strategy could link (raw names kept for alias maintenance)."""
    _event(
        "match_unlinked",
        level=logging.WARNING,
        line=line_number,
        home=home,
        away=away,
        date=match_date,
    )


def log_fixture_parse_error(line_number: int, reason: str) -> None:
    _event("fixture_parse_error", level=logging.WARNING, line=line_number, reason=reason)


def log_goal_attribution(
    match_id: str,
    inserted: int,
    duplicates: int,
    unresolved_scorers: int,
) -> None:
    """Log the outcome of attributing one fixture's scorers."""
    _event(
        "goal_attribution",
        match_id=match_id,
        inserted=inserted,
        duplicates=duplicates,
        unresolved_scorers=unresolved_scorers,
    )


def log_fixture_retry(line_number: int, attempt: int, error: str) -> None:
    _event("fixture_retry", level=logging.WARNING, line=line_number, attempt=attempt, error=error)


def log_fixture_failed(line_number: int, attempts: int, error: str) -> None:
    """Log a fixture abandoned after a persistent repository failure."""
    _event("fixture_failed", level=logging.ERROR, line=line_number, attempts=attempts, error=error)


def log_validation_summary(
    match_count: int,
    status_counts: Dict[str, int],
    consistency_rate: Optional[float] = None,
) -> None:
    """Log validation summary (counts, optional consistency rate). Deterministic."""
    payload: Dict[str, Any] = {
        "match_count": match_count,
        "status_counts": {k: v for k, v in sorted(status_counts.items())},
    }
    if consistency_rate is not None:
        payload["consistency_rate"] = round(consistency_rate, 4)
    _event("validation_summary", **payload)
