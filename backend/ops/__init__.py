"""Operational audit events for imports and validation runs."""

from .ops_events import (
    log_fixture_failed,
    log_fixture_parse_error,
    log_fixture_retry,
    log_goal_attribution,
    log_import_end,
    log_import_start,
    log_match_link,
    log_match_unlinked,
    log_validation_summary,
)

__all__ = [
    "log_fixture_failed",
    "log_fixture_parse_error",
    "log_fixture_retry",
    "log_goal_attribution",
    "log_import_end",
    "log_import_start",
    "log_match_link",
    "log_match_unlinked",
    "log_validation_summary",
]
