"""Report payload builders, schema validation and stable JSON artifacts."""

from __future__ import annotations

import json
import sys
from datetime import date
from pathlib import Path

_backend = Path(__file__).resolve().parent.parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

import pytest

from ingestion.schema import Fixture
from pipeline.types import FixtureOutcome, ImportReport
from reports.quality_report import (
    QUALITY_REPORT_SCHEMA_VERSION,
    VALIDATION_REPORT_SCHEMA_VERSION,
    build_quality_report,
    build_validation_report,
    validate_report_schema,
    write_report,
)
from resolver.types import MatchLinkResult
from validation.types import ValidationReport


def _fixture(line: int) -> Fixture:
    return Fixture(
        line_number=line,
        home_team_raw="Leeds",
        away_team_raw="Everton",
        match_date=date(2001, 8, 18),
    )


def _import_report() -> ImportReport:
    report = ImportReport(source="fixtures.csv", year=2001)
    report.outcomes = [
        FixtureOutcome(fixture=_fixture(2), link=MatchLinkResult(match_id="m-1", strategy="exact", confidence=1.0)),
        FixtureOutcome(fixture=_fixture(3), link=MatchLinkResult.unlinked()),
        FixtureOutcome(fixture=_fixture(4), error="OperationalError: locked", attempts=3),
    ]
    return report


def test_quality_report_passes_schema() -> None:
    payload = build_quality_report(_import_report(), "import_x", "2025-01-01T00:00:00Z")
    passed, errors = validate_report_schema(payload)
    assert passed, errors
    assert payload["schema_version"] == QUALITY_REPORT_SCHEMA_VERSION
    assert payload["linking"]["by_strategy"]["exact"] == 1
    assert payload["linking"]["by_strategy"]["unlinked"] == 1
    assert payload["linking"]["link_rate"] == round(1 / 3, 4)
    assert payload["failures"] == [{"line": 4, "attempts": 3, "error": "OperationalError: locked"}]


def test_validation_report_passes_schema() -> None:
    payload = build_validation_report(ValidationReport(group_by="decade"), "validation_x", "2025-01-01T00:00:00Z")
    passed, errors = validate_report_schema(payload)
    assert passed, errors
    assert payload["schema_version"] == VALIDATION_REPORT_SCHEMA_VERSION
    assert payload["consistency_rate"] == 0.0


def test_schema_rejects_unknown_version_and_missing_keys() -> None:
    passed, errors = validate_report_schema({"schema_version": "report.v0"})
    assert not passed
    assert "not in allowed set" in errors[0]

    passed, errors = validate_report_schema({"schema_version": QUALITY_REPORT_SCHEMA_VERSION})
    assert not passed
    assert any("linking" in e for e in errors)

    assert validate_report_schema([]) == (False, ["report must be a dict"])


def test_write_report_is_stable_json(tmp_path: Path) -> None:
    payload = build_quality_report(_import_report(), "import_x", "2025-01-01T00:00:00Z")
    path = write_report(payload, tmp_path, "quality")
    assert path == tmp_path / "quality" / "import_x.json"
    text = path.read_text(encoding="utf-8")
    assert text == json.dumps(json.loads(text), sort_keys=True, separators=(",", ":"))


def test_write_report_refuses_invalid_payload(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        write_report({"schema_version": QUALITY_REPORT_SCHEMA_VERSION, "run_id": "x"}, tmp_path, "quality")
