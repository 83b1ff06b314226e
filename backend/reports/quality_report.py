"""
Report payloads for import and validation runs.

Payloads are plain dicts serialized as stable JSON (sorted keys, compact
separators) so two runs over the same store produce byte-identical bodies
apart from run_id and created_at_utc.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Tuple

from pipeline.types import ImportReport
from validation.types import ValidationReport

QUALITY_REPORT_SCHEMA_VERSION = "quality_report.v1"
VALIDATION_REPORT_SCHEMA_VERSION = "validation_report.v1"

REQUIRED_KEYS = {
    QUALITY_REPORT_SCHEMA_VERSION: (
        "schema_version",
        "run_id",
        "created_at_utc",
        "fixtures_processed",
        "linking",
        "attribution",
        "corrections",
    ),
    VALIDATION_REPORT_SCHEMA_VERSION: (
        "schema_version",
        "run_id",
        "created_at_utc",
        "match_count",
        "status_counts",
        "consistency_rate",
        "periods",
        "corrections",
    ),
}


def stable_json(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), default=str)


def new_run_id(prefix: str) -> str:
    return f"{prefix}_{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:8]}"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0, tzinfo=None).isoformat() + "Z"


def build_quality_report(report: ImportReport, run_id: str, created_at_utc: str) -> Dict[str, Any]:
    payload = report.to_dict()
    payload.update(
        {
            "schema_version": QUALITY_REPORT_SCHEMA_VERSION,
            "run_id": run_id,
            "created_at_utc": created_at_utc,
        }
    )
    return payload


def build_validation_report(report: ValidationReport, run_id: str, created_at_utc: str) -> Dict[str, Any]:
    payload = report.to_dict()
    payload.update(
        {
            "schema_version": VALIDATION_REPORT_SCHEMA_VERSION,
            "run_id": run_id,
            "created_at_utc": created_at_utc,
        }
    )
    return payload


def validate_report_schema(report: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """
    Validate report payload shape. schema_version must be known and its
    required keys present. Returns (passed, list of error messages).
    """
    errors: List[str] = []
    if not isinstance(report, dict):
        return False, ["report must be a dict"]
    schema_version = report.get("schema_version")
    required = REQUIRED_KEYS.get(schema_version)
    if required is None:
        errors.append(f"schema_version {schema_version!r} not in allowed set: {sorted(REQUIRED_KEYS)}")
        return False, errors
    for key in required:
        if key not in report:
            errors.append(f"missing required key: {key!r}")
    if not isinstance(report.get("corrections", []), list):
        errors.append("corrections must be a list")
    return len(errors) == 0, errors


def write_report(payload: Dict[str, Any], output_dir: str | Path, subdir: str) -> Path:
    """Write ``payload`` to <output_dir>/<subdir>/<run_id>.json and return the path."""
    passed, errors = validate_report_schema(payload)
    if not passed:
        raise ValueError(f"report failed schema validation: {'; '.join(errors)}")
    out_dir = Path(output_dir) / subdir
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"{payload['run_id']}.json"
    path.write_text(stable_json(payload), encoding="utf-8")
    return path
