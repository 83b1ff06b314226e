"""
Tests for tools/import_fixtures.py and tools/validate_scores.py: report file, index.json, exit codes.
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from datetime import date
from pathlib import Path

import pytest

_repo_root = Path(__file__).resolve().parent.parent.parent
_backend = Path(__file__).resolve().parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

CSV_TEXT = (
    "Home Team,Away Team,Date,Home Score,Away Score,Home Scorers,Home Minutes,Away Scorers,Away Minutes\n"
    'Tottenham Hotspur,Arsenal,"Saturday, August 18",1,1,Sheringham,60,Henry,23\n'
)


def _run_tool(script: str, args: list[str], database_url: str) -> tuple[int, str, str]:
    env = {**os.environ, "DATABASE_URL": database_url, "LOG_LEVEL": "WARNING"}
    env.pop("ALIAS_TABLE_PATH", None)
    result = subprocess.run(
        [sys.executable, str(_repo_root / "tools" / script), *args],
        cwd=str(_repo_root),
        capture_output=True,
        text=True,
        timeout=60,
        env=env,
    )
    return result.returncode, result.stdout or "", result.stderr or ""


def _printed_run(out: str) -> tuple[str, Path]:
    lines = [line.strip() for line in out.strip().splitlines() if line.strip()]
    run_id, path = lines[-1].split(",", 1)
    return run_id, Path(path)


@pytest.mark.asyncio
async def test_import_then_validate_writes_reports_and_index(file_store, tmp_path: Path) -> None:
    await file_store.team("t-tot", "Tottenham")
    await file_store.team("t-ars", "Arsenal")
    await file_store.match("m-1", date(2001, 8, 18), "t-tot", "t-ars", 1, 1)
    database_url = f"sqlite+aiosqlite:///{tmp_path / 'fixtures.db'}"
    csv_path = tmp_path / "fixtures.csv"
    csv_path.write_text(CSV_TEXT, encoding="utf-8")
    output_dir = tmp_path / "reports"

    code, out, err = _run_tool(
        "import_fixtures.py",
        ["--csv", str(csv_path), "--year", "2001", "--workers", "1", "--output-dir", str(output_dir)],
        database_url,
    )
    assert code == 0, f"stderr: {err}"
    run_id, report_path = _printed_run(out)
    assert run_id.startswith("import_")
    assert report_path == output_dir / "quality" / f"{run_id}.json"
    report = json.loads(report_path.read_text(encoding="utf-8"))
    assert report["schema_version"] == "quality_report.v1"
    assert report["linking"]["by_strategy"]["aliased"] == 1
    assert report["attribution"]["goals_inserted"] == 2

    code, out, err = _run_tool("validate_scores.py", ["--output-dir", str(output_dir)], database_url)
    assert code == 0, f"stderr: {err}"
    validation_id, validation_path = _printed_run(out)
    validation = json.loads(validation_path.read_text(encoding="utf-8"))
    assert validation["schema_version"] == "validation_report.v1"
    assert validation["status_counts"]["consistent"] == 1

    index = json.loads((output_dir / "index.json").read_text(encoding="utf-8"))
    assert index["latest_run_id"] == run_id
    assert index["latest_validation_run_id"] == validation_id
    assert index["runs"][0]["goals_inserted"] == 2


def test_import_missing_csv_exits_2(tmp_path: Path) -> None:
    code, out, err = _run_tool(
        "import_fixtures.py",
        ["--csv", str(tmp_path / "absent.csv"), "--year", "2001", "--output-dir", str(tmp_path)],
        f"sqlite+aiosqlite:///{tmp_path / 'unused.db'}",
    )
    assert code == 2
    assert "CSV not found" in err
    assert not (tmp_path / "index.json").exists()
