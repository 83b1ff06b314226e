"""
Score validation CLI: compare attributed goals with recorded final scores.
Usage: python tools/validate_scores.py [--group-by season|decade] [--limit N] [--output-dir reports]
Outputs reports/validation/<run_id>.json and appends a summary to reports/index.json.
Read-only against the database.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

_backend = Path(__file__).resolve().parent.parent / "backend"
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

import models  # noqa: F401 - register models
from core.config import get_settings
from core.database import init_database, dispose_database, get_database_manager
from core.logging import setup_logging
from reports.index_store import append_validation_run, load_index, save_index
from reports.quality_report import build_validation_report, new_run_id, utc_now_iso, write_report
from validation.consistency import DEFAULT_CORRECTION_LIMIT, GROUP_BY_CHOICES, validate_all


async def _main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Validate attributed goals against recorded scores")
    parser.add_argument("--group-by", default="season", choices=list(GROUP_BY_CHOICES), help="Coverage period")
    parser.add_argument("--limit", type=int, default=DEFAULT_CORRECTION_LIMIT, help="Max correction candidates")
    parser.add_argument("--output-dir", default=None, help="Reports directory (default: REPORTS_DIR)")
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(settings)

    await init_database(settings.database_url)
    try:
        manager = get_database_manager()
        await manager.create_all()
        async with manager.rollback_session() as session:
            report = await validate_all(session, group_by=args.group_by, limit=args.limit)
    finally:
        await dispose_database()

    run_id = new_run_id("validation")
    created_at = utc_now_iso()
    payload = build_validation_report(report, run_id, created_at)

    output_dir = Path(args.output_dir or settings.reports_dir)
    report_path = write_report(payload, output_dir, "validation")

    index_path = output_dir / "index.json"
    index = load_index(index_path)
    append_validation_run(index, {
        "run_id": run_id,
        "created_at_utc": created_at,
        "group_by": args.group_by,
        "match_count": payload["match_count"],
        "consistency_rate": payload["consistency_rate"],
    })
    save_index(index, index_path)

    print(f"{run_id},{report_path}")
    return 0


def main() -> None:
    sys.exit(asyncio.run(_main()))


if __name__ == "__main__":
    main()
