"""
Fixture import CLI: link a historical CSV export to stored matches and attribute goals.
Usage: python tools/import_fixtures.py --csv PATH --year YYYY [--workers N] [--dry-run] [--limit N] [--output-dir reports]
Outputs reports/quality/<run_id>.json and appends a summary to reports/index.json.
Exit 0 when the batch ran (per-fixture failures are in the report); 2 when the CSV is missing.
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
from pipeline.importer import import_fixtures
from reports.index_store import append_import_run, load_index, save_index
from reports.quality_report import build_quality_report, new_run_id, utc_now_iso, write_report


async def _main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Import historical fixtures: link matches, attribute goals")
    parser.add_argument("--csv", required=True, help="Path to the CSV export")
    parser.add_argument("--year", type=int, required=True, help="Year completing month/day dates (e.g. 2001)")
    parser.add_argument("--workers", type=int, default=None, help="Concurrent fixtures (default: IMPORT_WORKERS)")
    parser.add_argument("--dry-run", action="store_true", help="Link and attribute, then roll back every fixture")
    parser.add_argument("--limit", type=int, default=None, help="Process at most N records")
    parser.add_argument("--output-dir", default=None, help="Reports directory (default: REPORTS_DIR)")
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(settings)

    csv_path = Path(args.csv)
    if not csv_path.is_file():
        print(f"CSV not found: {csv_path}", file=sys.stderr)
        return 2

    await init_database(settings.database_url)
    try:
        await get_database_manager().create_all()
        report = await import_fixtures(
            csv_path,
            args.year,
            workers=args.workers,
            dry_run=args.dry_run,
            limit=args.limit,
            settings=settings,
        )
    finally:
        await dispose_database()

    run_id = new_run_id("import")
    created_at = utc_now_iso()
    payload = build_quality_report(report, run_id, created_at)

    output_dir = Path(args.output_dir or settings.reports_dir)
    report_path = write_report(payload, output_dir, "quality")

    index_path = output_dir / "index.json"
    index = load_index(index_path)
    append_import_run(index, {
        "run_id": run_id,
        "created_at_utc": created_at,
        "source": str(csv_path),
        "fixtures_processed": payload["fixtures_processed"],
        "link_rate": payload["linking"]["link_rate"],
        "attribution_rate": payload["attribution"]["attribution_rate"],
        "goals_inserted": payload["attribution"]["goals_inserted"],
        "dry_run": args.dry_run,
    })
    save_index(index, index_path)

    print(f"{run_id},{report_path}")
    return 0


def main() -> None:
    sys.exit(asyncio.run(_main()))


if __name__ == "__main__":
    main()
