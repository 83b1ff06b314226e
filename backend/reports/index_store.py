"""
Reports index: load/save index.json with stable JSON (sorted keys).
Index structure: runs (import runs), validation_runs, latest_run_id,
latest_validation_run_id.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List


def _stable_dumps(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), default=str)


def _empty_index() -> Dict[str, Any]:
    return {
        "runs": [],
        "validation_runs": [],
        "latest_run_id": None,
        "latest_validation_run_id": None,
    }


def load_index(path: str | Path = "reports/index.json") -> Dict[str, Any]:
    """
    Load index from path. Missing or unreadable file -> empty index; list
    keys that are not lists are reset to empty lists.
    """
    path = Path(path)
    if not path.exists():
        return _empty_index()

    index = _empty_index()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        return index
    if not isinstance(data, dict):
        return index
    for key in ("runs", "validation_runs"):
        value = data.get(key)
        index[key] = value if isinstance(value, list) else []
    index["latest_run_id"] = data.get("latest_run_id")
    index["latest_validation_run_id"] = data.get("latest_validation_run_id")
    return index


def append_import_run(index: Dict[str, Any], run_meta: Dict[str, Any]) -> Dict[str, Any]:
    """
    Append an import run entry and set latest_run_id.
    run_meta keys: run_id, created_at_utc, source, fixtures_processed,
    link_rate, attribution_rate, goals_inserted, dry_run.
    Returns updated index (mutates and returns the same dict).
    """
    runs: List[Dict[str, Any]] = index.get("runs") or []
    runs.append(
        {
            "run_id": run_meta.get("run_id"),
            "created_at_utc": run_meta.get("created_at_utc"),
            "source": run_meta.get("source"),
            "fixtures_processed": run_meta.get("fixtures_processed"),
            "link_rate": run_meta.get("link_rate"),
            "attribution_rate": run_meta.get("attribution_rate"),
            "goals_inserted": run_meta.get("goals_inserted"),
            "dry_run": run_meta.get("dry_run"),
        }
    )
    index["runs"] = runs
    index["latest_run_id"] = run_meta.get("run_id")
    return index


def append_validation_run(index: Dict[str, Any], run_meta: Dict[str, Any]) -> Dict[str, Any]:
    """Append a validation run entry (run_id, created_at_utc, group_by, match_count, consistency_rate)."""
    runs: List[Dict[str, Any]] = index.get("validation_runs") or []
    runs.append(
        {
            "run_id": run_meta.get("run_id"),
            "created_at_utc": run_meta.get("created_at_utc"),
            "group_by": run_meta.get("group_by"),
            "match_count": run_meta.get("match_count"),
            "consistency_rate": run_meta.get("consistency_rate"),
        }
    )
    index["validation_runs"] = runs
    index["latest_validation_run_id"] = run_meta.get("run_id")
    return index


def save_index(index: Dict[str, Any], path: str | Path) -> None:
    """Persist index to path with stable JSON (sorted keys)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(_stable_dumps(index), encoding="utf-8")
