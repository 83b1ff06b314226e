"""
Versioned team alias table: source-side spellings -> canonical store names.

One explicit table replaces per-script alias literals. It is loaded from a
JSON file (``{"version": ..., "aliases": {"Tottenham Hotspur": "Tottenham"}}``)
and merged with the ``team_aliases`` rows of the store; file entries win on
conflict because the file is the reviewed, versioned source.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from .normalizer import normalize_team_name

logger = logging.getLogger(__name__)


class AliasTableError(Exception):
    """Raised when an alias file exists but cannot be read as an alias table."""


class AliasTable:
    """Normalized alias -> canonical team name."""

    def __init__(
        self,
        aliases: Optional[Mapping[str, str]] = None,
        version: str = "unversioned",
    ) -> None:
        self.version = version
        self._entries: Dict[str, str] = {}
        for alias, canonical in (aliases or {}).items():
            self.add(alias, canonical)

    def add(self, alias: str, canonical: str, *, override: bool = True) -> None:
        key = normalize_team_name(alias)
        if not key or not canonical or not canonical.strip():
            return
        existing = self._entries.get(key)
        if existing is not None and existing != canonical:
            if not override:
                return
            logger.warning(
                "Alias %r remapped from %r to %r (table %s)", alias, existing, canonical, self.version
            )
        self._entries[key] = canonical.strip()

    def lookup(self, raw_name: Optional[str]) -> Optional[str]:
        """Canonical name for ``raw_name``, or None when it is not an alias."""
        return self._entries.get(normalize_team_name(raw_name))

    def apply(self, raw_name: str) -> str:
        """Canonical name when aliased, else the raw name unchanged."""
        return self.lookup(raw_name) or raw_name

    def merge(self, other: "AliasTable") -> "AliasTable":
        """New table with ``other``'s entries layered over this one's."""
        merged = AliasTable(version=f"{self.version}+{other.version}")
        merged._entries = dict(self._entries)
        for key, canonical in other._entries.items():
            merged.add(key, canonical)
        return merged

    def items(self) -> Iterable[Tuple[str, str]]:
        return sorted(self._entries.items())

    def to_dict(self) -> Dict[str, object]:
        return {"version": self.version, "aliases": dict(self.items())}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, raw_name: object) -> bool:
        return isinstance(raw_name, str) and normalize_team_name(raw_name) in self._entries

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "AliasTable":
        aliases = data.get("aliases")
        if not isinstance(aliases, dict):
            raise AliasTableError("alias table must contain an 'aliases' object")
        return cls(
            {str(k): str(v) for k, v in aliases.items()},
            version=str(data.get("version") or "unversioned"),
        )

    @classmethod
    def from_json(cls, path: str | Path) -> "AliasTable":
        """Load a table from JSON. A missing file yields an empty table."""
        path = Path(path)
        if not path.exists():
            logger.warning("Alias table file not found: %s (continuing with no file aliases)", path)
            return cls(version="missing")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise AliasTableError(f"cannot read alias table {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise AliasTableError(f"alias table {path} must be a JSON object")
        return cls.from_dict(data)


async def load_alias_table(
    session: AsyncSession,
    path: Optional[str | Path] = None,
) -> AliasTable:
    """Store aliases (``team_aliases`` joined to canonical names) overlaid by the file table."""
    from repositories.team_repo import TeamRepository

    rows = await TeamRepository(session).list_alias_pairs()
    table = AliasTable(dict(rows), version="store")
    if path is not None:
        table = table.merge(AliasTable.from_json(path))
    logger.info("Alias table %s loaded with %d entries", table.version, len(table))
    return table
