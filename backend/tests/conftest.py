# Ensure backend is at sys.path[0] when pytest runs (from repo root or from backend dir)
import sys
from datetime import date
from pathlib import Path
from typing import Optional

_tests_dir = Path(__file__).resolve().parent
_backend = _tests_dir.parent
_str_backend = str(_backend)
if sys.path[0:1] != [_str_backend]:
    sys.path.insert(0, _str_backend)

import pytest_asyncio

from core.database import DatabaseManager, dispose_database, get_database_manager, init_database
from models.match import Match
from models.player import Player
from models.player_team import PlayerTeam
from models.season import Season
from models.team import Team
from models.team_alias import TeamAlias
from matching.normalizer import normalize_player_name, normalize_team_name


class StoreBuilder:
    """Seeds canonical rows (teams, seasons, matches, players); each call commits."""

    def __init__(self, manager: DatabaseManager) -> None:
        self.manager = manager

    async def team(self, team_id: str, name: str, short_name: Optional[str] = None) -> str:
        async with self.manager.session() as session:
            session.add(Team(id=team_id, name=name, short_name=short_name))
        return team_id

    async def season(self, season_id: str, name: str, year_start: int, year_end: int) -> str:
        async with self.manager.session() as session:
            session.add(Season(id=season_id, name=name, year_start=year_start, year_end=year_end))
        return season_id

    async def match(
        self,
        match_id: str,
        match_date: date,
        home_team_id: str,
        away_team_id: str,
        home_score: Optional[int] = None,
        away_score: Optional[int] = None,
        season_id: Optional[str] = None,
    ) -> str:
        async with self.manager.session() as session:
            session.add(
                Match(
                    id=match_id,
                    match_date=match_date,
                    home_team_id=home_team_id,
                    away_team_id=away_team_id,
                    home_score=home_score,
                    away_score=away_score,
                    season_id=season_id,
                )
            )
        return match_id

    async def player(self, name: str, team_id: Optional[str] = None) -> int:
        async with self.manager.session() as session:
            player = Player(name=name, name_norm=normalize_player_name(name))
            session.add(player)
            await session.flush()
            if team_id is not None:
                session.add(PlayerTeam(player_id=player.id, team_id=team_id))
            return player.id

    async def alias(self, team_id: str, alias: str, source: str = "csv") -> None:
        async with self.manager.session() as session:
            session.add(
                TeamAlias(
                    team_id=team_id,
                    alias=alias,
                    alias_norm=normalize_team_name(alias),
                    source=source,
                    quality=1.0,
                )
            )


@pytest_asyncio.fixture
async def db_manager():
    """In-memory SQLite with every table created; disposed after the test."""
    await init_database("sqlite+aiosqlite:///:memory:")
    manager = get_database_manager()
    await manager.create_all()
    yield manager
    await dispose_database()


@pytest_asyncio.fixture
async def store(db_manager):
    return StoreBuilder(db_manager)


@pytest_asyncio.fixture
async def file_store(tmp_path):
    """File-backed SQLite (real connection pool) for multi-worker imports."""
    await init_database(f"sqlite+aiosqlite:///{tmp_path / 'fixtures.db'}")
    manager = get_database_manager()
    await manager.create_all()
    yield StoreBuilder(manager)
    await dispose_database()
