"""Read-only quality API: /health, /api/v1/quality/validation, /api/v1/quality/matches/{id}."""

from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

_backend = Path(__file__).resolve().parent.parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

import httpx
import pytest
import pytest_asyncio

from core.dependencies import get_db_session
from main import app
from repositories.goal_repo import GoalRepository


@pytest_asyncio.fixture
async def client(store, db_manager):
    await store.team("t-tot", "Tottenham")
    await store.team("t-ars", "Arsenal")
    await store.season("s-2001", "2001/02", 2001, 2002)
    await store.match("m-1", date(2001, 8, 18), "t-tot", "t-ars", 1, 1, season_id="s-2001")
    await store.match("m-2", date(2001, 8, 25), "t-ars", "t-tot", 2, 0, season_id="s-2001")
    sheringham = await store.player("Teddy Sheringham", "t-tot")
    henry = await store.player("Thierry Henry", "t-ars")
    async with db_manager.session() as session:
        goals = GoalRepository(session)
        await goals.insert_if_absent("m-1", sheringham, "t-tot", 60)
        await goals.insert_if_absent("m-1", henry, "t-ars", 23)

    async def _session():
        async with db_manager.rollback_session() as session:
            yield session

    app.dependency_overrides[get_db_session] = _session
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
    app.dependency_overrides.pop(get_db_session, None)


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_validation_summarizes_statuses_and_corrections(client):
    resp = await client.get("/api/v1/quality/validation")
    assert resp.status_code == 200
    data = resp.json()
    assert data["group_by"] == "season"
    assert data["match_count"] == 2
    assert data["status_counts"]["consistent"] == 1
    assert data["status_counts"]["missing"] == 1
    assert data["consistency_rate"] == 0.5
    assert [p["period"] for p in data["periods"]] == ["2001/02"]
    assert [c["match_id"] for c in data["corrections"]] == ["m-2"]
    assert data["corrections"][0]["suggestion"] == "goals under-attributed"


@pytest.mark.asyncio
async def test_validation_by_decade_with_limit(client):
    resp = await client.get("/api/v1/quality/validation", params={"group_by": "decade", "limit": 0})
    assert resp.status_code == 200
    data = resp.json()
    assert [p["period"] for p in data["periods"]] == ["2000s"]
    assert data["corrections"] == []
    assert data["correction_count"] == 1


@pytest.mark.asyncio
async def test_validation_rejects_unknown_grouping(client):
    resp = await client.get("/api/v1/quality/validation", params={"group_by": "month"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_match_detail_lists_goals(client):
    resp = await client.get("/api/v1/quality/matches/m-1")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "consistent"
    assert sorted((g["team_id"], g["minute"]) for g in data["goals"]) == [("t-ars", 23), ("t-tot", 60)]


@pytest.mark.asyncio
async def test_match_detail_unknown_match_is_404(client):
    resp = await client.get("/api/v1/quality/matches/nope")
    assert resp.status_code == 404
