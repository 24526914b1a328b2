"""Integration tests for points awarding, totals and entitlement checks."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.db.models import PointsLedger, Profile, WineOptionsResult
from decanted.points.service import get_total_points, grant_points, increment_user_points


async def _seed_points(db: AsyncSession, user_id: str, points: int) -> None:
    await grant_points(db, user_id, points, reason="seed")
    await db.commit()


@pytest.mark.asyncio
class TestAwardPoints:
    """POST /api/v1/points/award"""

    async def test_streak_bonus_adds_to_prior_total(self, client: AsyncClient, db_session: AsyncSession, user_id: str):
        await _seed_points(db_session, user_id, 10)

        response = await client.post(
            "/api/v1/points/award",
            json={"user_id": user_id, "score": 3, "streak_bonus": True, "time_bonus": False},
        )

        assert response.status_code == 200
        data = response.json()
        assert data == {"ok": True, "points_awarded": 4, "total_points": 14}

    async def test_logs_result_row(self, client: AsyncClient, db_session: AsyncSession, user_id: str):
        await client.post(
            "/api/v1/points/award",
            json={"user_id": user_id, "mode": "host", "score": 5, "time_bonus": True, "session_id": "s-1"},
        )
        row = (await db_session.execute(select(WineOptionsResult))).scalar_one()
        assert row.user_id == user_id
        assert row.mode == "host"
        assert row.points_awarded == 6
        assert row.session_id == "s-1"

    async def test_missing_user_is_400_and_writes_nothing(self, client: AsyncClient, db_session: AsyncSession):
        response = await client.post("/api/v1/points/award", json={"score": 3})
        assert response.status_code == 400
        count = (await db_session.execute(select(func.count()).select_from(PointsLedger))).scalar_one()
        assert count == 0

    async def test_negative_score_rejected(self, client: AsyncClient, user_id: str):
        response = await client.post("/api/v1/points/award", json={"user_id": user_id, "score": -1})
        assert response.status_code == 400

    async def test_result_log_failure_keeps_points(
        self, raw_client: AsyncClient, db_session: AsyncSession, user_id: str
    ):
        """The points commit first; a failed result write is a 500 but the award stands."""
        with patch(
            "decanted.points.router.record_wine_options_result",
            AsyncMock(side_effect=RuntimeError("results table unavailable")),
        ):
            response = await raw_client.post("/api/v1/points/award", json={"user_id": user_id, "score": 2})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        ledger = (await db_session.execute(select(PointsLedger.points).where(PointsLedger.user_id == user_id))).all()
        assert [row.points for row in ledger] == [2]
        results = (await db_session.execute(select(func.count()).select_from(WineOptionsResult))).scalar_one()
        assert results == 0


@pytest.mark.asyncio
class TestPointsLedger:
    async def test_dedupe_key_grants_once(self, db_session: AsyncSession, user_id: str):
        first = await grant_points(db_session, user_id, 5, "vocab_daily", dedupe_key=f"k:{user_id}")
        await db_session.commit()
        second = await grant_points(db_session, user_id, 5, "vocab_daily", dedupe_key=f"k:{user_id}")
        await db_session.commit()

        assert first is True
        assert second is False
        count = (await db_session.execute(select(func.count()).select_from(PointsLedger))).scalar_one()
        assert count == 1

    async def test_increment_is_cumulative(self, db_session: AsyncSession, user_id: str):
        await increment_user_points(db_session, user_id, 7)
        await increment_user_points(db_session, user_id, -2)
        await db_session.commit()

        assert await get_total_points(db_session, user_id) == 5

    async def test_me_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/v1/points/me")
        assert response.status_code == 401

    async def test_me_and_history(self, client: AsyncClient, db_session: AsyncSession, auth_headers, user_id: str):
        await _seed_points(db_session, user_id, 3)
        await client.post("/api/v1/points/award", json={"user_id": user_id, "score": 1})

        me = await client.get("/api/v1/points/me", headers=auth_headers(user_id))
        assert me.json() == {"user_id": user_id, "total_points": 4}

        history = await client.get("/api/v1/points/history", headers=auth_headers(user_id))
        assert history.status_code == 200
        body = history.json()
        assert body["total_points"] == 4
        assert sorted(e["reason"] for e in body["entries"]) == ["seed", "wine_options"]


@pytest.mark.asyncio
class TestEntitlementCheck:
    """POST /api/v1/entitlements/check"""

    async def test_free_user_locked_out_of_pro(self, client: AsyncClient, auth_headers, user_id: str):
        response = await client.post(
            "/api/v1/entitlements/check",
            json={"required_tier": "pro", "required_points": 10},
            headers=auth_headers(user_id),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["tier"] == "free"
        assert data["locked"] is True
        assert data["points_delta"] == 10

    async def test_stored_vip_passes(self, client: AsyncClient, db_session: AsyncSession, auth_headers, user_id: str):
        db_session.add(Profile(id=user_id, tier="vip"))
        await db_session.commit()
        await _seed_points(db_session, user_id, 50)

        response = await client.post(
            "/api/v1/entitlements/check",
            json={"required_tier": "pro", "required_points": 20},
            headers=auth_headers(user_id),
        )
        data = response.json()
        assert data["tier"] == "vip"
        assert data["locked"] is False
        assert data["points"] == 50

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.post("/api/v1/entitlements/check", json={})
        assert response.status_code == 401
        assert response.json()["error"] == "UNAUTHORIZED"
