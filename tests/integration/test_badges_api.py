"""Integration tests for the badge ladder and evaluation."""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.db.models import BadgeAward
from decanted.points.service import grant_points


async def _give_points(db: AsyncSession, user_id: str, points: int) -> None:
    await grant_points(db, user_id, points, reason="seed")
    await db.commit()


@pytest.mark.asyncio
class TestLadder:
    async def test_anonymous_ladder(self, client: AsyncClient):
        response = await client.get("/api/v1/badges/ladder")
        assert response.status_code == 200
        data = response.json()
        assert len(data) == 8
        assert data[0]["code"] == "first_sip"
        assert data[1]["threshold"] == 100
        assert not any(b["earned"] for b in data)

    async def test_earned_flags_for_signed_in_user(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers, user_id: str
    ):
        await _give_points(db_session, user_id, 3)
        await client.post("/api/v1/badges/evaluate", headers=auth_headers(user_id))

        data = (await client.get("/api/v1/badges/ladder", headers=auth_headers(user_id))).json()
        earned = [b["code"] for b in data if b["earned"]]
        assert earned == ["first_sip"]
        assert data[0]["awarded_at"] is not None


@pytest.mark.asyncio
class TestEvaluate:
    async def test_awards_points_milestones_once(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers, user_id: str
    ):
        await _give_points(db_session, user_id, 150)
        headers = auth_headers(user_id)

        first = await client.post("/api/v1/badges/evaluate", headers=headers)
        assert first.status_code == 200
        assert sorted(first.json()["awarded"]) == ["first_sip", "points_100"]

        second = await client.post("/api/v1/badges/evaluate", headers=headers)
        assert second.json() == {"awarded": []}

        count = (
            await db_session.execute(select(func.count()).select_from(BadgeAward).where(BadgeAward.user_id == user_id))
        ).scalar_one()
        assert count == 2

    async def test_hosting_a_session(self, client: AsyncClient, auth_headers, user_id: str):
        await client.post("/api/v1/sessions", json={"host_user_id": user_id})
        response = await client.post("/api/v1/badges/evaluate", headers=auth_headers(user_id))
        assert response.json()["awarded"] == ["wine_options_host"]

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.post("/api/v1/badges/evaluate")
        assert response.status_code == 401


@pytest.mark.asyncio
class TestMineAndRecent:
    async def test_my_badges(self, client: AsyncClient, db_session: AsyncSession, auth_headers, user_id: str):
        await _give_points(db_session, user_id, 1)
        await client.post("/api/v1/badges/evaluate", headers=auth_headers(user_id))

        data = (await client.get("/api/v1/badges/me", headers=auth_headers(user_id))).json()
        assert [a["badge_code"] for a in data] == ["first_sip"]

    async def test_recent_for_several_users(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers, user_id: str
    ):
        await _give_points(db_session, user_id, 600)
        await client.post("/api/v1/badges/evaluate", headers=auth_headers(user_id))

        response = await client.get("/api/v1/badges/recent", params={"user_ids": f"{user_id},nobody"})
        assert response.status_code == 200
        data = response.json()
        assert len(data[user_id]) == 2
        assert data["nobody"] == []

    async def test_recent_needs_ids(self, client: AsyncClient):
        response = await client.get("/api/v1/badges/recent", params={"user_ids": " , "})
        assert response.status_code == 400

    async def test_recent_caps_id_count(self, client: AsyncClient):
        ids = ",".join(f"u{i}" for i in range(51))
        response = await client.get("/api/v1/badges/recent", params={"user_ids": ids})
        assert response.status_code == 400
