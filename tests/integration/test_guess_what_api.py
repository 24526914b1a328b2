"""Integration tests for Guess What weekly challenges."""

from __future__ import annotations

from datetime import date

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.db.models import GuessWhatChallenge
from decanted.points.service import get_total_points

QUESTIONS = [
    {"q": "Grape?", "options": ["Shiraz", "Pinot Noir", "Merlot"], "correct_index": 1},
    {"q": "Region?", "options": ["Burgundy", "Barossa"], "correct_index": 0},
    {"q": "Oak?", "options": ["Yes", "No"], "correct_index": 0},
]


@pytest_asyncio.fixture
async def challenge(db_session: AsyncSession) -> GuessWhatChallenge:
    row = GuessWhatChallenge(
        title="Mystery red",
        week_date=date(2026, 10, 12),
        video_url="https://www.youtube.com/watch?v=abc123",
        questions=QUESTIONS,
        reveal={"wine": "Domaine X Bourgogne Rouge"},
        points_award=12,
        is_published=True,
    )
    db_session.add(row)
    db_session.add(GuessWhatChallenge(title="Draft", week_date=date(2026, 10, 19), questions=QUESTIONS))
    await db_session.commit()
    return row


@pytest.mark.asyncio
class TestListChallenges:
    async def test_answers_withheld(self, client: AsyncClient, challenge: GuessWhatChallenge):
        response = await client.get("/api/v1/guess-what/challenges")
        assert response.status_code == 200
        data = response.json()
        assert [c["title"] for c in data] == ["Mystery red"]
        assert data[0]["video_url"] == "https://www.youtube.com/embed/abc123"
        assert data[0]["questions"][0] == {"q": "Grape?", "options": ["Shiraz", "Pinot Noir", "Merlot"]}
        assert "reveal" not in data[0]


@pytest.mark.asyncio
class TestSubmitResponse:
    async def test_scores_and_awards_share(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        challenge: GuessWhatChallenge,
        auth_headers,
        user_id: str,
    ):
        response = await client.post(
            f"/api/v1/guess-what/challenges/{challenge.id}/responses",
            json={"answers": {"0": 1, "1": 1, "2": 0}},
            headers=auth_headers(user_id),
        )
        assert response.status_code == 200
        assert response.json() == {
            "score": 2,
            "total": 3,
            "points_awarded": 8,
            "reveal": {"wine": "Domaine X Bourgogne Rouge"},
        }
        assert await get_total_points(db_session, user_id) == 8

    async def test_second_response_rejected(
        self, client: AsyncClient, db_session: AsyncSession, challenge: GuessWhatChallenge, auth_headers, user_id: str
    ):
        url = f"/api/v1/guess-what/challenges/{challenge.id}/responses"
        await client.post(url, json={"answers": {"0": 1}}, headers=auth_headers(user_id))
        response = await client.post(url, json={"answers": {"0": 1, "1": 0, "2": 0}}, headers=auth_headers(user_id))

        assert response.status_code == 409
        assert response.json()["error"] == "ALREADY_SUBMITTED"
        assert await get_total_points(db_session, user_id) == 4

    async def test_zero_score_awards_nothing(
        self, client: AsyncClient, db_session: AsyncSession, challenge: GuessWhatChallenge, auth_headers, user_id: str
    ):
        response = await client.post(
            f"/api/v1/guess-what/challenges/{challenge.id}/responses",
            json={"answers": {}},
            headers=auth_headers(user_id),
        )
        assert response.json()["points_awarded"] == 0
        assert await get_total_points(db_session, user_id) == 0

    async def test_unknown_challenge_is_404(self, client: AsyncClient, auth_headers, user_id: str):
        response = await client.post(
            "/api/v1/guess-what/challenges/missing/responses",
            json={"answers": {"0": 1}},
            headers=auth_headers(user_id),
        )
        assert response.status_code == 404
