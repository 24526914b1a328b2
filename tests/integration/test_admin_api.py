"""Integration tests for service-role content administration."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.content.dates import today_in
from decanted.db.models import DailyVocab, SwirdleWord

VOCAB = {
    "for_date": "2026-10-17",
    "term": "Tannin",
    "question": "Tannin mostly comes from...",
    "options": ["Skins and seeds", "Yeast", "Sugar"],
    "correct_index": 0,
}


@pytest.mark.asyncio
class TestAdminAuth:
    async def test_missing_token_is_401(self, client: AsyncClient):
        response = await client.put("/api/v1/admin/vocab", json=VOCAB)
        assert response.status_code == 401

    async def test_user_token_is_403(self, client: AsyncClient, auth_headers, user_id: str):
        response = await client.put("/api/v1/admin/vocab", json=VOCAB, headers=auth_headers(user_id))
        assert response.status_code == 403


@pytest.mark.asyncio
class TestUpserts:
    async def test_vocab_created_then_updated(
        self, client: AsyncClient, db_session: AsyncSession, service_headers: dict[str, str]
    ):
        created = await client.put("/api/v1/admin/vocab", json=VOCAB, headers=service_headers)
        assert created.status_code == 200
        assert created.json()["created"] is True

        updated = await client.put(
            "/api/v1/admin/vocab", json={**VOCAB, "term": "Tannins"}, headers=service_headers
        )
        assert updated.json()["created"] is False
        assert updated.json()["id"] == created.json()["id"]

        rows = (await db_session.execute(select(DailyVocab))).scalars().all()
        assert [r.term for r in rows] == ["Tannins"]

    async def test_vocab_index_out_of_range(self, client: AsyncClient, service_headers: dict[str, str]):
        response = await client.put(
            "/api/v1/admin/vocab", json={**VOCAB, "correct_index": 3}, headers=service_headers
        )
        assert response.status_code == 400

    async def test_upserted_vocab_served_today(
        self, app: FastAPI, client: AsyncClient, service_headers: dict[str, str]
    ):
        today = today_in(app.state.settings.content_timezone).isoformat()
        await client.put("/api/v1/admin/vocab", json={**VOCAB, "for_date": today}, headers=service_headers)
        response = await client.get("/api/v1/vocab/today")
        assert response.status_code == 200
        assert response.json()["term"] == "Tannin"

    async def test_trial_quiz(self, client: AsyncClient, service_headers: dict[str, str]):
        body = {
            "for_date": "2026-10-17",
            "locale": "fr",
            "title": "Quiz du jour",
            "questions": [{"q": "Cepage?", "options": ["Gamay", "Syrah"], "correct_index": 0}],
        }
        response = await client.put("/api/v1/admin/trial-quiz", json=body, headers=service_headers)
        assert response.status_code == 200
        assert response.json()["data"] == {"for_date": "2026-10-17", "locale": "fr"}

    async def test_swirdle_word_uppercased(
        self, client: AsyncClient, db_session: AsyncSession, service_headers: dict[str, str]
    ):
        response = await client.put(
            "/api/v1/admin/swirdle-words",
            json={"word": "gamay", "date_scheduled": "2026-10-18", "hints": ["Beaujolais"]},
            headers=service_headers,
        )
        assert response.status_code == 200
        row = (await db_session.execute(select(SwirdleWord))).scalar_one()
        assert row.word == "GAMAY"
        assert row.is_published is True

    async def test_swirdle_word_rejects_non_letters(self, client: AsyncClient, service_headers: dict[str, str]):
        response = await client.put(
            "/api/v1/admin/swirdle-words",
            json={"word": "pinot noir", "date_scheduled": "2026-10-18"},
            headers=service_headers,
        )
        assert response.status_code == 400

    async def test_guess_what(self, client: AsyncClient, service_headers: dict[str, str]):
        body = {
            "title": "Mystery white",
            "week_date": "2026-10-12",
            "questions": [{"q": "Grape?", "options": ["Riesling", "Chardonnay"], "correct_index": 1}],
        }
        response = await client.put("/api/v1/admin/guess-what", json=body, headers=service_headers)
        assert response.status_code == 200

        listed = (await client.get("/api/v1/guess-what/challenges")).json()
        assert [c["title"] for c in listed] == ["Mystery white"]
