"""Integration tests for Stripe customer provisioning with a mocked Stripe API."""

from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest
from fastapi import FastAPI
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.billing.router import get_stripe_client
from decanted.billing.stripe_client import StripeClient
from decanted.db.models import Profile


def _install_stripe(app: FastAPI, calls: list[dict]) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append({"headers": request.headers, "form": parse_qs(request.content.decode())})
        return httpx.Response(200, json={"id": f"cus_{len(calls)}", "object": "customer"})

    client = StripeClient("sk_test", "https://stripe.test", transport=httpx.MockTransport(handler))
    app.dependency_overrides[get_stripe_client] = lambda: client


async def _profile(db: AsyncSession, user_id: str, **fields) -> None:
    db.add(Profile(id=user_id, **fields))
    await db.commit()


@pytest.mark.asyncio
class TestCreateCustomer:
    """POST /api/v1/billing/customer"""

    async def test_creates_and_links(
        self, app: FastAPI, client: AsyncClient, db_session: AsyncSession, auth_headers, user_id: str
    ):
        calls: list[dict] = []
        _install_stripe(app, calls)
        await _profile(db_session, user_id, email="sam@example.com", alias="Sam", country="Australia")

        response = await client.post("/api/v1/billing/customer", json={}, headers=auth_headers(user_id))

        assert response.status_code == 200
        assert response.json() == {"status": "created", "stripe_customer_id": "cus_1"}
        assert calls[0]["form"]["metadata[user_id]"] == [user_id]
        assert calls[0]["form"]["email"] == ["sam@example.com"]
        assert calls[0]["headers"]["idempotency-key"] == f"customer:{user_id}"
        stored = (
            await db_session.execute(select(Profile.stripe_customer_id).where(Profile.id == user_id))
        ).scalar_one()
        assert stored == "cus_1"

    async def test_existing_customer_not_recreated(
        self, app: FastAPI, client: AsyncClient, db_session: AsyncSession, auth_headers, user_id: str
    ):
        calls: list[dict] = []
        _install_stripe(app, calls)
        await _profile(db_session, user_id, stripe_customer_id="cus_existing")

        response = await client.post("/api/v1/billing/customer", headers=auth_headers(user_id))

        assert response.json() == {"status": "exists", "stripe_customer_id": "cus_existing"}
        assert calls == []

    async def test_missing_profile_is_404(self, app: FastAPI, client: AsyncClient, auth_headers, user_id: str):
        _install_stripe(app, [])
        response = await client.post("/api/v1/billing/customer", headers=auth_headers(user_id))
        assert response.status_code == 404

    async def test_unconfigured_is_500(
        self, app: FastAPI, client: AsyncClient, db_session: AsyncSession, auth_headers, user_id: str
    ):
        app.dependency_overrides[get_stripe_client] = lambda: None
        await _profile(db_session, user_id)
        response = await client.post("/api/v1/billing/customer", headers=auth_headers(user_id))
        assert response.status_code == 500
        assert response.json()["error"] == "STRIPE_NOT_CONFIGURED"

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.post("/api/v1/billing/customer")
        assert response.status_code == 401

    async def test_email_from_token_reaches_stripe(self, app: FastAPI, client: AsyncClient, make_token, user_id: str):
        calls: list[dict] = []
        _install_stripe(app, calls)
        headers = {"Authorization": f"Bearer {make_token(user_id, email='sam@example.com')}"}

        profile = await client.get("/api/v1/profile/me", headers=headers)
        assert profile.json()["email"] == "sam@example.com"

        response = await client.post("/api/v1/billing/customer", headers=headers)
        assert response.json()["status"] == "created"
        assert calls[0]["form"]["email"] == ["sam@example.com"]
