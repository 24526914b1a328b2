"""Shared test fixtures.

Every test gets a fresh app built on its own SQLite file, with the schema
created from the ORM metadata and badge definitions seeded. The lifespan
is not run, so there is no Redis and realtime publishing is a no-op.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.auth.jwt import create_access_token
from decanted.badges.seed import seed_badges
from decanted.config import Settings
from decanted.db import models  # noqa: F401
from decanted.db.base import Base
from decanted.main import create_app

SERVICE_ROLE_KEY = "test-service-role-key"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'decanted_test.db'}",
        jwt_secret="test-secret-with-enough-length-for-hs256",
        service_role_key=SERVICE_ROLE_KEY,
        google_vision_api_key="test-vision-key",
        stripe_secret_key="sk_test_123",
        log_format="console",
    )


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncGenerator[FastAPI, None]:
    """App with its schema created and badges seeded."""
    application = create_app(settings)
    async with application.state.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with application.state.session_factory() as db:
        await seed_badges(db)

    yield application

    application.dependency_overrides.clear()
    await application.state.engine.dispose()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def raw_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Client that receives the 500 response instead of re-raising the server error."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def db_session(app: FastAPI) -> AsyncGenerator[AsyncSession, None]:
    """Get a direct database session for test assertions."""
    async with app.state.session_factory() as session:
        yield session


@pytest.fixture
def make_token(settings: Settings) -> Callable[..., str]:
    def _make(user_id: str, email: str | None = None) -> str:
        return create_access_token(user_id, settings, email=email)

    return _make


@pytest.fixture
def auth_headers(make_token: Callable[..., str]) -> Callable[[str], dict[str, str]]:
    """Bearer headers for a given user id."""

    def _headers(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user_id)}"}

    return _headers


@pytest.fixture
def user_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def service_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {SERVICE_ROLE_KEY}"}
