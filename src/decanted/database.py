"""Async SQLAlchemy engine and session management.

The engine and session factory are built by the app factory and kept on
``app.state``; nothing here is module-global.
"""

from collections.abc import AsyncGenerator
from typing import Any

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


def create_engine_and_factory(url: str) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Build the async engine and its session factory."""
    kwargs: dict[str, Any] = {"echo": False}
    if url.startswith("postgresql"):
        kwargs.update(
            pool_size=20,
            max_overflow=10,
            pool_pre_ping=True,
            connect_args={"statement_cache_size": 0},
        )
    engine = create_async_engine(url, **kwargs)
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return engine, session_factory


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    """Return the session factory attached to the running app."""
    factory = getattr(request.app.state, "session_factory", None)
    if factory is None:
        msg = "Database not initialized. Build the app with create_app() first."
        raise RuntimeError(msg)
    return factory


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session (FastAPI dependency)."""
    factory = get_session_factory(request)
    async with factory() as session:
        yield session
