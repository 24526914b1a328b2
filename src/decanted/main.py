"""FastAPI application factory."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from decanted.admin.router import router as admin_router
from decanted.badges.router import router as badges_router
from decanted.badges.seed import seed_badges
from decanted.billing.router import router as billing_router
from decanted.config import Settings, get_settings
from decanted.content.router import router as content_router
from decanted.database import create_engine_and_factory
from decanted.guess_what.router import router as guess_what_router
from decanted.health.router import router as health_router
from decanted.middleware import setup_middleware
from decanted.ocr.router import router as ocr_router
from decanted.points.router import router as points_router
from decanted.profiles.router import router as profiles_router
from decanted.redis_client import create_redis
from decanted.sessions.router import router as sessions_router
from decanted.swirdle.router import router as swirdle_router
from decanted.trial.router import router as trial_router
from decanted.ws.bridge import SessionEventBridge
from decanted.ws.feed import SessionFeed
from decanted.ws.manager import SessionConnectionManager
from decanted.ws.router import router as ws_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings: Settings = app.state.settings
    app.state.redis = create_redis(settings.redis_url)

    # Seed badge definitions (idempotent)
    try:
        async with app.state.session_factory() as db:
            await seed_badges(db)
    except Exception:
        logger.warning("Badge seeding failed (tables may not exist yet)", exc_info=True)

    # Start the Redis pub/sub -> WebSocket bridge
    bridge = SessionEventBridge(app.state.redis, app.state.session_feed)
    bridge_task = asyncio.create_task(bridge.start())

    yield

    # Shutdown bridge
    await bridge.stop()
    bridge_task.cancel()
    try:
        await bridge_task
    except asyncio.CancelledError:
        pass

    await app.state.redis.aclose()
    app.state.redis = None
    await app.state.engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Everything a request needs (settings, database, Redis, the WebSocket
    fan-out) hangs off ``app.state``, so separate apps never share clients.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Decanted API",
        description="Backend API for Decanted: wine education games, daily content and label scanning",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    engine, session_factory = create_engine_and_factory(settings.database_url)
    ws_manager = SessionConnectionManager()
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.redis = None
    app.state.ws_manager = ws_manager
    app.state.session_feed = SessionFeed(session_factory, ws_manager.broadcast)

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(profiles_router)
    app.include_router(points_router)
    app.include_router(trial_router)
    app.include_router(content_router)
    app.include_router(sessions_router)
    app.include_router(swirdle_router)
    app.include_router(guess_what_router)
    app.include_router(badges_router)
    app.include_router(ocr_router)
    app.include_router(billing_router)
    app.include_router(admin_router)
    app.include_router(ws_router)

    return app


app = create_app()
