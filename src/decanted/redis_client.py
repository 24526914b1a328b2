"""Redis connection pool."""

import redis.asyncio as redis
from fastapi import Request


def create_redis(url: str) -> redis.Redis:
    """Create a Redis client backed by its own connection pool."""
    return redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=50,
    )


def get_redis(request: Request) -> redis.Redis | None:
    """Get the app's Redis client, or None when realtime is not running (FastAPI dependency)."""
    return getattr(request.app.state, "redis", None)
