"""Bridges Redis pub/sub to session WebSocket clients.

Pattern-subscribes to every ``session:*`` channel and hands each event to
the SessionFeed, which decides what the watchers of that session receive.
"""

from __future__ import annotations

import asyncio
import json

import redis.asyncio as aioredis
import structlog

from decanted.sessions.events import CHANNEL_PREFIX
from decanted.ws.feed import SessionFeed

logger = structlog.get_logger()

SESSION_PATTERN = f"{CHANNEL_PREFIX}*"


class SessionEventBridge:
    """Subscribes to Redis pub/sub and pushes session events to WebSocket clients."""

    def __init__(self, redis_client: aioredis.Redis, feed: SessionFeed) -> None:
        self.redis = redis_client
        self.feed = feed
        self._running = False

    async def dispatch(self, message: dict) -> None:
        """Route one raw pub/sub message."""
        redis_channel = message.get("channel", "")
        if isinstance(redis_channel, bytes):
            redis_channel = redis_channel.decode()
        if not redis_channel.startswith(CHANNEL_PREFIX):
            return

        try:
            data = message.get("data", b"")
            if isinstance(data, bytes):
                data = data.decode()
            payload = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError):
            logger.warning("pubsub_invalid_message", channel=redis_channel)
            return

        session_id = redis_channel[len(CHANNEL_PREFIX):]
        await self.feed.handle(session_id, payload)

    async def start(self) -> None:
        """Start listening to session channels."""
        self._running = True
        pubsub = self.redis.pubsub()
        await pubsub.psubscribe(SESSION_PATTERN)
        logger.info("pubsub_bridge_started", patterns=[SESSION_PATTERN])

        try:
            while self._running:
                message = await pubsub.get_message(
                    ignore_subscribe_messages=True,
                    timeout=1.0,
                )
                if message is None:
                    continue
                try:
                    await self.dispatch(message)
                except Exception:
                    logger.warning("pubsub_dispatch_failed", channel=message.get("channel"), exc_info=True)

        except asyncio.CancelledError:
            pass
        finally:
            await pubsub.punsubscribe()
            await pubsub.aclose()
            logger.info("pubsub_bridge_stopped")

    async def stop(self) -> None:
        """Signal the bridge to stop."""
        self._running = False
