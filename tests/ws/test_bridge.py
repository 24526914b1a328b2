"""Tests for the Redis pub/sub to session WebSocket bridge."""

from __future__ import annotations

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from decanted.sessions.events import ROUND_CHANGE, publish_session_event, session_channel
from decanted.ws.bridge import SESSION_PATTERN, SessionEventBridge


def _bridge() -> tuple[SessionEventBridge, AsyncMock]:
    feed = MagicMock()
    feed.handle = AsyncMock()
    return SessionEventBridge(AsyncMock(), feed), feed.handle


def _fake_pubsub(messages: list[dict]) -> AsyncMock:
    pending = list(messages)

    async def fake_get_message(**kwargs):
        if pending:
            return pending.pop(0)
        await asyncio.sleep(0.01)
        return None

    pubsub = AsyncMock()
    pubsub.get_message = fake_get_message
    return pubsub


class TestDispatch:
    @pytest.mark.asyncio
    async def test_routes_to_feed_with_session_id(self) -> None:
        bridge, handle = _bridge()
        payload = {"event": ROUND_CHANGE, "data": {"round_number": 3}}

        await bridge.dispatch({"channel": "session:abc", "data": json.dumps(payload)})

        handle.assert_awaited_once_with("abc", payload)

    @pytest.mark.asyncio
    async def test_bytes_decoded(self) -> None:
        bridge, handle = _bridge()
        payload = {"event": ROUND_CHANGE, "data": {}}

        await bridge.dispatch({"channel": b"session:abc", "data": json.dumps(payload).encode()})

        handle.assert_awaited_once_with("abc", payload)

    @pytest.mark.asyncio
    async def test_invalid_json_skipped(self) -> None:
        bridge, handle = _bridge()
        await bridge.dispatch({"channel": "session:abc", "data": "not valid json {{{"})
        handle.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_foreign_channel_skipped(self) -> None:
        bridge, handle = _bridge()
        await bridge.dispatch({"channel": "other:abc", "data": "{}"})
        handle.assert_not_awaited()


class TestBridgeLifecycle:
    @pytest.mark.asyncio
    async def test_forwards_message_then_stops(self) -> None:
        payload = {"event": ROUND_CHANGE, "data": {}}
        pubsub = _fake_pubsub([
            {"type": "pmessage", "channel": "session:s-1", "data": json.dumps(payload)},
        ])
        redis = AsyncMock()
        redis.pubsub = MagicMock(return_value=pubsub)
        feed = MagicMock()
        feed.handle = AsyncMock()
        bridge = SessionEventBridge(redis, feed)

        async def stop_after_delay():
            await asyncio.sleep(0.1)
            await bridge.stop()

        await asyncio.gather(bridge.start(), stop_after_delay())

        pubsub.psubscribe.assert_awaited_once_with(SESSION_PATTERN)
        feed.handle.assert_awaited_once_with("s-1", payload)
        pubsub.punsubscribe.assert_awaited_once()
        pubsub.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_feed_failure_does_not_stop_bridge(self) -> None:
        pubsub = _fake_pubsub([
            {"type": "pmessage", "channel": "session:s-1", "data": json.dumps({"event": ROUND_CHANGE})},
            {"type": "pmessage", "channel": "session:s-2", "data": json.dumps({"event": ROUND_CHANGE})},
        ])
        redis = AsyncMock()
        redis.pubsub = MagicMock(return_value=pubsub)
        feed = MagicMock()
        feed.handle = AsyncMock(side_effect=[RuntimeError("db down"), None])
        bridge = SessionEventBridge(redis, feed)

        async def stop_after_delay():
            await asyncio.sleep(0.1)
            await bridge.stop()

        await asyncio.gather(bridge.start(), stop_after_delay())

        assert feed.handle.await_count == 2


class TestPublish:
    @pytest.mark.asyncio
    async def test_publishes_to_session_channel(self) -> None:
        redis = AsyncMock()
        await publish_session_event(redis, "s-1", ROUND_CHANGE, {"round_number": 1})

        channel, raw = redis.publish.call_args[0]
        assert channel == session_channel("s-1") == "session:s-1"
        assert json.loads(raw) == {"event": ROUND_CHANGE, "data": {"round_number": 1}}

    @pytest.mark.asyncio
    async def test_no_redis_is_noop(self) -> None:
        await publish_session_event(None, "s-1", ROUND_CHANGE, {})

    @pytest.mark.asyncio
    async def test_publish_failure_is_logged_not_raised(self) -> None:
        redis = AsyncMock()
        redis.publish = AsyncMock(side_effect=ConnectionError("redis gone"))
        await publish_session_event(redis, "s-1", ROUND_CHANGE, {})
