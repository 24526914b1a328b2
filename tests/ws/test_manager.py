"""Unit tests for the session WebSocket connection manager."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from decanted.ws.manager import SessionConnectionManager


@pytest.fixture
def mgr() -> SessionConnectionManager:
    """Fresh manager for each test."""
    return SessionConnectionManager()


def _make_ws(*, fail_send: bool = False) -> MagicMock:
    """Create a mock WebSocket."""
    ws = AsyncMock()
    ws.accept = AsyncMock()
    if fail_send:
        ws.send_text = AsyncMock(side_effect=RuntimeError("connection closed"))
    else:
        ws.send_text = AsyncMock()
    return ws


class TestConnect:
    @pytest.mark.asyncio
    async def test_connect_registers_client(self, mgr: SessionConnectionManager) -> None:
        ws = _make_ws()
        await mgr.connect(ws, "conn-1", "session-a")
        ws.accept.assert_awaited_once()
        assert mgr.connection_count == 1
        assert mgr.watchers("session-a") == 1
        assert mgr.get_stats() == {"total_connections": 1, "sessions": {"session-a": 1}}

    @pytest.mark.asyncio
    async def test_two_watchers_same_session(self, mgr: SessionConnectionManager) -> None:
        await mgr.connect(_make_ws(), "conn-1", "session-a")
        await mgr.connect(_make_ws(), "conn-2", "session-a")
        assert mgr.watchers("session-a") == 2


class TestDisconnect:
    @pytest.mark.asyncio
    async def test_disconnect_cleans_up(self, mgr: SessionConnectionManager) -> None:
        await mgr.connect(_make_ws(), "conn-1", "session-a")
        await mgr.disconnect("conn-1")
        assert mgr.connection_count == 0
        assert mgr.watchers("session-a") == 0
        assert mgr.get_stats()["sessions"] == {}

    @pytest.mark.asyncio
    async def test_disconnect_nonexistent(self, mgr: SessionConnectionManager) -> None:
        """Disconnecting a nonexistent conn_id is a no-op."""
        await mgr.disconnect("nonexistent")
        assert mgr.connection_count == 0


class TestBroadcast:
    @pytest.mark.asyncio
    async def test_only_session_watchers_receive(self, mgr: SessionConnectionManager) -> None:
        ws_a = _make_ws()
        ws_b = _make_ws()
        await mgr.connect(ws_a, "conn-a", "session-a")
        await mgr.connect(ws_b, "conn-b", "session-b")

        sent = await mgr.broadcast("session-a", {"type": "round", "round": {"round_number": 2}})

        assert sent == 1
        ws_a.send_text.assert_awaited_once()
        assert json.loads(ws_a.send_text.call_args[0][0])["round"]["round_number"] == 2
        ws_b.send_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_send_disconnects(self, mgr: SessionConnectionManager) -> None:
        await mgr.connect(_make_ws(fail_send=True), "conn-bad", "session-a")
        await mgr.connect(_make_ws(), "conn-good", "session-a")

        sent = await mgr.broadcast("session-a", {"type": "pong"})

        assert sent == 1
        assert mgr.watchers("session-a") == 1

    @pytest.mark.asyncio
    async def test_no_watchers(self, mgr: SessionConnectionManager) -> None:
        assert await mgr.broadcast("nobody", {"type": "pong"}) == 0


class TestSend:
    @pytest.mark.asyncio
    async def test_send_unknown_connection(self, mgr: SessionConnectionManager) -> None:
        assert await mgr.send("missing", {"type": "pong"}) is False

    @pytest.mark.asyncio
    async def test_send_failure_disconnects(self, mgr: SessionConnectionManager) -> None:
        await mgr.connect(_make_ws(fail_send=True), "conn-1", "session-a")
        assert await mgr.send("conn-1", {"type": "pong"}) is False
        assert mgr.connection_count == 0
